"""Tests for the HTTP API"""

import pytest
from fastapi.testclient import TestClient

from conftest import create_matter
from jurisai.api.app import create_app

FINDINGS = {
    "authorities": [{"type": "Case Law", "title": "Caparo v Dickman", "citation": "[1990] 2 AC 605"}],
    "summary": "Duty likely owed",
}


@pytest.fixture
def client(store, invoker, ingestion):
    app = create_app(entity_store=store, invoker=invoker, ingestion=ingestion)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def workspace_id(client):
    response = client.post("/api/workspaces")
    assert response.status_code == 201
    return response.json()["workspace_id"]


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["store"]["mode"] == "sqlite"


class TestMatters:

    def test_create_list_update(self, client):
        response = client.post("/api/matters", json={"name": "Doe v Roe", "court": "High Court"})
        assert response.status_code == 201
        matter_id = response.json()["id"]
        assert response.json()["matter_type"] == "Civil Litigation"

        assert [m["id"] for m in client.get("/api/matters").json()] == [matter_id]

        response = client.patch(f"/api/matters/{matter_id}", json={"status": "Closed"})
        assert response.json()["status"] == "Closed"
        assert client.get("/api/matters", params={"status": "Active"}).json() == []

    def test_detail(self, client, matter):
        response = client.get(f"/api/matters/{matter.id}")
        assert response.status_code == 200
        assert response.json()["matter"]["name"] == matter.name
        assert response.json()["arguments"] == []

    def test_missing_matter(self, client):
        assert client.get("/api/matters/missing").status_code == 404
        assert client.patch("/api/matters/missing", json={"name": "X"}).status_code == 404

    def test_invalid_matter_type(self, client):
        response = client.post("/api/matters", json={"name": "X", "matter_type": "Maritime"})
        assert response.status_code == 422
        assert "Choose one of" in response.json()["detail"]

    def test_name_required(self, client):
        assert client.post("/api/matters", json={"court": "High Court"}).status_code == 422


class TestResearch:

    def test_research_and_save(self, client, model, store, matter):
        model.queue(FINDINGS)
        response = client.post("/api/research", json={"query": "duty of care", "matter_id": matter.id})
        assert response.status_code == 200
        data = response.json()
        assert data["findings"]["authorities"][0]["title"] == "Caparo v Dickman"
        assert [s["key"] for s in data["sections"]] == ["summary", "authorities"]
        issue_id = data["issue"]["id"]

        response = client.post("/api/research/authorities", json={
            "authority": data["findings"]["authorities"][0],
            "matter_id": matter.id,
            "issue_id": issue_id,
        })
        assert response.status_code == 201
        authority = response.json()["authority"]
        assert authority["authority_type"] == "Case Law"
        assert store.get("LegalIssue", issue_id)["authority_ids"] == [authority["id"]]

    def test_model_failure_is_bad_gateway(self, client, model):
        model.queue(ConnectionError("upstream down"))
        response = client.post("/api/research", json={"query": "duty of care"})
        assert response.status_code == 502

    def test_empty_query(self, client):
        assert client.post("/api/research", json={"query": ""}).status_code == 422


class TestArgumentWorkspace:

    def test_generate_save_close(self, client, model, matter, workspace_id):
        base = f"/api/workspaces/{workspace_id}"
        response = client.post(f"{base}/argument/matter", json={"matter_id": matter.id})
        assert response.status_code == 200
        assert response.json()["position"] == "Claimant"
        assert response.json()["court"] == matter.court

        response = client.patch(f"{base}/argument", json={
            "position": "Defendant", "fact_expansions": {"chronology": "Notice served in May"},
        })
        assert response.json()["fact_expansions"]["chronology"] == "Notice served in May"

        model.queue("## Defence argument")
        response = client.post(f"{base}/argument/generate", json={})
        assert response.status_code == 200
        assert response.json()["argument_text"] == "## Defence argument"
        assert response.json()["has_unsaved_changes"] is True
        assert "## Chronology\nNotice served in May" in model.last_prompt

        assert client.delete(base).status_code == 409

        response = client.post(f"{base}/argument/save")
        assert response.status_code == 201
        assert response.json()["version_number"] == 1

        history = client.get(f"{base}/argument/history").json()
        assert [v["version_number"] for v in history["versions"]] == [1]

        assert client.delete(base).status_code == 204
        assert client.get(base).status_code == 404

    def test_force_close_discards(self, client, matter, workspace_id):
        base = f"/api/workspaces/{workspace_id}"
        client.post(f"{base}/argument/matter", json={"matter_id": matter.id})
        client.post(f"{base}/argument/generate", json={})
        assert client.delete(base, params={"force": True}).status_code == 204

    def test_switch_matter_with_unsaved_work(self, client, store, matter, workspace_id):
        other = create_matter(store, name="Other")
        base = f"/api/workspaces/{workspace_id}"
        client.post(f"{base}/argument/matter", json={"matter_id": matter.id})
        client.post(f"{base}/argument/generate", json={})
        response = client.post(f"{base}/argument/matter", json={"matter_id": other.id})
        assert response.status_code == 409
        response = client.post(f"{base}/argument/matter", json={"matter_id": other.id, "force": True})
        assert response.json()["matter_id"] == other.id

    def test_courtless_matter_rejected(self, client, model, store, workspace_id):
        courtless = create_matter(store, court="")
        base = f"/api/workspaces/{workspace_id}"
        client.post(f"{base}/argument/matter", json={"matter_id": courtless.id})
        response = client.post(f"{base}/argument/generate", json={})
        assert response.status_code == 422
        assert model.calls == []

    def test_attach_document(self, client, model, matter, workspace_id):
        base = f"/api/workspaces/{workspace_id}"
        client.post(f"{base}/argument/matter", json={"matter_id": matter.id})
        response = client.post(
            f"{base}/argument/documents",
            files={"file": ("lease.txt", b"Clause 3: landlord repairs the roof", "text/plain")},
        )
        assert response.status_code == 200
        assert response.json()["uploaded_documents"] == ["lease.txt"]
        client.post(f"{base}/argument/generate", json={})
        assert "Clause 3: landlord repairs the roof" in model.last_prompt

    def test_coach(self, client, model, matter, workspace_id):
        base = f"/api/workspaces/{workspace_id}"
        client.post(f"{base}/argument/matter", json={"matter_id": matter.id})
        model.queue({"strengths": ["Clear facts"], "overall_assessment": "Promising"})
        response = client.post(f"{base}/argument/coach")
        assert response.status_code == 200
        assert response.json()["feedback"]["strengths"] == ["Clear facts"]

    def test_unknown_workspace(self, client):
        assert client.get("/api/workspaces/nope/argument").status_code == 404


class TestDocumentWorkspace:

    def test_generate_save_export(self, client, model, matter, workspace_id):
        base = f"/api/workspaces/{workspace_id}"
        model.queue("# Particulars of Claim\n1. The claimant is the tenant.")
        response = client.post(f"{base}/document/generate", json={
            "matter_id": matter.id,
            "document_type": "Particulars of Claim",
            "briefing_notes": "Tenant claim for disrepair",
        })
        assert response.status_code == 200
        assert response.json()["has_unsaved_changes"] is True

        response = client.post(f"{base}/document/save", json={"status": "Review"})
        assert response.status_code == 201
        assert response.json()["status"] == "Review"
        assert response.json()["title"].startswith("Particulars of Claim - ")

        response = client.get(f"{base}/document/pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"

    def test_export_before_generate(self, client, workspace_id):
        assert client.get(f"/api/workspaces/{workspace_id}/document/pdf").status_code == 422


class TestJudgmentWorkspace:

    def test_upload_and_analyze(self, client, model, workspace_id):
        base = f"/api/workspaces/{workspace_id}"
        response = client.post(
            f"{base}/judgment/upload",
            files={"file": ("judgment.txt", b"The appeal is dismissed.", "text/plain")},
        )
        assert response.json()["characters"] == len("The appeal is dismissed.")

        model.queue({"executive_summary": "Weak judgment", "reasoning_weaknesses": ["No reasons given"]})
        response = client.post(f"{base}/judgment/analyze", json={})
        assert response.status_code == 200
        assert [s["key"] for s in response.json()["sections"]] == ["executive_summary", "reasoning_weaknesses"]

    def test_unsupported_upload(self, client, workspace_id):
        response = client.post(
            f"/api/workspaces/{workspace_id}/judgment/upload",
            files={"file": ("scan.png", b"\x89PNG", "image/png")},
        )
        assert response.status_code == 502
        assert "paste text directly" in response.json()["detail"]


class TestInsights:

    def test_dashboard_and_analytics(self, client, matter):
        dashboard = client.get("/api/dashboard").json()
        assert dashboard["active_matters"] == 1
        analytics = client.get("/api/analytics").json()
        assert analytics["total_matters"] == 1
        assert analytics["matter_types"] == [{"label": "Civil Litigation", "count": 1}]

"""Tests for matter management, dashboard and analytics"""

import pytest

from conftest import create_authority, create_matter
from jurisai.errors import ActionValidationError, RecordNotFoundError
from jurisai.models import MatterStatus, MatterType
from jurisai.services.analytics import (
    build_report,
    citation_trends,
    court_distribution,
    legal_principles,
    top_authorities,
)
from jurisai.services.matters import MatterService


@pytest.fixture
def service(store):
    return MatterService(store)


class TestMatterService:

    def test_create_defaults(self, service):
        matter = service.create_matter(name="Doe v Roe", court="High Court")
        assert matter.matter_type == MatterType.CIVIL_LITIGATION
        assert matter.status == MatterStatus.ACTIVE
        assert matter.id

    def test_name_required(self, service):
        with pytest.raises(ActionValidationError):
            service.create_matter(name="  ")

    def test_invalid_type(self, service):
        with pytest.raises(ActionValidationError, match="Choose one of"):
            service.create_matter(name="X", matter_type="Maritime")

    def test_update(self, service):
        matter = service.create_matter(name="X")
        updated = service.update_matter(matter.id, status="Closed", court="Court of Appeal")
        assert updated.status == MatterStatus.CLOSED
        assert updated.court == "Court of Appeal"

    def test_update_missing(self, service):
        with pytest.raises(RecordNotFoundError):
            service.update_matter("missing", name="Y")

    def test_list_filters(self, service):
        service.create_matter(name="Alpha", client="Acme Ltd", matter_type="Employment")
        service.create_matter(name="Beta", status="Closed")
        service.create_matter(name="Gamma", case_number="HC-2024-001")

        assert [m.name for m in service.list_matters(status="Closed")] == ["Beta"]
        assert [m.name for m in service.list_matters(matter_type="Employment")] == ["Alpha"]
        assert [m.name for m in service.list_matters(search="acme")] == ["Alpha"]
        assert [m.name for m in service.list_matters(search="hc-2024")] == ["Gamma"]
        assert len(service.list_matters(status="all", matter_type="all")) == 3

    def test_list_most_recent_first(self, service):
        first = service.create_matter(name="First")
        service.create_matter(name="Second")
        service.update_matter(first.id, description="touched")
        assert [m.name for m in service.list_matters()] == ["First", "Second"]

    def test_detail(self, service, store, matter):
        create_authority(store, matter.id)
        store.create("Document", {"matter_id": matter.id, "document_type": "Defence", "title": "D"})
        detail = service.matter_detail(matter.id)
        assert detail.matter.id == matter.id
        assert len(detail.authorities) == 1
        assert len(detail.documents) == 1
        assert detail.arguments == []

    def test_dashboard(self, service, store):
        create_matter(store, name="Open")
        create_matter(store, name="Done", status="Closed")
        for n in range(12):
            create_authority(store, title=f"Authority {n}")
        summary = service.dashboard()
        assert summary.active_matters == 1
        assert summary.total_authorities == 12
        assert len(summary.recent_authorities) == 10
        assert summary.recent_authorities[0].title == "Authority 11"


class TestAnalytics:

    def test_citation_trends_last_years_ascending(self):
        authorities = [{"year": str(y)} for y in range(2000, 2015)] + [{"year": "2014"}, {"year": ""}]
        buckets = citation_trends(authorities)
        assert [b.label for b in buckets] == [str(y) for y in range(2005, 2015)]
        assert buckets[-1].count == 2

    def test_top_authorities_truncated(self):
        long_title = "R (on the application of Miller) v Secretary of State for Exiting the EU"
        buckets = top_authorities([{"title": long_title}, {"title": long_title}, {"title": "Short"}])
        assert buckets[0].label == long_title[:40] + "..."
        assert buckets[0].count == 2

    def test_court_distribution_limit(self):
        authorities = [{"court": f"Court {n}"} for n in range(10)]
        assert len(court_distribution(authorities)) == 8

    def test_legal_principles_keywords(self):
        authorities = [
            {"legal_principle": "Duty of care and breach of duty"},
            {"legal_principle": "The standard is reasonable care"},
        ]
        counts = {b.label: b.count for b in legal_principles(authorities)}
        assert counts["duty"] == 2
        assert counts["breach"] == 1
        assert "care" not in counts

    def test_build_report(self, store, matter):
        create_authority(store, matter.id)
        store.create("Document", {"matter_id": matter.id, "document_type": "Defence", "title": "D", "status": "Final"})
        report = build_report(store)
        assert report.total_matters == 1
        assert [(b.label, b.count) for b in report.authority_types] == [("Case Law", 1)]
        assert [(b.label, b.count) for b in report.document_status] == [("Final", 1)]
        assert report.matter_types[0].label == "Civil Litigation"

"""Tests for the SQLite entity store"""

import pytest

from jurisai.db import COLLECTIONS, get_store
from jurisai.db.base import parse_sort
from jurisai.db.sqlite_client import SQLiteStore
from jurisai.errors import RecordNotFoundError, VersionConflictError
from jurisai.models import MatterStatus


class TestCreateGet:

    def test_create_assigns_id_and_timestamps(self, store):
        record = store.create("Matter", {"name": "A"})
        assert record["id"]
        assert record["created_date"] == record["updated_date"]
        assert store.get("Matter", record["id"])["name"] == "A"

    def test_get_missing_returns_none(self, store):
        assert store.get("Matter", "missing") is None

    def test_unknown_collection(self, store):
        with pytest.raises(ValueError):
            store.list("Client")

    def test_factory_defaults_to_sqlite(self):
        assert isinstance(get_store(), SQLiteStore)


class TestFilterSort:

    def test_filter_equality_and_enum_values(self, store):
        store.create("Matter", {"name": "A", "status": "Active"})
        store.create("Matter", {"name": "B", "status": "Closed"})
        rows = store.filter("Matter", {"status": MatterStatus.ACTIVE})
        assert [r["name"] for r in rows] == ["A"]

    def test_filter_none_matches_missing(self, store):
        store.create("LegalAuthority", {"title": "Global"})
        store.create("LegalAuthority", {"title": "Linked", "matter_id": "m1"})
        rows = store.filter("LegalAuthority", {"matter_id": None})
        assert [r["title"] for r in rows] == ["Global"]

    def test_sort_descending_and_limit(self, store):
        for n in (2, 5, 1):
            store.create("Argument", {"matter_id": "m1", "version_number": n, "position": "Claimant"})
        rows = store.filter("Argument", {"matter_id": "m1"}, sort="-version_number", limit=2)
        assert [r["version_number"] for r in rows] == [5, 2]

    def test_list_in_insertion_order(self, store):
        for name in ("first", "second"):
            store.create("Matter", {"name": name})
        assert [r["name"] for r in store.list("Matter")] == ["first", "second"]

    def test_rejects_injection_in_field_names(self, store):
        with pytest.raises(ValueError):
            store.filter("Matter", {"name') OR 1=1 --": "x"})

    def test_parse_sort(self):
        assert parse_sort("-created_date") == ("created_date", True)
        assert parse_sort("name") == ("name", False)
        assert parse_sort(None) == (None, False)


class TestUpdate:

    def test_update_merges_fields(self, store):
        record = store.create("Matter", {"name": "A", "court": "High Court"})
        updated = store.update("Matter", record["id"], {"status": "Closed"})
        assert updated["court"] == "High Court"
        assert updated["status"] == "Closed"
        assert updated["created_date"] == record["created_date"]

    def test_update_missing_record(self, store):
        with pytest.raises(RecordNotFoundError):
            store.update("Matter", "missing", {"name": "B"})


class TestArgumentVersions:

    def test_duplicate_version_rejected(self, store):
        store.create("Argument", {"matter_id": "m1", "version_number": 1, "position": "Claimant"})
        with pytest.raises(VersionConflictError):
            store.create("Argument", {"matter_id": "m1", "version_number": 1, "position": "Claimant"})

    def test_same_version_other_matter(self, store):
        store.create("Argument", {"matter_id": "m1", "version_number": 1, "position": "Claimant"})
        store.create("Argument", {"matter_id": "m2", "version_number": 1, "position": "Claimant"})
        assert len(store.list("Argument")) == 2


class TestStatus:

    def test_status_counts(self, store):
        store.create("Matter", {"name": "A"})
        status = store.get_status()
        assert status["mode"] == "sqlite"
        assert status["counts"]["Matter"] == 1
        assert set(status["counts"]) == set(COLLECTIONS)

"""Tests for the in-memory workspace store"""

import logging
from datetime import datetime, timedelta

import pytest

from jurisai.api.session_store import WorkspaceStore
from jurisai.errors import UnsavedChangesError


@pytest.fixture
def new_entry(store, invoker, ingestion):
    async def make(workspaces):
        return await workspaces.create(store, invoker, ingestion)
    return make


class TestCapacity:

    async def test_full_store_drops_oldest(self, new_entry):
        workspaces = WorkspaceStore(max_workspaces=2)
        first = await new_entry(workspaces)
        first.last_active = datetime.now() - timedelta(minutes=5)
        second = await new_entry(workspaces)
        third = await new_entry(workspaces)

        assert workspaces.active_count == 2
        assert await workspaces.get(first.workspace_id) is None
        assert await workspaces.get(second.workspace_id) is second
        assert await workspaces.get(third.workspace_id) is third

    async def test_dropping_unsaved_work_is_logged(self, new_entry, caplog):
        workspaces = WorkspaceStore(max_workspaces=1)
        first = await new_entry(workspaces)
        first.arguments.workspace.has_unsaved_changes = True

        with caplog.at_level(logging.WARNING, logger="jurisai.api.session_store"):
            await new_entry(workspaces)

        assert f"Evicting workspace {first.workspace_id} with unsaved changes" in caplog.text


class TestExpiry:

    async def test_expired_unsaved_work_is_logged(self, new_entry, caplog):
        workspaces = WorkspaceStore(ttl_minutes=1)
        entry = await new_entry(workspaces)
        entry.documents.workspace.has_unsaved_changes = True
        entry.last_active = datetime.now() - timedelta(minutes=2)

        with caplog.at_level(logging.WARNING, logger="jurisai.api.session_store"):
            assert await workspaces.evict_expired() == 1

        assert "with unsaved changes" in caplog.text
        assert workspaces.active_count == 0


class TestDelete:

    async def test_unsaved_work_blocks_delete(self, new_entry):
        workspaces = WorkspaceStore()
        entry = await new_entry(workspaces)
        entry.arguments.workspace.has_unsaved_changes = True

        with pytest.raises(UnsavedChangesError):
            await workspaces.delete(entry.workspace_id)
        assert await workspaces.delete(entry.workspace_id, force=True)
        assert not await workspaces.delete(entry.workspace_id)

"""Workspace store: in-memory page state per client, with TTL eviction"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from jurisai.services.arguments import ArgumentBuilder
from jurisai.services.coach import AICoach
from jurisai.services.documents import DocumentGenerator
from jurisai.services.judgments import JudgmentAnalyzer

logger = logging.getLogger(__name__)


class WorkspaceEntry:
    """The page instances one client is working in"""

    def __init__(self, workspace_id: str, store, invoker, ingestion):
        self.workspace_id = workspace_id
        self.arguments = ArgumentBuilder(store, invoker, ingestion)
        self.documents = DocumentGenerator(store, invoker)
        self.judgments = JudgmentAnalyzer(store, invoker, ingestion)
        self.coach = AICoach(store, invoker)
        self.created_at = datetime.now()
        self.last_active = datetime.now()

    @property
    def pages(self) -> dict:
        return {
            "arguments": self.arguments,
            "documents": self.documents,
            "judgments": self.judgments,
            "coach": self.coach,
        }

    @property
    def has_unsaved_changes(self) -> bool:
        return any(page.workspace.has_unsaved_changes for page in self.pages.values())

    def guard_close(self, force: bool = False) -> None:
        for page in self.pages.values():
            page.workspace.guard_close(force)

    def touch(self):
        self.last_active = datetime.now()


class WorkspaceStore:
    """In-memory workspaces keyed by id.

    Entries expire after `ttl_minutes` of inactivity; the oldest entry is
    dropped when `max_workspaces` is reached.
    """

    def __init__(self, ttl_minutes: int = 60, max_workspaces: int = 1000):
        self._workspaces: dict[str, WorkspaceEntry] = {}
        self._ttl = timedelta(minutes=ttl_minutes)
        self._max = max_workspaces
        self._lock = asyncio.Lock()

    async def create(self, store, invoker, ingestion) -> WorkspaceEntry:
        async with self._lock:
            if len(self._workspaces) >= self._max:
                self._evict_oldest()
            entry = WorkspaceEntry(str(uuid4()), store, invoker, ingestion)
            self._workspaces[entry.workspace_id] = entry
            return entry

    async def get(self, workspace_id: str) -> Optional[WorkspaceEntry]:
        """Get workspace by ID, returns None if not found or expired"""
        async with self._lock:
            entry = self._workspaces.get(workspace_id)
            if entry and (datetime.now() - entry.last_active) < self._ttl:
                entry.touch()
                return entry
            return None

    async def delete(self, workspace_id: str, force: bool = False) -> bool:
        """Close a workspace. Raises UnsavedChangesError unless force is set."""
        async with self._lock:
            entry = self._workspaces.get(workspace_id)
            if entry is None:
                return False
            entry.guard_close(force)
            del self._workspaces[workspace_id]
            return True

    async def evict_expired(self) -> int:
        """Remove expired workspaces from memory"""
        async with self._lock:
            now = datetime.now()
            expired = [
                wid for wid, entry in self._workspaces.items()
                if (now - entry.last_active) >= self._ttl
            ]
            for wid in expired:
                if self._workspaces[wid].has_unsaved_changes:
                    logger.warning(f"Evicting workspace {wid} with unsaved changes")
                del self._workspaces[wid]
            return len(expired)

    def _evict_oldest(self):
        """Remove the oldest workspace to make room (called under lock)"""
        if not self._workspaces:
            return
        oldest_id = min(self._workspaces, key=lambda wid: self._workspaces[wid].last_active)
        if self._workspaces[oldest_id].has_unsaved_changes:
            logger.warning(f"Evicting workspace {oldest_id} with unsaved changes")
        del self._workspaces[oldest_id]

    @property
    def active_count(self) -> int:
        return len(self._workspaces)

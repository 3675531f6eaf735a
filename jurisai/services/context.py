"""Context assembler: gathers the records a generation needs into one object"""

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional

from pydantic import BaseModel, Field

from jurisai.db.base import EntityStore
from jurisai.errors import ActionValidationError, RecordNotFoundError, StorageError
from jurisai.models import (
    Argument,
    FactExpansions,
    LegalAuthority,
    LegalIssue,
    Matter,
    Position,
)
from jurisai.utils.config import get_settings

logger = logging.getLogger(__name__)


class Task(str, Enum):
    """The five generation flows"""
    RESEARCH = "research"
    ARGUMENT = "argument"
    DOCUMENT = "document"
    JUDGMENT = "judgment"
    COACHING = "coaching"


MATTER_REQUIRED = {Task.ARGUMENT, Task.DOCUMENT}


class UploadedDocument(BaseModel):
    """Text extracted from a file the user attached"""
    name: str
    text: str


class TaskContext(BaseModel):
    """Request-scoped context for one generation. Empty slots are omitted from prompts."""
    task: Task
    matter: Optional[Matter] = None
    authorities: List[LegalAuthority] = []
    issues: List[LegalIssue] = []
    issue: Optional[LegalIssue] = None
    latest_argument: Optional[Argument] = None
    uploaded_documents: List[UploadedDocument] = []
    position: Optional[Position] = None
    fact_pattern: str = ""
    fact_expansions: FactExpansions = Field(default_factory=FactExpansions)
    argument_text: str = ""
    briefing_notes: str = ""
    judgment_text: str = ""
    research_query: str = ""


def truncate_documents(
    documents: Iterable[UploadedDocument], limit: int
) -> List[UploadedDocument]:
    """Cap each document's text at `limit` characters."""
    return [UploadedDocument(name=d.name, text=d.text[:limit]) for d in documents]


class ContextAssembler:
    """Read-only: fetches matter, authorities, issues and the latest argument version."""

    def __init__(self, store: EntityStore):
        self.store = store

    def assemble(
        self,
        task: Task,
        matter_id: Optional[str] = None,
        issue_id: Optional[str] = None,
        position: Optional[Position] = None,
        fact_pattern: str = "",
        fact_expansions: Optional[FactExpansions] = None,
        argument_text: str = "",
        briefing_notes: str = "",
        judgment_text: str = "",
        research_query: str = "",
        documents: Iterable[UploadedDocument] = (),
        load_latest_argument: bool = False,
    ) -> TaskContext:
        """Build the context for one task.

        A missing or unreadable matter (when an id is given) raises; every
        other slot degrades to empty on a failed read.
        """
        if task in MATTER_REQUIRED and not matter_id:
            raise ActionValidationError("Please select a matter first")

        settings = get_settings()
        context = TaskContext(
            task=task,
            position=position,
            fact_pattern=fact_pattern or "",
            fact_expansions=fact_expansions or FactExpansions(),
            argument_text=argument_text or "",
            briefing_notes=briefing_notes or "",
            judgment_text=judgment_text or "",
            research_query=research_query or "",
            uploaded_documents=truncate_documents(documents, settings.document_char_limit),
        )

        if not matter_id:
            return context

        context.matter = self.load_matter(matter_id)
        context.authorities = self._optional(
            "authorities",
            lambda: [
                LegalAuthority.model_validate(r)
                for r in self.store.filter("LegalAuthority", {"matter_id": matter_id})
            ],
            [],
        )
        context.issues = self._optional(
            "issues",
            lambda: [
                LegalIssue.model_validate(r)
                for r in self.store.filter("LegalIssue", {"matter_id": matter_id})
            ],
            [],
        )
        if issue_id:
            context.issue = next((i for i in context.issues if i.id == issue_id), None)
        if load_latest_argument:
            context.latest_argument = self._optional(
                "latest argument", lambda: self.latest_argument(matter_id), None
            )
        return context

    def load_matter(self, matter_id: str) -> Matter:
        record = self.store.get("Matter", matter_id)
        if record is None:
            raise RecordNotFoundError("Matter", matter_id)
        return Matter.model_validate(record)

    def latest_argument(self, matter_id: str) -> Optional[Argument]:
        """Most recent saved version for a matter, by version_number."""
        rows = self.store.filter(
            "Argument", {"matter_id": matter_id}, sort="-version_number", limit=1
        )
        return Argument.model_validate(rows[0]) if rows else None

    def _optional(self, slot: str, read: Callable, default):
        try:
            return read()
        except StorageError as e:
            logger.warning(f"Could not load {slot}, continuing without it: {e}")
            return default

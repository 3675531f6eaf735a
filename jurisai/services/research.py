"""Research service: AI authority research with optional matter linking"""

import logging
from typing import Optional

from jurisai.db.base import EntityStore
from jurisai.errors import ActionValidationError, StorageError
from jurisai.models import FoundAuthority, LegalAuthority, LegalIssue, ResearchFindings
from jurisai.services.context import ContextAssembler, Task
from jurisai.services.invoker import GenerationInvoker
from jurisai.services.projector import authority_record
from jurisai.services.prompts import compile_research
from jurisai.services.workspace import ActionOutcome, Workspace

logger = logging.getLogger(__name__)


class ResearchService:
    """One research page: run a query, review findings, save authorities."""

    def __init__(
        self,
        store: EntityStore,
        invoker: Optional[GenerationInvoker] = None,
        workspace: Optional[Workspace] = None,
    ):
        self.store = store
        self.invoker = invoker or GenerationInvoker()
        self.workspace = workspace or Workspace()
        self.assembler = ContextAssembler(store)
        self.query = ""
        self.matter_id: Optional[str] = None
        self.findings: Optional[ResearchFindings] = None
        self.issue: Optional[LegalIssue] = None

    async def research(self, query: str, matter_id: Optional[str] = None) -> ActionOutcome:
        """Find authorities for a query. With a matter, also records the LegalIssue."""

        async def operation():
            if not (query or "").strip():
                raise ActionValidationError("Please enter a research query")
            context = self.assembler.assemble(
                Task.RESEARCH, matter_id=matter_id, research_query=query.strip()
            )
            findings = await self.invoker.invoke_compiled(compile_research(context))
            issue = self._record_issue(matter_id, query.strip(), findings) if matter_id else None
            return findings, issue

        def apply(result):
            self.findings, self.issue = result
            self.query = query.strip()
            self.matter_id = matter_id

        if not self.workspace.is_busy("research"):
            self.findings = None
        return await self.workspace.run("research", operation, slot="findings", apply=apply)

    async def save_authority(self, index: int, matter_id: Optional[str] = None) -> ActionOutcome:
        """Persist the index-th finding as a LegalAuthority."""

        async def operation():
            found = self._finding(index)
            return self.store_authority(found, matter_id if matter_id is not None else self.matter_id)

        return await self.workspace.save(f"save_authority:{index}", operation)

    def store_authority(self, found: FoundAuthority, matter_id: Optional[str] = None) -> LegalAuthority:
        record = authority_record(found, matter_id)
        data = record.model_dump(mode="json", exclude={"id", "created_date", "updated_date"})
        if not matter_id:
            data.pop("matter_id", None)
        saved = LegalAuthority.model_validate(self.store.create("LegalAuthority", data))
        logger.info(f"Saved authority '{saved.title}'")

        if matter_id and self.issue and self.issue.matter_id == matter_id:
            self._link_issue(saved)
        return saved

    def _finding(self, index: int) -> FoundAuthority:
        if self.findings is None:
            raise ActionValidationError("Run a research query first")
        if not 0 <= index < len(self.findings.authorities):
            raise ActionValidationError(f"No authority at position {index + 1}")
        return self.findings.authorities[index]

    def _record_issue(self, matter_id: str, query: str, findings: ResearchFindings) -> Optional[LegalIssue]:
        """Create or update the matter's LegalIssue for this query.

        The findings are still shown if this write fails.
        """
        try:
            existing = self.store.filter(
                "LegalIssue", {"matter_id": matter_id, "question": query}, limit=1
            )
            description = findings.summary or ""
            if existing:
                record = self.store.update("LegalIssue", existing[0]["id"], {"description": description})
            else:
                issue = LegalIssue(matter_id=matter_id, question=query, description=description)
                record = self.store.create(
                    "LegalIssue",
                    issue.model_dump(mode="json", exclude={"id", "created_date", "updated_date"}),
                )
            return LegalIssue.model_validate(record)
        except StorageError as e:
            logger.warning(f"Could not record legal issue for matter {matter_id}: {e}")
            return None

    def _link_issue(self, authority: LegalAuthority) -> None:
        if authority.id in self.issue.authority_ids:
            return
        ids = [*self.issue.authority_ids, authority.id]
        try:
            record = self.store.update("LegalIssue", self.issue.id, {"authority_ids": ids})
            self.issue = LegalIssue.model_validate(record)
        except StorageError as e:
            logger.warning(f"Could not link authority to issue {self.issue.id}: {e}")

"""Argument builder: court-locked, versioned argument drafting"""

import asyncio
import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from jurisai.db.base import EntityStore
from jurisai.errors import ActionValidationError
from jurisai.models import (
    Argument,
    FactExpansions,
    Matter,
    MatterType,
    Position,
    StructuredArgument,
    coerce_choice,
)
from jurisai.services.context import ContextAssembler, Task, UploadedDocument
from jurisai.services.ingestion import FileIngestion
from jurisai.services.invoker import GenerationInvoker
from jurisai.services.projector import save_argument_version
from jurisai.services.prompts import compile_argument, compile_fact_correction
from jurisai.services.workspace import ActionOutcome, Workspace

logger = logging.getLogger(__name__)


class ArgumentDraft(BaseModel):
    """Editable state of the argument being worked on"""
    matter_id: Optional[str] = None
    position: Optional[Position] = None
    fact_pattern: str = ""
    fact_expansions: FactExpansions = Field(default_factory=FactExpansions)
    argument_text: str = ""
    structured: Optional[StructuredArgument] = None
    authority_ids: List[str] = []
    uploaded_documents: List[UploadedDocument] = []
    loaded_version: Optional[Argument] = None

    def apply_matter_defaults(self, matter: Matter) -> None:
        self.matter_id = matter.id
        self.position = Position.APPELLANT if matter.matter_type == MatterType.APPEAL else Position.CLAIMANT
        self.fact_pattern = matter.description
        self.fact_expansions = FactExpansions()
        self.argument_text = ""
        self.structured = None
        self.authority_ids = []
        self.loaded_version = None

    def apply_version(self, version: Argument) -> None:
        """Overwrite (not merge) the editable fields with a saved version."""
        self.matter_id = version.matter_id
        self.position = version.position
        self.fact_pattern = version.fact_pattern
        self.fact_expansions = version.fact_expansions.model_copy()
        self.argument_text = version.argument_text
        self.structured = None
        self.authority_ids = list(version.authorities)
        self.loaded_version = version


def structured_argument_markdown(result: StructuredArgument) -> str:
    """Markdown for a structured result whose full text is missing."""
    if result.full_argument_markdown:
        return result.full_argument_markdown
    parts = []
    if result.summary:
        parts.append(result.summary)
    for n, point in enumerate(result.points, 1):
        lines = [f"## {n}. {point.issue or 'Issue'}"]
        for label, value in (("Rule", point.rule), ("Application", point.application),
                             ("Conclusion", point.conclusion)):
            if value:
                lines.append(f"**{label}:** {value}")
        parts.append("\n\n".join(lines))
    if result.remedies_sought:
        parts.append("## Remedies Sought\n" + "\n".join(f"- {r}" for r in result.remedies_sought))
    return "\n\n".join(parts)


class ArgumentBuilder:
    """One argument builder page bound to a single draft."""

    def __init__(
        self,
        store: EntityStore,
        invoker: Optional[GenerationInvoker] = None,
        ingestion: Optional[FileIngestion] = None,
        workspace: Optional[Workspace] = None,
    ):
        self.store = store
        self.invoker = invoker or GenerationInvoker()
        self.ingestion = ingestion
        self.workspace = workspace or Workspace()
        self.assembler = ContextAssembler(store)
        self.draft = ArgumentDraft()
        self.matter: Optional[Matter] = None

    async def select_matter(self, matter_id: str, force: bool = False) -> ActionOutcome:
        """Switch to a matter and resume its latest saved version, if any.

        Raises UnsavedChangesError when the current draft would be lost.
        """
        self.workspace.guard_close(force)

        async def operation():
            context = self.assembler.assemble(Task.ARGUMENT, matter_id=matter_id, load_latest_argument=True)
            return context.matter, context.latest_argument

        def apply(result):
            matter, latest = result
            self.matter = matter
            self.draft.apply_matter_defaults(matter)
            if latest is not None:
                self.draft.apply_version(latest)
            self.workspace.discard_changes()
            # generations still running were built for the previous matter
            self.workspace.retire("draft")

        return await self.workspace.run("load_matter", operation, slot="matter", apply=apply)

    def update_draft(
        self,
        position: Optional[Position] = None,
        fact_pattern: Optional[str] = None,
        **expansions: str,
    ) -> None:
        """Edit the draft's inputs. Unknown expansion names are rejected."""
        if position is not None:
            self.draft.position = coerce_choice(Position, position, "position")
        if fact_pattern is not None:
            self.draft.fact_pattern = fact_pattern
        if expansions:
            unknown = set(expansions) - set(FactExpansions.model_fields)
            if unknown:
                raise ActionValidationError(f"Unknown fact expansion: {', '.join(sorted(unknown))}")
            self.draft.fact_expansions = self.draft.fact_expansions.model_copy(update=expansions)

    async def attach_document(self, filename: str, content: bytes) -> ActionOutcome:
        """Upload a source document and keep its text for the next generation."""
        if self.ingestion is None:
            raise RuntimeError("No file ingestion configured")

        async def operation():
            return await asyncio.to_thread(self.ingestion.ingest, content, filename)

        def apply(text: str):
            self.draft.uploaded_documents.append(UploadedDocument(name=filename, text=text))

        return await self.workspace.run("upload", operation, apply=apply)

    async def generate(self, structured: bool = False) -> ActionOutcome:
        """Draft the argument. Refused locally when the matter has no court."""
        draft = self.draft

        async def operation():
            context = self.assembler.assemble(
                Task.ARGUMENT,
                matter_id=draft.matter_id,
                position=draft.position,
                fact_pattern=draft.fact_pattern,
                fact_expansions=draft.fact_expansions,
                documents=draft.uploaded_documents,
            )
            compiled = compile_argument(context, structured=structured)
            result = await self.invoker.invoke_compiled(compiled)
            authority_ids = [a.id for a in context.authorities]
            if structured:
                return context.matter.id, structured_argument_markdown(result), result, authority_ids
            return context.matter.id, result, None, authority_ids

        def apply(result):
            _, draft.argument_text, draft.structured, draft.authority_ids = result

        control = "generate_structured" if structured else "generate"
        return await self.workspace.run(
            control, operation, slot="draft", apply=apply, marks_unsaved=True,
            is_current=self._for_current_matter,
        )

    async def correct_facts(self) -> ActionOutcome:
        """Rewrite the current draft so its facts match the fact pattern."""
        draft = self.draft

        async def operation():
            context = self.assembler.assemble(
                Task.ARGUMENT,
                matter_id=draft.matter_id,
                position=draft.position,
                fact_pattern=draft.fact_pattern,
                fact_expansions=draft.fact_expansions,
                argument_text=draft.argument_text,
            )
            text = await self.invoker.invoke_compiled(compile_fact_correction(context))
            return context.matter.id, text

        def apply(result):
            _, draft.argument_text = result
            draft.structured = None

        return await self.workspace.run(
            "correct_facts", operation, slot="draft", apply=apply, marks_unsaved=True,
            is_current=self._for_current_matter,
        )

    async def save(self) -> ActionOutcome:
        """Save the draft as a new version (never edits an existing one)."""
        draft = self.draft

        async def operation():
            if not draft.matter_id:
                raise ActionValidationError("Please select a matter first")
            if draft.position is None:
                raise ActionValidationError("Please select a position")
            return save_argument_version(
                self.store,
                matter_id=draft.matter_id,
                position=draft.position,
                fact_pattern=draft.fact_pattern,
                fact_expansions=draft.fact_expansions,
                argument_text=draft.argument_text,
                authorities=draft.authority_ids,
            )

        def apply(saved: Argument):
            draft.loaded_version = saved

        return await self.workspace.save("save", operation, apply=apply)

    def _for_current_matter(self, result) -> bool:
        return result[0] == self.draft.matter_id

    def history(self, matter_id: Optional[str] = None) -> List[Argument]:
        """Saved versions for the matter, newest first."""
        matter_id = matter_id or self.draft.matter_id
        if not matter_id:
            return []
        rows = self.store.filter("Argument", {"matter_id": matter_id}, sort="-version_number")
        return [Argument.model_validate(r) for r in rows]

    async def coach(self, coach=None) -> ActionOutcome:
        """Ask the coach to review the current draft."""
        from jurisai.services.coach import AICoach

        coach = coach or AICoach(self.store, self.invoker)
        return await coach.review(
            matter_id=self.draft.matter_id,
            position=self.draft.position,
            fact_pattern=self.draft.fact_pattern,
            argument_text=self.draft.argument_text,
        )

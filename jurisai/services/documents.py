"""Document generator: drafts court documents from briefing notes"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from jurisai.db.base import EntityStore
from jurisai.errors import ActionValidationError
from jurisai.models import Document, DocumentStatus, DocumentType, coerce_choice
from jurisai.services.context import ContextAssembler, Task
from jurisai.services.invoker import GenerationInvoker
from jurisai.services.projector import default_document_title, derive_title, save_document
from jurisai.services.prompts import compile_document
from jurisai.services.workspace import ActionOutcome, Workspace
from jurisai.utils.config import get_settings

logger = logging.getLogger(__name__)


class DocumentGenerator:
    """One document generator page: generate, review, save once per generation."""

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
        self.matter_id: Optional[str] = None
        self.document_type: Optional[DocumentType] = None
        self.title = ""
        self.content = ""
        self.saved: Optional[Document] = None

    async def generate(
        self,
        matter_id: Optional[str],
        document_type,
        briefing_notes: str,
        title: str = "",
    ) -> ActionOutcome:
        async def operation():
            if not document_type or not (briefing_notes or "").strip():
                raise ActionValidationError("Please select document type and provide briefing notes")
            doc_type = coerce_choice(DocumentType, document_type, "document type")
            context = self.assembler.assemble(
                Task.DOCUMENT, matter_id=matter_id, briefing_notes=briefing_notes
            )
            text = await self.invoker.invoke_compiled(compile_document(context, doc_type))
            return doc_type, text

        def apply(result):
            self.document_type, self.content = result
            self.matter_id = matter_id
            self.title = title or ""
            self.saved = None

        return await self.workspace.run("generate", operation, slot="content", apply=apply, marks_unsaved=True)

    async def save(self, status=DocumentStatus.DRAFT, today: Optional[date] = None) -> ActionOutcome:
        """Create the Document record for the current generation."""

        async def operation():
            if self.saved is not None:
                raise ActionValidationError("This document has already been saved")
            return save_document(
                self.store,
                matter_id=self.matter_id,
                document_type=self.document_type,
                content=self.content,
                title=self.title,
                status=coerce_choice(DocumentStatus, status, "status"),
                today=today,
            )

        def apply(document: Document):
            self.saved = document

        return await self.workspace.save("save", operation, apply=apply)

    def draft_title(self) -> str:
        """Title for an untitled draft: its first line, else type and date."""
        return (
            derive_title(self.content, get_settings().title_max_length)
            or default_document_title(self.document_type)
        )

    def export_pdf(self, output_path: Optional[str] = None) -> Path:
        """Export the saved document (or the unsaved draft) to PDF."""
        from jurisai.services.export import DocumentPDFExporter

        document = self.saved
        if document is None:
            if not self.content or not self.document_type:
                raise ActionValidationError("Generate a document before exporting")
            document = Document(
                matter_id=self.matter_id or "",
                document_type=self.document_type,
                title=self.title or self.draft_title(),
                content=self.content,
            )
        path = DocumentPDFExporter().export(document, output_path)
        logger.info(f"Exported '{document.title}' to {path}")
        return path

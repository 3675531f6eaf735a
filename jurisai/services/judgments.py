"""Judgment analyzer: critical review of a judgment for appeal points"""

import asyncio
import logging
from typing import Optional

from jurisai.db.base import EntityStore
from jurisai.errors import IngestionError
from jurisai.models import JudgmentAnalysis
from jurisai.services.context import ContextAssembler, Task
from jurisai.services.ingestion import FileIngestion
from jurisai.services.invoker import GenerationInvoker
from jurisai.services.prompts import compile_judgment
from jurisai.services.workspace import ActionOutcome, Workspace

logger = logging.getLogger(__name__)

UPLOAD_FAILED = "Failed to process file. Please paste text directly."


class JudgmentAnalyzer:
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
        self.judgment_text = ""
        self.filename: Optional[str] = None
        self.analysis: Optional[JudgmentAnalysis] = None

    async def load_file(self, filename: str, content: bytes) -> ActionOutcome:
        """Upload a judgment and use its extracted text as the input."""
        if self.ingestion is None:
            raise RuntimeError("No file ingestion configured")

        async def operation():
            try:
                return await asyncio.to_thread(self.ingestion.ingest, content, filename)
            except IngestionError as e:
                raise IngestionError(f"{UPLOAD_FAILED} ({e})") from e

        def apply(text: str):
            self.judgment_text = text
            self.filename = filename

        return await self.workspace.run("upload", operation, slot="judgment_text", apply=apply)

    async def analyze(self, judgment_text: Optional[str] = None, matter_id: Optional[str] = None) -> ActionOutcome:
        if judgment_text is not None:
            self.judgment_text = judgment_text
        text = self.judgment_text

        async def operation():
            context = self.assembler.assemble(Task.JUDGMENT, matter_id=matter_id, judgment_text=text)
            return await self.invoker.invoke_compiled(compile_judgment(context))

        def apply(analysis: JudgmentAnalysis):
            self.analysis = analysis

        if not self.workspace.is_busy("analyze"):
            self.analysis = None
        return await self.workspace.run("analyze", operation, slot="analysis", apply=apply)

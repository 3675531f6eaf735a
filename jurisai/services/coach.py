"""AI coach: Socratic review of an argument in progress"""

import logging
from typing import Optional

from jurisai.db.base import EntityStore
from jurisai.models import CoachingFeedback, Position
from jurisai.services.context import ContextAssembler, Task
from jurisai.services.invoker import GenerationInvoker
from jurisai.services.prompts import compile_coaching
from jurisai.services.workspace import ActionOutcome, OutcomeStatus, Workspace

logger = logging.getLogger(__name__)


class AICoach:
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
        self.feedback: Optional[CoachingFeedback] = None

    async def review(
        self,
        matter_id: Optional[str] = None,
        position: Optional[Position] = None,
        fact_pattern: str = "",
        argument_text: str = "",
    ) -> ActionOutcome:
        """Coaching feedback. Skipped when there are neither facts nor an argument."""
        if not (fact_pattern or "").strip() and not (argument_text or "").strip():
            return ActionOutcome("coach", OutcomeStatus.SKIPPED, message="Nothing to review yet")

        async def operation():
            context = self.assembler.assemble(
                Task.COACHING,
                matter_id=matter_id,
                position=position,
                fact_pattern=fact_pattern,
                argument_text=argument_text,
            )
            return await self.invoker.invoke_compiled(compile_coaching(context))

        def apply(feedback: CoachingFeedback):
            self.feedback = feedback

        return await self.workspace.run("coach", operation, slot="feedback", apply=apply)

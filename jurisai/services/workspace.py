"""Per-instance action state: busy guards, stale-result discarding, unsaved flag.

Every user-triggered action runs through ``Workspace.run`` (or ``save``):

    Idle -> Generating -> Succeeded -> (Idle | Saving -> Saved)
                       -> Failed -> Idle

A control that is Generating or Saving ignores further triggers. Results
are tagged with a per-slot sequence number; a completion is discarded when
a newer request for the same slot was issued after it started.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from jurisai.errors import (
    ActionValidationError,
    CollaboratorError,
    RecordNotFoundError,
    UnsavedChangesError,
)

logger = logging.getLogger(__name__)

UNSAVED_WARNING = "You have unsaved changes. Save your work or discard it before leaving."


class ActionState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    SUCCEEDED = "succeeded"
    SAVING = "saving"
    SAVED = "saved"
    FAILED = "failed"


BUSY_STATES = {ActionState.GENERATING, ActionState.SAVING}


class OutcomeStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"
    STALE = "stale"


class FailureKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    COLLABORATOR = "collaborator"


@dataclass
class ActionOutcome:
    """What the user sees after triggering a control"""
    control: str
    status: OutcomeStatus
    value: Any = None
    message: str = ""
    failure: Optional[FailureKind] = None

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SUCCEEDED


@dataclass
class ActionControl:
    name: str
    state: ActionState = ActionState.IDLE
    last_error: str = ""

    @property
    def busy(self) -> bool:
        return self.state in BUSY_STATES


@dataclass
class Workspace:
    """Action state owned by one page instance"""
    controls: Dict[str, ActionControl] = field(default_factory=dict)
    has_unsaved_changes: bool = False
    _sequence: Dict[str, int] = field(default_factory=dict)

    def control(self, name: str) -> ActionControl:
        if name not in self.controls:
            self.controls[name] = ActionControl(name)
        return self.controls[name]

    def is_busy(self, name: str) -> bool:
        return self.control(name).busy

    async def run(
        self,
        control: str,
        operation: Callable[[], Awaitable[Any]],
        slot: Optional[str] = None,
        apply: Optional[Callable[[Any], None]] = None,
        marks_unsaved: bool = False,
        is_current: Optional[Callable[[Any], bool]] = None,
    ) -> ActionOutcome:
        """Run a generation-style action (Idle -> Generating -> Succeeded | Idle).

        is_current can reject a result that no longer matches the page, e.g.
        one generated for a matter that has since been switched away from.
        """
        return await self._execute(
            control, ActionState.GENERATING, ActionState.SUCCEEDED,
            operation, slot=slot, apply=apply,
            on_success=self._mark_unsaved if marks_unsaved else None,
            is_current=is_current,
        )

    async def save(
        self,
        control: str,
        operation: Callable[[], Awaitable[Any]],
        apply: Optional[Callable[[Any], None]] = None,
    ) -> ActionOutcome:
        """Run a persist action (Saving -> Saved); clears the unsaved flag on success."""
        return await self._execute(
            control, ActionState.SAVING, ActionState.SAVED,
            operation, apply=apply, on_success=self._mark_saved,
        )

    def guard_close(self, force: bool = False) -> None:
        """Raise UnsavedChangesError unless there is nothing to lose or force is set."""
        if self.has_unsaved_changes and not force:
            raise UnsavedChangesError(UNSAVED_WARNING)

    def discard_changes(self) -> None:
        self.has_unsaved_changes = False

    def retire(self, slot: str) -> None:
        """Make every in-flight request for the slot stale."""
        self._issue(slot)

    async def _execute(
        self,
        name: str,
        busy_state: ActionState,
        done_state: ActionState,
        operation: Callable[[], Awaitable[Any]],
        slot: Optional[str] = None,
        apply: Optional[Callable[[Any], None]] = None,
        on_success: Optional[Callable[[], None]] = None,
        is_current: Optional[Callable[[Any], bool]] = None,
    ) -> ActionOutcome:
        control = self.control(name)
        if control.busy:
            logger.debug(f"Ignoring '{name}': already {control.state.value}")
            return ActionOutcome(name, OutcomeStatus.SKIPPED, message="Already in progress")

        control.state = busy_state
        control.last_error = ""
        ticket = self._issue(slot) if slot else None
        try:
            value = await operation()
        except ActionValidationError as e:
            return self._fail(control, str(e), FailureKind.VALIDATION)
        except RecordNotFoundError as e:
            return self._fail(control, str(e), FailureKind.NOT_FOUND)
        except CollaboratorError as e:
            logger.error(f"Action '{name}' failed: {e}")
            return self._fail(control, str(e), FailureKind.COLLABORATOR)
        except BaseException:
            control.state = ActionState.IDLE
            raise

        if (slot and self._sequence.get(slot) != ticket) or (is_current and not is_current(value)):
            logger.info(f"Discarding stale result of '{name}' for slot '{slot}'")
            control.state = ActionState.IDLE
            return ActionOutcome(name, OutcomeStatus.STALE, value=value,
                                 message="A newer request replaced this result")

        try:
            if apply is not None:
                apply(value)
            if on_success is not None:
                on_success()
        except BaseException:
            control.state = ActionState.IDLE
            raise
        control.state = done_state
        return ActionOutcome(name, OutcomeStatus.SUCCEEDED, value=value)

    def _issue(self, slot: str) -> int:
        self._sequence[slot] = self._sequence.get(slot, 0) + 1
        return self._sequence[slot]

    def _fail(self, control: ActionControl, message: str, kind: FailureKind) -> ActionOutcome:
        # Failed is transient: the control is immediately usable again
        control.state = ActionState.IDLE
        control.last_error = message
        return ActionOutcome(control.name, OutcomeStatus.FAILED, message=message, failure=kind)

    def _mark_unsaved(self) -> None:
        self.has_unsaved_changes = True

    def _mark_saved(self) -> None:
        self.has_unsaved_changes = False

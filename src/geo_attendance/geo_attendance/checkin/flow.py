from __future__ import annotations

from typing import Optional

from ..core.enums import CheckAction, FlowState
from ..core.exceptions import InvalidState

# FAILED is reachable from every non-terminal state.
TRANSITIONS: dict[FlowState, frozenset[FlowState]] = {
    FlowState.CAPTURING: frozenset({FlowState.VALIDATING_GEOFENCE, FlowState.FAILED}),
    FlowState.VALIDATING_GEOFENCE: frozenset({FlowState.VERIFYING_FACE, FlowState.FAILED}),
    FlowState.VERIFYING_FACE: frozenset({FlowState.RECORDING, FlowState.FAILED}),
    FlowState.RECORDING: frozenset({FlowState.DONE, FlowState.FAILED}),
    FlowState.DONE: frozenset(),
    FlowState.FAILED: frozenset(),
}


class CheckFlow:
    """State machine of one check-in/check-out attempt.

    Capturing -> ValidatingGeofence -> VerifyingFace -> Recording -> Done,
    or Failed(reason) from any step.
    """

    def __init__(self, action: CheckAction):
        self.action = action
        self.state = FlowState.CAPTURING
        self.history: list[FlowState] = [FlowState.CAPTURING]
        self.failure_reason: Optional[str] = None
        self.failed_at: Optional[FlowState] = None

    @property
    def terminal(self) -> bool:
        return not TRANSITIONS[self.state]

    def advance(self, target: FlowState) -> None:
        if target == FlowState.FAILED:
            raise InvalidState("Use fail() to abort a check flow")
        self._move(target)

    def fail(self, reason: str) -> None:
        failed_at = self.state
        self._move(FlowState.FAILED)
        self.failed_at = failed_at
        self.failure_reason = reason

    def _move(self, target: FlowState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidState(f"Cannot move {self.action.value} flow from {self.state.value} to {target.value}")
        self.state = target
        self.history.append(target)

    @property
    def may_write(self) -> bool:
        return self.state == FlowState.RECORDING

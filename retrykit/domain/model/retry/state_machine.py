"""Execution state for one retried call.

State Diagram:
    ┌──────┐     ┌────────────┐  success   ┌───────────┐
    │ IDLE │────▶│ ATTEMPTING │───────────▶│ SUCCEEDED │
    └──────┘     └──┬──────▲──┘            └───────────┘
                    │      │
         retryable  │      │ wait elapsed
                    ▼      │
                 ┌─────────┴┐  cancelled  ┌─────────────┐
                 │ WAITING  │────────────▶│ INTERRUPTED │
                 └──────────┘             └─────────────┘

    ATTEMPTING ──non-retryable / exhausted──▶ FAILED
"""

from dataclasses import dataclass, field
from enum import Enum

from retrykit.domain.exceptions import InvalidStateTransitionError


class ExecutionState(Enum):
    """Lifecycle of a single executor invocation."""

    IDLE = "idle"
    ATTEMPTING = "attempting"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    INTERRUPTED = "interrupted"


VALID_TRANSITIONS: dict[ExecutionState, frozenset[ExecutionState]] = {
    ExecutionState.IDLE: frozenset([ExecutionState.ATTEMPTING]),
    ExecutionState.ATTEMPTING: frozenset(
        [ExecutionState.SUCCEEDED, ExecutionState.FAILED, ExecutionState.WAITING]
    ),
    ExecutionState.WAITING: frozenset([ExecutionState.ATTEMPTING, ExecutionState.INTERRUPTED]),
}

TERMINAL_STATES: frozenset[ExecutionState] = frozenset(
    [ExecutionState.SUCCEEDED, ExecutionState.FAILED, ExecutionState.INTERRUPTED]
)


def can_transition(from_state: ExecutionState, to_state: ExecutionState) -> bool:
    """Check if a transition is allowed. Terminal states have no exits."""
    return to_state in VALID_TRANSITIONS.get(from_state, frozenset())


@dataclass
class AttemptState:
    """
    Mutable bookkeeping owned by exactly one in-flight execution.

    Attributes:
        delay_ms: Wait to use after the next retryable failure
        attempts: Failed retryable attempts so far
        last_error: Most recent failure, re-raised on exhaustion
        state: Current lifecycle state
        delays_ms: Waits requested so far, in order
    """

    delay_ms: int
    attempts: int = 0
    last_error: BaseException | None = None
    state: ExecutionState = ExecutionState.IDLE
    delays_ms: list[int] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition(self, to_state: ExecutionState) -> None:
        """Move to ``to_state``.

        Raises:
            InvalidStateTransitionError: If the move is not allowed
        """
        if not can_transition(self.state, to_state):
            raise InvalidStateTransitionError(self.state, to_state)
        self.state = to_state

    def record_failure(self, error: BaseException) -> None:
        """Count a retryable failure and keep it for re-raising."""
        self.attempts += 1
        self.last_error = error

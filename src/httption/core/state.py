r"""Lifecycle state of an HTTP action.

The state is an immutable value: every step of the executor returns a
new ``ActionState`` instead of mutating counters in place, which keeps
the lifecycle below directly testable::

    UNCONFIGURED -> CONFIGURED -> DISPATCHING -> SUCCEEDED | RETRY_WAIT | FAILED
    RETRY_WAIT -> DISPATCHING
    SUCCEEDED | FAILED -> CONFIGURED  (repeat)
"""

from __future__ import annotations

__all__ = ["ActionPhase", "ActionState"]

from dataclasses import dataclass, replace
from enum import Enum

from httption.exceptions import InvalidTransitionError


class ActionPhase(str, Enum):
    """Phases of the action lifecycle."""

    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    DISPATCHING = "dispatching"
    RETRY_WAIT = "retry_wait"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_TRANSITIONS: dict[ActionPhase, frozenset[ActionPhase]] = {
    ActionPhase.UNCONFIGURED: frozenset({ActionPhase.CONFIGURED, ActionPhase.DISPATCHING}),
    ActionPhase.CONFIGURED: frozenset({ActionPhase.CONFIGURED, ActionPhase.DISPATCHING}),
    ActionPhase.DISPATCHING: frozenset(
        {ActionPhase.SUCCEEDED, ActionPhase.RETRY_WAIT, ActionPhase.FAILED}
    ),
    ActionPhase.RETRY_WAIT: frozenset({ActionPhase.DISPATCHING, ActionPhase.FAILED}),
    ActionPhase.SUCCEEDED: frozenset({ActionPhase.CONFIGURED, ActionPhase.FAILED}),
    ActionPhase.FAILED: frozenset({ActionPhase.CONFIGURED, ActionPhase.FAILED}),
}


@dataclass(frozen=True)
class ActionState:
    """Immutable snapshot of the action lifecycle.

    Attributes:
        phase: The current lifecycle phase.
        attempt: Number of attempts dispatched in the current cycle.
        repeats: Number of repeat cycles run by the current execution.
        error: The last error observed, or ``None``.

    Example:
        ```pycon
        >>> from httption.core.state import ActionPhase, ActionState
        >>> state = ActionState().to(ActionPhase.CONFIGURED)
        >>> state = state.start_attempt()
        >>> state.phase, state.attempt
        (<ActionPhase.DISPATCHING: 'dispatching'>, 1)

        ```
    """

    phase: ActionPhase = ActionPhase.UNCONFIGURED
    attempt: int = 0
    repeats: int = 0
    error: Exception | None = None

    def to(self, phase: ActionPhase, **changes) -> ActionState:
        """Return the state after a transition to ``phase``.

        Raises:
            InvalidTransitionError: If the lifecycle does not allow the
                transition.
        """
        if phase not in _TRANSITIONS[self.phase]:
            msg = f"invalid action transition: {self.phase.value} -> {phase.value}"
            raise InvalidTransitionError(msg)
        return replace(self, phase=phase, **changes)

    def start_attempt(self) -> ActionState:
        return self.to(ActionPhase.DISPATCHING, attempt=self.attempt + 1)

    def succeed(self) -> ActionState:
        return self.to(ActionPhase.SUCCEEDED, error=None)

    def fail(self, error: Exception) -> ActionState:
        return self.to(ActionPhase.FAILED, error=error)

    def wait_retry(self, error: Exception) -> ActionState:
        return self.to(ActionPhase.RETRY_WAIT, error=error)

    def record(self, error: Exception) -> ActionState:
        """Return the state with ``error`` recorded, keeping the phase."""
        return replace(self, error=error)

    def new_cycle(self, *, repeat: bool) -> ActionState:
        """Return to ``CONFIGURED`` for a fresh dispatch cycle.

        The attempt counter restarts at 0. ``repeat`` counts the cycle as
        a repeat of the previous one.
        """
        repeats = self.repeats + 1 if repeat else 0
        return self.to(ActionPhase.CONFIGURED, attempt=0, repeats=repeats)

    @property
    def is_terminal(self) -> bool:
        return self.phase in (ActionPhase.SUCCEEDED, ActionPhase.FAILED)

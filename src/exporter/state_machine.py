"""State machine for the reconciliation loop."""

from enum import Enum

import structlog

from src.config.constants import COMPONENT_EXPORTER


logger = structlog.get_logger()


class LoopState(str, Enum):
    """State of the reconciliation loop.

    - IDLE: Waiting for the next tick
    - POLLING: Fetching nodes and rebuilding the gauge families
    """

    IDLE = "IDLE"
    POLLING = "POLLING"


_VALID_TRANSITIONS: dict[LoopState, set[LoopState]] = {
    LoopState.IDLE: {LoopState.POLLING},
    LoopState.POLLING: {LoopState.IDLE},
}


class LoopStateTransitionError(Exception):
    """Raised when an illegal state transition is attempted."""

    def __init__(self, from_state: LoopState, to_state: LoopState) -> None:
        """Initialize the transition error.

        Args:
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal reconciliation loop transition: "
            f"{from_state.value} -> {to_state.value}"
        )


class LoopStateMachine:
    """Tracks the Idle/Polling state of the reconciliation loop."""

    def __init__(self, initial_state: LoopState = LoopState.IDLE) -> None:
        """Initialize the state machine.

        Args:
            initial_state: Starting state.
        """
        self._state = initial_state
        self._log = logger.bind(component=COMPONENT_EXPORTER)

    @property
    def state(self) -> LoopState:
        """Get the current state."""
        return self._state

    def can_transition_to(self, target: LoopState) -> bool:
        """Check if a transition to the target state is valid."""
        return target in _VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, target: LoopState) -> None:
        """Transition to a new state.

        Args:
            target: The target state.

        Raises:
            LoopStateTransitionError: If the transition is invalid.
        """
        if not self.can_transition_to(target):
            self._log.error(
                "illegal_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise LoopStateTransitionError(self._state, target)

        old_state = self._state
        self._state = target
        self._log.debug(
            "state_transition",
            from_state=old_state.value,
            to_state=target.value,
        )

    def to_polling(self) -> None:
        """Transition to POLLING state."""
        self.transition_to(LoopState.POLLING)

    def to_idle(self) -> None:
        """Transition to IDLE state."""
        self.transition_to(LoopState.IDLE)

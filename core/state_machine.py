"""
Resolution States
-----------------
One resolution session moves through these states:

    IDLE → AWAITING_INPUT → HIT
                          → MISS → RETRYING → AWAITING_INPUT ...
                                 → FATAL

Every step is checked against VALID_TRANSITIONS and kept in the
session history, which the resolver returns with its Resolution.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Dict, List, Optional, Set
import logging


class State(Enum):
    IDLE = auto()            # No name under consideration
    AWAITING_INPUT = auto()  # Checking a name (argument or picker choice)
    HIT = auto()             # Name found, command handed to the launcher
    MISS = auto()            # Name not found
    RETRYING = auto()        # Showing the picker again after a miss
    FATAL = auto()           # Retry ceiling reached


@dataclass
class StateTransition:
    """One step of a session: where it came from, where it went, and why."""
    from_state: State
    to_state: State
    timestamp: datetime
    reason: str
    metadata: Dict = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"<{self.from_state.name} → {self.to_state.name}: {self.reason}>"


# HIT and FATAL end a session; IDLE is re-entered on cancel or a menu miss
VALID_TRANSITIONS: Dict[State, Set[State]] = {
    State.IDLE: {State.AWAITING_INPUT},
    State.AWAITING_INPUT: {State.HIT, State.MISS, State.IDLE},
    State.MISS: {State.RETRYING, State.FATAL, State.IDLE},
    State.RETRYING: {State.AWAITING_INPUT, State.IDLE},
    State.HIT: set(),
    State.FATAL: set(),
}


class StateMachine:
    """Current state of one resolution session plus the steps taken so far."""

    def __init__(self, initial_state: State = State.IDLE):
        self._state = initial_state
        self._steps: List[StateTransition] = []
        self._logger = logging.getLogger("sshpick.state")

    @property
    def state(self) -> State:
        return self._state

    @property
    def history(self) -> List[StateTransition]:
        return list(self._steps)

    def can_transition(self, to_state: State) -> bool:
        return to_state in VALID_TRANSITIONS[self._state]

    def transition(
        self,
        to_state: State,
        reason: str,
        metadata: Optional[Dict] = None
    ) -> StateTransition:
        """
        Move the session to `to_state` and record the step.

        Raises:
            ValueError: If `to_state` is not reachable from the current state
        """
        if not self.can_transition(to_state):
            allowed = ", ".join(sorted(s.name for s in VALID_TRANSITIONS[self._state])) or "none"
            raise ValueError(
                f"Invalid transition: {self._state.name} → {to_state.name} "
                f"(allowed: {allowed})"
            )

        step = StateTransition(
            from_state=self._state,
            to_state=to_state,
            timestamp=datetime.now(),
            reason=reason,
            metadata=metadata or {}
        )
        self._steps.append(step)
        self._state = to_state

        self._logger.debug(f"{step.from_state.name} → {to_state.name}: {reason}")
        return step

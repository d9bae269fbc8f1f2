"""
Connection Resolver
-------------------
Turns a user-supplied name into a launchable command.

Two pathways:
- Direct argument: checked once, a miss re-opens the picker until the
  retry ceiling is reached.
- Interactive menu: the picker is shown once, a miss is reported and
  the session ends.

The resolver never exits the process. It returns a Resolution and the
caller decides what to do with it.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional

from connections.matcher import Candidate, match
from connections.registry import ConnectionRegistry, ConnectionRequest
from .errors import (
    ErrorCategory, ErrorHandler, RetryPolicy, SSHPickError,
    create_cancelled_error, create_not_found_error, create_retry_exhausted_error,
)
from .state_machine import State, StateMachine, StateTransition
from infra.logging import get_logger


MENU_MESSAGE = "Select or search an SSH connection:"
RETRY_MESSAGE = "Connection not found. Search or select:"

CandidateSource = Callable[[str], List[Candidate]]
Selector = Callable[[str, CandidateSource], Optional[str]]
Reporter = Callable[[SSHPickError], None]


class ResolutionStatus(Enum):
    HIT = auto()
    NOT_FOUND = auto()   # Menu selection missing from the registry
    FATAL = auto()       # Retry ceiling reached
    CANCELLED = auto()   # Picker closed without a choice


@dataclass
class RetryState:
    """Failed attempts within one resolution session."""
    failures: int = 0

    def record_miss(self) -> int:
        self.failures += 1
        return self.failures

    @property
    def exhausted(self) -> bool:
        return self.failures >= RetryPolicy.limit_for(ErrorCategory.NAME_NOT_FOUND)


@dataclass
class Resolution:
    """Outcome of a resolution session."""
    status: ResolutionStatus
    retry: RetryState
    request: Optional[ConnectionRequest] = None
    error: Optional[SSHPickError] = None
    history: List[StateTransition] = field(default_factory=list)

    @property
    def is_hit(self) -> bool:
        return self.status is ResolutionStatus.HIT

    @property
    def states(self) -> List[State]:
        """States visited, starting from IDLE."""
        if not self.history:
            return [State.IDLE]
        return [self.history[0].from_state] + [t.to_state for t in self.history]


class Resolver:
    """
    Resolves connection names against a registry.

    Responsibilities:
    - Check names against the registry
    - Drive the bounded retry loop for direct arguments
    - Report misses through the reporter callback

    Forbidden:
    - Exiting the process
    - Launching commands
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        select: Selector,
        reporter: Optional[Reporter] = None,
    ):
        self._registry = registry
        self._select = select
        self._reporter = reporter or ErrorHandler().handle
        self._logger = get_logger("resolver")

    def candidates(self, fragment: str = "") -> List[Candidate]:
        """Candidate source handed to the picker, always over the full registry."""
        return match(self._registry, fragment)

    def resolve_direct(self, name: str, retry: Optional[RetryState] = None) -> Resolution:
        """
        Resolve a name given on the command line.

        Each miss counts against `retry`; the session turns FATAL once
        the retry ceiling is reached, without asking again.
        """
        retry = retry if retry is not None else RetryState()
        sm = StateMachine()
        candidate = name

        while True:
            sm.transition(State.AWAITING_INPUT, f"checking '{candidate}'")

            if candidate in self._registry:
                return self._hit(sm, candidate, retry)

            sm.transition(State.MISS, f"'{candidate}' is not registered")
            error = create_not_found_error(candidate)
            self._reporter(error)
            retry.record_miss()

            if retry.exhausted:
                sm.transition(State.FATAL, "too many failed attempts",
                              {"failures": retry.failures})
                fatal = create_retry_exhausted_error(retry.failures)
                self._reporter(fatal)
                return Resolution(
                    status=ResolutionStatus.FATAL,
                    retry=retry,
                    error=fatal,
                    history=sm.history
                )

            sm.transition(State.RETRYING, f"attempt {retry.failures + 1}",
                          {"failures": retry.failures})
            choice = self._select(RETRY_MESSAGE, self.candidates)

            if choice is None:
                return self._cancelled(sm, retry)

            candidate = choice

    def resolve_interactive(self) -> Resolution:
        """
        Resolve a name picked from the full connection menu.

        A miss is reported once and ends the session.
        """
        retry = RetryState()
        sm = StateMachine()

        sm.transition(State.AWAITING_INPUT, "showing connection menu")
        choice = self._select(MENU_MESSAGE, self.candidates)

        if choice is None:
            return self._cancelled(sm, retry)

        if choice in self._registry:
            return self._hit(sm, choice, retry)

        sm.transition(State.MISS, f"'{choice}' is not configured")
        error = create_not_found_error(choice)
        self._reporter(error)
        sm.transition(State.IDLE, "menu selection not configured")

        return Resolution(
            status=ResolutionStatus.NOT_FOUND,
            retry=retry,
            error=error,
            history=sm.history
        )

    def _hit(self, sm: StateMachine, name: str, retry: RetryState) -> Resolution:
        sm.transition(State.HIT, f"'{name}' found")
        self._logger.info(f"Resolved connection '{name}' after {retry.failures} failed attempts")
        return Resolution(
            status=ResolutionStatus.HIT,
            retry=retry,
            request=self._registry.request_for(name),
            history=sm.history
        )

    def _cancelled(self, sm: StateMachine, retry: RetryState) -> Resolution:
        sm.transition(State.IDLE, "picker cancelled")
        error = create_cancelled_error()
        self._reporter(error)
        return Resolution(
            status=ResolutionStatus.CANCELLED,
            retry=retry,
            error=error,
            history=sm.history
        )

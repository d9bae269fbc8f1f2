# Core module - resolution state machine, errors and launching
# Resolver and Launcher live in core.resolver / core.launcher and are
# imported from there; they depend on the connections package.

from .state_machine import StateMachine, State, StateTransition
from .errors import (
    ErrorHandler, SSHPickError, ErrorCategory, RetryPolicy,
    RegistryError, RegistryNotFoundError, RegistryFormatError,
)

__all__ = [
    "StateMachine", "State", "StateTransition",
    "ErrorHandler", "SSHPickError", "ErrorCategory", "RetryPolicy",
    "RegistryError", "RegistryNotFoundError", "RegistryFormatError",
]

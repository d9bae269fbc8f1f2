"""
Error Handling Module
---------------------
Typed errors with classification and retry limits.
Resolution code never exits the process; it returns or raises these
and the driver in main.py decides the exit status.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, Optional
import logging


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""
    CONFIG_MISSING = auto()     # Registry file not found
    CONFIG_MALFORMED = auto()   # Registry file does not parse
    ENTRY_INVALID = auto()      # Registry entry without a usable command
    NAME_NOT_FOUND = auto()     # Requested connection is not in the registry
    RETRY_EXHAUSTED = auto()    # Too many failed attempts
    LAUNCH_FAILED = auto()      # Command could not be started
    USER_CANCELLED = auto()     # Picker closed without a choice


class RegistryError(Exception):
    """Base class for fatal registry load errors."""

    category = ErrorCategory.CONFIG_MALFORMED

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class RegistryNotFoundError(RegistryError):
    """Registry file does not exist."""

    category = ErrorCategory.CONFIG_MISSING


class RegistryFormatError(RegistryError):
    """Registry file exists but is not a valid mapping."""

    category = ErrorCategory.CONFIG_MALFORMED


@dataclass
class SSHPickError:
    """
    Structured error with metadata.

    Used for consistent error handling and reporting.
    """
    category: ErrorCategory
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=datetime.now)
    recoverable: bool = True

    @classmethod
    def from_exception(
        cls,
        exception: Exception,
        category: Optional[ErrorCategory] = None,
        details: Optional[Dict] = None
    ) -> "SSHPickError":
        """Create error from an exception."""
        if category is None:
            category = getattr(exception, "category", ErrorCategory.LAUNCH_FAILED)
        if details is None and getattr(exception, "path", ""):
            details = {"path": exception.path}
        return cls(
            category=category,
            message=str(exception),
            details=details,
            recoverable=category not in FATAL_CATEGORIES
        )

    def __repr__(self) -> str:
        return f"SSHPickError({self.category.name}: {self.message})"


FATAL_CATEGORIES = {
    ErrorCategory.CONFIG_MISSING,
    ErrorCategory.CONFIG_MALFORMED,
    ErrorCategory.RETRY_EXHAUSTED,
}


class RetryPolicy:
    """
    Maximum failed attempts per error category.

    Only a mistyped name on the command line is retried; a miss from
    the picker menu is reported and the session ends.
    """

    MAX_FAILED_ATTEMPTS = 3

    MAX_RETRIES: Dict[ErrorCategory, int] = {
        ErrorCategory.NAME_NOT_FOUND: MAX_FAILED_ATTEMPTS,
        ErrorCategory.ENTRY_INVALID: 0,
        ErrorCategory.LAUNCH_FAILED: 0,
        ErrorCategory.CONFIG_MISSING: 0,
        ErrorCategory.CONFIG_MALFORMED: 0,
        ErrorCategory.RETRY_EXHAUSTED: 0,
        ErrorCategory.USER_CANCELLED: 0,
    }

    @classmethod
    def limit_for(cls, category: ErrorCategory) -> int:
        """Number of failures after which the session gives up."""
        return cls.MAX_RETRIES.get(category, 0)


class ErrorHandler:
    """
    Central error handler with logging and exit-code mapping.
    """

    EXIT_CODES: Dict[ErrorCategory, int] = {
        ErrorCategory.CONFIG_MISSING: 1,
        ErrorCategory.CONFIG_MALFORMED: 1,
        ErrorCategory.LAUNCH_FAILED: 1,
        ErrorCategory.RETRY_EXHAUSTED: 2,
        ErrorCategory.ENTRY_INVALID: 0,
        ErrorCategory.NAME_NOT_FOUND: 0,
        ErrorCategory.USER_CANCELLED: 0,
    }

    def __init__(self):
        self._logger = logging.getLogger("sshpick.errors")

    def handle(self, error: SSHPickError) -> str:
        """
        Handle an error and return user-friendly message.
        """
        self._log_error(error)
        return self._get_user_message(error)

    def exit_code(self, error: SSHPickError) -> int:
        """Process exit status for an error that ends the run."""
        return self.EXIT_CODES.get(error.category, 1)

    def _log_error(self, error: SSHPickError) -> None:
        """Log error with appropriate level."""
        level_map = {
            ErrorCategory.USER_CANCELLED: logging.INFO,
            ErrorCategory.NAME_NOT_FOUND: logging.WARNING,
            ErrorCategory.ENTRY_INVALID: logging.WARNING,
            ErrorCategory.LAUNCH_FAILED: logging.ERROR,
            ErrorCategory.CONFIG_MISSING: logging.ERROR,
            ErrorCategory.CONFIG_MALFORMED: logging.ERROR,
            ErrorCategory.RETRY_EXHAUSTED: logging.ERROR,
        }

        level = level_map.get(error.category, logging.ERROR)

        self._logger.log(
            level,
            f"{error.category.name}: {error.message}",
            extra={"details": error.details}
        )

    def _get_user_message(self, error: SSHPickError) -> str:
        """Generate user-friendly error message."""
        details = error.details or {}
        path = details.get("path", "")
        name = details.get("name", "")

        messages = {
            ErrorCategory.CONFIG_MISSING: f"Registry file not found: {path}",
            ErrorCategory.CONFIG_MALFORMED: (
                f"Registry file {path} is not valid: {error.message}"
            ),
            ErrorCategory.ENTRY_INVALID: f'Connection "{name}" has no command defined.',
            ErrorCategory.NAME_NOT_FOUND: f'Connection "{name}" does not exist.',
            ErrorCategory.RETRY_EXHAUSTED: "Too many failed attempts. Closing...",
            ErrorCategory.LAUNCH_FAILED: f"Could not start connection: {error.message}",
            ErrorCategory.USER_CANCELLED: "No connection selected.",
        }

        return messages.get(error.category, error.message or "An error occurred.")


# Convenience functions

def create_not_found_error(name: str) -> SSHPickError:
    """Create a name-not-found error."""
    return SSHPickError(
        category=ErrorCategory.NAME_NOT_FOUND,
        message=f'connection "{name}" does not exist',
        details={"name": name}
    )


def create_retry_exhausted_error(failures: int) -> SSHPickError:
    """Create the error raised when the retry ceiling is reached."""
    return SSHPickError(
        category=ErrorCategory.RETRY_EXHAUSTED,
        message="too many failed attempts",
        details={"failures": failures},
        recoverable=False
    )


def create_launch_error(message: str, command: str = "") -> SSHPickError:
    """Create a launch failure error."""
    return SSHPickError(
        category=ErrorCategory.LAUNCH_FAILED,
        message=message,
        details={"command": command},
        recoverable=False
    )


def create_cancelled_error() -> SSHPickError:
    """Create the error for a picker closed without a selection."""
    return SSHPickError(
        category=ErrorCategory.USER_CANCELLED,
        message="selection cancelled"
    )


def create_entry_invalid_error(name: str) -> SSHPickError:
    """Create the warning for a registry entry with no usable command."""
    return SSHPickError(
        category=ErrorCategory.ENTRY_INVALID,
        message=f'connection "{name}" has no command defined',
        details={"name": name}
    )

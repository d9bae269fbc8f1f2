"""
sshpick Centralized Logging
---------------------------
Logging with session_id propagation for resolution traceability.

Design:
- Every resolution session gets a unique session_id
- session_id propagates through: Resolver -> Launcher
- Console output through Rich on stderr, optional JSON file log
- Clear severity discipline: INFO=state, WARNING=recoverable, ERROR=abort

Usage:
    from infra.logging import get_logger, SessionContext

    logger = get_logger("resolver")

    with SessionContext() as session_id:
        logger.info("Resolving connection")
"""

import contextvars
import json
import logging
import logging.handlers
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAMESPACE = "sshpick"
LOG_FILE_NAME = "sshpick.log"
MAX_BYTES = 1024 * 1024
BACKUP_COUNT = 3

_session_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "session_id", default=None
)


def generate_session_id() -> str:
    """Generate a unique session ID."""
    return f"session_{uuid.uuid4().hex[:12]}"


def get_session_id() -> Optional[str]:
    """Get the current session ID from context."""
    return _session_id_var.get()


class SessionContext:
    """
    Context manager for session scoping.

    Usage:
        with SessionContext() as session_id:
            # All logs within this block carry session_id
            logger.info("Resolving...")
    """

    def __init__(self, session_id: Optional[str] = None):
        self._session_id = session_id or generate_session_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _session_id_var.set(self._session_id)
        return self._session_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _session_id_var.reset(self._token)
            self._token = None


class SessionIdFilter(logging.Filter):
    """Logging filter that adds session_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "session_id", None) is None:
            record.session_id = get_session_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "session_id": getattr(record, "session_id", "-"),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        details = getattr(record, "details", None)
        if details:
            log_entry["details"] = details

        return json.dumps(log_entry, default=str)


def configure_logging(
    level: int = logging.WARNING,
    log_dir: Optional[str] = None,
    console: Optional[Console] = None,
) -> Optional[Path]:
    """
    Configure the sshpick logging system.

    Safe to call more than once; handlers are replaced each time.

    Args:
        level: Console logging level (default WARNING)
        log_dir: Directory for the JSON log file, no file log if None
        console: Rich console for log output (default: stderr)

    Returns:
        Path of the log file, if file logging is enabled
    """
    root_logger = logging.getLogger(LOGGER_NAMESPACE)
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    session_filter = SessionIdFilter()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        show_time=False,
    )
    console_handler.setLevel(level)
    console_handler.addFilter(session_filter)
    root_logger.addHandler(console_handler)

    if not log_dir:
        return None

    log_path = Path(log_dir).expanduser()
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / LOG_FILE_NAME

    file_handler = logging.handlers.RotatingFileHandler(
        str(log_file), maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)  # File gets everything
    file_handler.setFormatter(JSONFormatter())
    file_handler.addFilter(session_filter)
    root_logger.addHandler(file_handler)

    return log_file


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the sshpick namespace.

    Args:
        name: Logger name (prefixed with 'sshpick.' if not already)
    """
    if not name.startswith(LOGGER_NAMESPACE):
        name = f"{LOGGER_NAMESPACE}.{name}"

    return logging.getLogger(name)

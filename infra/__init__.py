# Infrastructure module - Logging, configuration and the terminal picker

from .logging import (
    get_logger, configure_logging, SessionContext,
    get_session_id, generate_session_id
)
from .config import ConfigManager, ConfigError, DEFAULT_CONFIG_FILE
from .picker import ConnectionPicker, CandidateCompleter, pick_value

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "SessionContext",
    "get_session_id",
    "generate_session_id",
    # Config
    "ConfigManager",
    "ConfigError",
    "DEFAULT_CONFIG_FILE",
    # Picker
    "ConnectionPicker",
    "CandidateCompleter",
    "pick_value",
]

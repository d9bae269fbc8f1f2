# Connections module - registry loading and name matching
# This module does NOT launch anything, only loads and filters
# No terminal I/O, no subprocesses

from .registry import (
    ConnectionRegistry, ConnectionRequest, load_registry, DEFAULT_REGISTRY_FILE
)
from .matcher import Candidate, match

__all__ = [
    "ConnectionRegistry", "ConnectionRequest", "load_registry", "DEFAULT_REGISTRY_FILE",
    "Candidate", "match",
]

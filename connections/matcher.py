"""
Connection Matcher
------------------
Filters registry names by a typed fragment.
Case-insensitive substring match, registry order preserved.
"""

from dataclasses import dataclass
from typing import List, Optional

from .registry import ConnectionRegistry


@dataclass(frozen=True)
class Candidate:
    """A name offered to the user, with a label for display."""
    label: str
    key: str


def format_label(name: str, command: str) -> str:
    return f"{name} → {command}"


def match(registry: ConnectionRegistry, fragment: Optional[str] = "") -> List[Candidate]:
    """
    Return candidates whose name contains `fragment`, ignoring case.

    An empty fragment returns every connection.
    """
    needle = (fragment or "").lower()

    return [
        Candidate(label=format_label(name, registry.command_for(name)), key=name)
        for name in registry
        if needle in name.lower()
    ]

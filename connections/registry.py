"""
Connection Registry
-------------------
Loads the name -> command mapping from a local file.
No matching, no process execution. Only loading and validation.

Exit Criterion: A broken registry never reaches the resolver.
"""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union
import json
import logging

import yaml

from core.errors import RegistryFormatError, RegistryNotFoundError


DEFAULT_REGISTRY_FILE = "dir.txt"
YAML_SUFFIXES = {".yaml", ".yml"}


@dataclass(frozen=True)
class ConnectionRequest:
    """A resolved connection, consumed once by the launcher."""
    name: str
    command: str

    def __repr__(self) -> str:
        return f"ConnectionRequest(name={self.name}, command={self.command!r})"


def is_valid_command(value: Any) -> bool:
    """A usable command is a string with something besides whitespace."""
    return isinstance(value, str) and value.strip() != ""


class ConnectionRegistry:
    """
    Read-only registry of connection definitions.

    Responsibilities:
    - Keep entries in file order
    - Remember which entries have no usable command

    Forbidden:
    - Mutating entries after load
    - Running commands
    """

    def __init__(self, entries: Dict[str, Any], source: Optional[str] = None):
        self._entries = MappingProxyType(dict(entries))
        self._source = source
        self._warnings = [
            name for name, value in self._entries.items()
            if not is_valid_command(value)
        ]

    @property
    def entries(self) -> Mapping[str, Any]:
        """Read-only view of the raw entries."""
        return self._entries

    @property
    def source(self) -> Optional[str]:
        return self._source

    @property
    def warnings(self) -> List[str]:
        """Names whose command is missing, not a string, or blank."""
        return list(self._warnings)

    def command_for(self, name: str) -> str:
        """
        Get the command for a name.

        Invalid entries resolve to an empty command. Raises KeyError if
        the name is not registered.
        """
        value = self._entries[name]
        return value if isinstance(value, str) else ""

    def request_for(self, name: str) -> ConnectionRequest:
        """Build the launch request for a registered name."""
        return ConnectionRequest(name=name, command=self.command_for(name))

    def names(self) -> List[str]:
        """List all connection names in registry order."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"ConnectionRegistry(source={self._source}, entries={len(self)})"


def _parse(text: str, path: Path) -> Any:
    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise RegistryFormatError(str(e), path=str(path)) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise RegistryFormatError(str(e), path=str(path)) from e


def load_registry(source: Union[str, Path]) -> ConnectionRegistry:
    """
    Load connection definitions from a JSON (or YAML) file.

    Raises:
        RegistryNotFoundError: If the file does not exist
        RegistryFormatError: If the file cannot be read, does not parse to a
            mapping, or has a connection name that is not a string
    """
    logger = logging.getLogger("sshpick.registry")
    path = Path(source)

    if not path.is_file():
        raise RegistryNotFoundError(
            f"Connection registry not found: {path}", path=str(path)
        )

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise RegistryFormatError(str(e), path=str(path)) from e
    except OSError as e:
        raise RegistryFormatError(
            f"cannot read file: {e.strerror or e}", path=str(path)
        ) from e

    data = _parse(text, path)

    if not isinstance(data, dict):
        raise RegistryFormatError(
            f"expected an object of name -> command, got {type(data).__name__}",
            path=str(path)
        )

    bad_keys = [name for name in data if not isinstance(name, str)]
    if bad_keys:
        raise RegistryFormatError(
            f"connection names must be strings, got {bad_keys[0]!r}",
            path=str(path)
        )

    registry = ConnectionRegistry(dict(data), source=str(path))

    logger.info(f"Loaded {len(registry)} connections from {path}")

    if registry.warnings:
        logger.warning("Connections without a command defined:")
        for name in registry.warnings:
            logger.warning(f"  - {name}")

    return registry

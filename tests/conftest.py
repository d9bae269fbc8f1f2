"""
sshpick Test Configuration
--------------------------
Shared fixtures and configuration for all tests.
"""

import json
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from connections.registry import ConnectionRegistry


# =============================================================================
# Test Isolation: Block Side Effects
# =============================================================================

@pytest.fixture(autouse=True)
def block_subprocess(monkeypatch):
    """
    Block subprocess.run() and subprocess.Popen() during tests.

    Nothing may open a real connection from the test suite. Tests that
    exercise launching inject a fake spawner instead.
    """
    def _blocked(*args, **kwargs):
        raise RuntimeError(
            "Spawning processes is forbidden during tests. "
            "Pass a spawn= callable to Launcher or main()."
        )

    monkeypatch.setattr(subprocess, "run", _blocked)
    monkeypatch.setattr(subprocess, "Popen", _blocked)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep SSHPICK_* settings from the developer's shell out of the tests."""
    for key in ("SSHPICK_REGISTRY_PATH", "SSHPICK_LOGGING_LEVEL", "SSHPICK_LOGGING_DIR"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture
def sample_entries() -> Dict[str, str]:
    return {
        "prod": "ssh user@prod.example.com",
        "staging": "ssh -p 2222 deploy@staging.example.com",
        "Prod-DB": "ssh admin@db.example.com",
        "local": "bash -l",
    }


@pytest.fixture
def registry(sample_entries) -> ConnectionRegistry:
    return ConnectionRegistry(sample_entries)


@pytest.fixture
def write_registry(tmp_path):
    """Write a registry file and return its path."""
    def _write(data, name: str = "dir.txt", raw: Optional[str] = None) -> Path:
        path = tmp_path / name
        path.write_text(raw if raw is not None else json.dumps(data), encoding="utf-8")
        return path
    return _write


class ScriptedPicker:
    """Picker stand-in that returns queued answers and records prompts."""

    def __init__(self, answers: Optional[List[Optional[str]]] = None):
        self._answers = list(answers or [])
        self.calls: List[str] = []
        self.offered: List[List[str]] = []

    def __call__(self, message, source):
        self.calls.append(message)
        self.offered.append([c.key for c in source("")])
        if not self._answers:
            raise AssertionError(f"Picker called unexpectedly: {message}")
        return self._answers.pop(0)


class RecordingSpawner:
    """Spawner stand-in that records argv and returns a fixed exit code."""

    def __init__(self, exit_code: int = 0):
        self.exit_code = exit_code
        self.calls: List[List[str]] = []

    def __call__(self, argv):
        self.calls.append(list(argv))
        return self.exit_code


@pytest.fixture
def scripted_picker():
    return ScriptedPicker


@pytest.fixture
def spawner():
    return RecordingSpawner()

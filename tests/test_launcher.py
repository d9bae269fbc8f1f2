"""
Launcher Tests
--------------
Command splitting and foreground launching with an injected spawner.
"""

import io
import subprocess

import pytest
from rich.console import Console

from connections.registry import ConnectionRequest
from core.errors import ErrorCategory
from core.launcher import Launcher, LaunchResult, spawn_inherited, split_command


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def console(output):
    return Console(file=output, force_terminal=False, width=120)


class TestSplitCommand:

    def test_executable_and_args(self):
        assert split_command("echo hi") == ["echo", "hi"]

    def test_ssh_command(self):
        assert split_command("ssh -p 2222 user@host") == ["ssh", "-p", "2222", "user@host"]

    def test_collapses_repeated_whitespace(self):
        assert split_command("  ssh\tuser@host   -v ") == ["ssh", "user@host", "-v"]

    def test_quotes_are_not_interpreted(self):
        """Quoted arguments with spaces are split like anything else."""
        assert split_command('ssh -o "ProxyCommand nc %h %p" host') == [
            "ssh", "-o", '"ProxyCommand', "nc", "%h", '%p"', "host",
        ]

    @pytest.mark.parametrize("command", ["", "   ", "\t\n"])
    def test_blank_command(self, command):
        assert split_command(command) == []


class TestLauncher:

    def test_launch_passes_argv(self, console, spawner):
        launcher = Launcher(console=console, spawn=spawner)

        result = launcher.launch(ConnectionRequest("greet", "echo hi"))

        assert spawner.calls == [["echo", "hi"]]
        assert result.started
        assert result.exit_code == 0
        assert result.argv == ["echo", "hi"]

    def test_reports_connecting_and_exit_code(self, console, output):
        launcher = Launcher(console=console, spawn=lambda argv: 255)

        result = launcher.launch(ConnectionRequest("prod", "ssh user@prod.example.com"))

        text = output.getvalue()
        assert "Connecting → ssh user@prod.example.com" in text
        assert "Connection closed (code: 255)" in text
        assert result.exit_code == 255

    def test_empty_command_not_spawned(self, console, spawner):
        launcher = Launcher(console=console, spawn=spawner)

        result = launcher.launch(ConnectionRequest("b", ""))

        assert spawner.calls == []
        assert not result.started
        assert result.exit_code is None
        assert result.error.category == ErrorCategory.LAUNCH_FAILED
        assert '"b"' in result.error.message

    def test_missing_executable(self, console):
        calls = []

        def spawner(argv):
            calls.append(argv)
            raise FileNotFoundError(2, "No such file or directory")

        launcher = Launcher(console=console, spawn=spawner)

        result = launcher.launch(ConnectionRequest("x", "no-such-binary --flag"))

        assert calls == [["no-such-binary", "--flag"]]
        assert not result.started
        assert "no-such-binary" in result.error.message
        assert result.error.details == {"command": "no-such-binary --flag"}

    def test_markup_in_command_is_printed_literally(self, console, output):
        launcher = Launcher(console=console, spawn=lambda argv: 0)

        launcher.launch(ConnectionRequest("odd", "echo [bold]x[/bold]"))

        assert "echo [bold]x[/bold]" in output.getvalue()


class FakeProcess:
    """Popen stand-in whose wait() raises queued interrupts before returning."""

    def __init__(self, argv, interrupts=0, returncode=7, **kwargs):
        self.argv = argv
        self.kwargs = kwargs
        self.interrupts = interrupts
        self.returncode = returncode
        self.waits = 0
        self.killed = False

    def wait(self):
        self.waits += 1
        if self.interrupts:
            self.interrupts -= 1
            raise KeyboardInterrupt
        return self.returncode

    def kill(self):
        self.killed = True


class TestSpawnInherited:

    def test_inherits_terminal(self, monkeypatch):
        processes = []

        def fake_popen(argv, **kwargs):
            processes.append(FakeProcess(argv, **kwargs))
            return processes[-1]

        monkeypatch.setattr(subprocess, "Popen", fake_popen)

        assert spawn_inherited(["ssh", "host"]) == 7
        assert processes[0].argv == ["ssh", "host"]
        assert processes[0].kwargs == {}

    def test_ctrl_c_leaves_child_running(self, monkeypatch):
        """Interrupts in the parent do not stop the child; its exit code still comes back."""
        processes = []

        def fake_popen(argv, **kwargs):
            processes.append(FakeProcess(argv, interrupts=2, returncode=7))
            return processes[-1]

        monkeypatch.setattr(subprocess, "Popen", fake_popen)

        assert spawn_inherited(["sh", "-c", "trap '' INT; sleep 2; exit 7"]) == 7
        assert processes[0].waits == 3
        assert not processes[0].killed

    def test_launcher_reports_code_after_interrupt(self, monkeypatch, console, output):
        monkeypatch.setattr(
            subprocess, "Popen",
            lambda argv, **kwargs: FakeProcess(argv, interrupts=1, returncode=0),
        )

        result = Launcher(console=console).launch(ConnectionRequest("repl", "python3 -i"))

        assert result.exit_code == 0
        assert "Connection closed (code: 0)" in output.getvalue()


def test_launch_result_started():
    assert LaunchResult(argv=["ssh"], exit_code=0).started

"""
Connection Launcher
-------------------
Hands the terminal to the resolved command and reports its exit code.

Commands are split on whitespace only. Quoted arguments containing
spaces are NOT supported: `ssh -o "ProxyCommand x y" host` splits into
five words.

Safety:
- No shell=True in subprocess
- stdin/stdout/stderr are inherited so the user talks to the child directly
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import subprocess

from rich.console import Console
from rich.markup import escape

from connections.registry import ConnectionRequest
from .errors import SSHPickError, create_launch_error
from infra.logging import get_logger


Spawner = Callable[[List[str]], int]


def split_command(command: str) -> List[str]:
    """Split a command into executable and arguments on whitespace."""
    return command.split()


def spawn_inherited(argv: List[str]) -> int:
    """
    Run argv attached to this process's terminal and wait for it.

    Ctrl-C reaches the child through the terminal; the parent keeps
    waiting so the child alone decides whether to stop.
    """
    process = subprocess.Popen(argv)
    while True:
        try:
            return process.wait()
        except KeyboardInterrupt:
            continue


@dataclass
class LaunchResult:
    """Outcome of a launch."""
    argv: List[str]
    exit_code: Optional[int] = None
    error: Optional[SSHPickError] = None

    @property
    def started(self) -> bool:
        return self.error is None


class Launcher:
    """
    Runs a ConnectionRequest in the foreground.

    The child's exit code is reported to the user but is not used as
    this program's own exit status.
    """

    def __init__(self, console: Optional[Console] = None, spawn: Optional[Spawner] = None):
        self._console = console or Console()
        self._spawn = spawn or spawn_inherited
        self._logger = get_logger("launcher")

    def launch(self, request: ConnectionRequest) -> LaunchResult:
        argv = split_command(request.command)

        if not argv:
            error = create_launch_error(
                f'connection "{request.name}" has an empty command',
                command=request.command
            )
            self._logger.error(error.message)
            return LaunchResult(argv=argv, error=error)

        self._console.print(f"\n[bold cyan]Connecting →[/bold cyan] {escape(request.command)}\n")
        self._logger.info(f"Launching '{request.name}': {argv[0]} with {len(argv) - 1} args")

        try:
            exit_code = self._spawn(argv)
        except OSError as e:
            error = create_launch_error(f"{argv[0]}: {e.strerror or e}", command=request.command)
            self._logger.error(f"Launch failed for '{request.name}': {e}")
            return LaunchResult(argv=argv, error=error)

        self._console.print(f"\n[dim]Connection closed (code: {exit_code})[/dim]")
        self._logger.info(f"Connection '{request.name}' exited with code {exit_code}")

        return LaunchResult(argv=argv, exit_code=exit_code)

#!/usr/bin/env python3
"""
sshpick - Pick an SSH connection by name and open it
====================================================

Main entry point.

Usage:
    python main.py              # Search and pick from every connection
    python main.py prod         # Connect to "prod" directly
    python main.py --list       # Show the registry and exit
    python main.py --help       # Show help

Connections are read from dir.txt next to this file, a JSON object of
name -> command:

    {"prod": "ssh user@prod.example.com", "db": "ssh -p 2222 admin@db"}

Exit status: 0 normally (the connection's own exit code is only
printed), 1 when the registry is missing or invalid or the command
could not be started, 2 after too many failed attempts, 130 on Ctrl-C.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from connections import ConnectionRegistry, DEFAULT_REGISTRY_FILE, load_registry, match
from core.errors import (
    ErrorHandler, RegistryError, SSHPickError, create_entry_invalid_error
)
from core.launcher import Launcher, Spawner
from core.resolver import Resolver, ResolutionStatus, Selector
from infra.config import ConfigError, ConfigManager, DEFAULT_CONFIG_FILE
from infra.logging import SessionContext, configure_logging, get_logger
from infra.picker import ConnectionPicker


PROJECT_ROOT = Path(__file__).parent
EXIT_INTERRUPTED = 130

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="sshpick - Pick an SSH connection by name and open it"
    )
    parser.add_argument(
        "name",
        nargs="?",
        help="Connection name to open directly"
    )
    parser.add_argument(
        "--registry", "-r",
        help=f"Path to the connection registry (default: {DEFAULT_REGISTRY_FILE} next to main.py)"
    )
    parser.add_argument(
        "--config", "-c",
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_FILE} next to main.py)"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List configured connections and exit"
    )
    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Console logging level (default: CRITICAL)"
    )
    parser.add_argument(
        "--log-dir",
        help="Directory for a JSON log file"
    )
    return parser


def print_warnings(console: Console, registry: ConnectionRegistry, handler: ErrorHandler) -> None:
    """Print registry entries that have no usable command."""
    if not registry.warnings:
        return

    console.print("[bold yellow]Warning:[/bold yellow] some connections have no command defined:")
    for name in registry.warnings:
        handler.handle(create_entry_invalid_error(name))
        console.print(f"  - {escape(name)}")


def print_registry(console: Console, registry: ConnectionRegistry) -> None:
    """Print all connections as a table."""
    table = Table(title=f"Connections ({len(registry)})", title_justify="left")
    table.add_column("Name", style="bold cyan")
    table.add_column("Command")

    for candidate in match(registry, ""):
        command = registry.command_for(candidate.key)
        table.add_row(
            escape(candidate.key),
            escape(command) if command.strip() else "[red](none)[/red]"
        )

    console.print(table)


def main(
    argv: Optional[List[str]] = None,
    picker: Optional[Selector] = None,
    spawn: Optional[Spawner] = None,
    console: Optional[Console] = None,
) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    console = console or Console()
    handler = ErrorHandler()

    def report(error: SSHPickError) -> None:
        message = escape(handler.handle(error))
        if error.recoverable:
            console.print(f"[yellow]{message}[/yellow]")
        else:
            console.print(f"[bold red]Error:[/bold red] {message}")

    try:
        config = ConfigManager(args.config or PROJECT_ROOT / DEFAULT_CONFIG_FILE)
    except ConfigError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return 1

    level_name = (args.log_level or str(config.get("logging.level", "CRITICAL"))).upper()
    configure_logging(
        level=getattr(logging, level_name, logging.CRITICAL),
        log_dir=args.log_dir or config.get("logging.dir"),
    )
    logger = get_logger("main")

    if args.registry:
        registry_path = Path(args.registry)
    else:
        registry_path = config.get_path("registry.path", PROJECT_ROOT / DEFAULT_REGISTRY_FILE)

    try:
        registry = load_registry(registry_path)
    except RegistryError as e:
        error = SSHPickError.from_exception(e)
        report(error)
        return handler.exit_code(error)

    print_warnings(console, registry, handler)

    if args.list:
        print_registry(console, registry)
        return 0

    resolver = Resolver(registry, select=picker or ConnectionPicker(), reporter=report)
    launcher = Launcher(console=console, spawn=spawn)

    try:
        with SessionContext() as session_id:
            logger.debug(f"Starting resolution session {session_id}")

            if args.name:
                resolution = resolver.resolve_direct(args.name)
            else:
                resolution = resolver.resolve_interactive()

            if resolution.status is not ResolutionStatus.HIT:
                return handler.exit_code(resolution.error)

            result = launcher.launch(resolution.request)

        if not result.started:
            report(result.error)
            return handler.exit_code(result.error)

        return 0

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())

"""Shared utilities for installer CLI modules."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from bmad_installer.core.config import InstallerConfig
from bmad_installer.core.orchestrator import LifecycleOrchestrator
from bmad_installer.models.install import InstallAction, InstallResult


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for CLI commands.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable verbose logging
    """
    from bmad_installer.core.logger import setup_file_logging as _setup_file_logging
    _setup_file_logging(log_file=log_file, verbose=verbose)


def get_orchestrator(config: Optional[InstallerConfig] = None) -> LifecycleOrchestrator:
    """Return an orchestrator built from the environment unless config is given."""
    return LifecycleOrchestrator(config or InstallerConfig.from_env())


def resolve_directory(directory: Optional[str]) -> Path:
    return Path(directory).expanduser().resolve() if directory else Path.cwd()


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {e}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting.

    Args:
        console: Rich console for output
        message: Success message
        prefix: Prefix symbol (default: ✓)
    """
    console.print(f"[green]{prefix}[/green] {message}")


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    console.print(f"[red]{prefix}[/red] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    console.print(f"[yellow]{prefix}[/yellow] {message}")


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    console.print(f"[cyan]{prefix}[/cyan] {message}")


def print_install_result(console: Console, result: InstallResult, install_dir: Path) -> None:
    """Summarize an install/update/repair result."""
    if result.action in (InstallAction.NEWER_INSTALLED, InstallAction.PACKS_ONLY):
        print_info(console, result.message)
    else:
        print_success(console, result.message)

    for pack_id in result.packs_installed:
        print_success(console, f"Expansion pack installed: {pack_id} → .{pack_id}/")

    for warning in result.warnings:
        print_warning(console, warning)

    if result.manifest is not None and result.action != InstallAction.NEWER_INSTALLED:
        console.print(f"[dim]Read the user guide at {install_dir}/.bmad-core/user-guide.md[/dim]")

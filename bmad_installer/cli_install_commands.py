"""Lifecycle CLI commands - install, update, repair."""
from typing import List, Optional

import typer
from rich.console import Console

from bmad_installer.core.errors import InstallerError
from bmad_installer.models.install import InstallOptions, RepairOptions, UpdateOptions

# Module-level console instance (will be set by register function)
console: Console = Console()


def install(
    directory: Optional[str] = typer.Argument(None, help="Target directory (default: current directory)"),
    core: bool = typer.Option(True, "--core/--no-core", help="Install the core framework"),
    full: bool = typer.Option(False, "--full", help="Install core and every available expansion pack"),
    pack: List[str] = typer.Option([], "--pack", "-p", help="Expansion pack id (repeatable)"),
    ide: List[str] = typer.Option([], "--ide", help="IDE to configure: cursor, claude-code, windsurf, trae"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Install the core framework and expansion packs into a project."""
    from bmad_installer.cli_support import (
        get_orchestrator,
        handle_cli_error,
        print_install_result,
        resolve_directory,
        setup_file_logging,
    )

    setup_file_logging(log_file=log_file, verbose=verbose)
    install_dir = resolve_directory(directory)

    try:
        orchestrator = get_orchestrator()
        packs = list(pack)
        if full:
            packs.extend(p.id for p in orchestrator.available_packs() if p.id not in packs)

        options = InstallOptions(directory=install_dir, include_core=core, full=full, packs=packs, ides=list(ide))
        with console.status(f"Installing to {install_dir}..."):
            result = orchestrator.install(options)
    except InstallerError as e:
        handle_cli_error(e, console, verbose, exit_code=1)
    else:
        print_install_result(console, result, install_dir)


def update(
    directory: Optional[str] = typer.Argument(None, help="Installation directory (default: current directory)"),
    pack: List[str] = typer.Option([], "--pack", "-p", help="Expansion pack id to reinstall (repeatable)"),
    ide: List[str] = typer.Option([], "--ide", help="IDE to configure"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Update an existing installation to the bundled core version."""
    from bmad_installer.cli_support import (
        get_orchestrator,
        handle_cli_error,
        print_install_result,
        resolve_directory,
        setup_file_logging,
    )

    setup_file_logging(log_file=log_file, verbose=verbose)
    install_dir = resolve_directory(directory) if directory else None

    try:
        orchestrator = get_orchestrator()
        with console.status("Updating installation..."):
            result = orchestrator.update(UpdateOptions(directory=install_dir, packs=list(pack), ides=list(ide)))
    except InstallerError as e:
        handle_cli_error(e, console, verbose, exit_code=1)
    else:
        print_install_result(console, result, install_dir or resolve_directory(None))


def repair(
    directory: Optional[str] = typer.Argument(None, help="Installation directory (default: current directory)"),
    no_checksums: bool = typer.Option(False, "--no-checksums", help="Only look for missing files"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Restore missing core files. Locally modified files are left as they are."""
    from bmad_installer.cli_support import (
        get_orchestrator,
        handle_cli_error,
        print_install_result,
        resolve_directory,
        setup_file_logging,
    )

    setup_file_logging(log_file=log_file, verbose=verbose)
    install_dir = resolve_directory(directory)

    try:
        orchestrator = get_orchestrator()
        with console.status("Repairing installation..."):
            result = orchestrator.repair(
                RepairOptions(directory=install_dir, validate_checksums=not no_checksums)
            )
    except InstallerError as e:
        handle_cli_error(e, console, verbose, exit_code=1)
    else:
        print_install_result(console, result, install_dir)


def register_install_commands(app: typer.Typer, shared_console: Console):
    """Register lifecycle commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(install)
    app.command()(update)
    app.command()(repair)

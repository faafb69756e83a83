"""Inspection CLI commands - status, verify, packs."""
import json
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from bmad_installer.core.errors import InstallerError, IntegrityCheckFailedError

# Module-level console instance (will be set by register function)
console: Console = Console()


def status(
    directory: Optional[str] = typer.Argument(None, help="Directory to inspect (default: current directory)"),
    as_json: bool = typer.Option(False, "--json", help="Print status as JSON"),
):
    """Show what is installed in a directory."""
    from bmad_installer.cli_support import get_orchestrator, print_info, resolve_directory

    install_dir = resolve_directory(directory)
    installation = get_orchestrator().get_installation_status(install_dir)

    if as_json:
        typer.echo(json.dumps(installation.to_dict(), indent=2))
        return

    table = Table(title="Installation Status", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Directory", str(installation.directory))
    table.add_row("State", installation.type.value)
    table.add_row("Core installed", "yes" if installation.core_installed else "no")
    table.add_row("Core version", installation.core_version or "-")
    table.add_row("Expansion packs", ", ".join(installation.expansion_packs) or "-")
    console.print(table)

    if not installation.core_installed and not installation.expansion_packs:
        print_info(console, "Nothing installed here. Run 'bmad install' to get started.")


def verify(
    directory: Optional[str] = typer.Argument(None, help="Installation directory (default: current directory)"),
    no_checksums: bool = typer.Option(False, "--no-checksums", help="Skip checksum comparison"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Check installed core files against the install manifest."""
    from bmad_installer.cli_support import (
        get_orchestrator,
        handle_cli_error,
        print_error,
        print_success,
        print_warning,
        resolve_directory,
    )

    install_dir = resolve_directory(directory)
    try:
        get_orchestrator().verify(install_dir, validate_checksums=not no_checksums, strict=True)
    except IntegrityCheckFailedError as e:
        print_error(console, str(e))
        for path in e.missing:
            print_warning(console, f"missing: {path}")
        for path in e.modified:
            print_warning(console, f"modified: {path}")
        raise typer.Exit(1)
    except InstallerError as e:
        handle_cli_error(e, console, verbose, exit_code=1)
    else:
        print_success(console, "Installation is intact")


def packs():
    """List the expansion packs available to install."""
    from bmad_installer.cli_support import get_orchestrator, print_warning

    available = get_orchestrator().available_packs()
    if not available:
        print_warning(console, "No expansion packs available")
        return

    table = Table(title="Available Expansion Packs")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Version", style="yellow")
    table.add_column("Description", overflow="fold")

    for pack in available:
        table.add_row(pack.id, pack.title, pack.version or "-", pack.description)

    console.print(table)


def register_status_commands(app: typer.Typer, shared_console: Console):
    """Register inspection commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(status)
    app.command()(verify)
    app.command()(packs)

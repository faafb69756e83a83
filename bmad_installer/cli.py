#!/usr/bin/env python3
"""bmad CLI - install and maintain the BMad framework in a project."""

import typer
from rich.console import Console

from bmad_installer import __version__
from bmad_installer.cli_install_commands import register_install_commands
from bmad_installer.cli_status_commands import register_status_commands

app = typer.Typer(
    name="bmad",
    help=f"""bmad-installer {__version__}

Install the BMad core framework and expansion packs into a project.

Quick start:
  bmad install                    # Core into the current directory
  bmad install --pack game-dev    # Core plus an expansion pack
  bmad status                     # What is installed here
  bmad verify                     # Check installed files
""",
    add_completion=False,
)

console = Console()

# Attach modular subcommands
register_install_commands(app, console)
register_status_commands(app, console)

if __name__ == "__main__":
    app()

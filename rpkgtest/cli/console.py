"""
Console configuration for the rpkgtest CLI.

This module provides the shared Rich console and the common way commands
report rpkgtest errors before exiting.
"""

import os

import typer
from rich.console import Console
from rich.markup import escape

from rpkgtest.utils.errors import RPkgTestError


def create_console(plain: bool = False) -> Console:
    """Create a console for the current environment."""
    no_color = plain or bool(os.environ.get("NO_COLOR"))
    return Console(
        no_color=no_color,
        highlight=not plain,
        emoji=not plain,
        log_time_format="[%X]",
    )


# Create a singleton console instance
console = create_console()


def fail(error: RPkgTestError) -> typer.Exit:
    """Print an rpkgtest error with its hint and return the exit to raise."""
    console.print(f"[red]Error:[/red] {escape(error.message)}", highlight=False)
    if error.recovery_hint:
        console.print(f"[yellow]Hint:[/yellow] {escape(error.recovery_hint)}")
    return typer.Exit(1)

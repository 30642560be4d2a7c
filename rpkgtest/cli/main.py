"""
Main entry point for the rpkgtest CLI application.

This module sets up the Typer application and registers all commands
from the various submodules.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

from rpkgtest import __version__

# Import console for reconfiguration
from rpkgtest.cli import console as console_module

# Import commands from submodules
from rpkgtest.cli.coverage import coverage, coverage_file
from rpkgtest.cli.test import test, test_file, use_testthat, uses_testthat

# Create the main app
app = typer.Typer(
    help="rpkgtest: run testthat tests and covr coverage for R packages."
)


def version_callback(value: bool) -> None:
    """Prints the version of the application and exits."""
    if value:
        print(f"rpkgtest v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show the application's version and exit.",
        ),
    ] = False,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .rpkgtest.yml file"),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Verbose output")
    ] = False,
    no_color: Annotated[
        bool,
        typer.Option("--no-color", help="Disable colored output", envvar="NO_COLOR"),
    ] = False,
) -> None:
    """
    Run R package tests and coverage from the command line.
    """
    # Load environment variables from .env file
    load_dotenv()

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )

    if no_color:
        console_module.console = console_module.create_console(plain=True)

    # Store in context for subcommands
    ctx.obj = {"config_path": config, "verbose": verbose}


# Register all commands
app.command("test")(test)
app.command("test-file")(test_file)
app.command("coverage")(coverage)
app.command("coverage-file")(coverage_file)
app.command("uses-testthat")(uses_testthat)
app.command("use-testthat")(use_testthat)


if __name__ == "__main__":
    app()

"""
Coverage commands for the rpkgtest CLI.

This module contains commands that measure test coverage with covr, for a
whole package or for specific files.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from rpkgtest.cli import console as console_module
from rpkgtest.cli.console import fail
from rpkgtest.cli.options import make_facade
from rpkgtest.utils.errors import RPkgTestError


def coverage(
    ctx: typer.Context,
    pkg: Annotated[
        Path, typer.Argument(help="Package directory (or any path inside it)")
    ] = Path("."),
    show_report: Annotated[
        bool, typer.Option("--report/--no-report", help="Show the coverage report")
    ] = True,
) -> None:
    """
    Measure test coverage for a whole package.

    Examples:
        rpkgtest coverage
        rpkgtest coverage ./mypkg --no-report
    """
    try:
        facade = make_facade(ctx, pkg)
        result = facade.measure_coverage(pkg, show_report=show_report)
    except RPkgTestError as e:
        raise fail(e) from None

    if not show_report:
        console_module.console.print(
            f"Coverage: [bold]{result.total_percent:.2f}%[/bold]"
        )


def coverage_file(
    ctx: typer.Context,
    files: Annotated[
        Optional[list[Path]],
        typer.Argument(help="Source or test files (default: the editor's active file)"),
    ] = None,
    filter: Annotated[
        bool,
        typer.Option(
            "--filter/--no-filter", help="Restrict the report to the files under test"
        ),
    ] = True,
    show_report: Annotated[
        bool, typer.Option("--report/--no-report", help="Show the coverage report")
    ] = True,
    export_all: Annotated[
        bool,
        typer.Option("--export-all/--no-export-all", help="Expose internal objects"),
    ] = True,
) -> None:
    """
    Measure coverage of specific files by running only their tests.

    Examples:
        rpkgtest coverage-file R/utils.R
        rpkgtest coverage-file tests/testthat/test-utils.R --no-filter
    """
    try:
        facade = make_facade(ctx, files[0] if files else None)
        result = facade.measure_coverage_for_files(
            files, filter=filter, show_report=show_report, export_all=export_all
        )
    except RPkgTestError as e:
        raise fail(e) from None

    if not show_report:
        console_module.console.print(
            f"Coverage: [bold]{result.total_percent:.2f}%[/bold]"
        )

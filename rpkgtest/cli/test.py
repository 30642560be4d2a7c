"""
Test commands for the rpkgtest CLI.

This module contains the commands that run a package's testthat tests,
either all of them or only those belonging to specific files.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from rpkgtest.cli import console as console_module
from rpkgtest.cli.console import fail
from rpkgtest.cli.options import make_facade
from rpkgtest.package import use_testthat as scaffold_testthat
from rpkgtest.package import uses_testthat as has_testthat
from rpkgtest.report import TestRunResult, render_test_results
from rpkgtest.runner import is_interactive
from rpkgtest.utils.errors import RPkgTestError


def _finish(result: Optional[TestRunResult]) -> None:
    if result is None:
        console_module.console.print("[yellow]No tests found[/yellow]")
        return
    render_test_results(console_module.console, result)
    if not result.ok:
        raise typer.Exit(1)


def test(
    ctx: typer.Context,
    pkg: Annotated[
        Path, typer.Argument(help="Package directory (or any path inside it)")
    ] = Path("."),
    filter: Annotated[
        Optional[str],
        typer.Option("--filter", "-f", help="Only run test files whose name matches"),
    ] = None,
    stop_on_failure: Annotated[
        bool, typer.Option("--stop-on-failure", help="Fail as soon as a test fails")
    ] = False,
    export_all: Annotated[
        bool,
        typer.Option("--export-all/--no-export-all", help="Expose internal objects"),
    ] = True,
    reporter: Annotated[
        Optional[str], typer.Option("--reporter", help="testthat reporter name")
    ] = None,
) -> None:
    """
    Run all testthat tests of a package.

    Examples:
        rpkgtest test
        rpkgtest test ./mypkg --filter '^utils$'
    """
    try:
        facade = make_facade(ctx, pkg)

        if is_interactive() and not facade.uses_testthat(pkg):
            console_module.console.print("No testing infrastructure found. Create it?")
            if typer.confirm("Create tests/testthat?"):
                scaffold_testthat(pkg, facade.config.engine.test_engine_package)
            return

        options = {"reporter": reporter} if reporter else {}
        result = facade.run_tests(
            pkg,
            filter=filter,
            stop_on_failure=stop_on_failure,
            export_all=export_all,
            **options,
        )
    except RPkgTestError as e:
        raise fail(e) from None

    _finish(result)


def test_file(
    ctx: typer.Context,
    files: Annotated[
        Optional[list[Path]],
        typer.Argument(help="Source or test files (default: the editor's active file)"),
    ] = None,
) -> None:
    """
    Run the tests for one or more source or test files.

    A source file `R/foo.R` or `src/foo.cpp` runs `tests/testthat/test-foo.R`.

    Examples:
        rpkgtest test-file R/utils.R
        rpkgtest test-file src/fast.cpp tests/testthat/test-api.R
    """
    try:
        facade = make_facade(ctx, files[0] if files else None)
        result = facade.run_tests_for_files(files)
    except RPkgTestError as e:
        raise fail(e) from None

    _finish(result)


def uses_testthat(
    pkg: Annotated[
        Path, typer.Argument(help="Package directory (or any path inside it)")
    ] = Path("."),
) -> None:
    """
    Check whether a package has testthat infrastructure (exit 1 if not).
    """
    try:
        found = has_testthat(pkg)
    except RPkgTestError as e:
        raise fail(e) from None

    if found:
        console_module.console.print("[green]testthat infrastructure found[/green]")
    else:
        console_module.console.print("[yellow]No testthat infrastructure[/yellow]")
        raise typer.Exit(1)


def use_testthat(
    ctx: typer.Context,
    pkg: Annotated[
        Path, typer.Argument(help="Package directory (or any path inside it)")
    ] = Path("."),
) -> None:
    """
    Create tests/testthat and the tests/testthat.R runner for a package.
    """
    try:
        facade = make_facade(ctx, pkg)
        test_dir = scaffold_testthat(pkg, facade.config.engine.test_engine_package)
    except RPkgTestError as e:
        raise fail(e) from None

    console_module.console.print(f"[green]Test directory ready:[/green] {test_dir}")

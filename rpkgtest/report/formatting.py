"""
Terminal rendering of test and coverage results.

This module provides Rich-based reports: a per-file summary table for a
whole package, a line-by-line listing for focused file reports, and a
per-test table for test runs.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..utils.config import ReportConfig
from .models import CoverageResult, LineCoverage, TestRunResult

logger = logging.getLogger(__name__)


def _percent_style(percent: float) -> str:
    if percent >= 90:
        return "green"
    if percent >= 75:
        return "yellow"
    return "red"


def _title(coverage: CoverageResult) -> str:
    name = coverage.package.name if coverage.package is not None else "Package"
    return f"{name} Coverage: {coverage.total_percent:.2f}%"


def render_package_report(
    console: Console, coverage: CoverageResult, config: Optional[ReportConfig] = None
) -> None:
    """Per-file coverage table for a whole package."""
    if not coverage.lines:
        console.print("[yellow]No coverage data collected[/yellow]")
        return

    table = Table(title=_title(coverage))
    table.add_column("File", style="cyan")
    table.add_column("Lines", justify="right")
    table.add_column("Covered", justify="right")
    table.add_column("Coverage", justify="right")

    for filename, records in sorted(coverage.by_file().items()):
        percent = CoverageResult.percent(records)
        covered = sum(1 for r in records if r.covered)
        table.add_row(
            coverage.display_name(filename),
            str(len(records)),
            str(covered),
            Text(f"{percent:.2f}%", style=_percent_style(percent)),
        )

    console.print(table)


def _source_lines(coverage: CoverageResult, filename: str) -> list[str]:
    try:
        path = coverage.absolute_path(filename)
        return path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read source for {filename}: {e}")
        return []


def render_file_report(
    console: Console, coverage: CoverageResult, config: Optional[ReportConfig] = None
) -> None:
    """Line-by-line coverage listing for the files in a filtered result."""
    config = config or ReportConfig()

    if not coverage.lines:
        console.print("[yellow]No coverage data for the selected files[/yellow]")
        return

    console.print(f"[bold]{_title(coverage)}[/bold]")

    for filename, records in coverage.by_file().items():
        percent = CoverageResult.percent(records)
        console.print(
            f"\n[cyan]{coverage.display_name(filename)}[/cyan] "
            f"[{_percent_style(percent)}]{percent:.2f}%[/{_percent_style(percent)}]"
        )

        source = _source_lines(coverage, filename)
        shown: list[LineCoverage] = sorted(records, key=lambda r: r.line)
        if config.show_uncovered_only:
            shown = [r for r in shown if not r.covered]

        table = Table(show_header=True, box=None, pad_edge=False)
        table.add_column("Line", justify="right", style="dim")
        table.add_column("Hits", justify="right")
        table.add_column("Source", overflow="fold")

        for record in shown[: config.max_lines]:
            text = source[record.line - 1] if 0 < record.line <= len(source) else ""
            hits_style = "green" if record.covered else "red"
            table.add_row(
                str(record.line),
                Text(str(record.value), style=hits_style),
                Text(text),
            )

        console.print(table)
        if len(shown) > config.max_lines:
            console.print(f"[dim]... {len(shown) - config.max_lines} more lines[/dim]")


def render_test_results(console: Console, result: TestRunResult) -> None:
    """Per-test table followed by a summary line."""
    if result.results:
        table = Table(title="Test results")
        table.add_column("File", style="cyan")
        table.add_column("Test")
        table.add_column("Expectations", justify="right")
        table.add_column("Status")

        for test in result.results:
            if test.error:
                status = Text("ERROR", style="red")
            elif test.failed:
                status = Text(f"FAIL {test.failed}", style="red")
            elif test.skipped:
                status = Text("SKIP", style="yellow")
            else:
                status = Text("OK", style="green")
            table.add_row(test.file, test.test, str(test.nb), status)

        console.print(table)

    summary = result.get_summary()
    style = "green" if result.ok else "red"
    console.print(
        f"[{style}][ FAIL {summary['failed']} | WARN {summary['warnings']} | "
        f"SKIP {summary['skipped']} | TESTS {summary['tests']} ][/{style}]"
    )

"""Tests for result models, coverage filtering and rendering."""

from pathlib import Path

from rich.console import Console

from rpkgtest.package import PackageDescriptor
from rpkgtest.report import (
    CoverageResult,
    LineCoverage,
    TestResult,
    TestRunResult,
    adapt_coverage,
    render_file_report,
    render_package_report,
    render_test_results,
)
from rpkgtest.utils.config import ReportConfig


def recording_console() -> Console:
    return Console(record=True, width=120, color_system=None)


class TestCoverageResult:
    """Test coverage result helpers."""

    def test_percentages(self) -> None:
        result = CoverageResult(
            lines=[
                LineCoverage("R/a.R", 1, 2),
                LineCoverage("R/a.R", 2, 0),
                LineCoverage("R/b.R", 1, 1),
                LineCoverage("R/b.R", 2, 1),
            ]
        )
        assert result.total_percent == 75.0
        assert CoverageResult.percent(result.by_file()["R/a.R"]) == 50.0
        assert result.filenames() == ["R/a.R", "R/b.R"]

    def test_empty_is_fully_covered(self) -> None:
        assert CoverageResult().total_percent == 100.0

    def test_display_name_relative_to_package(self, tmp_path: Path) -> None:
        package = PackageDescriptor(name="p", path=tmp_path)
        result = CoverageResult(relative=True, package=package)
        assert result.display_name(str(tmp_path / "R" / "a.R")) == "R/a.R"
        assert result.display_name("/elsewhere/a.R") == "/elsewhere/a.R"

    def test_absolute_path_resolves_relative_names(self, tmp_path: Path) -> None:
        package = PackageDescriptor(name="p", path=tmp_path)
        result = CoverageResult(package=package)
        assert result.absolute_path("R/a.R") == (tmp_path / "R" / "a.R").resolve()


class TestAdaptCoverage:
    """Test filtering coverage down to the files under test."""

    def make_result(self, root: Path) -> CoverageResult:
        return CoverageResult(
            lines=[
                LineCoverage(str(root / "R" / "a.R"), 1, 1),
                LineCoverage("R/b.R", 1, 0),
            ]
        )

    def test_filters_by_membership(self, tmp_path: Path) -> None:
        (tmp_path / "R").mkdir()
        (tmp_path / "R" / "a.R").write_text("a <- 1\n")
        package = PackageDescriptor(name="p", path=tmp_path)

        result, filtered = adapt_coverage(
            self.make_result(tmp_path), [tmp_path / "R" / "a.R"], package
        )

        assert filtered is True
        assert len(result.lines) == 1
        assert result.relative is True
        assert result.package is package

    def test_relative_engine_names_match(self, tmp_path: Path) -> None:
        (tmp_path / "R").mkdir()
        (tmp_path / "R" / "b.R").write_text("b <- 1\n")
        package = PackageDescriptor(name="p", path=tmp_path)

        result, filtered = adapt_coverage(
            self.make_result(tmp_path), [tmp_path / "R" / "b.R"], package
        )
        assert filtered
        assert [r.filename for r in result.lines] == ["R/b.R"]

    def test_missing_source_fails_open(self, tmp_path: Path) -> None:
        package = PackageDescriptor(name="p", path=tmp_path)
        result, filtered = adapt_coverage(
            self.make_result(tmp_path), [tmp_path / "R" / "missing.R"], package
        )
        assert filtered is False
        assert len(result.lines) == 2
        assert result.relative is True

    def test_filter_disabled(self, tmp_path: Path) -> None:
        (tmp_path / "R").mkdir()
        (tmp_path / "R" / "a.R").write_text("a <- 1\n")
        package = PackageDescriptor(name="p", path=tmp_path)

        result, filtered = adapt_coverage(
            self.make_result(tmp_path), [tmp_path / "R" / "a.R"], package, filter=False
        )
        assert filtered is False
        assert len(result.lines) == 2


class TestRendering:
    """Test terminal reports."""

    def test_package_report(self, tmp_path: Path) -> None:
        console = recording_console()
        result = CoverageResult(
            lines=[LineCoverage("R/a.R", 1, 1), LineCoverage("R/a.R", 2, 0)],
            package=PackageDescriptor(name="mypkg", path=tmp_path),
        )
        render_package_report(console, result)
        text = console.export_text()
        assert "mypkg Coverage: 50.00%" in text
        assert "R/a.R" in text

    def test_file_report_shows_source(self, tmp_path: Path) -> None:
        (tmp_path / "R").mkdir()
        source = tmp_path / "R" / "a.R"
        source.write_text("f <- function() {\n  uncovered_call()\n}\n")
        result = CoverageResult(
            lines=[LineCoverage(str(source), 2, 0)],
            relative=True,
            package=PackageDescriptor(name="mypkg", path=tmp_path),
        )

        console = recording_console()
        render_file_report(console, result, ReportConfig(show_uncovered_only=True))
        text = console.export_text()
        assert "R/a.R" in text
        assert "uncovered_call()" in text

    def test_file_report_truncates(self, tmp_path: Path) -> None:
        result = CoverageResult(lines=[LineCoverage("R/a.R", i, 1) for i in range(1, 6)])
        console = recording_console()
        render_file_report(console, result, ReportConfig(max_lines=2))
        assert "3 more lines" in console.export_text()

    def test_empty_reports(self) -> None:
        console = recording_console()
        render_package_report(console, CoverageResult())
        render_file_report(console, CoverageResult())
        text = console.export_text()
        assert "No coverage data collected" in text
        assert "No coverage data for the selected files" in text

    def test_test_results(self) -> None:
        result = TestRunResult(
            results=[
                TestResult(file="test-a.R", test="works", nb=2),
                TestResult(file="test-a.R", test="breaks", nb=1, failed=1),
                TestResult(file="test-b.R", test="later", skipped=True),
            ]
        )
        console = recording_console()
        render_test_results(console, result)
        text = console.export_text()
        assert "FAIL 1 | WARN 0 | SKIP 1 | TESTS 3" in text
        assert "breaks" in text

"""Data models for engine results."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ..package import PackageDescriptor


@dataclass
class TestResult:
    """Outcome of one `test_that()` block."""

    __test__ = False  # not a pytest test class

    file: str
    test: str
    context: Optional[str] = None
    nb: int = 0  # number of expectations
    failed: int = 0
    skipped: bool = False
    error: bool = False
    warning: int = 0

    @property
    def passed(self) -> bool:
        return not self.failed and not self.error

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TestResult":
        """Build from a row of testthat's results data frame."""
        return cls(
            file=str(data.get("file", "")),
            test=str(data.get("test", "")),
            context=data.get("context"),
            nb=int(data.get("nb") or 0),
            failed=int(data.get("failed") or 0),
            skipped=bool(data.get("skipped")),
            error=bool(data.get("error")),
            warning=int(data.get("warning") or 0),
        )


@dataclass
class TestRunResult:
    """Everything the test engine reported for one run."""

    __test__ = False

    results: list[TestResult] = field(default_factory=list)
    returncode: int = 0

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.skipped)

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and self.failed == 0

    def get_summary(self) -> dict[str, Any]:
        """Get summary statistics."""
        return {
            "tests": len(self.results),
            "expectations": sum(r.nb for r in self.results),
            "failed": self.failed,
            "skipped": self.skipped,
            "warnings": sum(r.warning for r in self.results),
        }


@dataclass
class LineCoverage:
    """Hit count for one source line."""

    filename: str
    line: int
    value: int
    functions: Optional[str] = None

    @property
    def covered(self) -> bool:
        return self.value > 0


@dataclass
class CoverageResult:
    """
    Line coverage reported by the coverage engine.

    `relative` and `package` are presentation metadata attached after the
    engine returns.
    """

    lines: list[LineCoverage] = field(default_factory=list)
    relative: bool = False
    package: Optional["PackageDescriptor"] = None

    def display_name(self, filename: str) -> str:
        """File name as shown in reports: relative to the package when requested."""
        if self.relative and self.package is not None:
            path = Path(filename)
            if path.is_absolute():
                try:
                    return path.relative_to(self.package.path).as_posix()
                except ValueError:
                    pass
        return filename

    def absolute_path(self, filename: str) -> Path:
        """Normalized absolute path of an engine file name."""
        path = Path(filename)
        if not path.is_absolute() and self.package is not None:
            path = self.package.path / path
        return path.resolve()

    def filenames(self) -> list[str]:
        """Distinct file names in engine order."""
        return list(dict.fromkeys(record.filename for record in self.lines))

    def by_file(self) -> dict[str, list[LineCoverage]]:
        """Group line records by file name."""
        grouped: dict[str, list[LineCoverage]] = {}
        for record in self.lines:
            grouped.setdefault(record.filename, []).append(record)
        return grouped

    def only_files(self, paths: Iterable[Path]) -> "CoverageResult":
        """Copy restricted to records whose absolute path is in `paths`."""
        wanted = {Path(p).resolve() for p in paths}
        return CoverageResult(
            lines=[r for r in self.lines if self.absolute_path(r.filename) in wanted],
            relative=self.relative,
            package=self.package,
        )

    @staticmethod
    def percent(records: Iterable[LineCoverage]) -> float:
        records = list(records)
        if not records:
            return 100.0
        return 100.0 * sum(1 for r in records if r.covered) / len(records)

    @property
    def total_percent(self) -> float:
        return self.percent(self.lines)

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "CoverageResult":
        """Build from the rows of covr's per-line tally."""
        return cls(
            lines=[
                LineCoverage(
                    filename=str(row["filename"]),
                    line=int(row["line"]),
                    value=int(row.get("value") or 0),
                    functions=row.get("functions"),
                )
                for row in records
            ]
        )

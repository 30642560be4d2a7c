"""Test helpers: package skeletons and fake engines."""

import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional

from rpkgtest.package import PackageDescriptor
from rpkgtest.report import CoverageResult, LineCoverage, TestResult, TestRunResult
from rpkgtest.runner import (
    CoverageEngine,
    ExecutionContext,
    LoadedPackage,
    TestEngine,
)

DESCRIPTION = """Package: {name}
Title: A Test Package
Version: 0.1.0
Depends: {depends}
Imports:
    rlang,
    utils (>= 3.0)
"""


def create_package(
    root: Path,
    name: str = "mypkg",
    depends: str = "R (>= 3.5)",
    r_files: Sequence[str] = ("foo.R",),
    test_files: Optional[Sequence[str]] = ("test-foo.R",),
    src_files: Sequence[str] = (),
) -> Path:
    """Create an R package skeleton under `root`."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "DESCRIPTION").write_text(DESCRIPTION.format(name=name, depends=depends))

    (root / "R").mkdir(exist_ok=True)
    for file_name in r_files:
        (root / "R" / file_name).write_text("f <- function(x) {\n  x + 1\n}\n")

    if src_files:
        (root / "src").mkdir(exist_ok=True)
        for file_name in src_files:
            (root / "src" / file_name).write_text("int f(int x) { return x; }\n")

    if test_files is not None:
        test_dir = root / "tests" / "testthat"
        test_dir.mkdir(parents=True, exist_ok=True)
        for file_name in test_files:
            (test_dir / file_name).write_text('test_that("f works", expect_equal(f(1), 2))\n')

    return root


class FakeTestEngine(TestEngine):
    """Records calls and the environment seen during them."""

    def __init__(self, result: Optional[TestRunResult] = None, error: Optional[Exception] = None):
        self.result = result or TestRunResult(
            results=[TestResult(file="test-foo.R", test="f works", nb=1)]
        )
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def run(self, test_dir, package, filter=None, stop_on_failure=False,
            load_helpers=False, context=None, **options):
        self.calls.append(
            {
                "test_dir": test_dir,
                "package": package,
                "filter": filter,
                "stop_on_failure": stop_on_failure,
                "load_helpers": load_helpers,
                "context": context,
                "options": options,
                "environ": dict(os.environ),
                "cwd": os.getcwd(),
            }
        )
        if self.error is not None:
            raise self.error
        return self.result


class FakeCoverageEngine(CoverageEngine):
    """Returns canned coverage and records calls."""

    def __init__(self, lines: Optional[list[LineCoverage]] = None):
        self.lines = lines or []
        self.calls: list[dict[str, Any]] = []

    def _record(self, kind: str, context: Optional[ExecutionContext], **kwargs: Any) -> None:
        self.calls.append(
            {"kind": kind, "context": context, "environ": dict(os.environ),
             "cwd": os.getcwd(), **kwargs}
        )

    def package_coverage(self, package: PackageDescriptor, context=None, **options):
        self._record("package", context, package=package, options=options)
        return CoverageResult(lines=list(self.lines))

    def environment_coverage(self, package: LoadedPackage, test_files, context=None, **options):
        self._record("environment", context, package=package,
                     test_files=list(test_files), options=options)
        return CoverageResult(lines=list(self.lines))

"""
Orchestration of test and coverage runs for an R package.

This module provides the PackageTestFacade which ties together path
resolution, package loading, the scoped execution context and the external
engines. Module-level functions are shortcuts using a default facade.
"""

import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional, Union

from rich.console import Console

from ..package import (
    PackageDescriptor,
    find_test_dir,
    list_test_files,
    load_package,
    uses_testthat,
)
from ..package.layout import TEST_FILE_PATTERN
from ..report.adapter import adapt_coverage
from ..report.formatting import render_file_report, render_package_report
from ..report.models import CoverageResult, TestRunResult
from ..resolver import (
    build_test_filter,
    classify_file,
    resolve_source_files,
    resolve_test_files,
    validate_extensions,
)
from ..utils.config import RPkgTestConfig
from .context import r_env_vars, scoped_context
from .editor import ActiveFileProvider, EditorSession, NoEditor, find_active_file
from .engines import (
    CoverageEngine,
    PackageLoader,
    RscriptCoverageEngine,
    RscriptTestEngine,
    TestEngine,
)

logger = logging.getLogger(__name__)

PackageRef = Union[str, Path, PackageDescriptor]
FileArgs = Optional[Sequence[Union[str, Path]]]

PACKAGE_ENV_VAR = "TESTTHAT_PKG"


def is_interactive() -> bool:
    """True when both stdin and stdout are attached to a terminal."""
    return sys.stdin.isatty() and sys.stdout.isatty()


class PackageTestFacade:
    """Runs tests and coverage for R packages through external engines."""

    def __init__(
        self,
        config: Optional[RPkgTestConfig] = None,
        test_engine: Optional[TestEngine] = None,
        coverage_engine: Optional[CoverageEngine] = None,
        loader: Optional[PackageLoader] = None,
        editor: Optional[EditorSession] = None,
        active_file: Optional[ActiveFileProvider] = None,
        console: Optional[Console] = None,
    ):
        self.config = config or RPkgTestConfig()
        self.test_engine = test_engine or RscriptTestEngine(self.config.engine)
        self.coverage_engine = coverage_engine or RscriptCoverageEngine(self.config.engine)
        self.loader = loader or PackageLoader()
        self.editor = editor or NoEditor()
        self.active_file = active_file
        self.console = console or Console()

    def _package_env(self, descriptor: PackageDescriptor) -> dict[str, str]:
        env = r_env_vars(self.config.context)
        env[PACKAGE_ENV_VAR] = descriptor.name
        return env

    def _files_or_active(self, files: FileArgs) -> list[Path]:
        if files:
            return [Path(f) for f in files]
        return [find_active_file(self.active_file)]

    def uses_testthat(self, pkg: PackageRef = ".") -> bool:
        """Check whether the package has testthat infrastructure."""
        return uses_testthat(pkg)

    def run_tests(
        self,
        pkg: PackageRef = ".",
        filter: Optional[str] = None,
        stop_on_failure: bool = False,
        export_all: bool = True,
        **options: Any,
    ) -> Optional[TestRunResult]:
        """
        Run a package's testthat tests.

        Args:
            pkg: Package directory (or any path inside it) or descriptor
            filter: Regex selecting test files by name (`test-<name>.R`)
            stop_on_failure: Make the engine raise when any test fails
            export_all: Make internal package objects visible to tests
            **options: Passed through to the test engine

        Returns:
            The engine's result unchanged, or None when there are no test files

        Raises:
            PackageLoadError: Package descriptor cannot be loaded
            NoTestInfrastructureError: No tests/testthat or inst/tests
            EngineError: The test engine failed
        """
        self.editor.save_all()

        descriptor = load_package(pkg)
        test_dir = find_test_dir(descriptor.path)

        if not list_test_files(test_dir):
            logger.info(f"No tests: no files in {test_dir} match '{TEST_FILE_PATTERN}'")
            return None

        engine_package = self.config.engine.test_engine_package
        descriptor.ensure_dependency(engine_package)

        logger.info(f"Loading {descriptor.name}")
        package = self.loader.load(descriptor, export_all=export_all)

        logger.info(f"Testing {descriptor.name}")
        context_config = self.config.context
        with scoped_context(
            env_vars=self._package_env(descriptor),
            options=context_config.options,
            collate=context_config.collate,
        ) as context:
            return self.test_engine.run(
                test_dir,
                package,
                filter=filter,
                stop_on_failure=stop_on_failure,
                load_helpers=False,
                context=context,
                **options,
            )

    def run_tests_for_files(
        self, files: FileArgs = None, **options: Any
    ) -> Optional[TestRunResult]:
        """
        Run the tests belonging to one or more source or test files.

        Source files are mapped to `tests/testthat/test-<name>.R`; test files
        are used as-is. Without files the editor's active file is used.
        """
        paths = self._files_or_active(files)
        validate_extensions(paths)

        refs = [classify_file(p) for p in paths]
        test_files = resolve_test_files(refs)
        regex = build_test_filter(test_files)

        return self.run_tests(refs[0].package_root, filter=regex, **options)

    def measure_coverage(
        self, pkg: PackageRef = ".", show_report: Optional[bool] = None, **options: Any
    ) -> CoverageResult:
        """
        Measure test coverage for the whole package.

        Args:
            pkg: Package directory (or any path inside it) or descriptor
            show_report: Render the package report (default: interactive session)
            **options: Passed through to the coverage engine
        """
        if show_report is None:
            show_report = is_interactive()

        descriptor = load_package(pkg)
        self.editor.save_all()

        with scoped_context(env_vars=self._package_env(descriptor)) as context:
            coverage = self.coverage_engine.package_coverage(
                descriptor, context=context, **options
            )

        if show_report:
            render_package_report(self.console, coverage, self.config.report)

        return coverage

    def measure_coverage_for_files(
        self,
        files: FileArgs = None,
        filter: bool = True,
        show_report: Optional[bool] = None,
        export_all: bool = True,
        **options: Any,
    ) -> CoverageResult:
        """
        Measure coverage of specific files by running only their tests.

        Each file (source or test) is resolved to both its source and test
        counterpart. The result is filtered down to the source files unless
        `filter` is false or one of the source files does not exist.
        """
        if show_report is None:
            show_report = is_interactive()

        refs = [classify_file(p) for p in self._files_or_active(files)]
        source_files = [p.resolve() for p in resolve_source_files(refs)]
        test_files = [p.resolve() for p in resolve_test_files(refs)]

        descriptor = load_package(refs[0].package_root)
        package = self.loader.load(descriptor, export_all=export_all)
        test_dir = find_test_dir(descriptor.path)

        env = self._package_env(descriptor)
        env["TESTTHAT"] = "true"
        with scoped_context(env_vars=env, working_dir=test_dir) as context:
            coverage = self.coverage_engine.environment_coverage(
                package, test_files, context=context, **options
            )

        coverage, filtered = adapt_coverage(coverage, source_files, descriptor, filter=filter)

        if show_report:
            if filtered:
                render_file_report(self.console, coverage, self.config.report)
            else:
                render_package_report(self.console, coverage, self.config.report)

        return coverage


def run_tests(pkg: PackageRef = ".", **kwargs: Any) -> Optional[TestRunResult]:
    """Run a package's tests with the default facade."""
    return PackageTestFacade().run_tests(pkg, **kwargs)


def run_tests_for_files(files: FileArgs = None, **kwargs: Any) -> Optional[TestRunResult]:
    """Run the tests for specific files with the default facade."""
    return PackageTestFacade().run_tests_for_files(files, **kwargs)


def measure_coverage(pkg: PackageRef = ".", **kwargs: Any) -> CoverageResult:
    """Measure whole-package coverage with the default facade."""
    return PackageTestFacade().measure_coverage(pkg, **kwargs)


def measure_coverage_for_files(files: FileArgs = None, **kwargs: Any) -> CoverageResult:
    """Measure coverage for specific files with the default facade."""
    return PackageTestFacade().measure_coverage_for_files(files, **kwargs)

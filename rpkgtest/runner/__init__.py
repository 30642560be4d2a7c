"""
rpkgtest runner module.

Runs testthat tests and covr coverage for R packages.
"""

from .context import ExecutionContext, current_options, r_env_vars, scoped_context
from .editor import (
    ACTIVE_FILE_ENV,
    ActiveFileProvider,
    EditorSession,
    EnvActiveFile,
    NoEditor,
    find_active_file,
)
from .engines import (
    CoverageEngine,
    LoadedPackage,
    PackageLoader,
    RscriptCoverageEngine,
    RscriptRunner,
    RscriptTestEngine,
    TestEngine,
)
from .orchestrator import (
    PackageTestFacade,
    is_interactive,
    measure_coverage,
    measure_coverage_for_files,
    run_tests,
    run_tests_for_files,
)

__all__ = [
    "ExecutionContext",
    "current_options",
    "r_env_vars",
    "scoped_context",
    "ACTIVE_FILE_ENV",
    "ActiveFileProvider",
    "EditorSession",
    "EnvActiveFile",
    "NoEditor",
    "find_active_file",
    "CoverageEngine",
    "LoadedPackage",
    "PackageLoader",
    "RscriptCoverageEngine",
    "RscriptRunner",
    "RscriptTestEngine",
    "TestEngine",
    "PackageTestFacade",
    "is_interactive",
    "run_tests",
    "run_tests_for_files",
    "measure_coverage",
    "measure_coverage_for_files",
]

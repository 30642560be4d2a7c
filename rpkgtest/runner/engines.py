"""
External engines: testthat for tests, covr for coverage.

Both are driven through `Rscript`. Each call renders a small R script into
a temporary directory, runs it in the current (scoped) environment and
working directory, and reads back a JSON payload the script writes next
to itself.
"""

import json
import logging
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..package import PackageDescriptor
from ..report.models import CoverageResult, TestResult, TestRunResult
from ..utils.config import EngineConfig
from ..utils.errors import EngineError
from .context import ExecutionContext

logger = logging.getLogger(__name__)

RESULT_FILE = "result.json"


def r_literal(value: Any) -> str:
    """Render a Python value as R source code."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, Path):
        value = value.as_posix()
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    if isinstance(value, Mapping):
        return f"list({r_arguments(value)})"
    if isinstance(value, (list, tuple)):
        if not value:
            return "character(0)"
        return f"c({', '.join(r_literal(v) for v in value)})"
    raise TypeError(f"Cannot pass {type(value).__name__} to R: {value!r}")


def r_arguments(arguments: Mapping[str, Any]) -> str:
    """Render keyword arguments as an R argument list."""
    return ", ".join(f"{name} = {r_literal(value)}" for name, value in arguments.items())


@dataclass
class LoadedPackage:
    """
    Handle to a package loaded into a fresh namespace.

    `env` is a child of the namespace environment so objects created by
    tests do not leak into the package namespace.
    """

    descriptor: PackageDescriptor
    export_all: bool = True
    attach: list[str] = field(default_factory=list)

    def render(self) -> str:
        """R code that loads the package and binds `ns_env` and `env`."""
        lines = [
            f"for (.pkg in {r_literal(self.attach)}) "
            "suppressPackageStartupMessages(library(.pkg, character.only = TRUE))",
            f"ns_env <- pkgload::load_all({r_literal(self.descriptor.path)}, "
            f"quiet = TRUE, export_all = {r_literal(self.export_all)})$env",
            "env <- new.env(parent = ns_env)",
        ]
        return "\n".join(lines)


class PackageLoader:
    """Creates LoadedPackage handles for a descriptor."""

    def load(self, descriptor: PackageDescriptor, export_all: bool = True) -> LoadedPackage:
        return LoadedPackage(
            descriptor=descriptor,
            export_all=export_all,
            attach=list(descriptor.attached_packages),
        )


class RscriptRunner:
    """Runs generated R scripts and collects their JSON payload."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def run(self, body: str, context: Optional[ExecutionContext] = None) -> Any:
        """
        Run an R script body and return the decoded payload.

        The body must write its payload with `.write_result(x)`.

        Raises:
            EngineError: Rscript missing, script failed, or no valid payload
        """
        rscript = shutil.which(self.config.rscript) or self.config.rscript
        workdir = Path(tempfile.mkdtemp(prefix="rpkgtest-"))
        try:
            result_path = workdir / RESULT_FILE
            script_path = workdir / "run.R"
            script_path.write_text(
                self._preamble(result_path, context) + body + "\n", encoding="utf-8"
            )

            cmd = [rscript, *self.config.extra_args, str(script_path)]
            logger.debug(f"Running: {' '.join(cmd)}")
            try:
                proc = subprocess.run(cmd, check=False)
            except FileNotFoundError as e:
                raise EngineError(
                    f"Rscript executable not found: {self.config.rscript}",
                    recovery_hint="Install R or set engine.rscript in .rpkgtest.yml",
                ) from e

            payload = self._read_payload(result_path, proc.returncode)
            if isinstance(payload, dict) and payload.get("error"):
                raise EngineError(
                    str(payload["error"]), returncode=proc.returncode
                )
            return payload
        finally:
            shutil.rmtree(workdir, ignore_errors=True)

    @staticmethod
    def _preamble(result_path: Path, context: Optional[ExecutionContext]) -> str:
        lines = [
            ".write_result <- function(x) "
            f"writeLines(jsonlite::toJSON(x, auto_unbox = TRUE, null = 'null', "
            f"digits = NA), {r_literal(result_path)})",
        ]
        if context is not None:
            if context.collate:
                lines.append(
                    f"invisible(Sys.setlocale('LC_COLLATE', {r_literal(context.collate)}))"
                )
            if context.options:
                lines.append(f"options({r_arguments(context.options)})")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _read_payload(result_path: Path, returncode: int) -> Any:
        if not result_path.exists():
            raise EngineError(
                f"Rscript exited with status {returncode} without producing a result",
                recovery_hint="Check that testthat, covr, pkgload and jsonlite are installed",
                returncode=returncode,
            )
        try:
            return json.loads(result_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise EngineError(f"Malformed engine result: {e}", returncode=returncode) from e


class TestEngine(ABC):
    """Discovers and runs test files, reporting pass/fail per test."""

    __test__ = False

    @abstractmethod
    def run(
        self,
        test_dir: Path,
        package: LoadedPackage,
        filter: Optional[str] = None,
        stop_on_failure: bool = False,
        load_helpers: bool = False,
        context: Optional[ExecutionContext] = None,
        **options: Any,
    ) -> TestRunResult:
        raise NotImplementedError


class CoverageEngine(ABC):
    """Measures which source lines execute while tests run."""

    @abstractmethod
    def package_coverage(
        self,
        package: PackageDescriptor,
        context: Optional[ExecutionContext] = None,
        **options: Any,
    ) -> CoverageResult:
        raise NotImplementedError

    @abstractmethod
    def environment_coverage(
        self,
        package: LoadedPackage,
        test_files: Sequence[Path],
        context: Optional[ExecutionContext] = None,
        **options: Any,
    ) -> CoverageResult:
        raise NotImplementedError


TEST_RESULT_COLUMNS = ("file", "context", "test", "nb", "failed", "skipped", "error", "warning")

TEST_SCRIPT = """{load}
.res <- tryCatch(
  testthat::test_dir({arguments}),
  error = function(e) {{ .write_result(list(error = conditionMessage(e))); quit(status = 1) }}
)
.df <- as.data.frame(.res)
.df <- .df[, intersect({columns}, names(.df)), drop = FALSE]
.write_result(list(results = .df))
"""

COVERAGE_TALLY = """.tally <- covr::tally_coverage({coverage}, by = "line")
.write_result(list(lines = .tally[, c("filename", "functions", "line", "value"), drop = FALSE]))
"""


class RscriptTestEngine(TestEngine):
    """testthat::test_dir() through Rscript."""

    def __init__(self, config: Optional[EngineConfig] = None, runner: Optional[RscriptRunner] = None):
        self.config = config or EngineConfig()
        self.runner = runner or RscriptRunner(self.config)

    def render(
        self,
        test_dir: Path,
        package: LoadedPackage,
        filter: Optional[str] = None,
        stop_on_failure: bool = False,
        load_helpers: bool = False,
        **options: Any,
    ) -> str:
        arguments: dict[str, Any] = {
            "path": Path(test_dir).resolve(),
            "filter": filter,
            "stop_on_failure": stop_on_failure,
            "load_helpers": load_helpers,
        }
        if self.config.reporter and "reporter" not in options:
            arguments["reporter"] = self.config.reporter
        arguments.update(options)
        # env is an R variable, not a literal
        rendered = f"{r_arguments(arguments)}, env = env"
        return TEST_SCRIPT.format(
            load=package.render(),
            arguments=rendered,
            columns=r_literal(list(TEST_RESULT_COLUMNS)),
        )

    def run(
        self,
        test_dir: Path,
        package: LoadedPackage,
        filter: Optional[str] = None,
        stop_on_failure: bool = False,
        load_helpers: bool = False,
        context: Optional[ExecutionContext] = None,
        **options: Any,
    ) -> TestRunResult:
        script = self.render(test_dir, package, filter, stop_on_failure, load_helpers, **options)
        payload = self.runner.run(script, context)
        rows = payload.get("results") or []
        return TestRunResult(results=[TestResult.from_dict(row) for row in rows])


class RscriptCoverageEngine(CoverageEngine):
    """covr::package_coverage() and covr::environment_coverage() through Rscript."""

    def __init__(self, config: Optional[EngineConfig] = None, runner: Optional[RscriptRunner] = None):
        self.config = config or EngineConfig()
        self.runner = runner or RscriptRunner(self.config)

    def render_package(self, package: PackageDescriptor, **options: Any) -> str:
        arguments = r_arguments({"path": package.path, **options})
        call = f".cov <- covr::package_coverage({arguments})\n"
        return call + COVERAGE_TALLY.format(coverage=".cov")

    def render_environment(
        self, package: LoadedPackage, test_files: Sequence[Path], **options: Any
    ) -> str:
        files = [Path(f).resolve() for f in test_files]
        arguments = r_arguments({"test_files": files, **options})
        call = f".cov <- covr::environment_coverage(env, {arguments})\n"
        return package.render() + "\n" + call + COVERAGE_TALLY.format(coverage=".cov")

    def package_coverage(
        self,
        package: PackageDescriptor,
        context: Optional[ExecutionContext] = None,
        **options: Any,
    ) -> CoverageResult:
        payload = self.runner.run(self.render_package(package, **options), context)
        return CoverageResult.from_records(payload.get("lines") or [])

    def environment_coverage(
        self,
        package: LoadedPackage,
        test_files: Sequence[Path],
        context: Optional[ExecutionContext] = None,
        **options: Any,
    ) -> CoverageResult:
        script = self.render_environment(package, test_files, **options)
        payload = self.runner.run(script, context)
        return CoverageResult.from_records(payload.get("lines") or [])

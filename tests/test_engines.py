"""Tests for the Rscript-driven engines."""

import json
import subprocess
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from rpkgtest.package import PackageDescriptor
from rpkgtest.runner import (
    ExecutionContext,
    LoadedPackage,
    PackageLoader,
    RscriptCoverageEngine,
    RscriptRunner,
    RscriptTestEngine,
)
from rpkgtest.runner.engines import r_arguments, r_literal
from rpkgtest.utils.config import EngineConfig
from rpkgtest.utils.errors import EngineError


def fake_rscript(payload: Any, returncode: int = 0, scripts: list[str] | None = None):
    """subprocess.run replacement that writes `payload` where the script expects it."""

    def run(cmd, check=False):
        script = Path(cmd[-1])
        if scripts is not None:
            scripts.append(script.read_text())
        if payload is not None:
            (script.parent / "result.json").write_text(json.dumps(payload))
        return subprocess.CompletedProcess(cmd, returncode)

    return run


@pytest.fixture
def descriptor(tmp_path: Path) -> PackageDescriptor:
    return PackageDescriptor(
        name="mypkg", path=tmp_path, dependencies=["testthat", "R", "methods"]
    )


class TestRLiteral:
    """Test rendering Python values as R code."""

    def test_scalars(self) -> None:
        assert r_literal(None) == "NULL"
        assert r_literal(True) == "TRUE"
        assert r_literal(False) == "FALSE"
        assert r_literal(3) == "3"
        assert r_literal(0.5) == "0.5"

    def test_strings_are_escaped(self) -> None:
        assert r_literal('a "b"\\c') == '"a \\"b\\"\\\\c"'
        assert r_literal(Path("/tmp/x")) == '"/tmp/x"'

    def test_collections(self) -> None:
        assert r_literal(["a", "b"]) == 'c("a", "b")'
        assert r_literal([]) == "character(0)"
        assert r_literal({"x": 1, "y": "z"}) == 'list(x = 1, y = "z")'

    def test_arguments(self) -> None:
        assert r_arguments({"quiet": True, "filter": None}) == "quiet = TRUE, filter = NULL"

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError):
            r_literal(object())


class TestLoadedPackage:
    """Test the package loading handle."""

    def test_loader_attaches_dependencies(self, descriptor: PackageDescriptor) -> None:
        package = PackageLoader().load(descriptor, export_all=False)
        assert package.attach == ["testthat", "methods"]
        code = package.render()
        assert f'pkgload::load_all("{descriptor.path.as_posix()}"' in code
        assert "export_all = FALSE" in code
        assert "env <- new.env(parent = ns_env)" in code


class TestRscriptRunner:
    """Test running scripts and reading their payload."""

    def test_reads_payload_and_cleans_up(self) -> None:
        scripts: list[str] = []
        with patch("subprocess.run", side_effect=fake_rscript({"ok": 1}, scripts=scripts)) as run:
            payload = RscriptRunner().run(".write_result(list(ok = 1))")

        assert payload == {"ok": 1}
        cmd = run.call_args.args[0]
        assert cmd[1:3] == ["--no-save", "--no-restore"]
        assert not Path(cmd[-1]).exists()
        assert ".write_result(list(ok = 1))" in scripts[0]

    def test_context_is_applied_in_script(self) -> None:
        scripts: list[str] = []
        context = ExecutionContext(options={"useFancyQuotes": False}, collate="C")
        with patch("subprocess.run", side_effect=fake_rscript({}, scripts=scripts)):
            RscriptRunner().run("1", context)

        assert "options(useFancyQuotes = FALSE)" in scripts[0]
        assert "Sys.setlocale('LC_COLLATE', \"C\")" in scripts[0]

    def test_missing_payload(self) -> None:
        with patch("subprocess.run", side_effect=fake_rscript(None, returncode=1)):
            with pytest.raises(EngineError) as exc_info:
                RscriptRunner().run("stop('boom')")
        assert exc_info.value.returncode == 1

    def test_engine_reported_error(self) -> None:
        with patch("subprocess.run", side_effect=fake_rscript({"error": "Test failures"}, 1)):
            with pytest.raises(EngineError) as exc_info:
                RscriptRunner().run("1")
        assert exc_info.value.message == "Test failures"

    def test_rscript_not_installed(self) -> None:
        config = EngineConfig(rscript="definitely-not-rscript")
        with patch("subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(EngineError) as exc_info:
                RscriptRunner(config).run("1")
        assert "definitely-not-rscript" in exc_info.value.message


class TestRscriptTestEngine:
    """Test the testthat engine."""

    def test_render(self, descriptor: PackageDescriptor, tmp_path: Path) -> None:
        package = LoadedPackage(descriptor=descriptor, attach=["testthat"])
        script = RscriptTestEngine().render(
            tmp_path, package, filter="^foo$", stop_on_failure=True, load_helpers=False
        )
        assert "testthat::test_dir(" in script
        assert 'filter = "^foo$"' in script
        assert "stop_on_failure = TRUE" in script
        assert "load_helpers = FALSE" in script
        assert "env = env" in script

    def test_configured_reporter(self, descriptor: PackageDescriptor, tmp_path: Path) -> None:
        engine = RscriptTestEngine(EngineConfig(reporter="summary"))
        script = engine.render(tmp_path, LoadedPackage(descriptor=descriptor))
        assert 'reporter = "summary"' in script

    def test_run_parses_results(self, descriptor: PackageDescriptor, tmp_path: Path) -> None:
        payload = {
            "results": [
                {"file": "test-foo.R", "test": "adds", "nb": 2, "failed": 0,
                 "skipped": False, "error": False, "warning": 0},
                {"file": "test-foo.R", "test": "breaks", "nb": 1, "failed": 1,
                 "skipped": False, "error": False, "warning": 1},
            ]
        }
        with patch("subprocess.run", side_effect=fake_rscript(payload)):
            result = RscriptTestEngine().run(tmp_path, LoadedPackage(descriptor=descriptor))

        assert [r.test for r in result.results] == ["adds", "breaks"]
        assert result.failed == 1
        assert not result.ok


class TestRscriptCoverageEngine:
    """Test the covr engine."""

    def test_package_coverage(self, descriptor: PackageDescriptor) -> None:
        scripts: list[str] = []
        payload = {"lines": [{"filename": "R/foo.R", "functions": "f", "line": 2, "value": 3}]}
        with patch("subprocess.run", side_effect=fake_rscript(payload, scripts=scripts)):
            result = RscriptCoverageEngine().package_coverage(descriptor, quiet=False)

        assert "covr::package_coverage(" in scripts[0]
        assert "quiet = FALSE" in scripts[0]
        assert result.lines[0].filename == "R/foo.R"
        assert result.lines[0].value == 3

    def test_environment_coverage_uses_absolute_tests(
        self, descriptor: PackageDescriptor, tmp_path: Path
    ) -> None:
        test_file = tmp_path / "tests" / "testthat" / "test-foo.R"
        script = RscriptCoverageEngine().render_environment(
            LoadedPackage(descriptor=descriptor), [test_file]
        )
        assert "covr::environment_coverage(env, " in script
        assert test_file.resolve().as_posix() in script
        assert script.index("pkgload::load_all") < script.index("environment_coverage")

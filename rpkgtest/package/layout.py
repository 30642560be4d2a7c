"""Test directory conventions of an R package."""

import logging
import re
from pathlib import Path
from typing import Union

from ..utils.errors import NoTestInfrastructureError
from .descriptor import PackageDescriptor, add_suggested_package, load_package

logger = logging.getLogger(__name__)

TEST_FILE_PATTERN = r"^test.*\.[rR]$"

# Checked in this order; inst/tests is the legacy location.
TEST_DIRS = (("tests", "testthat"), ("inst", "tests"))

TESTTHAT_RUNNER = """library(testthat)
library({package})

test_check("{package}")
"""


def find_test_dir(path: Union[str, Path]) -> Path:
    """
    Locate the package's test directory.

    Raises:
        NoTestInfrastructureError: Neither tests/testthat nor inst/tests exists
    """
    root = Path(path)
    for parts in TEST_DIRS:
        candidate = root.joinpath(*parts)
        if candidate.is_dir():
            return candidate

    raise NoTestInfrastructureError(
        f"No testthat directories found in {root}",
        recovery_hint="Run `rpkgtest use-testthat` to create tests/testthat",
    )


def list_test_files(test_dir: Path) -> list[Path]:
    """Files in `test_dir` named like `test*.R`, sorted by name."""
    pattern = re.compile(TEST_FILE_PATTERN)
    return sorted(
        p for p in test_dir.iterdir() if p.is_file() and pattern.match(p.name)
    )


def uses_testthat(pkg: Union[str, Path, PackageDescriptor] = ".") -> bool:
    """Check whether the package has testthat infrastructure."""
    descriptor = load_package(pkg)
    return any(descriptor.path.joinpath(*parts).is_dir() for parts in TEST_DIRS)


def use_testthat(
    pkg: Union[str, Path, PackageDescriptor] = ".", engine_package: str = "testthat"
) -> Path:
    """
    Create testthat infrastructure for a package.

    Creates `tests/testthat/`, writes the `tests/testthat.R` runner if it is
    missing and adds the engine to Suggests.

    Returns:
        The test directory
    """
    descriptor = load_package(pkg)
    test_dir = descriptor.path / "tests" / "testthat"
    test_dir.mkdir(parents=True, exist_ok=True)

    runner = descriptor.path / "tests" / "testthat.R"
    if not runner.exists():
        runner.write_text(TESTTHAT_RUNNER.format(package=descriptor.name), encoding="utf-8")
        logger.info(f"Writing {runner}")

    if descriptor.name != engine_package:
        add_suggested_package(descriptor, engine_package)

    return test_dir

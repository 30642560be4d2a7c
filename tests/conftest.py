"""Shared test fixtures."""

from pathlib import Path

import pytest
from helpers import create_package


@pytest.fixture
def package_dir(tmp_path: Path) -> Path:
    """A package with R/foo.R and tests/testthat/test-foo.R."""
    return create_package(tmp_path / "mypkg")

"""Shared helpers for building configured facades from CLI state."""

from pathlib import Path
from typing import Optional

import typer

from rpkgtest.cli import console as console_module
from rpkgtest.package import find_package_root
from rpkgtest.runner import EnvActiveFile, PackageTestFacade
from rpkgtest.utils.config import RPkgTestConfig
from rpkgtest.utils.errors import PackageLoadError


def get_config(ctx: typer.Context, near: Optional[Path] = None) -> RPkgTestConfig:
    """Configuration from --config, else the package's .rpkgtest.yml, else defaults."""
    obj = ctx.obj or {}
    config_path = obj.get("config_path")

    package_path = None
    if config_path is None and near is not None:
        try:
            package_path = find_package_root(near)
        except PackageLoadError:
            package_path = None

    return RPkgTestConfig.discover(config_path, package_path)


def make_facade(ctx: typer.Context, near: Optional[Path] = None) -> PackageTestFacade:
    """Facade wired to the configured engines and the CLI console."""
    return PackageTestFacade(
        config=get_config(ctx, near),
        active_file=EnvActiveFile(),
        console=console_module.console,
    )

"""
rpkgtest CLI package.

This package contains the command-line interface for rpkgtest,
organized into logical submodules for better maintainability.
"""

from rpkgtest.cli.main import app

__all__ = ["app"]

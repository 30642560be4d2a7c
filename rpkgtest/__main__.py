"""
Allow rpkgtest to be invoked as a module.

This enables running the CLI with:
    python -m rpkgtest
"""

from rpkgtest.cli.main import app

if __name__ == "__main__":
    app()

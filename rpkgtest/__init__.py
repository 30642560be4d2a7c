"""
rpkgtest - run testthat tests and covr coverage for R packages.

Maps R and native source files to their testthat files (and back) and
drives the test and coverage engines through Rscript.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("rpkgtest")
except PackageNotFoundError:
    __version__ = "0.1.0"

"""
rpkgtest report module.

Result models, coverage filtering and terminal rendering.
"""

from .adapter import adapt_coverage
from .formatting import render_file_report, render_package_report, render_test_results
from .models import CoverageResult, LineCoverage, TestResult, TestRunResult

__all__ = [
    "CoverageResult",
    "LineCoverage",
    "TestResult",
    "TestRunResult",
    "adapt_coverage",
    "render_file_report",
    "render_package_report",
    "render_test_results",
]

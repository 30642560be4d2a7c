"""Post-processing of coverage engine results."""

import logging
from collections.abc import Sequence
from pathlib import Path

from ..package import PackageDescriptor
from .models import CoverageResult

logger = logging.getLogger(__name__)


def adapt_coverage(
    coverage: CoverageResult,
    source_files: Sequence[Path],
    package: PackageDescriptor,
    filter: bool = True,
) -> tuple[CoverageResult, bool]:
    """
    Restrict a coverage result to the files under test.

    Filtering is skipped when any source file is missing on disk, so the
    caller gets the full report instead of an empty one.

    Args:
        coverage: Result from the coverage engine
        source_files: Resolved source files under test
        package: Package the result belongs to
        filter: Whether filtering is wanted at all

    Returns:
        Tuple of (result, whether filtering was applied)
    """
    missing = [str(p) for p in source_files if not Path(p).exists()]
    if filter and missing:
        logger.warning(
            f"Not filtering coverage: source file(s) not found: {', '.join(missing)}"
        )
    apply_filter = filter and not missing

    # Relative engine file names resolve against the package root
    coverage.package = package
    if apply_filter:
        coverage = coverage.only_files(source_files)

    coverage.relative = True
    return coverage, apply_filter

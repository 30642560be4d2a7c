"""
rpkgtest package layer.

Loads R package descriptors and knows where a package keeps its tests.
"""

from .descriptor import (
    PackageDescriptor,
    add_suggested_package,
    find_package_root,
    load_package,
    parse_dcf,
    parse_dependency_field,
)
from .layout import (
    TEST_FILE_PATTERN,
    find_test_dir,
    list_test_files,
    use_testthat,
    uses_testthat,
)

__all__ = [
    "PackageDescriptor",
    "load_package",
    "find_package_root",
    "parse_dcf",
    "parse_dependency_field",
    "add_suggested_package",
    "TEST_FILE_PATTERN",
    "find_test_dir",
    "list_test_files",
    "uses_testthat",
    "use_testthat",
]

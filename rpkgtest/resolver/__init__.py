"""
rpkgtest path resolver.

Classifies package files and maps source files to test files and back.
"""

from .models import (
    NATIVE_EXTENSIONS,
    FileKind,
    FileReference,
    FileRole,
    Language,
)
from .paths import (
    build_test_filter,
    classify_file,
    find_source_file,
    find_test_file,
    resolve_source_files,
    resolve_test_files,
    context_name,
    escape_regex,
    validate_extensions,
)

__all__ = [
    "NATIVE_EXTENSIONS",
    "FileKind",
    "FileReference",
    "FileRole",
    "Language",
    "classify_file",
    "validate_extensions",
    "find_test_file",
    "find_source_file",
    "resolve_test_files",
    "resolve_source_files",
    "context_name",
    "escape_regex",
    "build_test_filter",
]

"""
Mapping between package source files and their testthat test files.

The role of a file is decided by the name of the directory that directly
contains it:

    R/<name>.R                  -> tests/testthat/test-<name>.R
    src/<name>.<c|cpp|h|...>    -> tests/testthat/test-<name>.R
    tests/testthat/test-<name>.R -> R/<name>.R

Counterparts are built from the package root inferred from the file, so a
relative input gives a relative counterpart and an absolute input gives an
absolute one.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Optional, Union

from ..utils.errors import InvalidExtensionError, NotInConventionalDirectoryError
from .models import (
    NATIVE_EXTENSIONS,
    R_EXTENSIONS,
    TEST_DIR_PARTS,
    TEST_PREFIX,
    FileKind,
    FileReference,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_DIRECTORY_KINDS = {
    "R": FileKind.SOURCE_R,
    "src": FileKind.SOURCE_NATIVE,
    "testthat": FileKind.TEST,
}


def _extension(path: Path) -> str:
    return path.suffix[1:].lower()


def _format_extensions(extensions: Iterable[str]) -> str:
    return ", ".join(f"`.{ext}`" for ext in extensions)


def classify_file(path: PathLike) -> FileReference:
    """
    Classify a file by the directory that contains it.

    Args:
        path: Path to an R source, native source or testthat file

    Returns:
        FileReference with a validated kind

    Raises:
        NotInConventionalDirectoryError: Parent directory is not `R`, `src`
            or `testthat`
        InvalidExtensionError: Extension does not fit the directory
    """
    path = Path(path)
    kind = _DIRECTORY_KINDS.get(path.parent.name)

    if kind is None:
        raise NotInConventionalDirectoryError(
            f"File '{path}' is not in `R/`, `src/` or `tests/testthat/`",
            recovery_hint="Open a file from one of the package's conventional directories",
        )

    ext = _extension(path)
    if kind is FileKind.SOURCE_NATIVE:
        if ext not in NATIVE_EXTENSIONS:
            raise InvalidExtensionError(
                f"File '{path}' does not end in a valid extension: "
                f"must be one of {_format_extensions(NATIVE_EXTENSIONS)}"
            )
    elif ext not in R_EXTENSIONS:
        raise InvalidExtensionError(f"File '{path}' does not end in `.R`")

    return FileReference(path=path, kind=kind)


def validate_extensions(files: Sequence[PathLike]) -> None:
    """Reject every file that is neither an R file nor a native source file."""
    valid = set(R_EXTENSIONS) | set(NATIVE_EXTENSIONS)
    invalid = [str(f) for f in files if _extension(Path(f)) not in valid]
    if invalid:
        quoted = ", ".join(f"'{f}'" for f in invalid)
        raise InvalidExtensionError(f"file(s): {quoted} are not valid R or src files")


def find_test_file(source: Union[PathLike, FileReference]) -> Path:
    """
    Find the conventional test file for a source file.

    The R branch keeps the file name as-is; the native branch replaces the
    extension with `.R`.
    """
    ref = source if isinstance(source, FileReference) else classify_file(source)

    if ref.kind is FileKind.SOURCE_R:
        name = f"{TEST_PREFIX}{ref.path.name}"
    elif ref.kind is FileKind.SOURCE_NATIVE:
        name = f"{TEST_PREFIX}{ref.path.stem}.R"
    else:
        raise NotInConventionalDirectoryError(
            f"File '{ref.path}' is not in `R/` or `src/` directories"
        )

    return ref.package_root.joinpath(*TEST_DIR_PARTS, name)


def find_source_file(test: Union[PathLike, FileReference]) -> Path:
    """Find the R source file exercised by a testthat file."""
    ref = test if isinstance(test, FileReference) else classify_file(test)

    if ref.kind is not FileKind.TEST:
        raise NotInConventionalDirectoryError(
            f"File '{ref.path}' is not in `tests/testthat/` directory"
        )

    name = re.sub(f"^{re.escape(TEST_PREFIX)}", "", ref.path.name)
    return ref.package_root / "R" / name


def resolve_test_files(refs: Iterable[FileReference]) -> list[Path]:
    """Tests to run for a mixed set of files: counterparts for sources, tests as-is."""
    tests: list[Path] = []
    for ref in refs:
        if ref.is_source:
            tests.append(find_test_file(ref))
        else:
            tests.append(ref.path)
    return tests


def resolve_source_files(refs: Iterable[FileReference]) -> list[Path]:
    """Sources under test for a mixed set of files: counterparts for tests, sources as-is."""
    sources: list[Path] = []
    for ref in refs:
        if ref.is_source:
            sources.append(ref.path)
        else:
            sources.append(find_source_file(ref))
    return sources


_REGEX_SPECIAL = re.compile(r"([.\\|()\[\]{}^$*+?])")


def escape_regex(text: str) -> str:
    """Escape regex metacharacters the same way for Python and R (TRE) engines."""
    return _REGEX_SPECIAL.sub(r"\\\1", text)


def context_name(test_file: PathLike) -> str:
    """`tests/testthat/test-foo.R` -> `foo`."""
    stem = Path(test_file).stem
    return re.sub(f"^{re.escape(TEST_PREFIX)}", "", stem)


def build_test_filter(test_files: Iterable[PathLike]) -> Optional[str]:
    """
    Build a regular expression selecting exactly the given test files.

    Each alternative is anchored at both ends so `foo` never matches
    `foobar` or `xfoo`. Returns None when there is nothing to select.
    """
    names = [context_name(f) for f in test_files]
    if not names:
        return None

    regex = "|".join(f"^{escape_regex(name)}$" for name in names)
    logger.debug(f"Test filter for {len(names)} file(s): {regex}")
    return regex

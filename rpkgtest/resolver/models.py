"""Data models for path resolution."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

NATIVE_EXTENSIONS = ("c", "cc", "cpp", "cxx", "h", "hpp", "hxx")
R_EXTENSIONS = ("r",)

TEST_DIR_PARTS = ("tests", "testthat")
TEST_PREFIX = "test-"


class FileRole(Enum):
    """What a file is for within the package."""

    SOURCE = "source"
    TEST = "test"


class Language(Enum):
    """Language a file is written in."""

    R = "R"
    NATIVE = "native"


class FileKind(Enum):
    """Tagged classification of a package file."""

    SOURCE_R = "source_r"  # R/<name>.R
    SOURCE_NATIVE = "source_native"  # src/<name>.<c|cpp|...>
    TEST = "test"  # tests/testthat/test-<name>.R

    @property
    def role(self) -> FileRole:
        if self is FileKind.TEST:
            return FileRole.TEST
        return FileRole.SOURCE

    @property
    def language(self) -> Language:
        if self is FileKind.SOURCE_NATIVE:
            return Language.NATIVE
        return Language.R


@dataclass(frozen=True)
class FileReference:
    """A package file with its validated classification."""

    path: Path
    kind: FileKind

    @property
    def role(self) -> FileRole:
        return self.kind.role

    @property
    def language(self) -> Language:
        return self.kind.language

    @property
    def is_source(self) -> bool:
        return self.kind.role is FileRole.SOURCE

    @property
    def package_root(self) -> Path:
        """Package directory inferred from the conventional layout."""
        if self.kind is FileKind.TEST:
            # tests/testthat/<file>
            return self.path.parent.parent.parent
        return self.path.parent.parent

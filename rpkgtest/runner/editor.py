"""Editor integration: the active file and saving open buffers."""

import os
from pathlib import Path
from typing import Optional, Protocol

from ..utils.errors import ActiveFileUnavailableError

ACTIVE_FILE_ENV = "RPKGTEST_ACTIVE_FILE"


class ActiveFileProvider(Protocol):
    """Returns the path of the file open in the editor."""

    def __call__(self) -> Path: ...


class EditorSession(Protocol):
    """Editor the user is working in."""

    def save_all(self) -> None: ...


class EnvActiveFile:
    """Active file published by the editor through an environment variable."""

    def __init__(self, variable: str = ACTIVE_FILE_ENV):
        self.variable = variable

    def __call__(self) -> Path:
        value = os.environ.get(self.variable)
        if not value:
            raise ActiveFileUnavailableError(
                "Argument `files` is missing, with no default",
                recovery_hint=f"Pass one or more files, or set {self.variable}",
            )
        return Path(value)


class NoEditor:
    """No editor attached: nothing to save."""

    def save_all(self) -> None:
        pass


def find_active_file(provider: Optional[ActiveFileProvider] = None) -> Path:
    """Ask `provider` (default: environment variable) for the active file."""
    return (provider or EnvActiveFile())()

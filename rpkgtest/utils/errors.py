"""
Custom exception classes for rpkgtest.

This module defines the exception hierarchy used throughout the application
for consistent error handling and reporting.
"""

from typing import Optional


class RPkgTestError(Exception):
    """Base exception for all rpkgtest errors."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Initialize an rpkgtest error.

        Args:
            message: The error message describing what went wrong
            recovery_hint: Optional hint on how to recover from this error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(self.message)


class InvalidExtensionError(RPkgTestError):
    """File extension does not fit the directory it lives in."""

    pass


class NotInConventionalDirectoryError(RPkgTestError):
    """File is not in `R/`, `src/` or `tests/testthat/`."""

    pass


class NoTestInfrastructureError(RPkgTestError):
    """Package has neither `tests/testthat/` nor `inst/tests/`."""

    pass


class PackageLoadError(RPkgTestError):
    """Package DESCRIPTION could not be found or parsed."""

    pass


class EngineError(RPkgTestError):
    """The test or coverage engine failed to run or returned garbage."""

    def __init__(
        self,
        message: str,
        recovery_hint: Optional[str] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message, recovery_hint)
        self.returncode = returncode
        self.stderr = stderr


class ActiveFileUnavailableError(RPkgTestError):
    """No file was given and the editor could not provide one."""

    pass


class ConfigError(RPkgTestError):
    """Configuration file is unreadable or invalid."""

    pass

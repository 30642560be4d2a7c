"""Shared utilities: configuration and errors."""

from .config import ContextConfig, EngineConfig, ReportConfig, RPkgTestConfig
from .errors import (
    ActiveFileUnavailableError,
    ConfigError,
    EngineError,
    InvalidExtensionError,
    NoTestInfrastructureError,
    NotInConventionalDirectoryError,
    PackageLoadError,
    RPkgTestError,
)

__all__ = [
    "RPkgTestConfig",
    "EngineConfig",
    "ContextConfig",
    "ReportConfig",
    "RPkgTestError",
    "InvalidExtensionError",
    "NotInConventionalDirectoryError",
    "NoTestInfrastructureError",
    "PackageLoadError",
    "EngineError",
    "ActiveFileUnavailableError",
    "ConfigError",
]

"""Configuration management for rpkgtest."""

import re
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

CONFIG_FILE_NAME = ".rpkgtest.yml"


class EngineConfig(BaseModel):
    """Configuration for the external test and coverage engines."""

    rscript: str = Field(default="Rscript", description="Rscript executable")
    test_engine_package: str = Field(
        default="testthat", description="R package providing the test engine"
    )
    reporter: Optional[str] = Field(
        default=None, description="testthat reporter name (engine default if unset)"
    )
    extra_args: list[str] = Field(
        default_factory=lambda: ["--no-save", "--no-restore"],
        description="Extra command line arguments for Rscript",
    )

    @field_validator("test_engine_package")
    @classmethod
    def validate_package_name(cls, name: str) -> str:
        """R package names are letters, digits and dots."""
        if not re.fullmatch(r"[A-Za-z][A-Za-z0-9.]*", name):
            raise ValueError(f"Invalid R package name: {name!r}")
        return name


class ContextConfig(BaseModel):
    """Configuration for the scoped execution context around engine calls."""

    collate: str = Field(default="C", description="LC_COLLATE during runs")
    options: dict[str, Any] = Field(
        default_factory=lambda: {"useFancyQuotes": False},
        description="R options set for the duration of a run",
    )
    env_vars: dict[str, str] = Field(
        default_factory=lambda: {
            "CYGWIN": "nodosfilewarning",
            "R_TESTS": "",
            "R_BROWSER": "false",
            "R_PDFVIEWER": "false",
        },
        description="Baseline environment variables for R processes",
    )
    not_cran: bool = Field(
        default=True, description="Set NOT_CRAN=true when it is not already set"
    )


class ReportConfig(BaseModel):
    """Configuration for terminal reports."""

    show_uncovered_only: bool = Field(
        default=False, description="Only list uncovered lines in file reports"
    )
    max_lines: int = Field(
        default=200, ge=1, le=100000, description="Maximum lines per file report"
    )


class RPkgTestConfig(BaseModel):
    """Complete configuration for rpkgtest."""

    version: int = 1
    engine: EngineConfig = Field(default_factory=EngineConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @classmethod
    def from_yaml(cls, file_path: str) -> "RPkgTestConfig":
        """Load configuration from YAML file."""
        import yaml  # type: ignore[import-untyped]

        try:
            with open(file_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config file {file_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file {file_path}: {e}") from e

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(
                f"Invalid configuration in {file_path}: {e}",
                recovery_hint="Check the keys and value types in the file",
            ) from e

    @classmethod
    def discover(
        cls, config_path: Optional[Path] = None, package_path: Optional[Path] = None
    ) -> "RPkgTestConfig":
        """
        Find and load the effective configuration.

        Priority order:
        1. Explicit config_path file
        2. `.rpkgtest.yml` in the package directory
        3. Default configuration
        """
        if config_path is not None:
            return cls.from_yaml(str(config_path))

        if package_path is not None:
            project_config = Path(package_path) / CONFIG_FILE_NAME
            if project_config.is_file():
                return cls.from_yaml(str(project_config))

        return cls()

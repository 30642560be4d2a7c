"""
Scoped execution context for engine calls.

Environment variables, R options and the working directory are process-wide.
They are only changed inside `scoped_context`, which snapshots the previous
values and restores them when the block exits, whether it returns or raises.
"""

import logging
import os
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..utils.config import ContextConfig

logger = logging.getLogger(__name__)

# R options in effect for engine calls made by this process
_r_options: dict[str, Any] = {}


def current_options() -> dict[str, Any]:
    """R options that will be applied to the next engine call."""
    return dict(_r_options)


@dataclass
class ExecutionContext:
    """What an engine call sees while the scope is active."""

    env_vars: dict[str, str] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)
    collate: Optional[str] = None
    working_dir: Optional[Path] = None


def r_env_vars(config: Optional[ContextConfig] = None) -> dict[str, str]:
    """Baseline environment for R processes started by rpkgtest."""
    config = config or ContextConfig()
    env = dict(config.env_vars)
    if config.not_cran and "NOT_CRAN" not in os.environ:
        env["NOT_CRAN"] = "true"
    return env


@contextmanager
def scoped_context(
    env_vars: Optional[Mapping[str, str]] = None,
    options: Optional[Mapping[str, Any]] = None,
    collate: Optional[str] = None,
    working_dir: Optional[Path] = None,
) -> Iterator[ExecutionContext]:
    """
    Apply env vars, R options, collation and working directory for one call.

    Args:
        env_vars: Environment variables to set
        options: R options to set
        collate: Value for LC_COLLATE
        working_dir: Directory to change into

    Yields:
        The ExecutionContext in effect
    """
    env = dict(env_vars or {})
    if collate is not None:
        env["LC_COLLATE"] = collate

    saved_env = {key: os.environ.get(key) for key in env}
    saved_options = dict(_r_options)
    saved_cwd = os.getcwd() if working_dir is not None else None

    try:
        os.environ.update(env)
        _r_options.update(options or {})
        if working_dir is not None:
            logger.debug(f"Changing directory to {working_dir}")
            os.chdir(working_dir)

        yield ExecutionContext(
            env_vars=env,
            options=dict(_r_options),
            collate=collate,
            working_dir=Path(working_dir) if working_dir is not None else None,
        )
    finally:
        if saved_cwd is not None:
            os.chdir(saved_cwd)
        _r_options.clear()
        _r_options.update(saved_options)
        for key, value in saved_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value

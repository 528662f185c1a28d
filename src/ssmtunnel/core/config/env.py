"""
AWS settings from .env files.

Projects often keep ``AWS_PROFILE``/``AWS_REGION`` (or ``SSMTUNNEL_*``
overrides) in a .env file. Only keys with those prefixes are loaded; they
reach both load_config and the plugin process, which inherits the
environment. Variables already exported in the shell always win.

Files are read in order, later files overriding earlier ones:
    ~/.config/ssmtunnel/.env < .env < .env.local
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from dotenv import dotenv_values

from .loader import get_config_dir

logger = logging.getLogger(__name__)

ENV_PREFIXES = ("AWS_", "SSMTUNNEL_")


def default_env_files(project_dir: Path) -> list[Path]:
    """User .env first, then the project's .env and .env.local."""
    return [
        get_config_dir() / ".env",
        project_dir / ".env",
        project_dir / ".env.local",
    ]


def read_env_file(path: Path) -> dict[str, str]:
    """Return the AWS_/SSMTUNNEL_ assignments in one .env file."""
    if not path.is_file():
        return {}
    return {
        key: value
        for key, value in dotenv_values(path).items()
        if value is not None and key.startswith(ENV_PREFIXES)
    }


def load_layered_env(
    *,
    project_dir: Path | None = None,
    env_files: Iterable[Path] | None = None,
) -> dict[str, str]:
    """
    Export AWS and ssmtunnel settings found in .env files.

    Args:
        project_dir: Directory holding the project .env files (defaults to cwd)
        env_files: Files to read instead of the defaults, lowest precedence first

    Returns:
        The variables that were set in os.environ
    """
    if env_files is None:
        env_files = default_env_files(project_dir or Path.cwd())

    shell_keys = set(os.environ)
    loaded: dict[str, str] = {}
    for path in env_files:
        for key, value in read_env_file(Path(path)).items():
            if key not in shell_keys:
                loaded[key] = value

    os.environ.update(loaded)
    if loaded:
        logger.debug("Loaded from .env files: %s", ", ".join(sorted(loaded)))
    return loaded

"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars

Every layer is a flat JSON object whose keys are TunnelConfig fields, so a
later layer simply replaces the keys it sets.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import TunnelConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per process
_config_cache: TunnelConfig | None = None

PROJECT_CONFIG_NAME = ".ssmtunnel.json"


def get_config_dir() -> Path:
    """
    Get the ssmtunnel user config directory.

    Returns:
        $XDG_CONFIG_HOME/ssmtunnel, or ~/.config/ssmtunnel when unset
    """
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "ssmtunnel"


def get_user_config_path() -> Path:
    """Path to the user config file (config.json in the config directory)."""
    return get_config_dir() / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)
    """
    return (cwd or Path.cwd()) / PROJECT_CONFIG_NAME


def read_config_layer(path: Path) -> dict[str, Any]:
    """
    Read one config file as a layer of TunnelConfig fields.

    A missing file is an empty layer. Unreadable files, invalid JSON and
    non-object documents are logged and skipped. Keys that are not
    TunnelConfig fields are dropped with a warning.
    """
    if not path.is_file():
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Ignoring config at %s: expected a JSON object", path)
        return {}

    unknown = sorted(set(data) - set(TunnelConfig.model_fields))
    if unknown:
        logger.warning("Ignoring unknown keys in %s: %s", path, ", ".join(unknown))

    return {key: value for key, value in data.items() if key in TunnelConfig.model_fields}


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        AWS_REGION / AWS_DEFAULT_REGION - override region
        AWS_PROFILE - overrides profile
        SSMTUNNEL_ENDPOINT - overrides session_endpoint
        SSMTUNNEL_PLUGIN - overrides plugin_name
        SSMTUNNEL_TIMEOUT - overrides timeout_seconds

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if region := os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION"):
        result["region"] = region

    if profile := os.environ.get("AWS_PROFILE"):
        result["profile"] = profile

    if endpoint := os.environ.get("SSMTUNNEL_ENDPOINT"):
        result["session_endpoint"] = endpoint

    if plugin := os.environ.get("SSMTUNNEL_PLUGIN"):
        result["plugin_name"] = plugin

    if timeout_str := os.environ.get("SSMTUNNEL_TIMEOUT"):
        try:
            timeout = float(timeout_str)
            if timeout <= 0:
                logger.warning("SSMTUNNEL_TIMEOUT must be > 0, got %s, ignoring", timeout_str)
            else:
                result["timeout_seconds"] = timeout
        except ValueError:
            logger.warning("Invalid SSMTUNNEL_TIMEOUT value '%s', ignoring", timeout_str)

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "plugin_name": "session-manager-plugin",
        "log_events": True,
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> TunnelConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables
        2. Project config (.ssmtunnel.json)
        3. User config (~/.config/ssmtunnel/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Directory to load .ssmtunnel.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated TunnelConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()
    for path in (get_user_config_path(), get_project_config_path(project_dir)):
        layer = read_config_layer(path)
        if layer:
            logger.debug("Config from %s: %s", path, ", ".join(sorted(layer)))
        merged.update(layer)

    config = TunnelConfig(**apply_env_overrides(merged))

    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None

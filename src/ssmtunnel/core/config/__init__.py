"""
Configuration models and loading.

This module provides the Pydantic model for ssmtunnel configuration with
multi-layer merging: defaults < user < project < env vars.
"""

from .env import load_layered_env
from .loader import (
    clear_cache,
    get_config_dir,
    get_project_config_path,
    get_user_config_path,
    load_config,
)
from .models import TunnelConfig

__all__ = [
    # Models
    "TunnelConfig",
    # Loader functions
    "clear_cache",
    "get_config_dir",
    "get_project_config_path",
    "get_user_config_path",
    "load_config",
    "load_layered_env",
]

"""
Configuration models and loading.

This module provides Pydantic models for node setup configuration
with layered merging: defaults < config file < env vars.
"""

from .loader import (
    apply_env_overrides,
    deep_merge,
    get_default_config,
    load_config,
    load_json_file,
)
from .models import (
    CacheConfig,
    CleanupConfig,
    SetupConfig,
)

__all__ = [
    # Models
    "CacheConfig",
    "CleanupConfig",
    "SetupConfig",
    # Loader functions
    "apply_env_overrides",
    "deep_merge",
    "get_default_config",
    "load_config",
    "load_json_file",
]

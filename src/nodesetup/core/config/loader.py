"""
Configuration loading with layered merging.

Implements the configuration precedence chain:
    defaults < config file < env vars

This is a convenience for callers that keep settings in a file. The
reconciler itself only takes SetupConfig and SetupItem models.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from nodesetup.core.errors import ConfigError

from .models import SetupConfig

logger = logging.getLogger(__name__)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`. Nested dicts
    are merged, not replaced. Lists are replaced as a whole.

    Args:
        base: Base dictionary (lower priority)
        override: Override dictionary (higher priority)

    Returns:
        Merged dictionary with override values taking precedence

    Example:
        >>> deep_merge({"cleanup": {"enabled": True, "max_age_days": 10}},
        ...            {"cleanup": {"max_age_days": 3}})
        {'cleanup': {'enabled': True, 'max_age_days': 3}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any]:
    """
    Load a JSON configuration file.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON object

    Raises:
        ConfigError: If the file is missing, unreadable or not a JSON object
    """
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Failed to read config at {path}: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config at {path} must be a JSON object", path=str(path))
    return data


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override the config file.

    Supported env vars:
        NODESETUP_DEBUG - overrides debug
        NODESETUP_CACHE_FILENAME - overrides cache.filename
        NODESETUP_CLEANUP_MAX_AGE_DAYS - overrides cleanup.max_age_days

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if debug_str := os.environ.get("NODESETUP_DEBUG"):
        result["debug"] = debug_str.lower() not in ("false", "0", "")

    if filename := os.environ.get("NODESETUP_CACHE_FILENAME"):
        result["cache"] = {**result.get("cache", {}), "filename": filename}

    if age_str := os.environ.get("NODESETUP_CLEANUP_MAX_AGE_DAYS"):
        try:
            age = int(age_str)
        except ValueError:
            logger.warning("Invalid NODESETUP_CLEANUP_MAX_AGE_DAYS value '%s', ignoring", age_str)
        else:
            result["cleanup"] = {**result.get("cleanup", {}), "max_age_days": age}

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "items": [],
        "debug": False,
        "cache": {"filename": "slave_setup.ini"},
        "cleanup": {
            "enabled": True,
            "temp_dir": "/tmp",
            "pattern": "*jenkins*.sh",
            "max_age_days": 10,
        },
    }


def load_config(path: Path | None = None) -> SetupConfig:
    """
    Load configuration with layered merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (NODESETUP_*)
        2. Config file (JSON), if given
        3. Hardcoded defaults

    Relative `files_dir` and `env_files` paths in the file are resolved
    against the file's directory.

    Args:
        path: Optional JSON config file

    Returns:
        Validated SetupConfig instance

    Raises:
        ConfigError: If the file cannot be read or the merged config is invalid
    """
    merged = get_default_config()

    if path is not None:
        file_config = _resolve_paths(load_json_file(path), path.parent)
        merged = deep_merge(merged, file_config)

    merged = apply_env_overrides(merged)

    try:
        return SetupConfig(**merged)
    except ValidationError as e:
        source = str(path) if path is not None else "defaults"
        raise ConfigError(f"Invalid configuration ({source}): {e}", source=source) from e


def _resolve_paths(data: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    result = data.copy()

    items = []
    for item in result.get("items", []):
        if isinstance(item, dict) and item.get("files_dir"):
            files_dir = Path(item["files_dir"])
            if not files_dir.is_absolute():
                item = {**item, "files_dir": str(base_dir / files_dir)}
        items.append(item)
    if "items" in result:
        result["items"] = items

    if "env_files" in result:
        result["env_files"] = [
            str(base_dir / p) if not Path(p).is_absolute() else p
            for p in result["env_files"]
        ]

    return result

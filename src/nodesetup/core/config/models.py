"""
Configuration data models for node setup.

These models define the structure of a node setup configuration: the setup
items to reconcile plus cache, cleanup and execution settings, validated by
Pydantic.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nodesetup.core.cache.store import CACHE_FILENAME
from nodesetup.core.deploy.models import SetupItem


class CacheConfig(BaseModel):
    """
    Setup cache file settings.
    """
    filename: str = Field(
        default=CACHE_FILENAME,
        min_length=1,
        description="Cache filename relative to the node root"
    )

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """Keep the cache file inside the node root."""
        if v.startswith(("/", "\\")) or ".." in Path(v).parts:
            raise ValueError(f"cache filename must be relative to the node root: {v!r}")
        return v


class CleanupConfig(BaseModel):
    """
    Temporary file cleanup.

    Stale script files left behind in the temp directory are removed from
    Unix nodes and from a Unix control side.
    """
    enabled: bool = Field(
        default=True,
        description="Run cleanup after reconciliation"
    )
    temp_dir: str = Field(
        default="/tmp",
        min_length=1,
        description="Directory searched for stale files"
    )
    pattern: str = Field(
        default="*jenkins*.sh",
        min_length=1,
        description="Filename pattern of removable files"
    )
    max_age_days: int = Field(
        default=10,
        ge=0,
        description="Only remove files not accessed for more than this many days"
    )


class SetupConfig(BaseModel):
    """
    Top-level node setup configuration.

    Example:
        >>> config = SetupConfig(
        ...     items=[SetupItem(selector="linux", version="1.0", install_script="make")],
        ...     debug=True,
        ... )
        >>> config.cache.filename
        'slave_setup.ini'
    """
    items: list[SetupItem] = Field(
        default_factory=list,
        description="Setup items in the order they are applied"
    )
    debug: bool = Field(
        default=False,
        description="Forward debug lines to the log sink"
    )
    script_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-script timeout for the local deployer (None waits indefinitely)"
    )
    env_files: list[Path] = Field(
        default_factory=list,
        description="Dotenv files layered into script environments"
    )
    cache: CacheConfig = Field(
        default_factory=CacheConfig,
        description="Setup cache file settings"
    )
    cleanup: CleanupConfig = Field(
        default_factory=CleanupConfig,
        description="Temporary file cleanup"
    )

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

"""
Setup item models.

A setup item declares one component to install on matching nodes: a label
selector, a version, and up to three deploy steps (a prepare script run on
the control side, a file bundle copied into the node root, an install script
run in the node root).
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nodesetup.core.cache.models import DELIMITER, CacheEntry
from nodesetup.core.errors import ConfigError
from nodesetup.core.nodes.labels import validate_expression


class SetupItem(BaseModel):
    """
    One declared setup component.

    The component identity defaults to the selector text, so two items with
    the same selector share one cache entry and the later version wins.

    Example:
        >>> item = SetupItem(selector="linux && jdk", version="17", install_script="./install.sh")
        >>> item.component
        'linux && jdk'
        >>> item.cache_entry().serialize()
        'linux && jdk:17'
    """

    model_config = ConfigDict(frozen=True)

    selector: str = Field(
        default="",
        description="Label expression selecting target nodes (empty matches all)",
    )
    identity: str | None = Field(
        default=None,
        description="Component name recorded in the cache (defaults to the selector)",
    )
    version: str = Field(
        ...,
        description="Version token; a change triggers reinstall",
    )
    prepare_script: str | None = Field(
        default=None,
        description="Script run on the control side before copying files",
    )
    install_script: str | None = Field(
        default=None,
        description="Script run in the node root after copying files",
    )
    files_dir: Path | None = Field(
        default=None,
        description="Directory whose contents are copied into the node root",
    )

    @field_validator("selector")
    @classmethod
    def validate_selector(cls, v: str) -> str:
        """Reject malformed label expressions at load time."""
        try:
            validate_expression(v)
        except ConfigError as e:
            raise ValueError(str(e)) from e
        return v.strip()

    @field_validator("prepare_script", "install_script", mode="before")
    @classmethod
    def blank_script_is_none(cls, v: str | None) -> str | None:
        """Treat blank scripts as not configured."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("files_dir", mode="before")
    @classmethod
    def blank_dir_is_none(cls, v: object) -> object:
        """Treat a blank bundle path as not configured."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_component(self) -> "SetupItem":
        """Ensure the component name can be stored in the cache."""
        if not self.component:
            raise ValueError("setup item needs an identity or a selector")
        if DELIMITER in self.component:
            raise ValueError(
                f"component name may not contain {DELIMITER!r}: {self.component!r}"
            )
        return self

    @property
    def component(self) -> str:
        """Component identity used in the cache."""
        return self.identity if self.identity else self.selector

    def cache_entry(self) -> CacheEntry:
        """Return the cache entry recorded once this item is installed."""
        return CacheEntry(identity=self.component, version=self.version)

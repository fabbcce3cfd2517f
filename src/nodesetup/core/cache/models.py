"""
Cache entry model.

A cache entry records that a given version of a component is installed on a
node. In memory it is a two-field record compared structurally; the
`identity:version` string form only exists at the persistence boundary.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DELIMITER = ":"

_LINE_BREAKS = ("\r", "\n")


class CacheEntry(BaseModel):
    """
    Installed version of one component on a node.

    Example:
        >>> entry = CacheEntry.parse("jdk:17.0.2")
        >>> entry.identity, entry.version
        ('jdk', '17.0.2')
        >>> entry.serialize()
        'jdk:17.0.2'
    """

    model_config = ConfigDict(frozen=True)

    identity: str = Field(description="Component name")
    version: str = Field(default="", description="Installed version token")

    @field_validator("identity")
    @classmethod
    def validate_identity(cls, v: str) -> str:
        """Reject identities that would not survive serialization."""
        if DELIMITER in v:
            raise ValueError(f"identity may not contain {DELIMITER!r}: {v!r}")
        if any(ch in v for ch in _LINE_BREAKS):
            raise ValueError(f"identity may not contain line breaks: {v!r}")
        return v

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Reject versions containing line breaks."""
        if any(ch in v for ch in _LINE_BREAKS):
            raise ValueError(f"version may not contain line breaks: {v!r}")
        return v

    @classmethod
    def parse(cls, line: str) -> "CacheEntry":
        """
        Parse the serialized `identity:version` form.

        The identity ends at the first delimiter. A line without a delimiter
        is an identity with an empty version.

        Args:
            line: One line of the cache file, without its terminator

        Returns:
            Parsed CacheEntry
        """
        identity, _, version = line.partition(DELIMITER)
        return cls(identity=identity, version=version)

    def serialize(self) -> str:
        """Return the `identity:version` form written to the cache file."""
        return f"{self.identity}{DELIMITER}{self.version}"

    def same_component(self, other: "CacheEntry") -> bool:
        """Check whether both entries describe the same component."""
        return self.identity == other.identity

    def __str__(self) -> str:
        return self.serialize()


class UpsertOutcome(str, Enum):
    """What an upsert did to the index."""

    UNCHANGED = "unchanged"
    REPLACED = "replaced"
    APPENDED = "appended"

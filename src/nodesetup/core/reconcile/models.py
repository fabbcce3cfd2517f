"""
Reconciliation pass models.
"""

from enum import Enum

from pydantic import BaseModel, Field

from nodesetup.core.cache.models import CacheEntry


class PassState(str, Enum):
    """State of a reconciliation pass."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    RUNNING = "running"
    PERSISTING = "persisting"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        """Check if the pass has finished, successfully or not."""
        return self in (PassState.DONE, PassState.ABORTED)


class ReconcileResult(BaseModel):
    """
    Outcome of one reconciliation pass on one node.

    Items are listed by component identity, in configuration order.
    """

    node: str = Field(description="Node name")
    first_contact: bool = Field(
        default=False,
        description="Whether the node had no recorded installations",
    )
    installed: list[str] = Field(
        default_factory=list,
        description="Components deployed during this pass",
    )
    up_to_date: list[str] = Field(
        default_factory=list,
        description="Components already at the desired version",
    )
    skipped: list[str] = Field(
        default_factory=list,
        description="Components whose selector does not match the node",
    )
    entries: list[CacheEntry] = Field(
        default_factory=list,
        description="Cache entries persisted at the end of the pass",
    )

    @property
    def changed(self) -> bool:
        """Check whether anything was deployed."""
        return bool(self.installed)

    def summary(self) -> str:
        """Generate a human-readable summary of the pass."""
        parts = []
        if self.installed:
            parts.append(f"Installed {len(self.installed)} component(s)")
        if self.up_to_date:
            parts.append(f"{len(self.up_to_date)} up to date")
        if self.skipped:
            parts.append(f"{len(self.skipped)} not applicable")
        if not parts:
            return "No setup items configured"
        return ", ".join(parts)

"""
Node context protocol.

A NodeContext is the handle the reconciler holds for one worker node. It
names the node, exposes its labels and root path, materializes the
environment used for scripts, and gives file access relative to the root.

Implementations decide how the node is reached (local filesystem, SSH,
agent channel). The core only relies on this interface.
"""

from typing import Protocol, runtime_checkable

from .models import PlatformFamily


@runtime_checkable
class NodeContext(Protocol):
    """
    Protocol for node handles.

    File operations take paths relative to the node root. Writes must be
    atomic from a later reader's perspective: a reader sees either the old
    or the new contents, never a partial file.
    """

    @property
    def name(self) -> str:
        """Node name used in log messages."""
        ...

    @property
    def root(self) -> str:
        """Root path as seen on the node."""
        ...

    @property
    def labels(self) -> frozenset[str]:
        """Labels assigned to the node."""
        ...

    @property
    def platform(self) -> PlatformFamily:
        """OS family of the node."""
        ...

    @property
    def line_separator(self) -> str:
        """Native line terminator of the node."""
        ...

    def environment(self) -> dict[str, str]:
        """
        Materialize environment variables for scripts run for this node.

        Returns:
            Environment dictionary
        """
        ...

    def child(self, relative: str) -> str:
        """Return the node-side path of a file under the root."""
        ...

    def exists(self, relative: str) -> bool:
        """Check whether a file under the root exists."""
        ...

    def read_text(self, relative: str) -> str:
        """
        Read a UTF-8 file under the root.

        Raises:
            OSError: If the file cannot be read
        """
        ...

    def write_text(self, relative: str, data: str) -> None:
        """
        Atomically replace a UTF-8 file under the root.

        Raises:
            OSError: If the file cannot be written
        """
        ...

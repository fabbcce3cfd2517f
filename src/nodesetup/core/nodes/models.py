"""
Node platform models.

The cache file and scripts live on the target node, whose OS family can
differ from the control side. The family of a node is derived from the shape
of its root path: Unix absolute paths start with "/".
"""

import os
from enum import Enum


class PlatformFamily(str, Enum):
    """OS family of a node or of the control side."""

    UNIX = "unix"
    WINDOWS = "windows"

    @property
    def line_separator(self) -> str:
        """Native line terminator for this family."""
        return "\n" if self is PlatformFamily.UNIX else "\r\n"

    @property
    def shell(self) -> list[str]:
        """Command prefix that runs a script string through the native shell."""
        if self is PlatformFamily.UNIX:
            return ["sh", "-c"]
        return ["cmd", "/c"]

    @classmethod
    def from_root_path(cls, root: str) -> "PlatformFamily":
        """
        Detect the family of a node from its root path.

        Args:
            root: Root path as seen on the node (e.g. "/home/agent", "C:\\agent")

        Returns:
            UNIX for "/"-rooted paths, WINDOWS otherwise
        """
        return cls.UNIX if root.startswith("/") else cls.WINDOWS


def control_platform() -> PlatformFamily:
    """Return the OS family of the machine running node setup."""
    return PlatformFamily.UNIX if os.name == "posix" else PlatformFamily.WINDOWS

"""
Local node implementation.

LocalNode treats a directory on the control machine as the node root. It is
used for agents whose workspace is reachable through the local filesystem
(same host, mounted share) and in tests.
"""

import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from .environment import build_node_environment
from .models import PlatformFamily

logger = logging.getLogger(__name__)


class LocalNode:
    """
    Node whose root is a local directory.

    Example:
        >>> node = LocalNode("agent-1", Path("/srv/agent-1"), labels={"linux", "jdk"})
        >>> node.platform
        <PlatformFamily.UNIX: 'unix'>
        >>> node.child("slave_setup.ini")
        '/srv/agent-1/slave_setup.ini'
    """

    def __init__(
        self,
        name: str,
        root: Path,
        labels: Iterable[str] = (),
        platform: PlatformFamily | None = None,
        env_files: Iterable[Path] = (),
        base_env: dict[str, str] | None = None,
    ) -> None:
        """
        Initialize a local node.

        Args:
            name: Node name
            root: Local directory acting as the node root
            labels: Labels assigned to the node
            platform: OS family override (detected from the root path if None)
            env_files: Dotenv files layered into the script environment
            base_env: Base script environment (defaults to os.environ)
        """
        self._name = name
        self._root = root
        self._labels = frozenset(labels)
        self._platform = platform or PlatformFamily.from_root_path(str(root))
        self._env_files = list(env_files)
        self._base_env = base_env

    @property
    def name(self) -> str:
        return self._name

    @property
    def root(self) -> str:
        return str(self._root)

    @property
    def root_path(self) -> Path:
        """Root as a local Path."""
        return self._root

    @property
    def labels(self) -> frozenset[str]:
        return self._labels

    @property
    def platform(self) -> PlatformFamily:
        return self._platform

    @property
    def line_separator(self) -> str:
        return self._platform.line_separator

    def environment(self) -> dict[str, str]:
        return build_node_environment(
            name=self._name,
            root=self.root,
            labels=self._labels,
            base=self._base_env,
            env_files=self._env_files,
        )

    def child(self, relative: str) -> str:
        return str(self._root / relative)

    def exists(self, relative: str) -> bool:
        return (self._root / relative).exists()

    def read_text(self, relative: str) -> str:
        # Bytes are decoded directly so native line terminators survive
        return (self._root / relative).read_bytes().decode("utf-8")

    def write_text(self, relative: str, data: str) -> None:
        """
        Replace a file atomically.

        Writes to a temporary file in the same directory, then renames it
        over the target so readers never see a partial file.
        """
        target = self._root / relative
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data.encode("utf-8"))
            os.replace(temp_path, target)
        except Exception:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
        logger.debug("Wrote %d bytes to %s", len(data), target)

    def __repr__(self) -> str:
        return f"LocalNode({self._name!r}, {self.root!r})"

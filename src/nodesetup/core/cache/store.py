"""
Setup cache file on a node.

The cache file lives in the node root and records one installed component
per line as `identity:version`. Lines are separated by the node's native
terminator, not the control side's, and the file is UTF-8.

Any of "\\r\\n", "\\n" or "\\r" ends a line on read, so a file written by another
platform (or a mix of them) still loads. Blank lines, including a trailing
one, are ignored. Writes always use the node's native terminator, which
normalizes such files on the next save.
"""

import logging
import re

from pydantic import ValidationError

from nodesetup.core.errors import CacheReadError, CacheWriteError
from nodesetup.core.nodes.provider import NodeContext

from .index import CacheIndex

logger = logging.getLogger(__name__)

CACHE_FILENAME = "slave_setup.ini"

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class CacheStore:
    """
    Reads and writes the setup cache file of one node.

    Example:
        >>> store = CacheStore(node)
        >>> store.create_empty()
        True
        >>> index = store.load_index()
        >>> store.save_index(index)
    """

    def __init__(self, node: NodeContext, filename: str = CACHE_FILENAME) -> None:
        """
        Initialize the store.

        Args:
            node: Node holding the cache file
            filename: Cache filename relative to the node root
        """
        self.node = node
        self.filename = filename

    @property
    def path(self) -> str:
        """Node-side path of the cache file."""
        return self.node.child(self.filename)

    def exists(self) -> bool:
        """Check whether the cache file is present."""
        return self.node.exists(self.filename)

    def create_empty(self) -> bool:
        """
        Create a zero-length cache file if none exists.

        Returns:
            True if the file was created, False if it already existed

        Raises:
            CacheWriteError: If the file cannot be created
        """
        if self.exists():
            return False
        self._write_raw("")
        logger.debug("Created empty setup cache %s", self.path)
        return True

    def read(self) -> list[str]:
        """
        Read the cache file lines.

        Returns:
            Non-blank lines in file order, without terminators

        Raises:
            CacheReadError: If the file cannot be read or decoded
        """
        try:
            raw = self.node.read_text(self.filename)
        except InterruptedError:
            raise
        except OSError as e:
            raise CacheReadError(self.path, str(e)) from e
        except UnicodeDecodeError as e:
            raise CacheReadError(self.path, f"not valid UTF-8 ({e})") from e

        return [line for line in _LINE_BREAK_RE.split(raw) if line]

    def write(self, lines: list[str]) -> None:
        """
        Replace the cache file with the given lines.

        Args:
            lines: Lines to write, without terminators

        Raises:
            CacheWriteError: If the file cannot be written
        """
        self._write_raw(self.node.line_separator.join(lines))

    def _write_raw(self, data: str) -> None:
        try:
            self.node.write_text(self.filename, data)
        except InterruptedError:
            raise
        except OSError as e:
            raise CacheWriteError(self.path, str(e)) from e

    def load_index(self) -> CacheIndex:
        """
        Read the cache file into an index.

        Raises:
            CacheReadError: If the file cannot be read or holds an entry
                that does not parse
        """
        lines = self.read()
        try:
            return CacheIndex.from_lines(lines)
        except ValidationError as e:
            raise CacheReadError(self.path, f"malformed entry: {e}") from e

    def save_index(self, index: CacheIndex) -> None:
        """Write an index back to the cache file."""
        self.write(index.to_lines())

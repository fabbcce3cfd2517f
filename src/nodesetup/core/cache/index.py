"""
In-memory index of installed components.

The index keeps cache entries in file order. Upserting a new version of a
component replaces the old entry in place so the cache file stays stable
across upgrades; a new component is appended at the end.

Entries loaded from an existing file are kept exactly as found, duplicates
included. Only upserts enforce one entry per identity.
"""

from collections.abc import Iterable, Iterator

from .models import CacheEntry, UpsertOutcome


class CacheIndex:
    """
    Ordered collection of cache entries with upsert by identity.

    Lookups use a map from identity to the position of its first entry, so
    upserts do not scan the list.

    Example:
        >>> index = CacheIndex()
        >>> index.upsert(CacheEntry(identity="jdk", version="11"))
        <UpsertOutcome.APPENDED: 'appended'>
        >>> index.upsert(CacheEntry(identity="jdk", version="17"))
        <UpsertOutcome.REPLACED: 'replaced'>
        >>> index.to_lines()
        ['jdk:17']
    """

    def __init__(self, entries: Iterable[CacheEntry] = ()) -> None:
        self._entries: list[CacheEntry] = []
        self._positions: dict[str, int] = {}
        for entry in entries:
            self._append(entry)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "CacheIndex":
        """
        Build an index from raw cache file lines.

        Args:
            lines: Lines in `identity:version` form

        Returns:
            CacheIndex holding one entry per line, in order
        """
        return cls(CacheEntry.parse(line) for line in lines)

    def _append(self, entry: CacheEntry) -> None:
        self._positions.setdefault(entry.identity, len(self._entries))
        self._entries.append(entry)

    def contains(self, entry: CacheEntry) -> bool:
        """Check whether this exact identity and version is recorded."""
        position = self._positions.get(entry.identity)
        if position is None:
            return False
        if self._entries[position] == entry:
            return True
        # Duplicates loaded from disk live after the first position
        return entry in self._entries[position + 1 :]

    def find(self, identity: str) -> CacheEntry | None:
        """Return the recorded entry for a component, if any."""
        position = self._positions.get(identity)
        if position is None:
            return None
        return self._entries[position]

    def upsert(self, entry: CacheEntry) -> UpsertOutcome:
        """
        Record an installed component version.

        If the exact entry is already present nothing changes. Otherwise an
        entry with the same identity is replaced in place, or the entry is
        appended when the component is new.

        Args:
            entry: Entry to record

        Returns:
            What the upsert did
        """
        if self.contains(entry):
            return UpsertOutcome.UNCHANGED

        position = self._positions.get(entry.identity)
        if position is not None:
            self._entries[position] = entry
            return UpsertOutcome.REPLACED

        self._append(entry)
        return UpsertOutcome.APPENDED

    def entries(self) -> list[CacheEntry]:
        """Return a copy of the entries in order."""
        return list(self._entries)

    def to_lines(self) -> list[str]:
        """Return the serialized entries in order."""
        return [entry.serialize() for entry in self._entries]

    def __contains__(self, entry: object) -> bool:
        return isinstance(entry, CacheEntry) and self.contains(entry)

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CacheIndex({self.to_lines()!r})"

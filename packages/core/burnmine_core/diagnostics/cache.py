"""Diagnostics cache keyed by document URI and version.

Entries are valid only for the exact document version they were computed
for. The cache is bounded with LRU eviction.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass

from burnmine_core.diagnostics.models import Diagnostic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Diagnostics computed for one document version."""

    document_version: int
    diagnostics: tuple[Diagnostic, ...]


class DiagnosticsCache:
    """LRU cache of diagnostics per document URI.

    An entry is replaced as a whole on put(), so a reader sees either the old
    or the new entry.
    """

    def __init__(self, max_entries: int = 256):
        """Initialize the cache.

        Args:
            max_entries: Maximum number of documents kept
        """
        self._max_entries = max_entries
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def get(self, uri: str, version: int) -> tuple[Diagnostic, ...] | None:
        """Get cached diagnostics, or None when missing or computed for another version."""
        entry = self._entries.get(uri)
        if entry is None or entry.document_version != version:
            return None
        self._entries.move_to_end(uri)
        return entry.diagnostics

    def put(self, uri: str, version: int, diagnostics: list[Diagnostic]) -> None:
        """Store diagnostics for a document version, replacing any previous entry.

        An entry for a newer version is kept; a late pass for an older version
        is ignored.
        """
        current = self._entries.get(uri)
        if current is not None and current.document_version > version:
            logger.debug(
                "Ignoring diagnostics for %s v%d, v%d is cached",
                uri,
                version,
                current.document_version,
            )
            return

        self._entries[uri] = CacheEntry(version, tuple(diagnostics))
        self._entries.move_to_end(uri)

        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted diagnostics for %s", evicted)

    def invalidate(self, uri: str) -> None:
        self._entries.pop(uri, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, uri: object) -> bool:
        return uri in self._entries

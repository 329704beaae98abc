"""Caller-owned cache for loaded documents."""

from __future__ import annotations

import typing as typ
from pathlib import Path

if typ.TYPE_CHECKING:
    from .models import ContentDocument


class DocumentCache:
    """Memoize parsed documents per file, keyed by resolved path and mtime.

    A cache instance is created by whoever runs a build (or a test) and passed
    to :class:`~docsite.content.loader.ContentLoader` explicitly. Entries go
    stale automatically when a file's modification time changes; callers can
    also drop entries with :meth:`invalidate` or :meth:`clear`.
    """

    def __init__(self) -> None:
        self._entries: dict[Path, tuple[int, ContentDocument]] = {}

    def get(self, path: Path) -> ContentDocument | None:
        """Return the cached document for ``path`` if it is still current."""
        key = path.resolve()
        entry = self._entries.get(key)
        if entry is None:
            return None
        mtime, document = entry
        try:
            current = key.stat().st_mtime_ns
        except OSError:
            self._entries.pop(key, None)
            return None
        if current != mtime:
            self._entries.pop(key, None)
            return None
        return document

    def put(self, path: Path, document: ContentDocument) -> None:
        """Store ``document`` for ``path`` stamped with the file's mtime."""
        key = path.resolve()
        try:
            mtime = key.stat().st_mtime_ns
        except OSError:
            return
        self._entries[key] = (mtime, document)

    def invalidate(self, path: Path) -> bool:
        """Drop the entry for ``path``; return True when one was present."""
        return self._entries.pop(path.resolve(), None) is not None

    def clear(self) -> None:
        """Drop every cached document."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, Path) and path.resolve() in self._entries


__all__ = ["DocumentCache"]

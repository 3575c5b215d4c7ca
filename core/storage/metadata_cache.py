"""In-memory TTL cache of file metadata keyed by absolute path."""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from threading import Lock

from core.schemas import FileMetadata


class MetadataCache:
    """Thread-safe TTL cache with a maximum entry count.

    Entries are kept in insertion order; re-setting a key moves it to the
    end, so when full the least-recently-set entry is evicted. A stale entry
    (file changed after caching) is served until its TTL runs out.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_entries: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._lock = Lock()
        self._entries: OrderedDict[str, tuple[FileMetadata, float]] = OrderedDict()

    def get(self, path: str) -> FileMetadata | None:
        """Return cached metadata, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(path)
            if entry is None:
                return None
            metadata, stored_at = entry
            if self._clock() - stored_at >= self._ttl:
                del self._entries[path]
                return None
            return metadata

    def set(self, path: str, metadata: FileMetadata) -> None:
        """Store metadata, evicting expired then oldest entries when full."""
        with self._lock:
            now = self._clock()
            self._entries.pop(path, None)
            if len(self._entries) >= self._max_entries:
                self._evict_expired(now)
            while len(self._entries) >= self._max_entries:
                self._entries.popitem(last=False)
            self._entries[path] = (metadata, now)

    def delete(self, path: str) -> None:
        with self._lock:
            self._entries.pop(path, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _evict_expired(self, now: float) -> None:
        expired_keys = [
            k for k, (_, ts) in self._entries.items() if now - ts >= self._ttl
        ]
        for k in expired_keys:
            del self._entries[k]

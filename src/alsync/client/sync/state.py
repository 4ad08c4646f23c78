"""In-memory record of the last uploaded content per file."""

from __future__ import annotations

import threading
from pathlib import Path


class SyncState:
    """Maps file paths to the hash of their last uploaded content.

    Lives for the process lifetime only. Thread-safe: watcher and timer
    callbacks may touch it concurrently.
    """

    def __init__(self) -> None:
        self._hashes: dict[Path, str] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._hashes)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._hashes

    def get_hash(self, path: Path) -> str | None:
        """Get the last recorded hash for a file."""
        with self._lock:
            return self._hashes.get(path)

    def set_hash(self, path: Path, content_hash: str) -> None:
        """Record the hash of content that is now on the server."""
        with self._lock:
            self._hashes[path] = content_hash

    def is_unchanged(self, path: Path, content_hash: str) -> bool:
        """Check whether content_hash matches the last recorded hash."""
        with self._lock:
            return self._hashes.get(path) == content_hash

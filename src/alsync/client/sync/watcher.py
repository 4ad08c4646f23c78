"""File system watcher for mapped source files.

This module provides:
- MappingEventHandler: Routes watchdog events for mapped files to a debouncer
- MappingWatcher: Watches the directories holding mapped files using watchdog
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from watchdog.events import (
    DirCreatedEvent,
    DirModifiedEvent,
    DirMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from alsync.client.sync.debounce import Debouncer
from alsync.core.config import DEFAULT_DEBOUNCE_MS, Mapping

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)


def _event_path(raw: str | bytes) -> Path:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return Path(os.path.realpath(raw))


class MappingEventHandler(FileSystemEventHandler):
    """Event handler that debounces changes to mapped files."""

    def __init__(
        self,
        mappings: list[Mapping],
        debouncer: Debouncer,
    ) -> None:
        """Initialize the handler.

        Args:
            mappings: Mappings whose files should trigger a sync.
            debouncer: Debouncer receiving (path, mapping) schedules.
        """
        super().__init__()
        self._by_file = {_event_path(str(mapping.file)): mapping for mapping in mappings}
        self._debouncer = debouncer

    def _handle_path(self, raw: str | bytes) -> None:
        path = _event_path(raw)
        mapping = self._by_file.get(path)
        if mapping is None:
            return
        logger.debug(f"Change detected: {path}")
        self._debouncer.schedule(path, mapping)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle created event."""
        if not isinstance(event, DirCreatedEvent):
            self._handle_path(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle modified event."""
        if not isinstance(event, DirModifiedEvent):
            self._handle_path(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle moved event (editors that save via rename)."""
        if not isinstance(event, DirMovedEvent):
            self._handle_path(event.dest_path)


class MappingWatcher:
    """Watches mapped files and calls on_change once per settled burst."""

    def __init__(
        self,
        mappings: list[Mapping],
        on_change: Callable[[Mapping], Any],
        debounce_s: float = DEFAULT_DEBOUNCE_MS / 1000.0,
    ) -> None:
        """Initialize the watcher.

        Args:
            mappings: Mappings to watch.
            on_change: Called with the mapping after its file settles.
            debounce_s: Quiet period in seconds before on_change fires.
        """
        self._mappings = list(mappings)
        self._debouncer = Debouncer(on_change, debounce_s)
        self._handler = MappingEventHandler(self._mappings, self._debouncer)
        self._observer: BaseObserver = Observer()
        self._running = False

    @property
    def directories(self) -> list[Path]:
        """Directories that hold mapped files."""
        return sorted({mapping.file.parent for mapping in self._mappings})

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    def watch_roots(self) -> dict[Path, bool]:
        """Directories to observe, each mapped to whether it is watched recursively.

        A directory that does not exist yet is replaced by its nearest
        existing ancestor, watched recursively so the mapped file is picked
        up once the missing directories are created.
        """
        roots: dict[Path, bool] = {}
        for directory in self.directories:
            root = directory
            while not root.is_dir() and root != root.parent:
                root = root.parent
            recursive = root != directory
            if recursive:
                logger.warning(
                    f"{directory} does not exist yet, watching {root} until it appears"
                )
            roots[root] = roots.get(root, False) or recursive
        return roots

    def start(self) -> None:
        """Start watching for changes."""
        if self._running:
            return

        for root, recursive in self.watch_roots().items():
            self._observer.schedule(self._handler, str(root), recursive=recursive)

        self._observer.start()
        self._running = True

        for mapping in self._mappings:
            logger.info(f' • {mapping.file}  →  name "{mapping.name}", slot {mapping.slot}')

    def stop(self) -> None:
        """Stop watching and drop pending debounced calls."""
        if not self._running:
            return

        self._debouncer.cancel()
        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._running = False

    def __enter__(self) -> MappingWatcher:
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.stop()

"""Sync engine: uploads changed files to their code slots.

This module provides:
- Syncer: Per-mapping sync (hash check, upload with retry, verify)
- run_watch: Continuous mode, preloads hashes then watches for changes
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from alsync.client.sync.retry import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_INITIAL_BACKOFF,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_MAX_RETRIES,
    retry_with_backoff,
)
from alsync.client.sync.state import SyncState
from alsync.client.sync.types import SyncResult, SyncStatus, VerifyStatus
from alsync.client.sync.watcher import MappingWatcher
from alsync.core.hashing import compute_content_hash

if TYPE_CHECKING:
    from alsync.client.api import HTTPClient
    from alsync.core.config import Mapping, SyncConfig

logger = logging.getLogger(__name__)

SAMPLE_LENGTH = 120


def read_source(path: Path) -> str:
    """Read a mapped source file as text."""
    return path.read_text(encoding="utf-8", errors="replace")


class Syncer:
    """Uploads mapped files whose content changed since the last upload.

    Work on a given file is serialized: a change arriving while that file
    is uploading waits, then re-reads the file and compares hashes again.
    """

    def __init__(
        self,
        client: HTTPClient,
        state: SyncState | None = None,
        verify: bool = True,
        max_retries: int = DEFAULT_MAX_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the syncer.

        Args:
            client: HTTP client for the code-storage API.
            state: Last uploaded hash per file (a fresh one if omitted).
            verify: Whether to read the slot back after each upload.
            max_retries: Retries after the first failed upload attempt.
            sleep: Function used to wait between retries.
        """
        self._client = client
        self._state = state if state is not None else SyncState()
        self._verify = verify
        self._max_retries = max_retries
        self._sleep = sleep
        self._file_locks: dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def state(self) -> SyncState:
        """Get the sync state."""
        return self._state

    def _file_lock(self, path: Path) -> threading.Lock:
        with self._locks_guard:
            lock = self._file_locks.get(path)
            if lock is None:
                lock = threading.Lock()
                self._file_locks[path] = lock
            return lock

    def preload(self, mappings: list[Mapping]) -> int:
        """Record current hashes so unchanged files are not uploaded on startup.

        Returns:
            Number of files hashed.
        """
        count = 0
        for mapping in mappings:
            try:
                source = read_source(mapping.file)
            except (OSError, ValueError):
                logger.debug(f"Not preloading {mapping.file}: file not readable yet")
                continue
            self._state.set_hash(mapping.file, compute_content_hash(source))
            count += 1
        return count

    def sync_mapping(self, mapping: Mapping, force: bool = False) -> SyncResult:
        """Upload a mapping's file if it changed, then verify.

        Args:
            mapping: The mapping to sync.
            force: Upload even if the content hash is unchanged.

        Returns:
            SyncResult describing what happened.

        Raises:
            OSError: If the file cannot be read.
            APIError: If the upload still fails after all retries.
        """
        with self._file_lock(mapping.file):
            source = read_source(mapping.file)
            content_hash = compute_content_hash(source)

            if not force and self._state.is_unchanged(mapping.file, content_hash):
                logger.debug(f"No change in {mapping.file}")
                return SyncResult(mapping, SyncStatus.UNCHANGED, content_hash)

            attempts = 0

            def upload_and_verify() -> VerifyStatus:
                nonlocal attempts
                attempts += 1
                self._client.save_code(mapping.name, mapping.slot, source)
                self._state.set_hash(mapping.file, content_hash)
                logger.info(
                    f'Uploaded "{mapping.name}" to slot {mapping.slot} '
                    f"({mapping.file.name})"
                )
                return self._verify_upload(mapping, source)

            def on_failed_attempt(attempt: int, error: Exception) -> None:
                logger.warning(
                    f"Retry {attempt}/{self._max_retries} for {mapping.name} "
                    f"(slot {mapping.slot}): {error}"
                )

            verify_status = retry_with_backoff(
                upload_and_verify,
                max_retries=self._max_retries,
                initial_backoff=DEFAULT_INITIAL_BACKOFF,
                max_backoff=DEFAULT_MAX_BACKOFF,
                backoff_multiplier=DEFAULT_BACKOFF_MULTIPLIER,
                on_failed_attempt=on_failed_attempt,
                sleep=self._sleep,
            )

            return SyncResult(
                mapping,
                SyncStatus.UPLOADED,
                content_hash,
                verify=verify_status,
                attempts=attempts,
            )

    def _verify_upload(self, mapping: Mapping, source: str) -> VerifyStatus:
        """Compare the server's copy of a slot with what was uploaded."""
        if not self._verify:
            return VerifyStatus.SKIPPED

        server_code = self._client.load_code(mapping.slot)
        if server_code is None:
            logger.info("   (Verification skipped or unavailable)")
            return VerifyStatus.UNAVAILABLE

        if server_code == source:
            logger.info("   Verify: match")
            return VerifyStatus.MATCH

        sample = server_code[:SAMPLE_LENGTH]
        if len(server_code) > SAMPLE_LENGTH:
            sample += "…"
        logger.info("   Verify: differs")
        logger.info(f"   Server sample: {sample}")
        return VerifyStatus.DIFFERS

    def sync_changed(self, mapping: Mapping) -> SyncResult | None:
        """Sync a mapping after a file event, logging instead of raising.

        Returns:
            SyncResult, or None if the sync failed.
        """
        try:
            return self.sync_mapping(mapping)
        except Exception as e:
            logger.error(f"Upload failed for {mapping.name}: {e}")
            return None

    def sync_all(self, mappings: list[Mapping], force: bool = True) -> list[SyncResult]:
        """Sync every mapping once; one failure does not stop the batch.

        Returns:
            Results of the mappings that synced successfully.
        """
        results: list[SyncResult] = []
        for mapping in mappings:
            try:
                results.append(self.sync_mapping(mapping, force=force))
            except Exception as e:
                logger.error(f"Upload failed for {mapping.name}: {e}")
        return results


def run_watch(
    syncer: Syncer,
    config: SyncConfig,
    stop_event: threading.Event | None = None,
) -> None:
    """Watch mapped files and upload them as they change.

    Blocks until interrupted with Ctrl+C or until stop_event is set.

    Args:
        syncer: Syncer performing the uploads.
        config: Sync configuration (mappings and debounce window).
        stop_event: Optional event that ends the loop when set.
    """
    preloaded = syncer.preload(config.mappings)
    logger.debug(f"Preloaded hashes for {preloaded} file(s)")

    stop = stop_event or threading.Event()
    with MappingWatcher(config.mappings, syncer.sync_changed, config.debounce_s):
        try:
            while not stop.wait(1.0):
                pass
        except KeyboardInterrupt:
            logger.info("Stopping...")

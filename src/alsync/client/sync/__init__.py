"""Sync operations for pushing local files into code slots.

Architecture:
    MappingWatcher → Debouncer → Syncer → HTTPClient

Components:
- **MappingWatcher**: Watches mapped files with watchdog
- **Debouncer**: Collapses event bursts into one call per settle window
- **Syncer**: Hash check, upload with retry, best-effort verification
- **SyncState**: Last uploaded hash per file, in memory
- **retry_with_backoff**: Bounded exponential backoff

All public symbols are re-exported here.
"""

from alsync.client.sync.debounce import Debouncer, debounce
from alsync.client.sync.engine import Syncer, run_watch
from alsync.client.sync.retry import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_INITIAL_BACKOFF,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_MAX_RETRIES,
    backoff_delays,
    retry_with_backoff,
)
from alsync.client.sync.state import SyncState
from alsync.client.sync.types import SyncResult, SyncStatus, VerifyStatus
from alsync.client.sync.watcher import MappingEventHandler, MappingWatcher

__all__ = [
    # Debounce
    "Debouncer",
    "debounce",
    # Engine
    "Syncer",
    "run_watch",
    # Retry
    "DEFAULT_BACKOFF_MULTIPLIER",
    "DEFAULT_INITIAL_BACKOFF",
    "DEFAULT_MAX_BACKOFF",
    "DEFAULT_MAX_RETRIES",
    "backoff_delays",
    "retry_with_backoff",
    # State
    "SyncState",
    # Types
    "SyncResult",
    "SyncStatus",
    "VerifyStatus",
    # Watcher
    "MappingEventHandler",
    "MappingWatcher",
]

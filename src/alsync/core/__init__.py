"""Core module - Configuration and content hashing."""

from alsync.core.config import (
    DEFAULT_BASE_URL,
    DEFAULT_CONFIG_FILE,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_SAVE_PATH,
    DEFAULT_TIMEOUT,
    DEFAULT_VERIFY_PATH,
    ConfigError,
    Mapping,
    ServerConfig,
    SyncConfig,
    load_sync_config,
)
from alsync.core.hashing import compute_content_hash

__all__ = [
    # Config
    "DEFAULT_BASE_URL",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_SAVE_PATH",
    "DEFAULT_TIMEOUT",
    "DEFAULT_VERIFY_PATH",
    "ConfigError",
    "Mapping",
    "ServerConfig",
    "SyncConfig",
    "load_sync_config",
    # Hashing
    "compute_content_hash",
]

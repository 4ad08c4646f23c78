"""Configuration classes for alsync.

This module defines:
- ServerConfig: Connection settings for the code-storage API (from environment)
- Mapping: A local file bound to a named remote code slot
- SyncConfig: Debounce window and mappings (from al-sync.config.json)
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_BASE_URL = "https://adventure.land"
DEFAULT_SAVE_PATH = "/api/save_code"
DEFAULT_VERIFY_PATH = "/api/load_code"
DEFAULT_TIMEOUT = 15.0  # seconds
DEFAULT_DEBOUNCE_MS = 150
DEFAULT_CONFIG_FILE = "al-sync.config.json"


class ConfigError(RuntimeError):
    """Raised when the environment or configuration file is missing or invalid."""


def _normalize_path(path: str) -> str:
    """Ensure an API path starts with exactly one slash."""
    return "/" + path.lstrip("/")


@dataclass
class ServerConfig:
    """Configuration for connecting to the code-storage API.

    Attributes:
        auth: Value of the site's "auth" session cookie.
        base_url: Base URL of the server (trailing slashes stripped).
        save_path: Path of the save endpoint.
        verify_path: Path of the load endpoint used for verification.
        timeout: Request timeout in seconds.
    """

    auth: str
    base_url: str = DEFAULT_BASE_URL
    save_path: str = DEFAULT_SAVE_PATH
    verify_path: str = DEFAULT_VERIFY_PATH
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        """Normalize URL and endpoint paths."""
        self.base_url = self.base_url.rstrip("/")
        self.save_path = _normalize_path(self.save_path)
        self.verify_path = _normalize_path(self.verify_path)

    @property
    def save_url(self) -> str:
        """Full URL of the save endpoint."""
        return f"{self.base_url}{self.save_path}"

    @property
    def verify_url(self) -> str:
        """Full URL of the load endpoint."""
        return f"{self.base_url}{self.verify_path}"

    @classmethod
    def from_env(cls, environ: MappingABC[str, str] | None = None) -> ServerConfig:
        """Build the server configuration from AL_* environment variables.

        Args:
            environ: Environment mapping (defaults to os.environ).

        Returns:
            Normalized server configuration.

        Raises:
            ConfigError: If AL_AUTH is missing or AL_TIMEOUT is not numeric.
        """
        env = os.environ if environ is None else environ

        auth = (env.get("AL_AUTH") or "").strip()
        if not auth:
            raise ConfigError(
                'AL_AUTH missing. Put your auth cookie value in .env '
                '(from the adventure.land "auth" cookie).'
            )

        timeout_raw = env.get("AL_TIMEOUT")
        timeout = DEFAULT_TIMEOUT
        if timeout_raw:
            try:
                timeout = float(timeout_raw)
            except ValueError as e:
                raise ConfigError(f"AL_TIMEOUT must be numeric, got {timeout_raw!r}") from e
            if timeout <= 0:
                raise ConfigError("AL_TIMEOUT must be positive.")

        return cls(
            auth=auth,
            base_url=env.get("AL_BASE") or DEFAULT_BASE_URL,
            save_path=env.get("AL_SAVE_PATH") or DEFAULT_SAVE_PATH,
            verify_path=env.get("AL_VERIFY_PATH") or DEFAULT_VERIFY_PATH,
            timeout=timeout,
        )


@dataclass(frozen=True)
class Mapping:
    """A local file bound to a named remote code slot."""

    file: Path
    name: str
    slot: int


@dataclass
class SyncConfig:
    """Contents of the sync configuration file."""

    mappings: list[Mapping]
    debounce_ms: int = DEFAULT_DEBOUNCE_MS

    @property
    def debounce_s(self) -> float:
        """Debounce window in seconds."""
        return self.debounce_ms / 1000.0


def _parse_slot(value: Any, index: int) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"mappings[{index}].slot must be a number, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ConfigError(f"mappings[{index}].slot must be an integer, got {value!r}")


def _parse_mapping(raw: Any, index: int, root: Path) -> Mapping:
    if not isinstance(raw, dict):
        raise ConfigError(f"mappings[{index}] must be an object.")

    for key in ("file", "name", "slot"):
        if raw.get(key) is None:
            raise ConfigError(f"mappings[{index}] is missing '{key}'.")

    file_raw = str(raw["file"]).strip()
    if not file_raw:
        raise ConfigError(f"mappings[{index}].file must not be empty.")

    return Mapping(
        file=Path(os.path.abspath(root / Path(file_raw).expanduser())),
        name=str(raw["name"]),
        slot=_parse_slot(raw["slot"], index),
    )


def _parse_debounce(value: Any) -> int:
    if value is None:
        return DEFAULT_DEBOUNCE_MS
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ConfigError(f"debounceMs must be numeric, got {value!r}")
    return max(0, int(value))


def load_sync_config(path: Path, root: Path | None = None) -> SyncConfig:
    """Load and validate the sync configuration file.

    Args:
        path: Path to the JSON configuration file.
        root: Directory that mapping file paths are relative to
            (defaults to the current working directory).

    Returns:
        Validated configuration with absolute mapping paths.

    Raises:
        ConfigError: If the file is unreadable, malformed, or has no mappings.
    """
    root = Path.cwd() if root is None else root

    try:
        raw = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    try:
        contents = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(contents, dict):
        raise ConfigError(f"{path} must contain a JSON object.")

    mappings_raw = contents.get("mappings")
    if not isinstance(mappings_raw, list) or not mappings_raw:
        raise ConfigError(f"No mappings defined in {path.name}")

    return SyncConfig(
        mappings=[
            _parse_mapping(item, index, root) for index, item in enumerate(mappings_raw)
        ],
        debounce_ms=_parse_debounce(contents.get("debounceMs")),
    )

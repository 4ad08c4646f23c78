"""Types for sync results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from alsync.core.config import Mapping


class SyncStatus(str, Enum):
    """Outcome of syncing one mapping."""

    UPLOADED = "uploaded"
    UNCHANGED = "unchanged"


class VerifyStatus(str, Enum):
    """Outcome of comparing the server copy with the local file."""

    MATCH = "match"
    DIFFERS = "differs"
    UNAVAILABLE = "unavailable"  # Server copy could not be read
    SKIPPED = "skipped"  # Verification disabled


@dataclass
class SyncResult:
    """Result of syncing one mapping."""

    mapping: Mapping
    status: SyncStatus
    content_hash: str
    verify: VerifyStatus | None = None
    attempts: int = 0

    @property
    def uploaded(self) -> bool:
        """Check if the file was uploaded."""
        return self.status == SyncStatus.UPLOADED

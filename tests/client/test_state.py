"""Tests for in-memory sync state."""

from pathlib import Path

from alsync.client.sync.state import SyncState


class TestSyncState:
    """Tests for SyncState class."""

    def test_starts_empty(self) -> None:
        """A new state should know no files."""
        state = SyncState()
        assert len(state) == 0
        assert state.get_hash(Path("/code/bot.js")) is None

    def test_set_and_get(self) -> None:
        """Should remember the last recorded hash."""
        state = SyncState()
        path = Path("/code/bot.js")

        state.set_hash(path, "aaa")
        state.set_hash(path, "bbb")

        assert state.get_hash(path) == "bbb"
        assert path in state
        assert len(state) == 1

    def test_is_unchanged(self) -> None:
        """Should compare against the recorded hash."""
        state = SyncState()
        path = Path("/code/bot.js")

        assert state.is_unchanged(path, "aaa") is False
        state.set_hash(path, "aaa")
        assert state.is_unchanged(path, "aaa") is True
        assert state.is_unchanged(path, "bbb") is False

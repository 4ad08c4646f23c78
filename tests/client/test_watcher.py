"""Tests for the mapped-file watcher."""

from __future__ import annotations

import os
import threading
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from alsync.client.sync.debounce import Debouncer
from alsync.client.sync.watcher import MappingEventHandler, MappingWatcher
from alsync.core.config import Mapping


class ChangeRecorder:
    """Collects on_change calls from the watcher."""

    def __init__(self) -> None:
        self.mappings: list[Mapping] = []
        self.changed = threading.Event()

    def __call__(self, mapping: Mapping) -> None:
        self.mappings.append(mapping)
        self.changed.set()


@pytest.fixture
def watch_dir(tmp_path: Path) -> Path:
    """Create a watch directory."""
    watch = tmp_path / "scripts"
    watch.mkdir()
    return watch


@pytest.fixture
def mapping(watch_dir: Path) -> Mapping:
    """Mapping for an existing script."""
    path = watch_dir / "bot.js"
    path.write_text("// v1", encoding="utf-8")
    return Mapping(file=path, name="main", slot=0)


class TestMappingEventHandler:
    """Tests for MappingEventHandler routing."""

    @pytest.fixture
    def debouncer(self) -> MagicMock:
        """Debouncer stand-in recording schedules."""
        return MagicMock(spec=Debouncer)

    def test_modified_mapped_file(self, mapping: Mapping, debouncer: MagicMock) -> None:
        """Should schedule a sync keyed by the mapped path."""
        handler = MappingEventHandler([mapping], debouncer)

        handler.on_modified(FileModifiedEvent(str(mapping.file)))

        debouncer.schedule.assert_called_once()
        _, scheduled = debouncer.schedule.call_args.args
        assert scheduled is mapping

    def test_created_mapped_file(self, mapping: Mapping, debouncer: MagicMock) -> None:
        """Should treat a created file like a change."""
        handler = MappingEventHandler([mapping], debouncer)

        handler.on_created(FileCreatedEvent(str(mapping.file)))

        debouncer.schedule.assert_called_once()

    def test_moved_onto_mapped_file(self, mapping: Mapping, debouncer: MagicMock) -> None:
        """Should follow the destination of a rename (atomic editor saves)."""
        handler = MappingEventHandler([mapping], debouncer)
        temp = mapping.file.with_name("bot.js.swp")

        handler.on_moved(FileMovedEvent(str(temp), str(mapping.file)))

        debouncer.schedule.assert_called_once()

    def test_unmapped_file_ignored(self, mapping: Mapping, debouncer: MagicMock) -> None:
        """Should ignore other files in the same directory."""
        handler = MappingEventHandler([mapping], debouncer)

        handler.on_modified(FileModifiedEvent(str(mapping.file.with_name("notes.txt"))))

        debouncer.schedule.assert_not_called()

    def test_directory_event_ignored(self, mapping: Mapping, debouncer: MagicMock) -> None:
        """Should ignore directory events."""
        handler = MappingEventHandler([mapping], debouncer)

        handler.on_modified(DirModifiedEvent(str(mapping.file.parent)))

        debouncer.schedule.assert_not_called()

    def test_bytes_path(self, mapping: Mapping, debouncer: MagicMock) -> None:
        """Should accept byte paths from the observer."""
        handler = MappingEventHandler([mapping], debouncer)

        handler.on_modified(FileModifiedEvent(os.fsencode(mapping.file)))

        debouncer.schedule.assert_called_once()


class TestMappingWatcher:
    """Tests for MappingWatcher class."""

    def test_directories_deduplicated(self, watch_dir: Path, mapping: Mapping) -> None:
        """Should watch each parent directory once."""
        other = Mapping(file=watch_dir / "util.js", name="util", slot=1)
        watcher = MappingWatcher([mapping, other], ChangeRecorder())

        assert watcher.directories == [watch_dir]

    def test_start_stop(self, mapping: Mapping) -> None:
        """Should start and stop cleanly."""
        watcher = MappingWatcher([mapping], ChangeRecorder())

        watcher.start()
        assert watcher.is_running is True

        watcher.stop()
        assert watcher.is_running is False

    def test_context_manager(self, mapping: Mapping) -> None:
        """Should work as context manager."""
        with MappingWatcher([mapping], ChangeRecorder()) as watcher:
            assert watcher.is_running is True
        assert watcher.is_running is False

    def test_missing_directory(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Should warn and fall back to the nearest existing ancestor."""
        mapping = Mapping(file=tmp_path / "nowhere" / "deeper" / "bot.js", name="main", slot=0)

        with caplog.at_level("WARNING", logger="alsync"):
            with MappingWatcher([mapping], ChangeRecorder()) as watcher:
                assert watcher.is_running is True
                assert watcher.watch_roots() == {tmp_path: True}

        assert "does not exist yet" in caplog.text

    def test_watch_roots_merge(self, watch_dir: Path, mapping: Mapping) -> None:
        """An existing directory doubling as a fallback should be watched recursively."""
        later = Mapping(file=watch_dir / "later" / "bot.js", name="later", slot=1)
        watcher = MappingWatcher([mapping, later], ChangeRecorder())

        assert watcher.watch_roots() == {watch_dir: True}

    def test_detects_file_in_created_directory(self, tmp_path: Path) -> None:
        """Should pick up a mapped file whose directory is created after start."""
        mapping = Mapping(file=tmp_path / "later" / "bot.js", name="main", slot=0)
        recorder = ChangeRecorder()

        with MappingWatcher([mapping], recorder, debounce_s=0.05):
            time.sleep(0.1)
            mapping.file.parent.mkdir()
            time.sleep(0.2)  # Let the observer add a watch on the new directory
            mapping.file.write_text("// v1", encoding="utf-8")

            assert recorder.changed.wait(timeout=3.0)

        assert recorder.mappings[0] is mapping

    def test_detects_modification(self, mapping: Mapping) -> None:
        """Should call on_change after the mapped file is written."""
        recorder = ChangeRecorder()

        with MappingWatcher([mapping], recorder, debounce_s=0.05):
            time.sleep(0.1)  # Wait for watcher to initialize
            mapping.file.write_text("// v2", encoding="utf-8")

            assert recorder.changed.wait(timeout=3.0)

        assert recorder.mappings[0] is mapping

    def test_detects_atomic_replace(self, mapping: Mapping) -> None:
        """Should notice a file replaced via rename."""
        recorder = ChangeRecorder()

        with MappingWatcher([mapping], recorder, debounce_s=0.05):
            time.sleep(0.1)
            temp = mapping.file.with_name(".bot.js.tmp")
            temp.write_text("// v2", encoding="utf-8")
            os.replace(temp, mapping.file)

            assert recorder.changed.wait(timeout=3.0)

        assert recorder.mappings[0] is mapping

    def test_ignores_other_files(self, watch_dir: Path, mapping: Mapping) -> None:
        """Should not react to unmapped files."""
        recorder = ChangeRecorder()

        with MappingWatcher([mapping], recorder, debounce_s=0.05):
            time.sleep(0.1)
            (watch_dir / "notes.txt").write_text("hello", encoding="utf-8")
            time.sleep(0.5)

        assert recorder.mappings == []

    def test_debouncing(self, mapping: Mapping) -> None:
        """Should coalesce rapid writes to the same file."""
        recorder = ChangeRecorder()

        with MappingWatcher([mapping], recorder, debounce_s=0.25):
            time.sleep(0.1)

            for i in range(5):
                mapping.file.write_text(f"// version {i}", encoding="utf-8")
                time.sleep(0.02)

            time.sleep(1.0)

        # Debouncing may still split a burst in two under load
        assert 1 <= len(recorder.mappings) <= 2

    def test_stop_cancels_pending(self, mapping: Mapping) -> None:
        """Stopping should drop a change that has not settled yet."""
        recorder = ChangeRecorder()

        with MappingWatcher([mapping], recorder, debounce_s=2.0):
            time.sleep(0.1)
            mapping.file.write_text("// v2", encoding="utf-8")
            time.sleep(0.3)

        time.sleep(0.2)
        assert recorder.mappings == []

"""
Tests for debounced project change notification.
"""

from pathlib import Path
from types import SimpleNamespace

import pytest

from code_skeleton.core.errors import ScanError
from code_skeleton.core.watcher import ChangeDebouncer, ChangeHandler, ProjectWatcher


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def _event(event_type: str, path: Path):
    return SimpleNamespace(event_type=event_type, src_path=str(path))


class TestChangeDebouncer:
    """Test leading-edge burst collapsing."""

    def test_first_event_fires_and_burst_is_dropped(self):
        clock = FakeClock()
        debouncer = ChangeDebouncer(0.5, clock=clock)

        assert debouncer.should_emit()
        clock.now += 0.1
        assert not debouncer.should_emit()
        clock.now += 0.3
        assert not debouncer.should_emit()

    def test_fires_again_after_interval(self):
        clock = FakeClock()
        debouncer = ChangeDebouncer(0.5, clock=clock)

        assert debouncer.should_emit()
        clock.now += 0.6
        assert debouncer.should_emit()


class TestChangeHandler:
    """Test event filtering ahead of the callback."""

    def _handler(self, root: Path, calls: list, interval: float = 0.0):
        return ChangeHandler(root, lambda: calls.append(1), ChangeDebouncer(interval))

    def test_modification_triggers_callback(self, temp_dir: Path):
        calls = []
        handler = self._handler(temp_dir, calls)
        handler.on_any_event(_event("modified", temp_dir / "src" / "app.py"))

        assert calls == [1]

    def test_access_events_are_ignored(self, temp_dir: Path):
        calls = []
        handler = self._handler(temp_dir, calls)
        handler.on_any_event(_event("opened", temp_dir / "app.py"))
        handler.on_any_event(_event("closed_no_write", temp_dir / "app.py"))

        assert calls == []

    def test_ignored_directories_are_filtered(self, temp_dir: Path):
        calls = []
        handler = self._handler(temp_dir, calls)
        handler.on_any_event(_event("created", temp_dir / "node_modules" / "react" / "index.js"))
        handler.on_any_event(_event("modified", temp_dir / ".git" / "index"))

        assert calls == []

    def test_burst_produces_single_callback(self, temp_dir: Path):
        calls = []
        handler = self._handler(temp_dir, calls, interval=60.0)
        for name in ("a.py", "b.py", "c.py"):
            handler.on_any_event(_event("created", temp_dir / name))

        assert calls == [1]

    def test_callback_errors_do_not_propagate(self, temp_dir: Path):
        def fail():
            raise RuntimeError("consumer failed")

        handler = ChangeHandler(temp_dir, fail, ChangeDebouncer(0.0))
        handler.on_any_event(_event("deleted", temp_dir / "a.py"))


class TestProjectWatcher:
    """Test watcher lifecycle."""

    def test_missing_root(self, temp_dir: Path):
        watcher = ProjectWatcher(temp_dir / "missing", lambda: None)

        with pytest.raises(ScanError, match="Path does not exist"):
            watcher.start()

    def test_start_and_stop(self, sample_project: Path):
        with ProjectWatcher(sample_project, lambda: None) as watcher:
            assert watcher.observer is not None
            assert sample_project.resolve() in watcher.watched
            assert not any("node_modules" in d.parts for d in watcher.watched)

        assert watcher.observer is None

    def test_stop_without_start(self, temp_dir: Path):
        ProjectWatcher(temp_dir, lambda: None).stop()

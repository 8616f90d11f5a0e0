"""
Project change notification built on watchdog.

Any file-system event under a watched, non-ignored directory produces one
payload-less "changed" callback. Bursts collapse: after a callback fires,
further events are dropped until the debounce interval has passed. Consumers
are expected to re-scan.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional

import watchdog.observers
from watchdog.events import FileSystemEvent, FileSystemEventHandler

from .config import SkeletonConfig
from .errors import ScanError
from .scanner import is_ignored_dir, iter_watch_directories

# Access-only notifications never change content.
IGNORED_EVENT_TYPES = frozenset({"opened", "closed", "closed_no_write"})


class ChangeDebouncer:
    """Leading-edge throttle: the first event fires, the rest of the burst is dropped."""

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic):
        self.interval = interval
        self.clock = clock
        self._last_emit: Optional[float] = None
        self._lock = threading.Lock()

    def should_emit(self) -> bool:
        with self._lock:
            now = self.clock()
            if self._last_emit is not None and now - self._last_emit < self.interval:
                return False
            self._last_emit = now
            return True


class ChangeHandler(FileSystemEventHandler):
    def __init__(self, root: Path, on_change: Callable[[], None], debouncer: ChangeDebouncer,
                 config: Optional[SkeletonConfig] = None):
        self.root = root
        self.on_change = on_change
        self.debouncer = debouncer
        config = config or SkeletonConfig()
        self.ignored_dir_names = {name.lower() for name in config.ignored_dir_names}

    def _is_ignored_path(self, src_path: str) -> bool:
        path = Path(src_path)
        try:
            parts = path.relative_to(self.root).parts
        except ValueError:
            parts = path.parts
        return any(is_ignored_dir(part, path, self.ignored_dir_names) for part in parts)

    def on_any_event(self, event: FileSystemEvent):
        if event.event_type in IGNORED_EVENT_TYPES:
            return
        src_path = event.src_path.decode() if isinstance(event.src_path, bytes) else event.src_path
        if self._is_ignored_path(src_path):
            return
        if not self.debouncer.should_emit():
            return
        logging.debug(f"Project change: {event.event_type} {src_path}")
        try:
            self.on_change()
        except Exception as e:
            logging.warning(f"Change callback failed: {e}")


class ProjectWatcher:
    """Watches a project root and reports debounced changes."""

    def __init__(self, root, on_change: Callable[[], None], debounce_seconds: float = 0.5,
                 config: Optional[SkeletonConfig] = None):
        self.root = Path(root).resolve()
        self.config = config or SkeletonConfig()
        self.handler = ChangeHandler(self.root, on_change, ChangeDebouncer(debounce_seconds), self.config)
        self.observer = None
        self.watched: List[Path] = []

    def start(self) -> None:
        if not self.root.exists():
            raise ScanError("Path does not exist")
        self.stop()
        observer = watchdog.observers.Observer()
        # Watch each kept directory non-recursively so ignored trees such as
        # node_modules are never registered with the OS.
        self.watched = iter_watch_directories(self.root, self.config)
        for directory in self.watched:
            observer.schedule(self.handler, str(directory), recursive=False)
        observer.start()
        self.observer = observer
        logging.info(f"Started watching {self.root} ({len(self.watched)} directories)")

    def stop(self) -> None:
        if self.observer is None:
            return
        self.observer.stop()
        self.observer.join()
        self.observer = None
        logging.info(f"Stopped watching {self.root}")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

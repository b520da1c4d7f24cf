"""
Change Watching
===============

Turns watchdog notifications for the two synced files into a single stream
of "this path was modified" events.

Each file's parent directory is watched non-recursively and events for any
other entry in those directories are dropped. Only write-class notifications
count; read-class ones (``opened``, ``closed_no_write``) are ignored. Bursts
of notifications for the same path are coalesced with a trailing-edge
debounce: a path is emitted once it has been quiet for ``debounce_seconds``.

Classes:
    PairEventHandler: watchdog handler filtering events down to the watched files
    ChangeWatcher: Observer lifecycle plus the debounced event stream
"""

import os
import queue
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from filetwin.errors import WatcherSetupError
from filetwin.utils.rich_console import get_console_logger

logger = get_console_logger()

# Coalescing window for rapid successive writes to one file
DEFAULT_DEBOUNCE_SECONDS = 0.5

# Upper bound on how long events() blocks before re-checking for shutdown
POLL_INTERVAL = 0.2

WRITE_EVENT_TYPES = frozenset({"modified", "created", "moved", "closed"})

_STOP = object()


def _event_path(raw: str | bytes) -> Path:
    return Path(os.fsdecode(raw)).resolve()


class PairEventHandler(FileSystemEventHandler):
    """
    Forwards write-class events for the watched files to ``notify``.
    """

    def __init__(
        self,
        watched: Iterable[Path],
        notify: Callable[[Path], None],
        on_removed: Callable[[Path], None] | None = None,
    ) -> None:
        """
        Initialize the event handler.
        Args:
            watched: Resolved paths of the files to report on
            notify: Called from the observer thread with the modified path
            on_removed: Called with a watched path that was deleted or renamed away
        """
        super().__init__()
        self.watched = frozenset(Path(path) for path in watched)
        self.notify = notify
        self.on_removed = on_removed

    def target_path(self, event: FileSystemEvent) -> Path | None:
        """
        Work out which watched file, if any, an event changed.
        Args:
            event: The file system event
        Returns:
            Path | None: The watched path whose content may have changed
        """
        if event.is_directory:
            return None

        if event.event_type in ("deleted", "moved"):
            gone = _event_path(event.src_path)
            if gone in self.watched:
                # Editors that save by rename-then-create trigger this on every save
                logger.debug(f"Watched file removed or renamed away: {gone}")
                if self.on_removed is not None:
                    self.on_removed(gone)

        if event.event_type not in WRITE_EVENT_TYPES:
            return None

        # Editors and atomic writers replace a file by renaming onto it
        raw = event.dest_path if event.event_type == "moved" else event.src_path
        if not raw:
            return None
        path = _event_path(raw)
        return path if path in self.watched else None

    def on_any_event(self, event: FileSystemEvent) -> None:
        path = self.target_path(event)
        if path is not None:
            logger.debug(f"{event.event_type} event received: {path}")
            self.notify(path)


class ChangeWatcher:
    """
    Watches two files and yields debounced modification events.
    """

    def __init__(
        self,
        paths: Iterable[Path],
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the watcher.

        Args:
            paths: Files to watch
            debounce_seconds: Quiet period required before a path is emitted
            clock: Monotonic time source
        """
        if debounce_seconds < 0:
            raise ValueError("debounce_seconds must not be negative")
        self.paths = tuple(Path(path).resolve() for path in paths)
        self.debounce_seconds = debounce_seconds
        self.clock = clock
        self.observer = Observer()
        self.event_handler = PairEventHandler(self.paths, self.notify, self.notify_removed)
        self._queue: queue.Queue = queue.Queue()
        self._stop_requested = threading.Event()
        self._is_running = False

    @property
    def is_running(self) -> bool:
        return self._is_running

    def notify(self, path: Path) -> None:
        """Record a raw notification for ``path``; safe to call from any thread."""
        self._queue.put((path, self.clock(), False))

    def notify_removed(self, path: Path) -> None:
        """Record that ``path`` disappeared; warned about only if it stays gone."""
        self._queue.put((path, self.clock(), True))

    def watch_dirs(self) -> list[Path]:
        """Parent directories to schedule, each listed once."""
        dirs: list[Path] = []
        for path in self.paths:
            if path.parent not in dirs:
                dirs.append(path.parent)
        return dirs

    def start(self) -> None:
        """Subscribe to notifications for both files.

        Raises:
            WatcherSetupError: If a directory cannot be watched or the observer fails to start
        """
        if self._is_running:
            logger.warning("Watcher is already running")
            return

        self._stop_requested.clear()
        self._queue = queue.Queue()
        try:
            for directory in self.watch_dirs():
                self.observer.schedule(self.event_handler, str(directory), recursive=False)
                logger.debug(f"Started monitoring: {directory}")
            self.observer.start()
        except (OSError, RuntimeError) as error:
            failed, self.observer = self.observer, Observer()
            # Emitters scheduled before the failure may already be running
            failed.stop()
            if failed.is_alive():
                failed.join()
            raise WatcherSetupError(f"Failed to start file watcher: {error}") from error

        self._is_running = True
        logger.debug("File watcher observer started successfully")

    def request_stop(self) -> None:
        """Ask ``events()`` to return at its next check. Safe from signal handlers."""
        self._stop_requested.set()

    def stop(self) -> None:
        """Unsubscribe both files and end the event stream."""
        self.request_stop()
        self._queue.put(_STOP)
        if not self._is_running:
            return

        if self.observer.is_alive():
            self.observer.unschedule_all()
            self.observer.stop()
            self.observer.join()
        self.observer = Observer()  # Create a new observer for next start
        self._is_running = False
        logger.debug("File watcher stopped")

    def _record(self, item, pending: dict[Path, float], vanished: dict[Path, float]) -> None:
        path, seen, removed = item
        if removed:
            vanished[path] = seen
        else:
            pending[path] = seen
            vanished.pop(path, None)

    def _drain(self, pending: dict[Path, float], vanished: dict[Path, float]) -> bool:
        """Move queued notifications into ``pending``; False once a stop marker is seen."""
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return True
            if item is _STOP:
                return False
            self._record(item, pending, vanished)

    def _report_vanished(self, vanished: dict[Path, float], now: float) -> None:
        """Warn about removed files that were not recreated within the debounce window."""
        for path, seen in list(vanished.items()):
            if now - seen < self.debounce_seconds:
                continue
            del vanished[path]
            if not path.exists():
                logger.warning(f"Watched file removed or renamed away: {path}")

    def events(self) -> Iterator[Path]:
        """
        Yield each watched path once per burst of modifications.

        Paths are emitted in the order their bursts began. The generator
        returns once ``stop()`` or ``request_stop()`` has been called; it is
        never interrupted while the caller is handling a yielded path.
        """
        # Insertion order is burst start order; values are the last notification time
        pending: dict[Path, float] = {}
        vanished: dict[Path, float] = {}
        while not self._stop_requested.is_set():
            if not self._drain(pending, vanished):
                return

            now = self.clock()
            self._report_vanished(vanished, now)
            due = [path for path, seen in pending.items() if now - seen >= self.debounce_seconds]
            if due:
                for path in due:
                    del pending[path]
                    yield path
                    if self._stop_requested.is_set():
                        return
                continue

            timeout = POLL_INTERVAL
            if pending or vanished:
                quiet_at = min([*pending.values(), *vanished.values()]) + self.debounce_seconds
                timeout = min(POLL_INTERVAL, max(quiet_at - now, 0.0))
            try:
                item = self._queue.get(timeout=timeout)
            except queue.Empty:
                continue
            if item is _STOP:
                return
            self._record(item, pending, vanished)

    def __enter__(self) -> "ChangeWatcher":
        """Start watching when entering context."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Stop watching when exiting context."""
        self.stop()

"""
Sync Engine
===========

Consumes modification events for the two files and decides, per event,
whether the change is genuine and must be copied to the other side.

Loop prevention rests on checksums: after every propagation both snapshots
hold the checksum of the written content, so the notification caused by the
engine's own write hashes equal to the destination's snapshot and is
discarded. Timestamps are never consulted.
"""

import signal
import threading
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path

from filetwin.errors import ReadError, WriteError
from filetwin.file_monitor import ChangeWatcher
from filetwin.hasher import digest_file, format_checksum
from filetwin.snapshot import SyncPair
from filetwin.utils.file_ops import safe_write_bytes
from filetwin.utils.logging import timeit
from filetwin.utils.rich_console import get_console_logger

logger = get_console_logger()


class EngineState(Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    PROPAGATING = "propagating"
    STOPPED = "stopped"


class SyncOutcome(Enum):
    """Result of handling one event."""

    DISCARDED = "discarded"  # content matches what we last saw for this file
    ADOPTED = "adopted"  # new content already equals the counterpart
    PROPAGATED = "propagated"  # content copied to the counterpart
    FAILED = "failed"  # read or write error, snapshots untouched
    IGNORED = "ignored"  # path is not part of the pair


@dataclass
class SyncStats:
    events: int = 0
    propagated: int = 0
    discarded: int = 0
    adopted: int = 0
    failed: int = 0

    def count(self, outcome: SyncOutcome) -> None:
        self.events += 1
        if outcome is SyncOutcome.PROPAGATED:
            self.propagated += 1
        elif outcome is SyncOutcome.DISCARDED:
            self.discarded += 1
        elif outcome is SyncOutcome.ADOPTED:
            self.adopted += 1
        elif outcome is SyncOutcome.FAILED:
            self.failed += 1

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class SyncEngine:
    """Keeps the two files of a SyncPair identical, one event at a time."""

    def __init__(self, pair: SyncPair, watcher: ChangeWatcher | None = None, writer=safe_write_bytes):
        """Initialize the engine.

        Args:
            pair: Snapshots seeded by the conflict resolver
            watcher: Event source; built from the pair's paths when omitted
            writer: Callable(path, content) used to write the counterpart
        """
        self.pair = pair
        self.watcher = watcher if watcher is not None else ChangeWatcher(pair.paths)
        self.writer = writer
        self.state = EngineState.IDLE
        self.stats = SyncStats()

    @timeit
    def handle_change(self, path: Path) -> SyncOutcome:
        """
        Evaluate one modification event and propagate if it is genuine.

        Args:
            path: The file reported as modified

        Returns:
            SyncOutcome: What was done with the event
        """
        try:
            changed, other = self.pair.counterpart(Path(path))
        except KeyError:
            logger.debug(f"Ignoring event for unrelated path: {path}")
            return SyncOutcome.IGNORED

        outcome = self._evaluate(changed, other)
        self.stats.count(outcome)
        self.state = EngineState.IDLE
        return outcome

    def _evaluate(self, changed, other) -> SyncOutcome:
        self.state = EngineState.EVALUATING
        src = self.pair.label(changed)
        dst = self.pair.label(other)

        try:
            digest = digest_file(changed.path)
        except ReadError as error:
            logger.error(f"Error hashing {src}: {error.message}. Skipping event")
            return SyncOutcome.FAILED

        checksum = format_checksum(digest.checksum)
        if changed.matches(digest):
            logger.debug(f"{src} unchanged (hash {checksum}); discarding event")
            return SyncOutcome.DISCARDED

        if other.matches(digest):
            changed.record(digest)
            logger.info(f"{src} now matches {dst} (hash {checksum}); nothing to write")
            return SyncOutcome.ADOPTED

        self.state = EngineState.PROPAGATING
        logger.info(f"File {src} changed (hash {checksum}). Syncing to {dst}...")
        try:
            self.writer(other.path, digest.content)
        except WriteError as error:
            logger.error(f"Failed to write {dst}: {error.message}. Change on {src} not propagated")
            return SyncOutcome.FAILED

        changed.record(digest)
        other.record(digest)
        logger.success(f"Synced {src} -> {dst} ({digest.length} bytes)")
        return SyncOutcome.PROPAGATED

    def stop(self) -> None:
        """Request shutdown; honoured between events."""
        self.watcher.request_stop()

    def _on_signal(self, signum, frame) -> None:
        logger.info("Stop requested, finishing current event...")
        self.stop()

    def _install_signal_handlers(self) -> dict:
        if threading.current_thread() is not threading.main_thread():
            return {}
        previous = {}
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, self._on_signal)
        return previous

    def run(self) -> SyncStats:
        """
        Watch both files and sync until stopped.

        Events are handled strictly in arrival order; a stop request (SIGINT,
        SIGTERM or ``stop()``) ends the loop only between events.

        Returns:
            SyncStats: Counters for the session

        Raises:
            WatcherSetupError: If the watcher cannot be started
        """
        previous = self._install_signal_handlers()
        try:
            with self.watcher:
                logger.info("Watching for changes (Ctrl+C to stop)...")
                for path in self.watcher.events():
                    self.handle_change(path)
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)
            self.state = EngineState.STOPPED
        return self.stats

"""Tests for file change watching."""

import threading
import time
from typing import Optional

import pytest

from filetwin import file_monitor
from filetwin.errors import WatcherSetupError
from filetwin.file_monitor import ChangeWatcher, PairEventHandler


@pytest.fixture
def mock_event():
    """Create a mock event with the required attributes."""
    def create_event(src_path, event_type: str = "modified", is_directory: bool = False, dest_path: Optional[str] = None):
        attrs = {
            "src_path": str(src_path),
            "dest_path": str(dest_path) if dest_path else "",
            "is_directory": is_directory,
            "event_type": event_type,
        }
        return type("Event", (), attrs)()
    return create_event


@pytest.fixture
def handler(pair_files):
    calls = []
    handler = PairEventHandler(pair_files, calls.append)
    handler.calls = calls
    return handler


@pytest.mark.parametrize("event_type", ["modified", "created", "closed"])
def test_write_events_are_forwarded(handler, pair_files, mock_event, event_type):
    file_a, _ = pair_files
    handler.on_any_event(mock_event(file_a, event_type))
    assert handler.calls == [file_a]


@pytest.mark.parametrize("event_type", ["opened", "closed_no_write", "deleted"])
def test_read_and_delete_events_are_dropped(handler, pair_files, mock_event, event_type):
    """Test that read-class notifications never reach the engine."""
    file_a, _ = pair_files
    handler.on_any_event(mock_event(file_a, event_type))
    assert handler.calls == []


def test_rename_onto_watched_file_is_forwarded(handler, pair_files, mock_event):
    """Test that atomic replace (write temp, rename over target) counts as a write."""
    _, file_b = pair_files
    temp = file_b.parent / ".types.ts.1234.tmp"
    handler.on_any_event(mock_event(temp, "moved", dest_path=file_b))
    assert handler.calls == [file_b]


def test_other_files_and_directories_are_dropped(handler, pair_files, mock_event):
    file_a, _ = pair_files
    handler.on_any_event(mock_event(file_a.parent / "other.ts"))
    handler.on_any_event(mock_event(file_a.parent, is_directory=True))
    handler.on_any_event(mock_event(file_a.parent / "x.tmp", "moved", dest_path=file_a.parent / "y.ts"))
    assert handler.calls == []


def test_burst_is_coalesced(pair_files):
    """Test that repeated notifications for one path produce a single event."""
    file_a, file_b = pair_files
    watcher = ChangeWatcher(pair_files, debounce_seconds=0.05)
    for _ in range(5):
        watcher.notify(file_a)
    watcher.notify(file_b)

    events = watcher.events()
    assert next(events) == file_a
    assert next(events) == file_b

    watcher.stop()
    assert list(events) == []


def test_debounce_waits_for_quiet_period(pair_files):
    """Test that a path is only emitted once no notification arrived for the window."""
    file_a, _ = pair_files
    watcher = ChangeWatcher(pair_files, debounce_seconds=0.2)
    watcher.notify(file_a)
    time.sleep(0.1)
    last_notify = time.monotonic()
    watcher.notify(file_a)

    assert next(watcher.events()) == file_a
    assert time.monotonic() - last_notify >= 0.19


def test_stop_ends_event_stream(pair_files):
    watcher = ChangeWatcher(pair_files)
    watcher.stop()
    assert list(watcher.events()) == []


def test_negative_debounce_rejected(pair_files):
    with pytest.raises(ValueError):
        ChangeWatcher(pair_files, debounce_seconds=-1)


def test_shared_directory_is_watched_once(temp_dir):
    file_a = temp_dir / "a.txt"
    file_b = temp_dir / "b.txt"
    watcher = ChangeWatcher([file_a, file_b])
    assert watcher.watch_dirs() == [temp_dir]


def test_start_and_stop(pair_files):
    """Test that the observer is started and cleaned up."""
    watcher = ChangeWatcher(pair_files)
    with watcher:
        assert watcher.is_running
        assert watcher.observer.is_alive()
        observer = watcher.observer
    assert not watcher.is_running
    assert not observer.is_alive()


def test_setup_failure_raises(pair_files, monkeypatch):
    watcher = ChangeWatcher(pair_files)

    def failing_schedule(*args, **kwargs):
        raise OSError("inotify watch limit reached")

    monkeypatch.setattr(watcher.observer, "schedule", failing_schedule)

    with pytest.raises(WatcherSetupError) as excinfo:
        watcher.start()

    assert excinfo.value.exit_code == 6
    assert not watcher.is_running


def test_real_write_is_reported(pair_files):
    """Test that a real write to a watched file comes out of events()."""
    file_a, _ = pair_files
    watcher = ChangeWatcher(pair_files, debounce_seconds=0.1)
    # Fail instead of hanging if the notification never arrives
    timer = threading.Timer(5.0, watcher.request_stop)
    with watcher:
        time.sleep(0.1)  # Let the observer initialize
        timer.start()
        file_a.write_text("changed")
        try:
            assert next(watcher.events(), None) == file_a
        finally:
            timer.cancel()


def test_failed_start_stops_partial_observer(pair_files, monkeypatch):
    """Test that emitters scheduled before a start failure are shut down."""
    watcher = ChangeWatcher(pair_files)
    failed = watcher.observer
    stopped = []

    def failing_start():
        raise RuntimeError("emitter failed to start")

    monkeypatch.setattr(failed, "start", failing_start)
    monkeypatch.setattr(failed, "stop", lambda: stopped.append(True))

    with pytest.raises(WatcherSetupError):
        watcher.start()

    assert stopped == [True]
    assert watcher.observer is not failed


def test_removal_is_reported_to_watcher(pair_files, mock_event):
    file_a, _ = pair_files
    removed = []
    handler = PairEventHandler(pair_files, lambda path: None, removed.append)

    handler.on_any_event(mock_event(file_a, "moved", dest_path=file_a.parent / "types.ts~"))
    handler.on_any_event(mock_event(file_a, "deleted"))

    assert removed == [file_a, file_a]


@pytest.fixture
def warnings(monkeypatch):
    messages = []
    monkeypatch.setattr(file_monitor.logger, "warning", lambda msg, *args: messages.append(msg))
    return messages


def test_rename_then_recreate_is_not_warned(pair_files, warnings):
    """Test that an editor's save-by-rename does not look like a lost file."""
    file_a, _ = pair_files
    watcher = ChangeWatcher(pair_files, debounce_seconds=0.05)
    watcher.notify_removed(file_a)
    watcher.notify(file_a)

    assert next(watcher.events()) == file_a
    assert warnings == []


def test_file_that_stays_gone_is_warned(pair_files, warnings):
    file_a, _ = pair_files
    file_a.unlink()
    watcher = ChangeWatcher(pair_files, debounce_seconds=0.05)
    watcher.notify_removed(file_a)
    timer = threading.Timer(0.5, watcher.request_stop)
    timer.start()
    try:
        assert list(watcher.events()) == []
    finally:
        timer.cancel()

    assert len(warnings) == 1
    assert str(file_a) in warnings[0]

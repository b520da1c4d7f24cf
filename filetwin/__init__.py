"""
filetwin - keep two files byte-identical across directory trees
"""

__version__ = "0.1.0"

from filetwin.conflict import ConflictResolver, Resolution, backup_path
from filetwin.errors import (
    BackupError,
    ConflictError,
    FileTwinError,
    MissingFileError,
    ReadError,
    WatcherSetupError,
    WriteError,
)
from filetwin.file_monitor import ChangeWatcher
from filetwin.snapshot import FileSnapshot, SyncPair
from filetwin.sync import SyncEngine, SyncOutcome

__all__ = [
    "BackupError",
    "ChangeWatcher",
    "ConflictError",
    "ConflictResolver",
    "FileSnapshot",
    "FileTwinError",
    "MissingFileError",
    "ReadError",
    "Resolution",
    "SyncEngine",
    "SyncOutcome",
    "SyncPair",
    "WatcherSetupError",
    "WriteError",
    "backup_path",
]

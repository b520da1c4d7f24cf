"""
Error Taxonomy
==============

Startup errors (missing file, conflict, backup, watcher setup) are fatal and
carry the process exit code the CLI reports. Runtime errors (read, write) are
raised by the file helpers and swallowed by the sync engine, which logs them
and drops the offending event.
"""

from pathlib import Path


class FileTwinError(Exception):
    """Base exception for filetwin errors."""

    exit_code: int = 1

    def __init__(self, message: str, path: Path | None = None):
        self.message = message
        self.path = path
        super().__init__(self.message)


class MissingFileError(FileTwinError):
    """Raised when one of the two files does not exist or is not a regular file."""

    exit_code = 3


class ConflictError(FileTwinError):
    """Raised when the files differ at startup and overwriting was not requested."""

    exit_code = 4


class BackupError(FileTwinError):
    """Raised when a backup cannot be written during the overwrite protocol."""

    exit_code = 5


class WatcherSetupError(FileTwinError):
    """Raised when filesystem notifications cannot be subscribed to."""

    exit_code = 6


class ReadError(FileTwinError):
    """Raised when a watched file cannot be read."""


class WriteError(FileTwinError):
    """Raised when propagating content to the counterpart file fails."""

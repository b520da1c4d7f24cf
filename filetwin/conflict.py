"""
Startup Conflict Resolution
===========================

Runs once before the watch loop. Establishes that both files exist and hold
identical content, either because they already do or by applying the
overwrite protocol: back up both files, then truncate both to empty.
"""

from enum import Enum
from pathlib import Path

from filetwin.errors import BackupError, ConflictError, MissingFileError, ReadError, WriteError
from filetwin.hasher import FileDigest, digest_file, format_checksum
from filetwin.snapshot import SyncPair
from filetwin.utils.file_ops import safe_write_bytes
from filetwin.utils.rich_console import get_console_logger

logger = get_console_logger()

BACKUP_SUFFIX = "_backup"


class Resolution(Enum):
    """How the starting state was reached."""

    IDENTICAL = "identical"
    FILLED_A = "filled_a"  # A was empty and received B's content
    FILLED_B = "filled_b"  # B was empty and received A's content
    RESET = "reset"  # both backed up and truncated


def backup_path(path: Path) -> Path:
    """
    Derive the backup path by inserting ``_backup`` before the extension.

    ``notes.txt`` becomes ``notes_backup.txt`` and ``Makefile`` becomes
    ``Makefile_backup``. Only the final extension is considered.
    """
    return path.with_name(f"{path.stem}{BACKUP_SUFFIX}{path.suffix}")


class ConflictResolver:
    """Brings two files to a known-identical state before syncing starts."""

    def __init__(self, path_a: Path, path_b: Path, overwrite: bool = False, fill_empty: bool = False):
        """Initialize the resolver.

        Args:
            path_a: First file
            path_b: Second file
            overwrite: Back up and truncate both files when they differ
            fill_empty: When exactly one file is empty, copy the other one onto it
        """
        self.path_a = Path(path_a)
        self.path_b = Path(path_b)
        self.overwrite = overwrite
        self.fill_empty = fill_empty

    def _read(self, path: Path) -> FileDigest:
        try:
            return digest_file(path)
        except ReadError as error:
            raise MissingFileError(f"File must exist and be a regular file: {path}", path) from error

    def resolve(self) -> tuple[SyncPair, Resolution]:
        """
        Run the startup protocol.

        Returns:
            tuple: The seeded SyncPair and how the starting state was reached

        Raises:
            MissingFileError: If either file is missing or unreadable
            ConflictError: If the files differ and no resolution was requested
            BackupError: If a backup cannot be written or an original cannot be reset
        """
        digest_a = self._read(self.path_a)
        digest_b = self._read(self.path_b)
        logger.info(
            "Initial checksums -> A: %s, B: %s",
            format_checksum(digest_a.checksum),
            format_checksum(digest_b.checksum),
        )

        if digest_a.checksum == digest_b.checksum and digest_a.length == digest_b.length:
            logger.success("Files are identical")
            resolution = Resolution.IDENTICAL
        elif self.fill_empty and (digest_a.length == 0) != (digest_b.length == 0):
            resolution = self._fill_empty_side(digest_a, digest_b)
        elif not self.overwrite:
            raise ConflictError(
                f"Files differ: {self.path_a} and {self.path_b}. "
                "Use --overwrite to back them up and start from empty files, or fix them manually."
            )
        else:
            self._backup_and_reset(digest_a, digest_b)
            resolution = Resolution.RESET

        # Seed from disk so the snapshots reflect what is actually there now
        try:
            return SyncPair.capture(self.path_a, self.path_b), resolution
        except ReadError as error:
            raise MissingFileError(str(error), error.path) from error

    def _fill_empty_side(self, digest_a: FileDigest, digest_b: FileDigest) -> Resolution:
        if digest_b.length == 0:
            source, target, content, resolution = self.path_a, self.path_b, digest_a.content, Resolution.FILLED_B
        else:
            source, target, content, resolution = self.path_b, self.path_a, digest_b.content, Resolution.FILLED_A
        logger.info("%s is empty. Copying %s onto it", target, source)
        try:
            safe_write_bytes(target, content)
        except WriteError as error:
            raise BackupError(f"Could not fill {target}: {error.message}", target) from error
        return resolution

    def _backup_and_reset(self, digest_a: FileDigest, digest_b: FileDigest) -> None:
        logger.warning("Conflict! Files differ. Backing up both and clearing them...")
        targets = [(self.path_a, digest_a), (self.path_b, digest_b)]
        for path, _ in targets:
            if backup_path(path) in (self.path_a, self.path_b):
                raise BackupError(f"Backup of {path} would overwrite a synced file: {backup_path(path)}", path)

        # Every backup must exist before any original is touched
        for path, digest in targets:
            backup = backup_path(path)
            try:
                safe_write_bytes(backup, digest.content, mode_from=path)
            except WriteError as error:
                raise BackupError(f"Could not write backup {backup}: {error.message}", backup) from error
            logger.info("Backed up %s -> %s (%d bytes)", path, backup, digest.length)

        for path, _ in targets:
            try:
                safe_write_bytes(path, b"")
            except WriteError as error:
                raise BackupError(
                    f"Backups were written but {path} could not be cleared: {error.message}", path
                ) from error
        logger.success("Both files cleared; originals kept as backups")

"""
Sync State
==========

In-memory record of what the engine last confirmed for each file. Nothing
here is persisted; every run re-seeds the pair by hashing both files.

Classes:
    FileSnapshot: Last known checksum and length of one file
    SyncPair: The two snapshots, labelled A and B, with no primary side
"""

from dataclasses import dataclass
from pathlib import Path

from filetwin.hasher import FileDigest, digest_file


@dataclass
class FileSnapshot:
    """
    Last confirmed state of one watched file.

    Attributes:
        path (Path): Absolute path of the file, fixed for the process lifetime
        last_hash (int): Checksum of the content last written or read for this path
        last_length (int): Byte length paired with ``last_hash``
    """

    path: Path
    last_hash: int
    last_length: int

    @classmethod
    def capture(cls, path: Path) -> "FileSnapshot":
        """Build a snapshot from the file as it exists on disk."""
        digest = digest_file(path)
        return cls(path=path, last_hash=digest.checksum, last_length=digest.length)

    def matches(self, digest: FileDigest) -> bool:
        # Length differs -> content differs, no need to compare checksums
        if digest.length != self.last_length:
            return False
        return digest.checksum == self.last_hash

    def record(self, digest: FileDigest) -> None:
        self.last_hash = digest.checksum
        self.last_length = digest.length


class SyncPair:
    """Exactly two snapshots; either may be source or destination of an event."""

    def __init__(self, a: FileSnapshot, b: FileSnapshot):
        if a.path == b.path:
            raise ValueError(f"A sync pair needs two distinct files, got {a.path} twice")
        self.a = a
        self.b = b

    @classmethod
    def capture(cls, path_a: Path, path_b: Path) -> "SyncPair":
        return cls(FileSnapshot.capture(path_a), FileSnapshot.capture(path_b))

    @property
    def paths(self) -> tuple[Path, Path]:
        return self.a.path, self.b.path

    @property
    def in_sync(self) -> bool:
        return self.a.last_hash == self.b.last_hash and self.a.last_length == self.b.last_length

    def counterpart(self, path: Path) -> tuple[FileSnapshot, FileSnapshot]:
        """
        Split the pair around a changed path.

        Args:
            path: Path reported as modified

        Returns:
            tuple: (snapshot of the changed file, snapshot of the other file)

        Raises:
            KeyError: If ``path`` is neither of the two files
        """
        if path == self.a.path:
            return self.a, self.b
        if path == self.b.path:
            return self.b, self.a
        raise KeyError(path)

    def label(self, snapshot: FileSnapshot) -> str:
        return "A" if snapshot is self.a else "B"

    def __repr__(self) -> str:
        return f"SyncPair(a={self.a!r}, b={self.b!r})"

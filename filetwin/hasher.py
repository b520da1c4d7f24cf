"""
Content Hashing
===============

CRC32 checksums over whole-file content. The checksum is only ever used for
equality tests between a file and the last content the engine saw for it,
so a fast non-cryptographic digest is enough.
"""

import zlib
from dataclasses import dataclass
from pathlib import Path

from filetwin.utils.file_ops import safe_read_bytes


@dataclass(frozen=True)
class FileDigest:
    """Checksum, length and bytes of a file as read at one point in time."""

    checksum: int
    length: int
    content: bytes


def checksum(data: bytes) -> int:
    """Return the unsigned CRC32 of ``data``."""
    return zlib.crc32(data) & 0xFFFFFFFF


def digest_bytes(data: bytes) -> FileDigest:
    return FileDigest(checksum=checksum(data), length=len(data), content=data)


def digest_file(path: Path) -> FileDigest:
    """
    Read a file and compute its digest.

    Args:
        path: File to read

    Returns:
        FileDigest: Checksum and length of the content together with the content itself

    Raises:
        ReadError: If the file cannot be read
    """
    return digest_bytes(safe_read_bytes(path))


def format_checksum(value: int) -> str:
    """Render a checksum the way status lines show it."""
    return f"{value:08x}"

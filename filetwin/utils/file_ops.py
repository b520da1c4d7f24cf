"""File operation utilities."""
import contextlib
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from filetwin.errors import ReadError, WriteError

logger = logging.getLogger(__name__)


def _default_mode() -> int:
    """Mode a plain ``open(path, "w")`` would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def safe_write_bytes(file_path: Path, content: bytes, mode_from: Optional[Path] = None) -> None:
    """
    Write content to a file using a temporary file to ensure atomic writes.

    The temporary file lives in the target's directory so the final rename
    never crosses a filesystem. Permission bits are taken from ``mode_from``
    when given, otherwise from the existing target; a new file gets the
    umask default. The result has the mode a plain copy would have left.

    Args:
        file_path: Path to the target file
        content: Bytes to write to the file
        mode_from: File whose permission bits the written file should carry

    Raises:
        WriteError: If the temporary file cannot be written or renamed
    """
    try:
        temp_fd, temp_path = tempfile.mkstemp(
            dir=str(file_path.parent), prefix=f".{file_path.name}.", suffix=".tmp"
        )
    except OSError as error:
        raise WriteError(f"Cannot create temporary file next to {file_path}: {error}", file_path) from error

    try:
        with os.fdopen(temp_fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        # mkstemp always creates 0600
        if mode_from is not None:
            shutil.copymode(mode_from, temp_path)
        elif file_path.exists():
            shutil.copymode(file_path, temp_path)
        else:
            os.chmod(temp_path, _default_mode())

        # On Windows, we need to remove the target file first
        if os.name == "nt" and file_path.exists():
            file_path.unlink()

        # Rename temporary file to target file (atomic on Unix)
        Path(temp_path).replace(file_path)
    except OSError as error:
        # Clean up temp file if something goes wrong
        with contextlib.suppress(OSError):
            Path(temp_path).unlink()
        raise WriteError(f"Error writing {file_path}: {error}", file_path) from error


def safe_read_bytes(file_path: Path) -> bytes:
    """
    Read the full byte content of a regular file.

    Args:
        file_path: Path to the file to read

    Returns:
        The content of the file

    Raises:
        ReadError: If the file is missing, not a regular file, or unreadable
    """
    if not file_path.is_file():
        raise ReadError(f"Not a regular file: {file_path}", file_path)
    try:
        with file_path.open("rb") as f:
            return f.read()
    except OSError as error:
        logger.debug("Error reading file %s: %s", file_path, error)
        raise ReadError(f"Error reading {file_path}: {error}", file_path) from error

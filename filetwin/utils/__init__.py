"""
Utility helpers for file I/O and console output.
"""

from filetwin.utils.file_ops import safe_read_bytes, safe_write_bytes
from filetwin.utils.rich_console import get_console, get_console_logger

__all__ = [
    "safe_read_bytes",
    "safe_write_bytes",
    "get_console",
    "get_console_logger",
]

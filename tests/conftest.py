"""
Test Configuration and Fixtures
=============================

This module provides pytest fixtures and utilities for testing filetwin.
"""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from filetwin.utils.logging import configure_logging


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path: Resolved path to the temporary directory

    Note:
        The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir).resolve()


@pytest.fixture
def pair_files(temp_dir: Path) -> tuple[Path, Path]:
    """
    Create two empty files in separate directory trees.

    Args:
        temp_dir: Temporary directory fixture

    Returns:
        tuple: Paths of file A and file B
    """
    file_a = temp_dir / "project_one" / "types.ts"
    file_b = temp_dir / "project_two" / "shared" / "types.ts"
    for path in (file_a, file_b):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
    return file_a, file_b


@pytest.fixture(autouse=True, scope="session")
def quiet_timing_logs():
    """Keep loguru's per-event debug timings out of test output."""
    configure_logging("INFO")

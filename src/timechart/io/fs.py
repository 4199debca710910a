"""
Filesystem helpers for timechart.io (file protocol baseline).

Responsibilities
- Provide a minimal stdlib-only abstraction for the filesystem operations used when
  saving artifacts: directory creation, binary write handles, fsync, atomic rename and
  temporary-file cleanup.
- Establish clear semantics for the atomic write path: tmp write -> fsync -> atomic rename.

Notes
- Atomicity via os.replace is guaranteed only when src and dst reside on the same filesystem.
- All helpers are synchronous; concurrent writers to one path are last-writer-wins.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO


def makedirs(path: str, exist_ok: bool = True) -> None:
    """
    Create directories recursively.

    Args:
        path (str): Directory path to create. An empty string (current directory) is a no-op.
        exist_ok (bool): Do not error if the directory already exists.
    """
    if path:
        os.makedirs(path, exist_ok=exist_ok)


@contextmanager
def open_write(path: str) -> Iterator[BinaryIO]:
    """
    Open a file for binary write as a context manager.

    Args:
        path (str): Destination path to open in write-binary mode.

    Yields:
        BinaryIO: A writable handle supporting .flush() and .fileno().

    Notes:
        Caller is responsible for fsync and the atomic os.replace of the temporary file.
    """
    fh = open(path, "wb")
    try:
        yield fh
    finally:
        fh.close()


def fsync_file(fh: BinaryIO) -> None:
    """
    Flush and fsync an open file handle.

    Notes:
        Ensures file contents reach the storage device (subject to OS/filesystem semantics).
    """
    fh.flush()
    os.fsync(fh.fileno())


def rename_atomic(src: str, dst: str) -> None:
    """
    Atomically rename src -> dst on the same filesystem.

    Notes:
        Uses os.replace, which is atomic only if src and dst reside on the same filesystem.
    """
    os.replace(src, dst)


def remove_quietly(path: str) -> None:
    """Remove a leftover temporary file if one was created."""
    if os.path.lexists(path):
        os.remove(path)

"""
Atomic file replacement for the UNIXPackage state file.

A write either lands completely or leaves the previous file untouched.
The content goes to a temporary file in the destination directory, is
fsynced, then renamed over the target with ``os.replace``.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)


def _fsync_directory(directory: Path) -> None:
    """Flush a directory entry so a completed rename survives a crash."""
    try:
        dir_fd = os.open(str(directory), os.O_RDONLY | os.O_DIRECTORY)
    except (OSError, AttributeError):
        # O_DIRECTORY is POSIX only
        return
    try:
        os.fsync(dir_fd)
    except OSError:
        logger.debug(f"Directory fsync not supported for {directory}")
    finally:
        os.close(dir_fd)


def atomic_write_text(path: Union[str, Path], content: str, mode: int = 0o644) -> None:
    """
    Replace ``path`` with ``content`` atomically.

    The temporary file lives next to the target so the final rename
    never crosses a filesystem boundary.

    Args:
        path: Destination file path
        content: Text content to write
        mode: File permissions applied before the rename

    Raises:
        OSError: If the temporary file cannot be written or renamed.
            The destination is left as it was.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
    )

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise

    _fsync_directory(path.parent)


def atomic_write_json(
    path: Union[str, Path],
    data: Any,
    indent: int = 2,
    sort_keys: bool = True,
    mode: int = 0o644,
) -> None:
    """
    Serialize ``data`` as JSON and replace ``path`` atomically.

    Serialization happens before any file is touched, so an
    unserializable value raises without creating a temporary file.

    Args:
        path: Destination file path
        data: JSON-serializable data
        indent: JSON indentation (default 2)
        sort_keys: Sort object keys for reproducible output
        mode: File permissions
    """
    content = json.dumps(data, indent=indent, sort_keys=sort_keys, ensure_ascii=False)
    atomic_write_text(path, content + "\n", mode)

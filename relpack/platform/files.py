"""Filesystem helpers."""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path

__all__ = ["atomic_write_text", "remove_tree"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def _remove_readonly(
    _func: Callable[[str], object], path: str, exc: BaseException
) -> None:
    """Handle read-only files on Windows."""
    if isinstance(exc, PermissionError):
        os.chmod(path, stat.S_IWRITE)
        os.unlink(path)
    else:
        raise exc


def remove_tree(path: Path) -> bool:
    """Remove a file or directory tree if it exists.

    Returns:
        True if something was removed.
    """
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path, onexc=_remove_readonly)
        return True
    if path.exists() or path.is_symlink():
        path.unlink()
        return True
    return False

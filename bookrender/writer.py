"""Persist rendered output without leaving partial files behind."""

from __future__ import annotations

import contextlib
import os
import stat
import tempfile
from pathlib import Path

from .errors import WriteError

DEFAULT_FILE_MODE = 0o666


def write_atomic(path: Path, content: bytes) -> Path:
    """Write ``content`` to ``path`` through a temporary file in the same directory.

    The temporary file is moved over the target with ``os.replace`` only after
    it has been fully written; on failure it is removed and ``WriteError`` is
    raised. The result keeps the mode of the file it replaces, or gets the
    usual umask-derived mode when the target is new.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"Unable to create directory {path.parent}: {exc}", path=path.parent) from exc

    try:
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as exc:
        raise WriteError(f"Unable to write {path}: {exc}", path=path) from exc

    try:
        with os.fdopen(fd, "wb") as handle:
            # mkstemp creates owner-only files.
            os.fchmod(handle.fileno(), _target_mode(path))
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, path)
    except OSError as exc:
        with contextlib.suppress(OSError):
            os.unlink(temp_path)
        raise WriteError(f"Unable to write {path}: {exc}", path=path) from exc
    return path


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return DEFAULT_FILE_MODE & ~_current_umask()


def _current_umask() -> int:
    # The umask can only be read by setting it.
    mask = os.umask(0)
    os.umask(mask)
    return mask

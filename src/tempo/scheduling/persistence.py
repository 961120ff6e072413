"""File persistence helpers shared by the file-backed backends.

Atomic writes use tempfile + fsync + os.replace().
"""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any


@contextmanager
def locked(lock_path: Path) -> Iterator[None]:
    """Hold an exclusive lock on ``lock_path`` for the duration of the block."""
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with lock_path.open("a+") as lockf:
        try:
            fcntl.flock(lockf.fileno(), fcntl.LOCK_EX)
            yield
        finally:
            fcntl.flock(lockf.fileno(), fcntl.LOCK_UN)


def lock_path_for(path: Path) -> Path:
    return path.with_name(f".{path.name}.lock")


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON atomically via tempfile + fsync + os.replace()."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(json.dumps(data, indent=2, sort_keys=True))
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        Path(tmp).replace(path)
    except BaseException:
        try:
            Path(tmp).unlink()
        except OSError:
            pass
        raise

"""File operations: source reading, fingerprinting, atomic output under a lock."""

from __future__ import annotations

import hashlib
import os
import shutil
import tempfile
from io import TextIOWrapper
from pathlib import Path

import portalocker


def read_text_safe(path: str | Path) -> str:
    """Read UTF-8 text, dropping a leading BOM if present."""
    return Path(path).read_text(encoding="utf-8-sig")


def fingerprint(path: str | Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return f"sha256:{h.hexdigest()}"


def atomic_write(target: str | Path, data: bytes) -> None:
    """Write via a temp file in the target directory, then rename over the target."""
    target = Path(target)
    fd, tmp_path = tempfile.mkstemp(dir=target.parent, suffix=target.suffix, prefix=".tablebook_tmp_")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        shutil.move(tmp_path, target)
    except Exception:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


class OutputLock:
    """Exclusive, non-blocking ``<file>.lock`` sidecar held while an output is written.

    Raises ``portalocker.LockException`` when another process holds it. The OS
    releases the lock if the process dies; a leftover sidecar file is harmless.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).resolve()
        self.lock_path = self.path.parent / (self.path.name + ".lock")
        self._lock_file: TextIOWrapper | None = None

    def __enter__(self) -> "OutputLock":
        self._lock_file = open(self.lock_path, "a+")  # noqa: SIM115
        try:
            portalocker.lock(self._lock_file, portalocker.LOCK_EX | portalocker.LOCK_NB)
        except portalocker.LockException:
            self._lock_file.close()
            self._lock_file = None
            raise
        self._lock_file.seek(0)
        self._lock_file.truncate()
        self._lock_file.write(f"pid={os.getpid()}\n")
        self._lock_file.flush()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if self._lock_file is not None:
            try:
                portalocker.unlock(self._lock_file)
            finally:
                self._lock_file.close()
                self._lock_file = None

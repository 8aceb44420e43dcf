"""Shared JSON-file plumbing for the repositories.

Every write goes through ``JsonFileStore.transaction()``: it takes the
file's lock (shared by all stores on the same path within the process),
loads the records, lets the caller mutate them and writes them back
atomically (temp file then rename).  A conditional update is therefore a
single critical section, never a read in one step and a write in another.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

_LOCKS: dict[Path, threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


class PersistenceError(Exception):
    """The data store could not be reached in time or is unreadable."""


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.Lock()
        return lock


class JsonFileStore:

    def __init__(self, file_path: Path, lock_timeout: float = 5.0) -> None:
        self._file_path = file_path
        self._lock_timeout = lock_timeout
        self._ensure_file()
        self._lock = _lock_for(file_path)

    @property
    def path(self) -> Path:
        return self._file_path

    def read(self) -> list[dict]:
        """Load all records.  Safe without the lock: writes are atomic renames."""
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Cannot read {self._file_path}: {exc}") from exc

    @contextmanager
    def transaction(self) -> Iterator[list[dict]]:
        """Yield the records under the file lock; persist them if they changed."""
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise PersistenceError(
                f"Timed out after {self._lock_timeout}s waiting for {self._file_path}"
            )
        try:
            records = self.read()
            before = json.dumps(records, sort_keys=True)
            yield records
            if json.dumps(records, sort_keys=True) != before:
                self._persist(records)
        finally:
            self._lock.release()

    # --- File helpers ---------------------------------------------------------

    def _persist(self, records: list[dict]) -> None:
        # Write to temp file then rename (atomic on POSIX)
        fd, temp_path = tempfile.mkstemp(
            dir=self._file_path.parent, prefix=f".{self._file_path.stem}_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
                f.write("\n")
            os.replace(temp_path, self._file_path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from pollwatch.models import FileRecord


class ReadWriteLock:
    """Many readers or one writer. Waiting writers block new readers.

    Not reentrant: a thread holding either side must not acquire again.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read_lock(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_lock(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class SnapshotStore:
    """Path -> FileRecord mapping shared between the scan loop and readers.

    Each method holds the lock for a single read or write, never for a whole
    pass. Records are immutable, so a reader sees either the old or the new
    record for a path and nothing in between.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._records: dict[str, FileRecord] = {}

    def get(self, path: str) -> FileRecord | None:
        with self._lock.read_lock():
            return self._records.get(path)

    def set(self, path: str, record: FileRecord) -> None:
        with self._lock.write_lock():
            self._records[path] = record

    def replace(self, path: str, record: FileRecord) -> FileRecord | None:
        """Store ``record`` and return the record it replaced, in one write."""
        with self._lock.write_lock():
            previous = self._records.get(path)
            self._records[path] = record
            return previous

    def delete(self, path: str) -> FileRecord | None:
        with self._lock.write_lock():
            return self._records.pop(path, None)

    def snapshot(self) -> dict[str, FileRecord]:
        with self._lock.read_lock():
            return dict(self._records)

    def paths(self) -> set[str]:
        with self._lock.read_lock():
            return set(self._records)

    def clear(self) -> None:
        with self._lock.write_lock():
            self._records.clear()

    def __len__(self) -> int:
        with self._lock.read_lock():
            return len(self._records)

    def __contains__(self, path: object) -> bool:
        with self._lock.read_lock():
            return path in self._records

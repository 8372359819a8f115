from __future__ import annotations

import os
import stat

from pollwatch.models import FileRecord


def record_from_stat(path: str, st: os.stat_result) -> FileRecord:
    return FileRecord(
        path=path,
        size=st.st_size,
        mtime_ns=st.st_mtime_ns,
        mode=st.st_mode,
        is_dir=stat.S_ISDIR(st.st_mode),
    )


def extract(path: str | os.PathLike[str]) -> FileRecord:
    """Stat ``path`` (following symlinks) and describe it as a FileRecord.

    ``FileNotFoundError``, ``PermissionError`` and other ``OSError`` subclasses
    propagate unchanged so callers can decide whether a failure is fatal.
    """
    absolute = os.path.abspath(os.fspath(path))
    return record_from_stat(absolute, os.stat(absolute))

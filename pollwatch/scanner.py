from __future__ import annotations

import os
from collections.abc import Iterable, Iterator

from pollwatch.errors import InitialWalkError
from pollwatch.logging_utils import get_logger
from pollwatch.metadata import extract
from pollwatch.models import FileRecord


logger = get_logger(__name__)


def _skip(path: str, exc: OSError, *, strict: bool) -> None:
    if strict:
        raise InitialWalkError(path, exc.strerror or str(exc)) from exc
    # Vanished or unreadable entries are reconciled by the next deletion sweep.
    logger.debug("Skipping %s: %s", path, exc)


def _list_directory(directory: str) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: entry.name)


def walk(root: str | os.PathLike[str], *, strict: bool = False) -> Iterator[tuple[str, FileRecord]]:
    """Yield ``(path, record)`` for ``root`` and every entry below it.

    Every call is a fresh traversal. Symlinked directories below the root are
    reported but not descended into. With ``strict=False`` entries that cannot
    be listed or stat'ed are left out of the output; with ``strict=True`` the
    first such failure raises :class:`InitialWalkError`.
    """
    root_path = os.path.abspath(os.fspath(root))
    try:
        root_record = extract(root_path)
    except OSError as exc:
        _skip(root_path, exc, strict=strict)
        return

    yield root_record.path, root_record
    if not root_record.is_dir:
        return

    pending = [root_record.path]
    while pending:
        directory = pending.pop()
        try:
            entries = _list_directory(directory)
        except OSError as exc:
            _skip(directory, exc, strict=strict)
            continue

        subdirectories: list[str] = []
        for entry in entries:
            try:
                record = extract(entry.path)
            except OSError as exc:
                _skip(entry.path, exc, strict=strict)
                continue

            yield record.path, record
            if record.is_dir and not entry.is_symlink():
                subdirectories.append(record.path)

        pending.extend(reversed(subdirectories))


def scan_roots(
    roots: Iterable[str | os.PathLike[str]], *, strict: bool = False
) -> Iterator[tuple[str, FileRecord]]:
    for root in roots:
        yield from walk(root, strict=strict)

from __future__ import annotations

import os
import stat
import threading
from datetime import datetime

from rich.console import Console
from rich.table import Table
from rich.text import Text

from pollwatch.models import FileRecord, WatchEvent


def display_path(path: str) -> str:
    """Printable form of ``path``; undecodable filename bytes become ``\\xNN`` escapes."""
    try:
        raw = os.fsencode(path)
    except UnicodeEncodeError:
        return path.encode("utf-8", "backslashreplace").decode("utf-8")
    return raw.decode("utf-8", "backslashreplace")


class ConsoleEventSink:
    """Writes one plain line per event; usable as a watcher ``on_event`` callback."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()
        self._lock = threading.Lock()

    def __call__(self, event: WatchEvent) -> None:
        line = event.kind.format(display_path(event.path))
        with self._lock:
            self._console.print(line, markup=False, highlight=False, soft_wrap=True)


def _format_mtime(mtime_ns: int) -> str:
    return datetime.fromtimestamp(mtime_ns / 1_000_000_000).isoformat(sep=" ", timespec="seconds")


def render_snapshot(console: Console, records: dict[str, FileRecord], *, title: str = "Snapshot") -> None:
    table = Table(title=title)
    table.add_column("Path", overflow="fold")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Mode")

    for path in sorted(records):
        record = records[path]
        table.add_row(
            Text(display_path(path)),
            "dir" if record.is_dir else "file",
            str(record.size),
            _format_mtime(record.mtime_ns),
            stat.filemode(record.mode),
        )

    console.print(table)

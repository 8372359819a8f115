from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class FileRecord:
    path: str
    size: int
    mtime_ns: int
    mode: int
    is_dir: bool


class EventKind(Enum):
    CREATED = "File created: {path}"
    SIZE_CHANGED = "File content modified (size changed): {path}"
    TIME_CHANGED = "File modified (time changed): {path}"
    ATTRIBUTES_CHANGED = "File attributes modified: {path}"
    DELETED = "File deleted: {path}"

    def format(self, path: str) -> str:
        return self.value.format(path=path)


@dataclass(frozen=True, slots=True)
class WatchEvent:
    kind: EventKind
    path: str
    previous: FileRecord | None = None
    current: FileRecord | None = None

    @property
    def message(self) -> str:
        return self.kind.format(self.path)

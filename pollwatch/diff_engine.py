from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from pollwatch.logging_utils import get_logger
from pollwatch.models import EventKind, FileRecord, WatchEvent
from pollwatch.scanner import scan_roots, walk
from pollwatch.store import SnapshotStore


logger = get_logger(__name__)

EventSink = Callable[[WatchEvent], None]


@dataclass(slots=True)
class PassResult:
    events: list[WatchEvent]
    observed_count: int
    snapshot_count: int

    @property
    def has_changes(self) -> bool:
        return bool(self.events)

    def paths(self, kind: EventKind) -> list[str]:
        return [event.path for event in self.events if event.kind is kind]


def classify_change(old: FileRecord | None, new: FileRecord) -> list[EventKind]:
    """Return the events implied by moving from ``old`` to ``new``.

    Size, mtime and mode are compared independently, so one observation can
    produce any combination of the three change kinds, or none. A content
    change that keeps both size and mtime is invisible here.
    """
    if old is None:
        return [EventKind.CREATED]

    kinds: list[EventKind] = []
    if old.size != new.size:
        kinds.append(EventKind.SIZE_CHANGED)
    if old.mtime_ns != new.mtime_ns:
        kinds.append(EventKind.TIME_CHANGED)
    if old.mode != new.mode:
        kinds.append(EventKind.ATTRIBUTES_CHANGED)
    return kinds


class DiffEngine:
    def __init__(
        self,
        store: SnapshotStore,
        emit: EventSink | None = None,
        *,
        max_workers: int = 1,
    ) -> None:
        self._store = store
        self._emit = emit
        self._max_workers = max(1, max_workers)
        self._emit_lock = threading.Lock()

    @property
    def store(self) -> SnapshotStore:
        return self._store

    def seed(self, roots: Iterable[str | os.PathLike[str]]) -> int:
        """Fill the store from a strict walk of ``roots`` without emitting events."""
        for path, record in scan_roots(roots, strict=True):
            self._store.set(path, record)
        count = len(self._store)
        logger.info("Seeded snapshot with %d entries", count)
        return count

    def run_pass(self, roots: Iterable[str | os.PathLike[str]]) -> PassResult:
        roots = list(roots)
        events: list[WatchEvent] = []
        observed: set[str] = set()

        if self._max_workers > 1 and len(roots) > 1:
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(roots))) as pool:
                futures = [pool.submit(self._diff_root, root, events) for root in roots]
                for future in as_completed(futures):
                    observed |= future.result()
        else:
            for root in roots:
                observed |= self._diff_root(root, events)

        # Only sweep once every root has been walked for this pass.
        self._sweep(observed, events)

        result = PassResult(
            events=events,
            observed_count=len(observed),
            snapshot_count=len(self._store),
        )
        logger.debug(
            "Pass complete: %d observed, %d events, %d in snapshot",
            result.observed_count,
            len(result.events),
            result.snapshot_count,
        )
        return result

    def _diff_root(self, root: str | os.PathLike[str], events: list[WatchEvent]) -> set[str]:
        observed: set[str] = set()
        for path, record in walk(root):
            observed.add(path)
            previous = self._store.replace(path, record)
            for kind in classify_change(previous, record):
                self._publish(
                    WatchEvent(kind=kind, path=path, previous=previous, current=record),
                    events,
                )
        return observed

    def _sweep(self, observed: set[str], events: list[WatchEvent]) -> None:
        for path in sorted(self._store.paths() - observed):
            removed = self._store.delete(path)
            if removed is None:
                continue
            self._publish(WatchEvent(kind=EventKind.DELETED, path=path, previous=removed), events)

    def _publish(self, event: WatchEvent, events: list[WatchEvent]) -> None:
        with self._emit_lock:
            events.append(event)
            if self._emit is None:
                return
            # The store already holds the new record, so a failing sink must
            # not cut the walk or the deletion sweep short.
            try:
                self._emit(event)
            except Exception:
                logger.exception("Event sink failed for %s", event.message)

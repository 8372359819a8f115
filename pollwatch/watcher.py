from __future__ import annotations

import os
import threading
import time
from collections.abc import Callable, Iterable
from enum import Enum

from pollwatch.config import DEFAULT_INTERVAL_SECONDS, WatchConfig, normalize_directories
from pollwatch.diff_engine import DiffEngine, EventSink, PassResult
from pollwatch.errors import ConfigError, InitialWalkError, WatchError
from pollwatch.logging_utils import get_logger
from pollwatch.store import SnapshotStore


logger = get_logger(__name__)


class WatcherState(Enum):
    NEW = "new"
    INITIALIZING = "initializing"
    RUNNING = "running"
    FAILED = "failed"
    STOPPED = "stopped"


class FileWatcher:
    """Polls a fixed set of directory trees and reports changes once per tick.

    The snapshot store belongs to this watcher unless one is passed in. Passes
    never overlap: the tick loop waits for a pass to finish before scheduling
    the next one, and ``check_changes`` holds a pass lock.
    """

    def __init__(
        self,
        directories: Iterable[str | os.PathLike[str]],
        *,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        on_event: EventSink | None = None,
        store: SnapshotStore | None = None,
        max_workers: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.directories = normalize_directories(directories)
        if not self.directories:
            raise ConfigError("Please provide at least one directory to watch")
        if interval <= 0:
            raise ConfigError(f"Scan interval must be positive, got {interval}")

        self.interval = interval
        self._store = store if store is not None else SnapshotStore()
        self._engine = DiffEngine(self._store, on_event, max_workers=max_workers)
        self._clock = clock
        self._state = WatcherState.NEW
        self._state_lock = threading.Lock()
        self._pass_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._active_stop: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @classmethod
    def from_config(cls, config: WatchConfig, **kwargs) -> "FileWatcher":
        return cls(config.directories, interval=config.interval, **kwargs)

    @property
    def state(self) -> WatcherState:
        return self._state

    @property
    def store(self) -> SnapshotStore:
        return self._store

    def _transition(self, state: WatcherState) -> None:
        logger.debug("Watcher state %s -> %s", self._state.value, state.value)
        self._state = state

    def initialize(self) -> int:
        """Seed the snapshot from every directory. No events are emitted."""
        with self._state_lock:
            if self._state is not WatcherState.NEW:
                raise WatchError(f"Cannot initialize a watcher that is {self._state.value}")
            self._transition(WatcherState.INITIALIZING)

        try:
            count = self._engine.seed(self.directories)
        except InitialWalkError:
            self._store.clear()
            self._transition(WatcherState.FAILED)
            raise

        self._transition(WatcherState.RUNNING)
        return count

    def check_changes(self) -> PassResult:
        """Run one full pass: walk, diff, then the deletion sweep."""
        if self._state is not WatcherState.RUNNING:
            raise WatchError(f"Cannot scan while the watcher is {self._state.value}")
        with self._pass_lock:
            return self._engine.run_pass(self.directories)

    def run(self, stop_event: threading.Event | None = None) -> None:
        """Run one pass per tick until ``stop_event`` (or :meth:`stop`) fires.

        A pass that raises is logged and the loop keeps ticking; only the stop
        signal ends it.
        """
        if self._state is WatcherState.NEW:
            self.initialize()
        if self._state is not WatcherState.RUNNING:
            raise WatchError(f"Cannot run a watcher that is {self._state.value}")

        stop = stop_event if stop_event is not None else self._stop_event
        with self._state_lock:
            self._active_stop = stop
            if self._stop_event.is_set():
                stop.set()

        try:
            next_tick = self._clock() + self.interval
            while not stop.wait(max(0.0, next_tick - self._clock())):
                try:
                    self.check_changes()
                except Exception:
                    logger.exception("Scan pass failed, retrying on the next tick")
                next_tick += self.interval
                now = self._clock()
                if next_tick <= now:
                    missed = int((now - next_tick) // self.interval) + 1
                    logger.debug("Pass overran the interval, skipping %d tick(s)", missed)
                    next_tick += missed * self.interval
        finally:
            with self._state_lock:
                self._active_stop = None
            self._transition(WatcherState.STOPPED)

    def start(self) -> threading.Thread:
        """Seed synchronously, then run the tick loop on a daemon thread."""
        if self._thread is not None:
            raise WatchError("Watcher already started")
        if self._state is WatcherState.NEW:
            self.initialize()

        self._thread = threading.Thread(target=self.run, name="pollwatch-scanner", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        with self._state_lock:
            self._stop_event.set()
            if self._active_stop is not None:
                self._active_stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

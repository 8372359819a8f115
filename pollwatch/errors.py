from __future__ import annotations


class WatchError(RuntimeError):
    """Base class for errors surfaced to callers of pollwatch."""


class ConfigError(WatchError):
    """Raised when the watcher cannot be configured, e.g. no directories were given."""


class InitialWalkError(WatchError):
    """Raised when the seeding walk cannot read a root or stat one of its entries."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot scan {path}: {reason}")
        self.path = path
        self.reason = reason

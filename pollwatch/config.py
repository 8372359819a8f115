from __future__ import annotations

import json
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from pollwatch.errors import ConfigError


CONFIG_FILENAME = ".pollwatch.json"
DEFAULT_INTERVAL_SECONDS = 1.0


@dataclass(frozen=True, slots=True)
class WatchConfig:
    directories: tuple[str, ...]
    interval: float = DEFAULT_INTERVAL_SECONDS


def normalize_directories(directories: Iterable[str | os.PathLike[str]]) -> tuple[str, ...]:
    """Make every directory absolute and drop repeats, keeping first occurrence."""
    seen: dict[str, None] = {}
    for directory in directories:
        value = os.fspath(directory)
        if not value.strip():
            continue
        seen.setdefault(os.path.abspath(value), None)
    return tuple(seen)


def build_config(
    directories: Iterable[str | os.PathLike[str]] = (),
    *,
    config_file: Path | None = None,
) -> WatchConfig:
    combined: list[str | os.PathLike[str]] = []
    if config_file is not None:
        combined.extend(load_config(config_file))
    combined.extend(directories)

    normalized = normalize_directories(combined)
    if not normalized:
        raise ConfigError("Please provide at least one directory to watch")
    return WatchConfig(directories=normalized)


def load_config(path: Path) -> list[str]:
    """Read the directory list from a JSON config file.

    Relative entries are resolved against the config file's own directory.
    """
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc.strerror or exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    directories = data.get("directories", [])
    if not isinstance(directories, list) or not all(isinstance(d, str) for d in directories):
        raise ConfigError(f"`directories` in {path} must be a list of strings")

    base_dir = path.resolve().parent
    return [str(base_dir / Path(directory).expanduser()) for directory in directories]

from __future__ import annotations

import signal
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from pollwatch.config import WatchConfig, build_config
from pollwatch.errors import ConfigError, InitialWalkError
from pollwatch.logging_utils import configure_logging
from pollwatch.output import ConsoleEventSink, display_path, render_snapshot
from pollwatch.watcher import FileWatcher


app = typer.Typer(help="Poll directory trees and report created, modified and deleted files.")
console = Console()
err_console = Console(stderr=True)


def _load_watch_config(directories: tuple[str, ...], config_file: Path | None) -> WatchConfig | None:
    try:
        return build_config(directories, config_file=config_file)
    except (ConfigError, FileNotFoundError) as exc:
        err_console.print(f"[red]{escape(display_path(str(exc)))}[/red]")
        return None


def _watch(directories: tuple[str, ...], config_file: Path | None, workers: int) -> int:
    config = _load_watch_config(directories, config_file)
    if config is None:
        return 1

    err_console.print(
        "Starting file watcher for directories: "
        + ", ".join(display_path(directory) for directory in config.directories),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )
    watcher = FileWatcher.from_config(
        config,
        on_event=ConsoleEventSink(console),
        max_workers=workers,
    )

    previous_handler = signal.signal(signal.SIGTERM, lambda signum, frame: watcher.stop())
    try:
        watcher.initialize()
        watcher.run()
    except InitialWalkError as exc:
        err_console.print(f"[red]Initial scan failed:[/red] {escape(display_path(str(exc)))}")
        return 1
    except KeyboardInterrupt:
        watcher.stop()
        err_console.print("[yellow]Watcher stopped.[/yellow]")
        return 130
    finally:
        signal.signal(signal.SIGTERM, previous_handler)
    return 0


@app.command()
def watch(
    directories: list[str] | None = typer.Argument(
        None,
        help="Directories to watch.",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        help="JSON file with a `directories` list, combined with any positional directories.",
    ),
    workers: int = typer.Option(
        1,
        "--workers",
        min=1,
        help="Walk up to this many directories concurrently during each pass.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log scan details to stderr."),
) -> None:
    """Report changes under DIRECTORIES once per second until interrupted."""
    configure_logging(verbose, console=err_console)
    raise typer.Exit(code=_watch(tuple(directories or ()), config_file, workers))


def _scan(directories: tuple[str, ...], config_file: Path | None) -> int:
    config = _load_watch_config(directories, config_file)
    if config is None:
        return 1

    watcher = FileWatcher.from_config(config)
    try:
        with err_console.status("Scanning directories..."):
            count = watcher.initialize()
    except InitialWalkError as exc:
        err_console.print(f"[red]Scan failed:[/red] {escape(display_path(str(exc)))}")
        return 1

    render_snapshot(console, watcher.store.snapshot())
    entries = "entry" if count == 1 else "entries"
    directories_label = "directory" if len(config.directories) == 1 else "directories"
    console.print(f"{count} {entries} across {len(config.directories)} {directories_label}")
    return 0


@app.command()
def scan(
    directories: list[str] | None = typer.Argument(
        None,
        help="Directories to scan.",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        help="JSON file with a `directories` list, combined with any positional directories.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log scan details to stderr."),
) -> None:
    """Walk DIRECTORIES once and print the resulting snapshot."""
    configure_logging(verbose, console=err_console)
    raise typer.Exit(code=_scan(tuple(directories or ()), config_file))

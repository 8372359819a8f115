from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from pollwatch.cli import app
from pollwatch.watcher import FileWatcher


runner = CliRunner()


def test_watch_without_directories_fails() -> None:
    result = runner.invoke(app, ["watch"])
    assert result.exit_code == 1
    assert "at least one directory" in result.output


def test_watch_with_unreadable_root_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["watch", str(tmp_path / "missing")])
    assert result.exit_code == 1
    assert "Initial scan failed" in result.output


def test_watch_prints_events(watched_dir: Path, monkeypatch) -> None:
    target = watched_dir / "new.txt"

    def one_pass(self, stop_event=None) -> None:
        target.write_text("hello", encoding="utf-8")
        self.check_changes()

    monkeypatch.setattr(FileWatcher, "run", one_pass)

    result = runner.invoke(app, ["watch", str(watched_dir)])

    assert result.exit_code == 0
    assert "Starting file watcher for directories:" in result.output
    assert f"File created: {target}" in result.output.splitlines()


def test_watch_interrupt_exits_130(watched_dir: Path, monkeypatch) -> None:
    def interrupted(self, stop_event=None) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr(FileWatcher, "run", interrupted)

    result = runner.invoke(app, ["watch", str(watched_dir)])

    assert result.exit_code == 130
    assert "Watcher stopped" in result.output


def test_scan_prints_snapshot_summary(watched_dir: Path, make_file) -> None:
    make_file(watched_dir / "a.txt", b"abc")
    make_file(watched_dir / "sub" / "b.txt", b"de")

    result = runner.invoke(app, ["scan", str(watched_dir)])

    assert result.exit_code == 0
    assert "4 entries across 1 directory" in result.output


def test_scan_reads_config_file(tmp_path: Path, watched_dir: Path) -> None:
    config_file = tmp_path / "watch.json"
    config_file.write_text('{"directories": ["D"]}', encoding="utf-8")

    result = runner.invoke(app, ["scan", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "1 entry across 1 directory" in result.output


def test_scan_missing_config_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["scan", "--config", str(tmp_path / "nope.json")])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_scan_missing_root_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["scan", str(tmp_path / "missing")])
    assert result.exit_code == 1
    assert "Scan failed" in result.output


def test_scan_with_directory_as_config_file_fails_cleanly(tmp_path: Path) -> None:
    result = runner.invoke(app, ["scan", "--config", str(tmp_path)])

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Cannot read config file" in " ".join(result.output.split())


def test_scan_with_non_utf8_config_file_fails_cleanly(tmp_path: Path) -> None:
    config_file = tmp_path / "watch.json"
    config_file.write_bytes('{"directories": ["café"]}'.encode("latin-1"))

    result = runner.invoke(app, ["scan", "--config", str(config_file)])

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "not valid UTF-8" in " ".join(result.output.split())


def test_watch_interrupt_during_initial_scan_exits_130(watched_dir: Path, monkeypatch) -> None:
    def interrupted(self) -> int:
        raise KeyboardInterrupt

    monkeypatch.setattr(FileWatcher, "initialize", interrupted)

    result = runner.invoke(app, ["watch", str(watched_dir)])

    assert result.exit_code == 130
    assert "Watcher stopped" in result.output

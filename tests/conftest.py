"""
Pytest configuration and shared fixtures for wintune tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

import os
from pathlib import Path
import subprocess
from typing import Any

import pytest
import yaml

from wintune.config import ToolkitConfig, build_config
from wintune.logging import SilentLogger, set_global_logger

WINGET_DIR = "Microsoft.DesktopAppInstaller_{version}_x64__8wekyb3d8bbwe"


class RecordingLogger:
    """Logger that records every message as (level, prefix, message)."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, str]] = []

    def step(self, step: int, total: int, message: str) -> None:
        self.records.append(("step", "", message))

    def info(self, prefix: str, message: str) -> None:
        self.records.append(("info", prefix, message))

    def warning(self, prefix: str, message: str) -> None:
        self.records.append(("warning", prefix, message))

    def error(self, prefix: str, message: str) -> None:
        self.records.append(("error", prefix, message))

    def verbose(self, prefix: str, message: str) -> None:
        self.records.append(("verbose", prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.records.append(("debug", prefix, message))

    def messages(self, level: str) -> list[str]:
        return [m for lvl, _, m in self.records if lvl == level]


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Reset the global logger so CLI tests don't leak output settings."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture(autouse=True)
def no_config_env(monkeypatch):
    """Make sure a developer's WINTUNE_CONFIG never leaks into tests."""
    monkeypatch.delenv("WINTUNE_CONFIG", raising=False)


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def create_yaml_file(tmp_path: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("wintune.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def winget_root(tmp_path: Path) -> Path:
    """Stand-in for C:\\Program Files\\WindowsApps."""
    root = tmp_path / "WindowsApps"
    root.mkdir()
    return root


@pytest.fixture
def install_winget(winget_root: Path):
    """
    Factory fixture that creates a fake winget.exe inside a versioned
    DesktopAppInstaller directory and returns its path.
    """

    def _install(version: str = "1.22.11261.0") -> Path:
        exe = winget_root / WINGET_DIR.format(version=version) / "winget.exe"
        exe.parent.mkdir(parents=True, exist_ok=True)
        exe.write_bytes(b"MZ")
        return exe

    return _install


@pytest.fixture
def config_data(tmp_path: Path, winget_root: Path) -> dict[str, Any]:
    """Configuration overrides pointing every path into tmp_path."""
    return {
        "winget": {
            "search_paths": [
                str(winget_root / WINGET_DIR.format(version="*") / "winget.exe"),
                str(tmp_path / "LocalAppData" / "Microsoft" / "WindowsApps" / "winget.exe"),
            ],
            "export_path": str(tmp_path / "temp" / "winget-export.json"),
            "timeout": 30,
        },
        "detector": {
            "log_file": str(tmp_path / "detector" / "WingetDetection.log"),
        },
        "logsync": {
            "source_dir": str(tmp_path / "wau" / "logs"),
            "destination_dir": str(tmp_path / "ime" / "Logs"),
        },
        "generator": {
            "output_dir": str(tmp_path / "detections"),
        },
    }


@pytest.fixture
def toolkit_config(config_data: dict[str, Any]) -> ToolkitConfig:
    return build_config(config_data)


@pytest.fixture
def completed():
    """Factory for subprocess.CompletedProcess results."""

    def _completed(
        stdout: str = "", stderr: str = "", returncode: int = 0
    ) -> subprocess.CompletedProcess:
        return subprocess.CompletedProcess(
            args=["winget.exe"], returncode=returncode, stdout=stdout, stderr=stderr
        )

    return _completed


def set_mtime(path: Path, mtime: float) -> None:
    os.utime(path, (mtime, mtime))


def snapshot(*roots: Path) -> dict[str, tuple[int, int, bytes]]:
    """Map every path under ``roots`` to (mtime_ns, size, content)."""
    state: dict[str, tuple[int, int, bytes]] = {}
    for root in roots:
        if not root.exists():
            continue
        for path in sorted(root.rglob("*")):
            st = path.stat()
            content = path.read_bytes() if path.is_file() else b""
            state[str(path)] = (st.st_mtime_ns, st.st_size, content)
    return state


@pytest.fixture
def fs_snapshot():
    return snapshot


@pytest.fixture
def write_log():
    """
    Factory fixture that writes a log file with a fixed modification time.

    Usage:
        write_log(path, "content", mtime=1_700_000_000)
    """

    def _write(path: Path, content: str, mtime: float | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        if mtime is not None:
            set_mtime(path, mtime)
        return path

    return _write

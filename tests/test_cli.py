"""
Tests for wintune.cli module.

Tests the command-line interface including:
- Exit codes for compliant and non-compliant outcomes
- Configuration errors reported before any command runs
- Interactive identifier prompt for 'generate'
- Argument parsing and --version

These are UNIT tests; subprocess.run is mocked and all paths live in tmp_path.
"""

from __future__ import annotations

from importlib.metadata import version
import json
from unittest.mock import patch

import pytest

from wintune import __version__
from wintune.cli import build_parser, main

pytestmark = pytest.mark.unit

RUN = "wintune.winget.client.subprocess.run"
T1 = 1_700_000_000


@pytest.fixture
def config_file(create_yaml_file, config_data):
    return create_yaml_file("wintune.yaml", config_data)


def run_cli(*argv: str) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(list(argv))
    return exc_info.value.code


class TestParser:
    """Tests for argument parsing."""

    def test_version(self, capsys):
        """Test --version output."""
        assert run_cli("--version") == 0
        assert f"wintune {__version__}" in capsys.readouterr().out

    def test_version_matches_package_metadata(self):
        """Test that --version reports the installed distribution version."""
        assert version("wintune") == __version__

    def test_command_required(self):
        """Test that a subcommand is mandatory."""
        assert run_cli() == 2

    def test_common_options(self):
        """Test that every command accepts --config, -v and -d."""
        parser = build_parser()
        args = parser.parse_args(["detect-logs", "--config", "x.yaml", "-v", "-d"])

        assert args.config == "x.yaml"
        assert args.verbose is True
        assert args.debug is True

    def test_generate_identifier_optional(self):
        args = build_parser().parse_args(["generate"])
        assert args.identifier is None


class TestCheckWinget:
    """Tests for 'wintune check-winget'."""

    def test_compliant_exit_zero(self, config_file, install_winget, completed, capsys):
        install_winget()
        with patch(RUN, return_value=completed(stdout="v1.22.11261")):
            code = run_cli("check-winget", "--config", str(config_file))

        assert code == 0
        assert "[COMPLIANT]" in capsys.readouterr().out

    def test_missing_winget_exit_one(self, config_file, capsys):
        code = run_cli("check-winget", "--config", str(config_file))

        assert code == 1
        assert "[NON-COMPLIANT] winget not found" in capsys.readouterr().out

    def test_minimum_version_flag(self, config_file, install_winget, completed):
        install_winget()
        with patch(RUN, return_value=completed(stdout="v1.22.11261")):
            code = run_cli(
                "check-winget", "--config", str(config_file), "--minimum-version", "2.0"
            )

        assert code == 1

    def test_invalid_minimum_version(self, config_file, capsys):
        code = run_cli(
            "check-winget", "--config", str(config_file), "--minimum-version", "latest"
        )

        assert code == 1
        assert "Error:" in capsys.readouterr().out

    def test_bad_config_exit_one(self, tmp_path, capsys):
        """Test that a missing config file fails before checking anything."""
        code = run_cli("check-winget", "--config", str(tmp_path / "missing.yaml"))

        assert code == 1
        assert "file not found" in capsys.readouterr().out

    def test_config_from_environment(self, config_file, monkeypatch, capsys):
        """Test that WINTUNE_CONFIG is honored by the CLI."""
        monkeypatch.setenv("WINTUNE_CONFIG", str(config_file))

        assert run_cli("check-winget") == 1
        assert "winget not found" in capsys.readouterr().out


class TestLogCommands:
    """Tests for 'wintune detect-logs' and 'wintune remediate-logs'."""

    def test_detect_remediate_detect(self, config_file, tmp_path, write_log, capsys):
        """Test the Intune detection/remediation cycle through the CLI."""
        write_log(tmp_path / "wau" / "logs" / "install.log", "a\n", mtime=T1)

        assert run_cli("detect-logs", "--config", str(config_file)) == 1
        assert run_cli("remediate-logs", "--config", str(config_file)) == 0
        assert run_cli("detect-logs", "--config", str(config_file)) == 0

        out = capsys.readouterr().out
        assert "[NON-COMPLIANT] install.log" in out
        assert "[SUCCESS] Logs synchronized" in out
        assert (tmp_path / "ime" / "Logs" / "WAU-install.log").is_file()

    def test_source_absent(self, config_file, capsys):
        """Test that detection is compliant but remediation fails without a source."""
        assert run_cli("detect-logs", "--config", str(config_file)) == 0
        assert run_cli("remediate-logs", "--config", str(config_file)) == 1
        assert "Source directory not found" in capsys.readouterr().out


class TestGenerate:
    """Tests for 'wintune generate'."""

    LISTING = "Name   Id         Version  Source\n7-Zip  7zip.7zip  23.01    winget\n"

    def test_generate_with_argument(self, config_file, install_winget, completed, tmp_path, capsys):
        install_winget()
        with patch(RUN, return_value=completed(stdout=self.LISTING)):
            code = run_cli("generate", "7zip.7zip", "--config", str(config_file))

        assert code == 0
        assert (tmp_path / "detections" / "Detect-7-Zip.ps1").is_file()
        assert "[SUCCESS]" in capsys.readouterr().out

    def test_generate_prompts(self, config_file, install_winget, completed, tmp_path, monkeypatch):
        """Test that the identifier is read from stdin when omitted."""
        install_winget()
        monkeypatch.setattr("builtins.input", lambda prompt: "7zip.7zip")
        with patch(RUN, return_value=completed(stdout=self.LISTING)):
            code = run_cli(
                "generate", "--config", str(config_file), "--output-dir", str(tmp_path / "out")
            )

        assert code == 0
        assert (tmp_path / "out" / "Detect-7-Zip.ps1").is_file()

    def test_generate_empty_prompt(self, config_file, monkeypatch, tmp_path, capsys):
        """Test that an empty answer fails without writing a file."""
        monkeypatch.setattr("builtins.input", lambda prompt: "")
        with patch(RUN) as run:
            code = run_cli("generate", "--config", str(config_file))

        assert code == 1
        run.assert_not_called()
        assert "No package identifier" in capsys.readouterr().out
        assert not (tmp_path / "detections").exists()

    def test_generate_not_found(self, config_file, install_winget, completed, tmp_path):
        install_winget()
        result = completed(stdout="No package found matching input criteria.", returncode=1)
        with patch(RUN, return_value=result):
            code = run_cli("generate", "Nope.Nope", "--config", str(config_file))

        assert code == 1
        assert not (tmp_path / "detections").exists()


class TestDetectPackage:
    """Tests for 'wintune detect-package'."""

    def test_installed(self, config_file, config_data, install_winget, completed, capsys):
        install_winget()
        export_path = config_data["winget"]["export_path"]

        def fake_run(cmd, **kwargs):
            data = {"Sources": [{"Packages": [{"PackageIdentifier": "7zip.7zip"}]}]}
            with open(export_path, "w", encoding="utf-8") as f:
                json.dump(data, f)
            return completed()

        with patch(RUN, side_effect=fake_run):
            code = run_cli("detect-package", "7zip.7zip", "--config", str(config_file))

        assert code == 0
        assert capsys.readouterr().out.strip().endswith("Installed")

    def test_winget_missing(self, config_file):
        assert run_cli("detect-package", "7zip.7zip", "--config", str(config_file)) == 1

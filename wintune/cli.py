# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for wintune.

This module provides the main CLI entry point for the wintune tool. Each
command is a standalone Intune detection or remediation step and reports
its outcome through the process exit code.

Commands:

    check-winget: Check winget is installed and meets the minimum version
    detect-logs: Check whether Winget-AutoUpdate logs need collecting
    remediate-logs: Copy Winget-AutoUpdate logs into the Intune log folder
    generate: Generate a detection script for a winget package
    detect-package: Check whether a winget package is installed

Example:
    Check winget as an Intune detection script:
        ```bash
        $ wintune check-winget --minimum-version 1.7.11132
        ```

    Log collection remediation pair:
        ```bash
        $ wintune detect-logs
        $ wintune remediate-logs
        ```

    Generate a detection script:
        ```bash
        $ wintune generate 7zip.7zip --output-dir detections/
        ```

Exit Codes:

- 0: Compliant / success
- 1: Non-compliant / failure

Note:
    The CLI uses argparse for command parsing. Each command has its own
    handler function (cmd_<command>). Verbose mode shows full tracebacks on
    errors for debugging. Debug mode implies verbose mode.
"""

from __future__ import annotations

import argparse
from importlib.metadata import version
from pathlib import Path
import sys

from wintune.config import ToolkitConfig, load_config
from wintune.detection import detect_installed_package, generate_detection_script
from wintune.detector import check_winget
from wintune.exceptions import ConfigError, SyncError, ToolError, WintuneError
from wintune.logging import get_logger, set_global_logger
from wintune.logsync import detect_log_sync, remediate_log_sync


def _print_error(args: argparse.Namespace, err: BaseException) -> None:
    print(f"Error: {err}")
    if args.verbose or args.debug:
        import traceback

        traceback.print_exc()


def _configure(args: argparse.Namespace) -> ToolkitConfig | None:
    """Configure the global logger and load configuration.

    Returns:
        The configuration, or None if it could not be loaded (the error has
        already been printed).
    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    try:
        return load_config(Path(args.config) if args.config else None)
    except ConfigError as err:
        _print_error(args, err)
        return None


def cmd_check_winget(args: argparse.Namespace) -> int:
    """Handler for 'wintune check-winget' command.

    Returns:
        Exit code (0 if winget is present and new enough, 1 otherwise).

    Note:
        Compliant runs print one line and write nothing to the detector log.
    """
    config = _configure(args)
    if config is None:
        return 1

    try:
        result = check_winget(
            config.winget, config.detector, minimum_version=args.minimum_version
        )
    except WintuneError as err:
        _print_error(args, err)
        return 1

    if result.compliant:
        print(f"[COMPLIANT] {result.message}")
        return 0

    print(f"[NON-COMPLIANT] {result.message}")
    return 1


def cmd_detect_logs(args: argparse.Namespace) -> int:
    """Handler for 'wintune detect-logs' command.

    Read-only: does not touch the file system.

    Returns:
        Exit code (0 if no log needs copying, 1 if remediation is needed).
    """
    config = _configure(args)
    if config is None:
        return 1

    try:
        result = detect_log_sync(config.logsync)
    except OSError as err:
        _print_error(args, err)
        return 1

    if result.compliant:
        print("[COMPLIANT] Logs are up to date")
        return 0

    pending = result.pending
    print(f"[NON-COMPLIANT] {pending.name} needs to be copied to {pending.destination_path}")
    return 1


def cmd_remediate_logs(args: argparse.Namespace) -> int:
    """Handler for 'wintune remediate-logs' command.

    Returns:
        Exit code (0 on success, 1 if the source directory is missing or any
        copy failed).
    """
    config = _configure(args)
    if config is None:
        return 1

    try:
        result = remediate_log_sync(config.logsync)
    except (SyncError, OSError) as err:
        _print_error(args, err)
        return 1

    print("=" * 70)
    print("LOG SYNC RESULTS")
    print("=" * 70)
    print(f"Destination:     {config.logsync.destination_dir}")
    print(f"Copied:          {len(result.copied)}")
    print(f"Skipped:         {', '.join(result.skipped) or '-'}")
    print(f"Errors:          {len(result.errors)}")
    print("=" * 70)

    if result.success:
        print()
        print("[SUCCESS] Logs synchronized")
        return 0

    print()
    print(f"[FAILED] Log synchronization failed with {len(result.errors)} error(s).")
    return 1


def cmd_generate(args: argparse.Namespace) -> int:
    """Handler for 'wintune generate' command.

    Prompts for the identifier when it is not given on the command line.

    Returns:
        Exit code (0 if a script was written, 1 otherwise).

    Note:
        No file is written on any failure path.
    """
    config = _configure(args)
    if config is None:
        return 1

    identifier = args.identifier
    if not identifier:
        try:
            identifier = input("winget package identifier: ")
        except EOFError:
            identifier = ""

    output_dir = Path(args.output_dir) if args.output_dir else None

    try:
        result = generate_detection_script(identifier, config, output_dir=output_dir)
    except (ConfigError, ToolError) as err:
        _print_error(args, err)
        return 1
    except WintuneError as err:
        # Catch any other wintune errors we might have missed
        _print_error(args, err)
        return 1
    except OSError as err:
        _print_error(args, err)
        return 1

    print("=" * 70)
    print("DETECTION SCRIPT")
    print("=" * 70)
    print(f"Identifier:      {result.identifier}")
    print(f"Display Name:    {result.display_name}")
    print(f"Script Path:     {result.script_path}")
    print("=" * 70)
    print()
    print("[SUCCESS] Detection script generated!")
    return 0


def cmd_detect_package(args: argparse.Namespace) -> int:
    """Handler for 'wintune detect-package' command.

    Returns:
        Exit code (0 if the package is installed, 1 otherwise).
    """
    config = _configure(args)
    if config is None:
        return 1

    try:
        result = detect_installed_package(args.identifier, config.winget)
    except WintuneError as err:
        _print_error(args, err)
        return 1

    if result.installed:
        print("Installed")
        return 0
    return 1


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (default: $WINTUNE_CONFIG or built-in defaults)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands registered."""
    parser = argparse.ArgumentParser(
        prog="wintune",
        description="wintune - winget detection and remediation scripts for Intune",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"wintune {version('wintune')}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'check-winget' command
    parser_check = subparsers.add_parser(
        "check-winget",
        help="Check winget is installed and meets the minimum version",
        description="Locate winget, query its version and compare it to the required minimum.",
    )
    parser_check.add_argument(
        "--minimum-version",
        default=None,
        help="Minimum required winget version (default: from config)",
    )
    _add_common_arguments(parser_check)
    parser_check.set_defaults(func=cmd_check_winget)

    # 'detect-logs' command
    parser_detect_logs = subparsers.add_parser(
        "detect-logs",
        help="Check whether monitored logs need to be copied (read-only)",
        description="Compare source and destination log timestamps without changing any file.",
    )
    _add_common_arguments(parser_detect_logs)
    parser_detect_logs.set_defaults(func=cmd_detect_logs)

    # 'remediate-logs' command
    parser_remediate_logs = subparsers.add_parser(
        "remediate-logs",
        help="Copy monitored logs into the destination log directory",
        description="Copy each monitored log to the destination under the configured prefix.",
    )
    _add_common_arguments(parser_remediate_logs)
    parser_remediate_logs.set_defaults(func=cmd_remediate_logs)

    # 'generate' command
    parser_generate = subparsers.add_parser(
        "generate",
        help="Generate a detection script for a winget package",
        description="Look up a winget identifier and write a standalone PowerShell detection script.",
    )
    parser_generate.add_argument(
        "identifier",
        nargs="?",
        default=None,
        help="winget package identifier (prompted for if omitted)",
    )
    parser_generate.add_argument(
        "--output-dir",
        default=None,
        help="Directory for the generated script (default: from config or current directory)",
    )
    _add_common_arguments(parser_generate)
    parser_generate.set_defaults(func=cmd_generate)

    # 'detect-package' command
    parser_detect_package = subparsers.add_parser(
        "detect-package",
        help="Check whether a winget package is installed",
        description="Export the installed winget catalog and look for an exact identifier match.",
    )
    parser_detect_package.add_argument(
        "identifier",
        help="winget package identifier",
    )
    _add_common_arguments(parser_detect_package)
    parser_detect_package.set_defaults(func=cmd_detect_package)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the wintune CLI.

    This function is registered as the 'wintune' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

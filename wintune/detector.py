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

"""winget presence and minimum-version detection.

This is the detection half of an Intune remediation that installs or
repairs winget under the System account. It answers one question: is a
runnable winget at or above the required version present on this device?

Detection Logic:
    1. Locate winget.exe via the configured wildcard search paths
       (last match after sorting wins).
    2. Run ``winget --version`` and capture stdout.
    3. Strip whitespace and the "v" prefix, parse as a dotted version.
    4. Compliant iff installed >= required.

Logging:
    A compliant result returns without writing anything. Every
    non-compliant outcome (not found, failed to run, unparseable output,
    too old) writes exactly one diagnostic entry to the detector log file.

Example:
    ```python
    from wintune.config import load_config
    from wintune.detector import check_winget

    config = load_config()
    result = check_winget(config.winget, config.detector)
    raise SystemExit(0 if result.compliant else 1)
    ```
"""

from __future__ import annotations

from wintune.config import DetectorSettings, WingetSettings
from wintune.exceptions import ToolError, VersionError
from wintune.logging import FileLogger, Logger, get_global_logger
from wintune.results import DetectResult
from wintune.versioning import VersionString
from wintune.winget.client import WingetClient
from wintune.winget.locate import find_executable


def check_winget(
    winget: WingetSettings,
    detector: DetectorSettings,
    *,
    minimum_version: str | None = None,
    logger: Logger | None = None,
) -> DetectResult:
    """Check that winget is installed, runnable and new enough.

    Args:
        winget: winget search paths, version prefix, timeout and default
            minimum version.
        detector: Log file that receives non-compliance diagnostics.
        minimum_version: Overrides ``winget.minimum_version`` when given.
        logger: Console logger mirrored by the file logger. Defaults to the
            global logger.

    Returns:
        DetectResult. ``compliant`` is True only when the parsed version is
        greater than or equal to the required version.

    Raises:
        VersionError: If the required version itself is malformed.

    Note:
        The function never raises for problems with the installed winget;
        those are reported as non-compliant results.
    """
    console = logger if logger is not None else get_global_logger()
    required_text = minimum_version or winget.minimum_version
    required = VersionString.parse(required_text)

    def non_compliant(message: str, **fields) -> DetectResult:
        log = FileLogger(detector.log_file, detector.max_log_bytes, mirror=console)
        log.warning("DETECTOR", message)
        return DetectResult(
            compliant=False, required_version=required_text, message=message, **fields
        )

    executable = find_executable(winget.search_paths)
    if executable is None:
        return non_compliant("winget not found")

    client = WingetClient(executable, timeout=winget.timeout, logger=console)
    try:
        raw = client.version()
    except ToolError as err:
        return non_compliant(f"winget failed to run: {err}", executable=executable)

    try:
        installed = VersionString.parse(raw, prefix=winget.version_prefix)
    except VersionError:
        return non_compliant(
            f"Could not parse winget version output: {raw!r}", executable=executable
        )

    if installed < required:
        return non_compliant(
            f"winget {installed} is older than required {required}",
            executable=executable,
            version=str(installed),
        )

    return DetectResult(
        compliant=True,
        required_version=required_text,
        executable=executable,
        version=str(installed),
        message=f"winget {installed} meets required {required}",
    )

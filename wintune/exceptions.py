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

"""Exception hierarchy for wintune.

This module defines a custom exception hierarchy that allows library users
to distinguish between different types of errors:

- ConfigError: Configuration or input errors (YAML parse, invalid settings,
  unknown catalog identifiers)
- VersionError: Malformed version strings
- ToolError: External tool failures (winget missing, crashed, timed out)
- SyncError: Log synchronizer invariant violations

All exceptions inherit from WintuneError, allowing callers to catch every
wintune error with a single except clause if needed.

Example:
    Catching specific error types:
        ```python
        from wintune.detection import generate_detection_script
        from wintune.exceptions import ConfigError, ToolError

        try:
            result = generate_detection_script("7zip.7zip", config)
        except ConfigError as e:
            print(f"Configuration error: {e}")
        except ToolError as e:
            print(f"winget error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "WintuneError",
    "ConfigError",
    "VersionError",
    "ToolError",
    "SyncError",
]


class WintuneError(Exception):
    """Base exception for all wintune errors."""

    pass


class ConfigError(WintuneError):
    """Raised for configuration and input errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, invalid structure)
    - Missing or invalid configuration fields
    - Empty or invalid package identifiers
    - Identifiers that cannot be found in the winget catalog
    """

    pass


class VersionError(WintuneError):
    """Raised when a version string is not a dotted numeric version.

    Example:
        ```python
        from wintune.versioning import VersionString

        VersionString.parse("1.7.x")  # raises VersionError
        ```
    """

    pass


class ToolError(WintuneError):
    """Raised for external tool failures.

    This exception is raised when there are problems with:

    - Locating the winget executable
    - Launching winget (missing runtime dependency, access denied)
    - Non-zero exit codes and timeouts
    - Output that cannot be parsed (e.g., a corrupt export file)
    """

    pass


class SyncError(WintuneError):
    """Raised when the log synchronizer is asked to run in an invalid state.

    The remediation half raises this when the source log directory does not
    exist, since detection never requests remediation in that case.
    """

    pass

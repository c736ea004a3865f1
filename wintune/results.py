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

"""Public API return types for wintune.

This module defines dataclasses for return values from public API functions:
the winget compliance check, both halves of the log synchronizer, script
generation, and installed-package detection.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Note:
    Only public API return types belong in this module. Domain types
    (like LogFileRecord and PackageRecord) remain co-located with their
    related logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wintune.logsync import LogFileRecord
    from wintune.winget.catalog import PackageRecord


@dataclass(frozen=True)
class DetectResult:
    """Result from checking winget presence and version.

    Attributes:
        compliant: True iff winget was found and meets the minimum version.
        required_version: Minimum version that was checked against.
        executable: Path to the winget executable, if one was found.
        version: Version reported by winget, if it could be parsed.
        message: Human-readable reason for the outcome.
    """

    compliant: bool
    required_version: str
    executable: Path | None = None
    version: str | None = None
    message: str = ""


@dataclass(frozen=True)
class SyncCheckResult:
    """Result from the read-only log synchronization check.

    Attributes:
        compliant: True if no monitored file needs copying.
        source_present: False if the source log directory does not exist.
        pending: First record found that needs remediation, if any.
    """

    compliant: bool
    source_present: bool
    pending: LogFileRecord | None = None


@dataclass(frozen=True)
class SyncResult:
    """Result from copying log files into the destination directory.

    Attributes:
        success: False if the source directory was missing or a copy failed.
        copied: Destination paths written during this run.
        skipped: Monitored file names whose source file was absent.
        errors: Error messages for failed copies.
    """

    success: bool
    copied: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GenerateResult:
    """Result from generating a detection script.

    Attributes:
        identifier: Catalog identifier embedded in the script.
        display_name: Sanitized display name used for the file name.
        script_path: Path to the written script.
    """

    identifier: str
    display_name: str
    script_path: Path


@dataclass(frozen=True)
class PackageDetectResult:
    """Result from checking whether a package is installed.

    Attributes:
        identifier: Identifier that was searched for.
        installed: True if an exact identifier match was exported.
        package: The matching record, if installed.
    """

    identifier: str
    installed: bool
    package: PackageRecord | None = None

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

"""Log synchronization for Intune log collection.

Winget-AutoUpdate writes its logs under its own install directory, which
Intune's "Collect diagnostics" does not pick up. This module copies the
monitored logs into the Intune Management Extension log directory under a
prefixed name (``install.log`` -> ``WAU-install.log``), as a detection and
remediation pair.

Detection (detect_log_sync):
    Read-only. Never creates, modifies or deletes a file, and never writes
    to the synchronizer log file.

    - Source directory absent -> compliant (nothing to collect).
    - Per monitored file: source missing -> skip; destination missing or
      source strictly newer -> non-compliant (stops at the first one).

Remediation (remediate_log_sync):
    Idempotent copy.

    - Creates the destination directory if needed.
    - Source directory absent -> failure. Detection never requests
      remediation in that state, so this is logged as an invariant
      violation.
    - Per monitored file: source missing -> informational skip; otherwise
      copy with metadata (mtime preserved), overwriting.
    - A failed copy is logged and fails the run; remaining files are still
      copied.

Example:
    ```python
    from wintune.config import load_config
    from wintune.logsync import detect_log_sync, remediate_log_sync

    settings = load_config().logsync
    if not detect_log_sync(settings).compliant:
        remediate_log_sync(settings)
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import shutil

from wintune.config import LogSyncSettings
from wintune.exceptions import SyncError
from wintune.logging import FileLogger, Logger, get_global_logger
from wintune.results import SyncCheckResult, SyncResult


@dataclass(frozen=True)
class LogFileRecord:
    """State of one monitored log file.

    Attributes:
        name: Monitored file name (e.g., "install.log").
        source_path: Path in the source directory.
        destination_path: Prefixed path in the destination directory.
        source_mtime: Source modification time (epoch seconds).
        destination_mtime: Destination modification time, or None if the
            file has never been copied.
    """

    name: str
    source_path: Path
    destination_path: Path
    source_mtime: float
    destination_mtime: float | None = None

    @property
    def needs_remediation(self) -> bool:
        """True iff the destination is absent or the source is strictly newer."""
        if self.destination_mtime is None:
            return True
        return self.source_mtime > self.destination_mtime


def inspect_log_file(settings: LogSyncSettings, name: str) -> LogFileRecord | None:
    """Build a LogFileRecord for ``name`` from the file system.

    Only stats files; never writes.

    Returns:
        The record, or None if the source file does not exist.
    """
    source = settings.source_dir / name
    if not source.is_file():
        return None
    destination = settings.destination_for(name)
    destination_mtime = (
        destination.stat().st_mtime if destination.is_file() else None
    )
    return LogFileRecord(
        name=name,
        source_path=source,
        destination_path=destination,
        source_mtime=source.stat().st_mtime,
        destination_mtime=destination_mtime,
    )


def detect_log_sync(
    settings: LogSyncSettings, *, logger: Logger | None = None
) -> SyncCheckResult:
    """Check whether any monitored log needs to be copied.

    Args:
        settings: Source/destination directories and monitored files.
        logger: Console logger. Defaults to the global logger. Nothing is
            written to disk.

    Returns:
        SyncCheckResult with the first record needing remediation, if any.
    """
    logger = logger if logger is not None else get_global_logger()

    if not settings.source_dir.is_dir():
        logger.verbose(
            "LOGSYNC", f"Source directory not found, nothing to sync: {settings.source_dir}"
        )
        return SyncCheckResult(compliant=True, source_present=False)

    for name in settings.files:
        record = inspect_log_file(settings, name)
        if record is None:
            logger.verbose("LOGSYNC", f"Source log not present, skipping: {name}")
            continue
        if record.needs_remediation:
            if record.destination_mtime is None:
                logger.info("LOGSYNC", f"{record.destination_path.name} has not been copied yet")
            else:
                logger.info("LOGSYNC", f"{name} is newer than {record.destination_path.name}")
            return SyncCheckResult(compliant=False, source_present=True, pending=record)
        logger.verbose("LOGSYNC", f"{record.destination_path.name} is up to date")

    return SyncCheckResult(compliant=True, source_present=True)


def remediate_log_sync(
    settings: LogSyncSettings, *, logger: Logger | None = None
) -> SyncResult:
    """Copy monitored logs into the destination directory.

    Args:
        settings: Source/destination directories, monitored files, prefix
            and synchronizer log file.
        logger: Console logger mirrored by the synchronizer log file.
            Defaults to the global logger.

    Returns:
        SyncResult describing copied, skipped and failed files.

    Raises:
        SyncError: If the source directory does not exist.
        OSError: If the destination directory cannot be created.
    """
    console = logger if logger is not None else get_global_logger()

    settings.destination_dir.mkdir(parents=True, exist_ok=True)
    log = FileLogger(settings.log_path, settings.max_log_bytes, mirror=console)
    log.info("LOGSYNC", "Starting log synchronization")

    if not settings.source_dir.is_dir():
        message = (
            f"Source directory not found: {settings.source_dir}. "
            "Remediation should not run when detection is compliant."
        )
        log.error("LOGSYNC", message)
        raise SyncError(message)

    copied: list[Path] = []
    skipped: list[str] = []
    errors: list[str] = []

    for name in settings.files:
        source = settings.source_dir / name
        if not source.is_file():
            log.info("LOGSYNC", f"Source log not present, skipping: {name}")
            skipped.append(name)
            continue

        destination = settings.destination_for(name)
        try:
            shutil.copy2(source, destination)
        except OSError as err:
            message = f"Failed to copy {source} to {destination}: {err}"
            log.error("LOGSYNC", message)
            errors.append(message)
            continue

        log.info("LOGSYNC", f"Copied {name} -> {destination.name}")
        copied.append(destination)

    success = not errors
    if success:
        log.info("LOGSYNC", f"Log synchronization complete ({len(copied)} copied)")
    else:
        log.error("LOGSYNC", f"Log synchronization failed ({len(errors)} error(s))")

    return SyncResult(success=success, copied=copied, skipped=skipped, errors=errors)

"""wintune - winget detection and remediation for Intune

A Python toolkit for the Intune proactive-remediation and Win32 app
detection steps that surround the Windows Package Manager (winget) on
managed devices.

wintune provides:

- winget presence and minimum-version detection under the System account
- Winget-AutoUpdate log collection into the Intune Management Extension
  log folder (detection + remediation pair)
- Per-application PowerShell detection script generation from a winget
  catalog identifier
- YAML configuration layered over the standard Windows locations

Quick Start:
Check winget:

    $ wintune check-winget

Generate a detection script:

    $ wintune generate 7zip.7zip

For full CLI documentation:

    $ wintune --help

For more details, see the individual module docstrings.
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "winget detection and remediation scripts for Intune"

# Re-export commonly used functions for convenience
from wintune.config import ToolkitConfig, load_config
from wintune.detection import (
    detect_installed_package,
    generate_detection_script,
    sanitize_filename,
)
from wintune.detector import check_winget
from wintune.exceptions import (
    ConfigError,
    SyncError,
    ToolError,
    VersionError,
    WintuneError,
)
from wintune.logsync import LogFileRecord, detect_log_sync, remediate_log_sync
from wintune.results import (
    DetectResult,
    GenerateResult,
    PackageDetectResult,
    SyncCheckResult,
    SyncResult,
)
from wintune.versioning import VersionString, compare_versions, is_at_least

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "ToolkitConfig",
    "load_config",
    "check_winget",
    "detect_log_sync",
    "remediate_log_sync",
    "generate_detection_script",
    "detect_installed_package",
    "sanitize_filename",
    "LogFileRecord",
    "VersionString",
    "compare_versions",
    "is_at_least",
    "DetectResult",
    "GenerateResult",
    "PackageDetectResult",
    "SyncCheckResult",
    "SyncResult",
    "WintuneError",
    "ConfigError",
    "SyncError",
    "ToolError",
    "VersionError",
]

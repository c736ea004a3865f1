"""winget integration for wintune.

Modules
-------
locate : module
    Wildcard search for winget.exe with a deterministic tie-break.
client : module
    WingetClient, a subprocess wrapper for --version, search and export.
catalog : module
    PackageRecord and parsers for export JSON and search listings.
"""

from .catalog import (
    PackageRecord,
    display_name_from_listing,
    find_package,
    load_export,
    parse_export,
)
from .client import WingetClient
from .locate import find_executable, require_executable

__all__ = [
    "PackageRecord",
    "WingetClient",
    "display_name_from_listing",
    "find_executable",
    "find_package",
    "load_export",
    "parse_export",
    "require_executable",
]

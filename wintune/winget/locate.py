"""Locate the winget executable on disk.

winget ships inside the DesktopAppInstaller MSIX package, whose install
directory name embeds the package version
(``Microsoft.DesktopAppInstaller_1.22.11261.0_x64__8wekyb3d8bbwe``). Under the
System account the ``WindowsApps`` execution alias is not on PATH, so the
executable is found with a wildcard search instead.

Search order:
    1. Each configured pattern in turn (privileged WindowsApps location
       first, then the per-user ``%LOCALAPPDATA%`` alias).
    2. Within the first pattern that matches, the matches are sorted by
       the package version embedded in the directory name (then by path
       text) and the LAST one is used, so the newest side-by-side install
       wins deterministically. Paths without a parseable version sort
       before versioned ones.
"""

from __future__ import annotations

from collections.abc import Iterable
import glob
from pathlib import Path
import re

from wintune.exceptions import ToolError, VersionError
from wintune.versioning import VersionString

_INSTALL_VERSION = re.compile(r"DesktopAppInstaller_([0-9][0-9.]*)_", re.IGNORECASE)


def _install_sort_key(path: str) -> tuple[tuple[int, ...], str]:
    match = _INSTALL_VERSION.search(path)
    if match is None:
        return (), path
    try:
        return VersionString.parse(match.group(1)).parts, path
    except VersionError:
        return (), path


def find_executable(patterns: Iterable[str]) -> Path | None:
    """Return the winget executable selected by the search order above.

    Args:
        patterns: Wildcard paths, already environment-expanded.

    Returns:
        Path to the selected executable, or None if no pattern matches a
        file.

    Example:
        ```python
        find_executable([
            r"C:\\Program Files\\WindowsApps\\Microsoft.DesktopAppInstaller_*_x64__8wekyb3d8bbwe\\winget.exe",
        ])
        ```
    """
    from wintune.logging import get_global_logger

    logger = get_global_logger()

    for pattern in patterns:
        matches = sorted(
            (m for m in glob.glob(pattern) if Path(m).is_file()),
            key=_install_sort_key,
        )
        logger.debug("WINGET", f"Pattern {pattern!r} matched {len(matches)} file(s)")
        if matches:
            selected = Path(matches[-1])
            logger.verbose("WINGET", f"Using winget executable: {selected}")
            return selected
    return None


def require_executable(patterns: Iterable[str]) -> Path:
    """Like find_executable(), but raise if nothing is found.

    Raises:
        ToolError: If no pattern matches.
    """
    patterns = list(patterns)
    executable = find_executable(patterns)
    if executable is None:
        raise ToolError(
            "winget executable not found (searched: " + "; ".join(patterns) + ")"
        )
    return executable

"""
Version comparison utilities for wintune.

This package parses and compares the dotted numeric versions reported by
winget and used as minimum-version requirements in configuration.

Public API
----------
VersionString : dataclass
    Parsed version with per-segment numeric ordering.
compare_versions : function
    Compare two version strings, returning -1, 0, or 1.
is_at_least : function
    Check whether an installed version satisfies a minimum.

Examples
--------
    >>> from wintune.versioning import VersionString, is_at_least
    >>> is_at_least("1.7.11132", "1.6.3482")
    True
    >>> VersionString.parse("v1.7.11132", prefix="v").parts
    (1, 7, 11132)

Notes
-----
- Malformed input raises wintune.exceptions.VersionError rather than
  ordering incorrectly.
- Missing trailing components compare as zero ("1.7" == "1.7.0").
"""

from .keys import VersionString, compare_versions, is_at_least

__all__ = ["VersionString", "compare_versions", "is_at_least"]

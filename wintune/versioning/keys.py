"""Version parsing and comparison for wintune.

This module is format-agnostic: it does NOT run winget or read files.
It only parses and compares dotted numeric version strings such as the
ones printed by ``winget --version`` ("v1.7.11132") once the prefix is
removed.

Unlike a forgiving semver parser, parsing here is strict. A component that
is not a run of ASCII digits raises VersionError instead of being mapped
to zero, so "1.2a" never silently orders as "1.2.0".
"""

from __future__ import annotations

from dataclasses import dataclass
import functools
import re

from wintune.exceptions import VersionError

_DIGITS = re.compile(r"[0-9]+")


def _ints_from_text(text: str) -> tuple[int, ...]:
    """Parse dot-separated numeric components.

    Raises VersionError for empty input, empty components ("1..2") and any
    non-numeric component.
    """
    if not text:
        raise VersionError("empty version string")
    nums: list[int] = []
    for p in text.split("."):
        if not _DIGITS.fullmatch(p):
            raise VersionError(f"non-numeric version component {p!r} in {text!r}")
        nums.append(int(p))
    return tuple(nums)


def _pad_equal(
    a: tuple[int, ...], b: tuple[int, ...]
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Pad tuples with zeros so they align for element-wise comparison."""
    n = max(len(a), len(b))
    return a + (0,) * (n - len(a)), b + (0,) * (n - len(b))


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class VersionString:
    """A parsed dotted numeric version.

    Ordering is per-segment numeric with zero padding, so "1.7" equals
    "1.7.0" and "1.10" is newer than "1.9".

    Attributes:
        raw: The text the version was parsed from (whitespace stripped).
        parts: Numeric components in order.

    Example:
        ```python
        VersionString.parse("1.7.11132") >= VersionString.parse("1.6")  # True
        ```
    """

    raw: str
    parts: tuple[int, ...]

    @classmethod
    def parse(cls, text: str, *, prefix: str = "") -> VersionString:
        """Parse a version string, optionally dropping a leading prefix.

        Args:
            text: Version text, e.g. "v1.7.11132" or "1.7.11132".
            prefix: Case-insensitive prefix to strip after trimming
                whitespace (e.g. "v").

        Returns:
            The parsed VersionString.

        Raises:
            VersionError: If the text is not a dotted numeric version.
        """
        if not isinstance(text, str):
            raise VersionError(f"version must be a string, got {type(text).__name__}")
        s = text.strip()
        if prefix and s.lower().startswith(prefix.lower()):
            s = s[len(prefix) :].strip()
        return cls(raw=s, parts=_ints_from_text(s))

    def _compare(self, other: VersionString) -> int:
        a, b = _pad_equal(self.parts, other.parts)
        return (a > b) - (a < b)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionString):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, VersionString):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self) -> int:
        trimmed = list(self.parts)
        while len(trimmed) > 1 and trimmed[-1] == 0:
            trimmed.pop()
        return hash(tuple(trimmed))

    def __str__(self) -> str:
        return self.raw


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns -1 if a < b, 0 if equal, 1 if a > b.

    Raises:
        VersionError: If either string is malformed.
    """
    return VersionString.parse(a)._compare(VersionString.parse(b))


def is_at_least(installed: str, required: str) -> bool:
    """Return True iff ``installed`` >= ``required``.

    Raises:
        VersionError: If either string is malformed.
    """
    return compare_versions(installed, required) >= 0

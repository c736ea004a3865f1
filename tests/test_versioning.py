"""
Tests for wintune.versioning module.

Tests version parsing and comparison including:
- Strict dotted numeric parsing
- Prefix stripping ("v1.7.11132")
- Per-segment numeric ordering with zero padding
- Clean failure on malformed input
"""

from __future__ import annotations

import pytest

from wintune.exceptions import VersionError
from wintune.versioning import VersionString, compare_versions, is_at_least

pytestmark = pytest.mark.unit


class TestVersionParsing:
    """Tests for VersionString.parse."""

    def test_parse_dotted(self):
        """Test parsing a plain dotted version."""
        v = VersionString.parse("1.7.11132")
        assert v.parts == (1, 7, 11132)
        assert str(v) == "1.7.11132"

    def test_parse_strips_whitespace(self):
        """Test that surrounding whitespace and newlines are ignored."""
        assert VersionString.parse("  1.7.11132\r\n").parts == (1, 7, 11132)

    def test_parse_strips_prefix(self):
        """Test that the winget 'v' prefix is removed."""
        v = VersionString.parse("v1.7.11132\n", prefix="v")
        assert v.parts == (1, 7, 11132)
        assert v.raw == "1.7.11132"

    def test_prefix_is_case_insensitive(self):
        """Test that an upper-case prefix is removed too."""
        assert VersionString.parse("V2.0", prefix="v").parts == (2, 0)

    def test_prefix_optional(self):
        """Test that a missing prefix is not an error."""
        assert VersionString.parse("1.2", prefix="v").parts == (1, 2)

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "1..2", "1.2.", ".1", "1.2a", "v1.2", "1.-2", "abc", "1 .2"],
    )
    def test_malformed_raises(self, text):
        """Test that malformed versions raise VersionError."""
        with pytest.raises(VersionError):
            VersionString.parse(text)

    def test_non_string_raises(self):
        """Test that non-string input raises VersionError."""
        with pytest.raises(VersionError):
            VersionString.parse(None)  # type: ignore[arg-type]


class TestVersionComparison:
    """Tests for ordering between versions."""

    @pytest.mark.parametrize(
        "a,b,expected",
        [
            ("1.7.11132", "1.7.11132", 0),
            ("1.8.0", "1.7.11132", 1),
            ("1.10", "1.9", 1),
            ("2.0", "1.99.99", 1),
            ("1.6.3482", "1.7.11132", -1),
            ("1.7", "1.7.0", 0),
            ("1.7.0.1", "1.7", 1),
            ("0.9", "1", -1),
        ],
    )
    def test_compare_versions(self, a, b, expected):
        """Test per-segment numeric comparison."""
        assert compare_versions(a, b) == expected
        assert compare_versions(b, a) == -expected

    @pytest.mark.parametrize(
        "installed,required,expected",
        [
            ("1.7.11132", "1.7.11132", True),
            ("1.22.11261", "1.7.11132", True),
            ("1.7.10861", "1.7.11132", False),
            ("1.6.3482", "1.7.11132", False),
        ],
    )
    def test_is_at_least(self, installed, required, expected):
        """Test the minimum-version check."""
        assert is_at_least(installed, required) is expected

    def test_operators(self):
        """Test rich comparison operators on VersionString."""
        old = VersionString.parse("1.6.3482")
        new = VersionString.parse("1.7.11132")
        assert old < new
        assert new > old
        assert new >= new
        assert old != new

    def test_padded_versions_equal_and_hash_equal(self):
        """Test that zero-padded versions are equal and hash the same."""
        a = VersionString.parse("1.7")
        b = VersionString.parse("1.7.0")
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_compare_malformed_raises(self):
        """Test that comparing against malformed input fails cleanly."""
        with pytest.raises(VersionError):
            compare_versions("1.7.11132", "latest")

    def test_compare_with_other_type_is_not_supported(self):
        """Test that ordering against a plain string raises TypeError."""
        with pytest.raises(TypeError):
            VersionString.parse("1.0") < "2.0"  # noqa: B015

"""Parsers for winget output.

winget has two output shapes wintune relies on:

- ``winget export`` JSON, which is structured and parsed into PackageRecord
  values.
- ``winget search`` tabular text, which is unversioned, column-aligned
  console output. Only display_name_from_listing() reads it, so the brittle
  position-based logic stays behind one function.

Example:
    ```python
    from wintune.winget.catalog import display_name_from_listing

    listing = "Name   Id         Version  Source\\n7-Zip  7zip.7zip  23.01    winget"
    display_name_from_listing(listing, "7zip.7zip")  # "7-Zip"
    ```
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any

from wintune.exceptions import ToolError


@dataclass(frozen=True)
class PackageRecord:
    """An installed package as reported by ``winget export``.

    Attributes:
        identifier: Catalog identifier (e.g., "7zip.7zip").
        display_name: Human-readable name; empty when the export omits it.
        version: Installed version; empty when the export omits it.
        source: Name of the source the package came from (e.g., "winget").
    """

    identifier: str
    display_name: str = ""
    version: str = ""
    source: str = ""


def parse_export(data: dict[str, Any]) -> list[PackageRecord]:
    """Parse a decoded ``winget export`` document into PackageRecords.

    Raises:
        ToolError: If the document does not have the export structure.
    """
    sources = data.get("Sources")
    if not isinstance(sources, list):
        raise ToolError("winget export is missing the 'Sources' list")

    records: list[PackageRecord] = []
    for source in sources:
        if not isinstance(source, dict):
            continue
        details = source.get("SourceDetails") or {}
        source_name = details.get("Name", "") if isinstance(details, dict) else ""
        for package in source.get("Packages") or []:
            if not isinstance(package, dict):
                continue
            identifier = package.get("PackageIdentifier")
            if not isinstance(identifier, str) or not identifier:
                continue
            records.append(
                PackageRecord(
                    identifier=identifier,
                    display_name=str(package.get("DisplayName") or ""),
                    version=str(package.get("Version") or ""),
                    source=str(source_name or ""),
                )
            )
    return records


def load_export(path: Path) -> list[PackageRecord]:
    """Read and parse a ``winget export`` file.

    The file is read as UTF-8 with an optional BOM.

    Raises:
        ToolError: If the file cannot be read or is not valid export JSON.
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as err:
        raise ToolError(f"Could not read winget export {path}: {err}") from err
    try:
        data = json.loads(text)
    except json.JSONDecodeError as err:
        raise ToolError(f"winget export {path} is not valid JSON: {err}") from err
    if not isinstance(data, dict):
        raise ToolError(f"winget export {path} is not a JSON object")
    return parse_export(data)


def find_package(
    records: Iterable[PackageRecord], identifier: str
) -> PackageRecord | None:
    """Return the first record whose identifier equals ``identifier`` exactly."""
    for record in records:
        if record.identifier == identifier:
            return record
    return None


def find_listing_line(listing: str, identifier: str) -> str | None:
    """Return the first listing line containing ``identifier`` verbatim.

    splitlines() also splits on the carriage returns winget uses to draw its
    progress spinner, so spinner frames become separate, non-matching lines.
    """
    for line in listing.splitlines():
        if identifier in line:
            return line
    return None


def display_name_from_listing(listing: str, identifier: str) -> str | None:
    """Extract the display name for ``identifier`` from a search listing.

    The name is the text preceding the identifier on the first line that
    contains it, with surrounding whitespace removed.

    Note:
        This assumes the identifier text first appears in the Id column. A
        display name that itself contains the identifier text would be cut
        short.

    Returns:
        The raw display name (possibly empty), or None when no line mentions
        the identifier.
    """
    line = find_listing_line(listing, identifier)
    if line is None:
        return None
    return line[: line.index(identifier)].strip()

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

"""Detection script generation for winget-deployed Intune apps.

This module turns a winget catalog identifier into a standalone PowerShell
detection script for an Intune Win32 app, and provides the same check in
Python.

Generation:
    1. Locate winget (privileged WindowsApps location, then per-user alias).
    2. ``winget search --id <identifier> --exact``; the identifier must
       appear verbatim on a listing line.
    3. The display name is the text before the identifier on that line,
       sanitized for use in a Windows filename.
    4. Render the template with the identifier as its only substitution,
       validate, and write ``Detect-<name>.ps1`` with a UTF-8 BOM.

Generated Script Logic:
    - Locates winget.exe the same way (System first, then user)
    - Runs ``winget export`` to a temporary JSON file
    - Exits 0 if a package's PackageIdentifier equals the embedded
      identifier, 1 otherwise
    - Deletes the temporary export in a ``finally`` block

Example:
    Generate a detection script:
        ```python
        from wintune.config import load_config
        from wintune.detection import generate_detection_script

        config = load_config()
        result = generate_detection_script("7zip.7zip", config)
        print(result.script_path)  # Detect-7-Zip.ps1
        ```
"""

from __future__ import annotations

from pathlib import Path
import re
import string

from wintune.config import ToolkitConfig, WingetSettings
from wintune.exceptions import ConfigError
from wintune.logging import Logger, get_global_logger
from wintune.results import GenerateResult, PackageDetectResult
from wintune.winget.catalog import display_name_from_listing, find_package, load_export
from wintune.winget.client import WingetClient
from wintune.winget.locate import require_executable

# winget identifiers are Publisher.Package with letters, digits, and . _ - +
_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._+-]*$")


def validate_identifier(identifier: str) -> str:
    """Return the stripped identifier, or raise if it is unusable.

    Raises:
        ConfigError: If the identifier is empty or contains characters that
            never appear in winget identifiers (quotes, spaces, ``$``...).
    """
    identifier = (identifier or "").strip()
    if not identifier:
        raise ConfigError("No package identifier supplied")
    if not _IDENTIFIER_RE.match(identifier):
        raise ConfigError(f"Invalid package identifier: {identifier!r}")
    return identifier


def sanitize_filename(name: str) -> str:
    """Sanitize string for use in Windows filename.

    Rules:
        - Trim surrounding whitespace, replace inner whitespace runs with
          hyphens
        - Remove invalid Windows filename characters (< > : " | ? * \\ /)
        - Normalize multiple consecutive hyphens to single hyphen
        - Remove leading/trailing hyphens and dots

    Returns:
        Sanitized filename-safe string. May be empty; callers treat an
        empty result as an extraction failure.

    Example:
        ```python
        sanitize_filename("7-Zip")          # "7-Zip"
        sanitize_filename("Google Chrome")  # "Google-Chrome"
        sanitize_filename("Test<>App")      # "TestApp"
        sanitize_filename("  ")             # ""
        ```
    """
    sanitized = re.sub(r"\s+", "-", name.strip())

    invalid_chars = '<>:"|?*\\/'
    for char in invalid_chars:
        sanitized = sanitized.replace(char, "")

    sanitized = re.sub(r"-+", "-", sanitized)
    return sanitized.strip(".-")


# PowerShell detection script template. $$ is a literal $ for string.Template.
_DETECTION_SCRIPT_TEMPLATE = """# Detection script for winget package ${package_id}
# Generated by wintune
# Exits 0 when the package is installed, 1 otherwise.

param(
    [string]$$PackageId = '${package_id}'
)

function Get-WingetPath {
    $$SystemPattern = Join-Path $$env:ProgramFiles "WindowsApps\\Microsoft.DesktopAppInstaller_*_x64__8wekyb3d8bbwe\\winget.exe"
    $$InstallVersion = {
        if ($$_.Path -match 'DesktopAppInstaller_([0-9]+(\\.[0-9]+){1,3})_') {
            [version]$$Matches[1]
        } else {
            [version]'0.0'
        }
    }
    $$Candidates = @(Resolve-Path -Path $$SystemPattern -ErrorAction SilentlyContinue | Sort-Object -Property $$InstallVersion, Path)
    if ($$Candidates.Count -gt 0) {
        return $$Candidates[-1].Path
    }

    $$UserPath = Join-Path $$env:LOCALAPPDATA "Microsoft\\WindowsApps\\winget.exe"
    if (Test-Path -Path $$UserPath) {
        return $$UserPath
    }

    return $$null
}

$$Winget = Get-WingetPath
if (-not $$Winget) {
    Write-Output "winget not found"
    exit 1
}

$$ExportFile = Join-Path $$env:TEMP ("wintune-export-{0}.json" -f [guid]::NewGuid())
$$Found = $$false

try {
    & $$Winget export --output $$ExportFile --include-versions --accept-source-agreements --disable-interactivity | Out-Null

    if (Test-Path -Path $$ExportFile) {
        $$Export = Get-Content -Path $$ExportFile -Raw -Encoding UTF8 | ConvertFrom-Json
        foreach ($$Source in $$Export.Sources) {
            foreach ($$Package in $$Source.Packages) {
                if ($$Package.PackageIdentifier -ceq $$PackageId) {
                    $$Found = $$true
                    break
                }
            }
            if ($$Found) {
                break
            }
        }
    }
} catch {
    Write-Output "Detection error: $$($$_.Exception.Message)"
    $$Found = $$false
} finally {
    if (Test-Path -Path $$ExportFile) {
        Remove-Item -Path $$ExportFile -Force -ErrorAction SilentlyContinue
    }
}

if ($$Found) {
    Write-Output "Installed"
    exit 0
}

exit 1
"""


def render_detection_script(identifier: str) -> str:
    """Render the detection script template for ``identifier``.

    The identifier is validated, then substituted with strict
    string.Template substitution so a missing or malformed placeholder
    raises instead of leaving template text in the output.

    Raises:
        ConfigError: If the identifier is invalid or the template fails to
            render.
    """
    identifier = validate_identifier(identifier)
    try:
        content = string.Template(_DETECTION_SCRIPT_TEMPLATE).substitute(
            package_id=identifier,
        )
    except (KeyError, ValueError) as err:
        raise ConfigError(f"Detection script template failed to render: {err}") from err

    if f"[string]$PackageId = '{identifier}'" not in content:
        raise ConfigError("Rendered detection script does not embed the identifier")
    return content


def _winget_client(settings: WingetSettings, logger: Logger) -> WingetClient:
    executable = require_executable(settings.search_paths)
    return WingetClient(executable, timeout=settings.timeout, logger=logger)


def generate_detection_script(
    identifier: str,
    config: ToolkitConfig,
    *,
    client: WingetClient | None = None,
    output_dir: Path | None = None,
) -> GenerateResult:
    """Generate a detection script for a winget catalog identifier.

    Args:
        identifier: Catalog identifier (e.g., "7zip.7zip").
        config: Toolkit configuration (winget location, output naming).
        client: winget client to use. Located from configuration if None.
        output_dir: Directory for the script. Defaults to
            ``config.generator.output_dir``, then the current directory.

    Returns:
        GenerateResult with the identifier, sanitized name and script path.

    Raises:
        ConfigError: If the identifier is empty/invalid, is not found in the
            catalog listing, or yields an empty display name.
        ToolError: If winget cannot be located or run.
        OSError: If the script file cannot be written.

    Note:
        Nothing is written unless every step succeeds.
    """
    logger = get_global_logger()

    identifier = validate_identifier(identifier)

    logger.step(1, 4, "Locating winget...")
    if client is None:
        client = _winget_client(config.winget, logger)

    logger.step(2, 4, f"Searching catalog for {identifier}...")
    listing = client.search(identifier)
    logger.debug("GENERATOR", f"Search output:\n{listing}")

    raw_name = display_name_from_listing(listing, identifier)
    if raw_name is None:
        raise ConfigError(f"Package not found in winget catalog: {identifier}")

    display_name = sanitize_filename(raw_name)
    if not display_name:
        raise ConfigError(
            f"Could not extract a display name for {identifier} from: {raw_name!r}"
        )
    logger.verbose("GENERATOR", f"Display name: {display_name}")

    logger.step(3, 4, "Rendering detection script...")
    content = render_detection_script(identifier)

    target_dir = output_dir or config.generator.output_dir or Path.cwd()
    script_path = target_dir / f"{config.generator.file_prefix}{display_name}.ps1"

    logger.step(4, 4, f"Writing {script_path.name}...")
    target_dir.mkdir(parents=True, exist_ok=True)

    # Write script with UTF-8 BOM encoding (required for PowerShell)
    try:
        script_path.write_bytes(content.encode("utf-8-sig"))
    except OSError as err:
        logger.error("GENERATOR", f"Failed to write detection script to {script_path}: {err}")
        raise

    logger.verbose("GENERATOR", f"Detection script written to: {script_path}")
    return GenerateResult(
        identifier=identifier, display_name=display_name, script_path=script_path
    )


def detect_installed_package(
    identifier: str,
    settings: WingetSettings,
    *,
    client: WingetClient | None = None,
) -> PackageDetectResult:
    """Check whether a package is installed, as a generated script would.

    Exports the installed catalog to ``settings.export_path``, looks for an
    exact identifier match, and removes the export file whatever the
    outcome.

    Raises:
        ConfigError: If the identifier is empty or invalid.
        ToolError: If winget cannot be located, run, or its export parsed.
    """
    logger = get_global_logger()

    identifier = validate_identifier(identifier)
    if client is None:
        client = _winget_client(settings, logger)

    export_path = settings.export_path
    try:
        client.export(export_path)
        records = load_export(export_path)
    finally:
        try:
            export_path.unlink(missing_ok=True)
        except OSError as err:
            logger.warning("DETECTION", f"Could not remove {export_path}: {err}")

    logger.verbose("DETECTION", f"Export lists {len(records)} installed package(s)")
    package = find_package(records, identifier)
    if package is None:
        logger.verbose("DETECTION", f"{identifier} is not installed")
    else:
        logger.verbose("DETECTION", f"{identifier} {package.version} is installed")
    return PackageDetectResult(
        identifier=identifier, installed=package is not None, package=package
    )

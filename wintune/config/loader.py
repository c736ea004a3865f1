"""
Configuration loader for wintune.

Every path and constant the utilities use (winget search locations, log
directories, monitored file names, rotation size) is read from here and
passed explicitly into each component. Nothing in the library reads a
module-level path constant at run time.

Layers
------
1. **Built-in defaults** (DEFAULTS below)
   - The fixed, well-known Windows locations used on Intune-managed devices
   - Always present

2. **Configuration file** (YAML)
   - Optional; given by ``--config`` or the ``WINTUNE_CONFIG`` environment
     variable
   - Overrides the defaults

Merge Behavior
--------------
The loader performs deep merging with "last wins" semantics:
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

Path Expansion
--------------
Path fields expand environment variables in both Windows (``%TEMP%``) and
POSIX (``$HOME``) syntax, so the defaults resolve against the account the
Intune agent runs as.

Error Handling
--------------
- ConfigError: missing file, YAML parse errors, empty files, invalid values
- All errors are chained with "from err" for better debugging

Examples
--------
    >>> from pathlib import Path
    >>> from wintune.config import load_config
    >>> cfg = load_config()
    >>> cfg.logsync.files
    ('install.log', 'updates.log')
    >>> cfg = load_config(Path("wintune.yaml"))
"""

from __future__ import annotations

from dataclasses import dataclass
import ntpath
import os
from pathlib import Path
from typing import Any

import yaml

from wintune.exceptions import ConfigError, VersionError
from wintune.versioning import VersionString

CONFIG_ENV_VAR = "WINTUNE_CONFIG"

DEFAULTS: dict[str, Any] = {
    "winget": {
        "minimum_version": "1.7.11132",
        "version_prefix": "v",
        "timeout": 300,
        "search_paths": [
            "%ProgramFiles%\\WindowsApps\\"
            "Microsoft.DesktopAppInstaller_*_x64__8wekyb3d8bbwe\\winget.exe",
            "%LOCALAPPDATA%\\Microsoft\\WindowsApps\\winget.exe",
        ],
        "export_path": "%TEMP%\\wintune-winget-export.json",
    },
    "detector": {
        "log_file": "C:\\ProgramData\\Wintune\\Logs\\WingetDetection.log",
        "max_log_bytes": 1048576,
    },
    "logsync": {
        "source_dir": "C:\\Program Files\\Winget-AutoUpdate\\logs",
        "destination_dir": "C:\\ProgramData\\Microsoft\\IntuneManagementExtension\\Logs",
        "files": ["install.log", "updates.log"],
        "prefix": "WAU-",
        "log_file": "WAU-LogSync.log",
        "max_log_bytes": 1048576,
    },
    "generator": {
        "output_dir": None,
        "file_prefix": "Detect-",
    },
}

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class WingetSettings:
    """How to find and invoke winget.

    Attributes:
        minimum_version: Lowest acceptable winget version.
        version_prefix: Prefix stripped from ``winget --version`` output.
        timeout: Seconds before a winget invocation is abandoned.
        search_paths: Wildcard patterns for winget.exe, tried in order.
        export_path: Temporary file used for ``winget export``.
    """

    minimum_version: str
    version_prefix: str
    timeout: int
    search_paths: tuple[str, ...]
    export_path: Path


@dataclass(frozen=True)
class DetectorSettings:
    """Where the presence/version detector records non-compliance."""

    log_file: Path
    max_log_bytes: int


@dataclass(frozen=True)
class LogSyncSettings:
    """Source, destination and naming rules for log synchronization.

    Attributes:
        source_dir: Directory the monitored logs are written to.
        destination_dir: Directory collected by the management agent.
        files: Monitored log file names.
        prefix: Tag prepended to each file name in the destination.
        log_file: Synchronizer's own log file name, inside destination_dir.
        max_log_bytes: Size above which the synchronizer log is cleared.
    """

    source_dir: Path
    destination_dir: Path
    files: tuple[str, ...]
    prefix: str
    log_file: str
    max_log_bytes: int

    @property
    def log_path(self) -> Path:
        return self.destination_dir / self.log_file

    def destination_for(self, name: str) -> Path:
        return self.destination_dir / f"{self.prefix}{name}"


@dataclass(frozen=True)
class GeneratorSettings:
    """Output location and naming for generated detection scripts."""

    output_dir: Path | None
    file_prefix: str


@dataclass(frozen=True)
class ToolkitConfig:
    """Fully resolved configuration passed into each component.

    Attributes:
        winget: winget location and invocation settings.
        detector: Presence/version detector settings.
        logsync: Log synchronizer settings.
        generator: Detection-script generator settings.
        source_path: YAML file the config was loaded from, or None for
            built-in defaults only.
    """

    winget: WingetSettings
    detector: DetectorSettings
    logsync: LogSyncSettings
    generator: GeneratorSettings
    source_path: Path | None = None


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """Loads a YAML file and returns the parsed Python object.

    Raises:
        ConfigError: When file does not exist, invalid YAML (parse error), or
            empty files.
    """
    if not p.exists():
        raise ConfigError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep-merges two dicts with "overlay wins" semantics.

    - dict + dict -> deep merge
    - list + list -> overlay REPLACES base (not concatenated)
    - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            # Replace lists and scalars entirely
            result[k] = v
    return result


# -------------------------------
# Field coercion
# -------------------------------


def _expand(raw: str) -> str:
    # ntpath handles %VAR% as well as $VAR/${VAR} on every platform
    return ntpath.expandvars(os.path.expanduser(raw))


def _section(cfg: dict[str, Any], name: str) -> dict[str, Any]:
    section = cfg.get(name)
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _require_str(section: dict[str, Any], name: str, key: str) -> str:
    value = section.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{name}.{key}' must be a non-empty string")
    return value


def _require_positive_int(section: dict[str, Any], name: str, key: str) -> int:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"'{name}.{key}' must be a positive integer")
    return value


def _require_str_list(section: dict[str, Any], name: str, key: str) -> tuple[str, ...]:
    value = section.get(key)
    if (
        not isinstance(value, list)
        or not value
        or not all(isinstance(v, str) and v.strip() for v in value)
    ):
        raise ConfigError(f"'{name}.{key}' must be a non-empty list of strings")
    return tuple(value)


def _build_winget(cfg: dict[str, Any]) -> WingetSettings:
    section = _section(cfg, "winget")
    minimum = _require_str(section, "winget", "minimum_version")
    try:
        VersionString.parse(minimum)
    except VersionError as err:
        raise ConfigError(f"'winget.minimum_version' is invalid: {err}") from err
    prefix = section.get("version_prefix") or ""
    if not isinstance(prefix, str):
        raise ConfigError("'winget.version_prefix' must be a string")
    return WingetSettings(
        minimum_version=minimum,
        version_prefix=prefix,
        timeout=_require_positive_int(section, "winget", "timeout"),
        search_paths=tuple(
            _expand(p) for p in _require_str_list(section, "winget", "search_paths")
        ),
        export_path=Path(_expand(_require_str(section, "winget", "export_path"))),
    )


def _build_detector(cfg: dict[str, Any]) -> DetectorSettings:
    section = _section(cfg, "detector")
    return DetectorSettings(
        log_file=Path(_expand(_require_str(section, "detector", "log_file"))),
        max_log_bytes=_require_positive_int(section, "detector", "max_log_bytes"),
    )


def _build_logsync(cfg: dict[str, Any]) -> LogSyncSettings:
    section = _section(cfg, "logsync")
    files = _require_str_list(section, "logsync", "files")
    for name in files:
        if Path(name).name != name:
            raise ConfigError(f"'logsync.files' entries must be bare file names: {name!r}")
    log_file = _require_str(section, "logsync", "log_file")
    if Path(log_file).name != log_file:
        raise ConfigError(f"'logsync.log_file' must be a bare file name: {log_file!r}")
    prefix = section.get("prefix", "")
    if not isinstance(prefix, str):
        raise ConfigError("'logsync.prefix' must be a string")
    return LogSyncSettings(
        source_dir=Path(_expand(_require_str(section, "logsync", "source_dir"))),
        destination_dir=Path(
            _expand(_require_str(section, "logsync", "destination_dir"))
        ),
        files=files,
        prefix=prefix,
        log_file=log_file,
        max_log_bytes=_require_positive_int(section, "logsync", "max_log_bytes"),
    )


def _build_generator(cfg: dict[str, Any]) -> GeneratorSettings:
    section = _section(cfg, "generator")
    raw_dir = section.get("output_dir")
    if raw_dir is not None and not isinstance(raw_dir, str):
        raise ConfigError("'generator.output_dir' must be a string or null")
    prefix = section.get("file_prefix", "")
    if not isinstance(prefix, str):
        raise ConfigError("'generator.file_prefix' must be a string")
    return GeneratorSettings(
        output_dir=Path(_expand(raw_dir)) if raw_dir else None,
        file_prefix=prefix,
    )


# -------------------------------
# Public API
# -------------------------------


def build_config(
    overrides: dict[str, Any] | None = None, source_path: Path | None = None
) -> ToolkitConfig:
    """Build a ToolkitConfig from the defaults plus an override mapping.

    Args:
        overrides: Mapping with the same shape as DEFAULTS. Dicts are merged,
            lists and scalars replace the defaults.
        source_path: Recorded on the result for diagnostics.

    Returns:
        A validated, frozen ToolkitConfig.

    Raises:
        ConfigError: If any field is missing or invalid.
    """
    merged = _deep_merge_dicts(DEFAULTS, overrides or {})
    return ToolkitConfig(
        winget=_build_winget(merged),
        detector=_build_detector(merged),
        logsync=_build_logsync(merged),
        generator=_build_generator(merged),
        source_path=source_path,
    )


def load_config(path: Path | None = None) -> ToolkitConfig:
    """Load the effective configuration.

    Steps
      1) Use ``path`` if given, else the ``WINTUNE_CONFIG`` environment
         variable, else defaults only.
      2) Read the YAML file; the top level must be a mapping.
      3) Merge it over DEFAULTS and validate every field.

    Raises:
        ConfigError: On missing files, YAML errors or invalid values.
    """
    from wintune.logging import get_global_logger

    logger = get_global_logger()

    if path is None:
        env_value = os.environ.get(CONFIG_ENV_VAR)
        if env_value:
            path = Path(env_value)

    if path is None:
        logger.verbose("CONFIG", "No configuration file, using built-in defaults")
        return build_config()

    path = path.resolve()
    logger.verbose("CONFIG", f"Loading configuration: {path}")
    data = _load_yaml_file(path)
    if not isinstance(data, dict):
        raise ConfigError(f"top-level YAML must be a mapping (dict): {path}")

    config = build_config(data, source_path=path)
    logger.debug("CONFIG", f"Effective configuration: {config}")
    return config

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

"""Configuration loading for wintune.

Built-in defaults for the well-known Windows locations are merged with an
optional YAML file (dicts merged recursively, lists/scalars replaced) and
validated into a frozen ToolkitConfig that is passed into each component.

Public API:

- load_config: Load and validate the effective configuration
- build_config: Build a configuration from an in-memory override mapping

Example:
    Basic usage:
        ```python
        from pathlib import Path
        from wintune.config import load_config

        config = load_config(Path("wintune.yaml"))
        print(config.logsync.destination_dir)
        ```
"""

from .loader import (
    DEFAULTS,
    DetectorSettings,
    GeneratorSettings,
    LogSyncSettings,
    ToolkitConfig,
    WingetSettings,
    build_config,
    load_config,
)

__all__ = [
    "DEFAULTS",
    "DetectorSettings",
    "GeneratorSettings",
    "LogSyncSettings",
    "ToolkitConfig",
    "WingetSettings",
    "build_config",
    "load_config",
]

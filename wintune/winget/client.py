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

"""Thin wrapper around the winget command-line tool.

Each method runs one blocking winget invocation with a timeout and turns
launch failures, timeouts and (where the exit code is meaningful) non-zero
exits into ToolError. Output parsing lives in wintune.winget.catalog.

Example:
    ```python
    from pathlib import Path
    from wintune.winget.client import WingetClient

    client = WingetClient(Path("winget.exe"), timeout=120)
    print(client.version())          # "v1.7.11132"
    listing = client.search("7zip.7zip")
    ```
"""

from __future__ import annotations

from pathlib import Path
import subprocess

from wintune.exceptions import ToolError
from wintune.logging import Logger, get_global_logger


class WingetClient:
    """Run winget commands against a known executable."""

    def __init__(
        self, executable: Path, timeout: int = 300, logger: Logger | None = None
    ) -> None:
        """Initialize the client.

        Args:
            executable: Path to winget.exe.
            timeout: Seconds before an invocation is abandoned.
            logger: Logger for command tracing. Defaults to the global logger.
        """
        self.executable = executable
        self.timeout = timeout
        self._logger = logger if logger is not None else get_global_logger()

    def _run(self, args: list[str]) -> subprocess.CompletedProcess[str]:
        cmd = [str(self.executable), *args]
        self._logger.verbose("WINGET", f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as err:
            raise ToolError(f"winget timed out after {err.timeout}s") from err
        except OSError as err:
            raise ToolError(f"Failed to run {self.executable}: {err}") from err

        self._logger.debug("WINGET", f"Exit code: {result.returncode}")
        return result

    @staticmethod
    def _failure(action: str, result: subprocess.CompletedProcess[str]) -> ToolError:
        message = f"winget {action} failed (exit code {result.returncode})"
        detail = (result.stderr or result.stdout or "").strip()
        if detail:
            message += f"\n{detail}"
        return ToolError(message)

    def version(self) -> str:
        """Return the raw output of ``winget --version``.

        Raises:
            ToolError: If winget cannot be run, times out or exits non-zero.
        """
        result = self._run(["--version"])
        if result.returncode != 0:
            raise self._failure("--version", result)
        return result.stdout

    def search(self, identifier: str) -> str:
        """Return the tabular listing of an exact-id catalog search.

        winget exits non-zero when nothing matches, so the exit code is not
        treated as a failure here; callers decide from the listing text.

        Raises:
            ToolError: If winget cannot be run or times out.
        """
        result = self._run(
            [
                "search",
                "--id",
                identifier,
                "--exact",
                "--accept-source-agreements",
                "--disable-interactivity",
            ]
        )
        if result.returncode != 0:
            self._logger.debug(
                "WINGET", f"search exited with {result.returncode} for {identifier}"
            )
        return result.stdout

    def export(self, output_path: Path) -> Path:
        """Export the installed-package catalog as JSON.

        winget returns a non-zero exit code when some installed packages are
        not available from any source, while still writing the export. A
        non-zero exit is therefore only a failure if no file was written.
        Any file already at ``output_path`` is removed first, so a stale
        export from an earlier run is never mistaken for this one.

        Raises:
            ToolError: If winget cannot be run, times out, or writes nothing,
                or a stale export cannot be removed.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            output_path.unlink(missing_ok=True)
        except OSError as err:
            raise ToolError(f"Could not remove stale export {output_path}: {err}") from err
        result = self._run(
            [
                "export",
                "--output",
                str(output_path),
                "--include-versions",
                "--accept-source-agreements",
                "--disable-interactivity",
            ]
        )
        if not output_path.exists():
            raise self._failure("export", result)
        if result.returncode != 0:
            self._logger.warning(
                "WINGET",
                f"winget export exited with {result.returncode}; using partial export",
            )
        return output_path

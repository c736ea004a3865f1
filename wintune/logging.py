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

"""Logging interface for wintune.

This module provides a configurable logging interface that library modules
can use for output without depending on the CLI. The logger can be configured
globally or passed as a parameter for better isolation.

The console logger supports these output levels:

- Step: Always printed (for progress indicators)
- Info/Warning/Error: Always printed
- Verbose: Only printed when verbose mode is enabled
- Debug: Only printed when debug mode is enabled (implies verbose)

FileLogger appends timestamped plain-text lines to a fixed log file and
mirrors every entry to a console logger, so an Intune run leaves a record on
disk while remaining observable live.

Example:
    Configure global logger:
        ```python
        from wintune.logging import get_logger, set_global_logger

        logger = get_logger(verbose=True, debug=False)
        set_global_logger(logger)
        ```

    Log to a file with console mirroring:
        ```python
        from pathlib import Path
        from wintune.logging import FileLogger, get_global_logger

        log = FileLogger(Path("C:/ProgramData/Wintune/Logs/sync.log"),
                         max_bytes=1024 * 1024,
                         mirror=get_global_logger())
        log.info("LOGSYNC", "Copied install.log")
        ```

Note:
    The default logger is silent, so library functions won't print anything
    unless explicitly configured. The CLI configures the global logger when
    commands are executed.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Protocol

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class Logger(Protocol):
    """Protocol for logger implementations."""

    def step(self, step: int, total: int, message: str) -> None:
        """Print a step indicator.

        Args:
            step: Current step number (1-based).
            total: Total number of steps.
            message: Step description.
        """
        ...

    def info(self, prefix: str, message: str) -> None:
        """Record an informational message.

        Args:
            prefix: Message prefix (e.g., "LOGSYNC", "DETECTOR").
            message: Log message.
        """
        ...

    def warning(self, prefix: str, message: str) -> None:
        """Record a warning message."""
        ...

    def error(self, prefix: str, message: str) -> None:
        """Record an error message."""
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Record a verbose message."""
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Record a debug message."""
        ...


class DefaultLogger:
    """Default logger implementation that prints to stdout.

    This logger respects verbose and debug flags and formats output
    consistently with the CLI output format.
    """

    def __init__(self, verbose: bool = False, debug: bool = False) -> None:
        """Initialize logger with verbosity settings.

        Args:
            verbose: If True, print verbose messages.
            debug: If True, print debug messages (implies verbose).
        """
        self._verbose = verbose or debug
        self._debug = debug

    def step(self, step: int, total: int, message: str) -> None:
        print(f"[{step}/{total}] {message}")

    def info(self, prefix: str, message: str) -> None:
        print(f"[{prefix}] {message}")

    def warning(self, prefix: str, message: str) -> None:
        print(f"[{prefix}] [WARNING] {message}")

    def error(self, prefix: str, message: str) -> None:
        print(f"[{prefix}] [ERROR] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        if self._verbose:
            print(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        if self._debug:
            print(f"[{prefix}] {message}")


class SilentLogger:
    """Logger that suppresses all output.

    Useful for programmatic usage when output is not desired.
    """

    def step(self, step: int, total: int, message: str) -> None:
        pass

    def info(self, prefix: str, message: str) -> None:
        pass

    def warning(self, prefix: str, message: str) -> None:
        pass

    def error(self, prefix: str, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass


class FileLogger:
    """Logger that appends timestamped lines to a file.

    Each entry is written as ``YYYY-MM-DD HH:MM:SS [LEVEL] [PREFIX] message``
    and forwarded to ``mirror`` for console output.

    Before every append the file size is checked. If it exceeds
    ``max_bytes`` the file is truncated and a rotation notice is appended
    directly, then the entry itself is appended. The notice never goes
    through the size check, so a rotation can only happen once per entry.

    Failures to write the file are reported as warnings on the mirror and
    never raised to the caller.
    """

    def __init__(
        self,
        path: Path,
        max_bytes: int | None = None,
        mirror: Logger | None = None,
        verbose: bool = False,
        debug: bool = False,
    ) -> None:
        """Initialize the file logger.

        Args:
            path: Log file to append to. Parent directories are created on
                first write.
            max_bytes: Size threshold that triggers truncation. None
                disables rotation.
            mirror: Console logger that receives a copy of every entry.
                Defaults to the global logger.
            verbose: If True, write verbose messages to the file.
            debug: If True, write debug messages to the file (implies
                verbose).
        """
        self.path = path
        self.max_bytes = max_bytes
        self._mirror = mirror if mirror is not None else get_global_logger()
        self._verbose = verbose or debug
        self._debug = debug

    def step(self, step: int, total: int, message: str) -> None:
        self._mirror.step(step, total, message)

    def info(self, prefix: str, message: str) -> None:
        self._mirror.info(prefix, message)
        self._write("INFO", prefix, message)

    def warning(self, prefix: str, message: str) -> None:
        self._mirror.warning(prefix, message)
        self._write("WARNING", prefix, message)

    def error(self, prefix: str, message: str) -> None:
        self._mirror.error(prefix, message)
        self._write("ERROR", prefix, message)

    def verbose(self, prefix: str, message: str) -> None:
        self._mirror.verbose(prefix, message)
        if self._verbose:
            self._write("VERBOSE", prefix, message)

    def debug(self, prefix: str, message: str) -> None:
        self._mirror.debug(prefix, message)
        if self._debug:
            self._write("DEBUG", prefix, message)

    def rotate_if_needed(self) -> bool:
        """Truncate the log file if it is larger than ``max_bytes``.

        Returns:
            True if the file was truncated and a rotation notice written.
        """
        if self.max_bytes is None or not self.path.exists():
            return False
        size = self.path.stat().st_size
        if size <= self.max_bytes:
            return False
        self.path.write_text("", encoding="utf-8")
        self._append(
            self._format(
                "INFO",
                "LOG",
                f"Log file exceeded {self.max_bytes} bytes ({size} bytes); content cleared",
            )
        )
        return True

    def _format(self, level: str, prefix: str, message: str) -> str:
        timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
        return f"{timestamp} [{level}] [{prefix}] {message}\n"

    def _append(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line)

    def _write(self, level: str, prefix: str, message: str) -> None:
        try:
            self.rotate_if_needed()
            self._append(self._format(level, prefix, message))
        except OSError as err:
            self._mirror.warning("LOG", f"Could not write to {self.path}: {err}")


# Global logger instance (defaults to silent)
_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Get a console logger instance with specified verbosity.

    Args:
        verbose: If True, logger will print verbose messages.
        debug: If True, logger will print debug messages (implies verbose).

    Returns:
        A logger instance configured with the specified verbosity.
    """
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    """Get the global logger instance.

    Note:
        The default global logger is silent. Use set_global_logger() to
        configure it, or pass a logger instance directly to functions.
    """
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Set the global logger instance.

    Args:
        logger: Logger instance to use as the global logger.

    Note:
        This affects all library functions that use get_global_logger()
        without passing a logger instance. For better isolation, pass logger
        instances directly to functions instead of using the global logger.
    """
    global _global_logger
    _global_logger = logger

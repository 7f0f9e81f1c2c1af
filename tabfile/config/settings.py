"""
Configuration settings for tabfile.

**Conceptual**: This module provides a strongly-typed configuration object
that loads from environment variables (via .env files). Settings are
validated at construction time, so a bad value (unknown encoding, a lock
prefix containing a path separator) fails immediately with a clear error
instead of halfway through a batch load.

**Why centralized config?**
  - Single source of truth for defaults (output directory, encoding, etc.).
  - Easy to test (construct TabularSettings(...) directly instead of reading
    the environment).
  - Fail-fast validation.

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import codecs
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root (no-op when the file is absent)
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class TabularSettings:
    """
    Configuration for reading and writing tabular files.

    Attributes:
        output_dir: Default directory the CLI writes CSV files to.
        encoding: Text encoding used for reading and writing CSV files.
                  Must be a codec name Python knows (e.g. "utf-8", "latin-1").
        lock_prefix: Prefix added to a file name when it is locked before
                     reading (see tabfile.utils.fs.lock_file).
                     Must be non-empty and contain no path separator.
        log_level: Log level used by the CLI entrypoints.
    """
    output_dir: Path = Path("output")
    encoding: str = "utf-8"
    lock_prefix: str = "LOCKED_"
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate settings after initialization."""
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(
                f"TABFILE_ENCODING must be a known text encoding, got: {self.encoding}"
            )
        if not self.lock_prefix or "/" in self.lock_prefix or "\\" in self.lock_prefix:
            raise ValueError(
                f"TABFILE_LOCK_PREFIX must be a non-empty name fragment without "
                f"path separators, got: {self.lock_prefix!r}"
            )
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"TABFILE_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, "
                f"got: {self.log_level}"
            )

    @property
    def log_level_number(self) -> int:
        """The log level as a logging module constant (e.g. logging.INFO)."""
        return getattr(logging, self.log_level.upper())

    @classmethod
    def from_env(cls) -> "TabularSettings":
        """
        Load settings from environment variables.

        **Environment variables** (all optional):
          - TABFILE_OUTPUT_DIR: Default output directory (default: "output").
          - TABFILE_ENCODING: CSV text encoding (default: "utf-8").
          - TABFILE_LOCK_PREFIX: Lock rename prefix (default: "LOCKED_").
          - TABFILE_LOG_LEVEL: CLI log level (default: "INFO").

        Returns:
            TabularSettings object with values loaded from environment.

        Raises:
            ValueError: If any variable holds an invalid value.

        Usage example:
            >>> # In .env file:
            >>> # TABFILE_OUTPUT_DIR=exports
            >>>
            >>> settings = TabularSettings.from_env()
            >>> print(settings.output_dir)  # "exports"
        """
        return cls(
            output_dir=Path(os.getenv("TABFILE_OUTPUT_DIR", "output")),
            encoding=os.getenv("TABFILE_ENCODING", "utf-8"),
            lock_prefix=os.getenv("TABFILE_LOCK_PREFIX", "LOCKED_"),
            log_level=os.getenv("TABFILE_LOG_LEVEL", "INFO").upper(),
        )


_default_settings: Optional[TabularSettings] = None


def get_settings() -> TabularSettings:
    """
    Get the global settings singleton.

    Settings are loaded from the environment on first call, then cached.
    Library functions accept an explicit ``settings`` argument; this is only
    the fallback when none is passed.

    Returns:
        Global TabularSettings singleton.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = TabularSettings.from_env()

    return _default_settings


def reset_settings() -> None:
    """
    Reset the global settings singleton (mainly for testing).

    The next get_settings() call reloads from the environment.
    """
    global _default_settings
    _default_settings = None

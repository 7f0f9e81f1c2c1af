"""
Exceptions raised by the tabular readers and writers.

**Conceptual**: Every failure in a load or write is fail-fast: the first error
aborts the operation and is handed straight to the caller. These exception
types give callers something precise to catch while keeping the original
library error attached as ``__cause__`` (always raised with ``raise ... from``).

Plain filesystem failures (``FileNotFoundError``, ``PermissionError``, other
``OSError``) are NOT wrapped; they propagate unchanged from the filesystem
helper so callers can handle them the usual way.
"""


class TabularFileError(Exception):
    """
    Base class for all tabfile errors.

    Attributes:
        message: Human-readable description of what failed.
        cause: The underlying exception (same object as ``__cause__``), or
               None when the error originates in tabfile itself.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class CsvParseError(TabularFileError):
    """Raised when CSV text cannot be decoded into rows."""


class CsvEncodeError(TabularFileError):
    """Raised when rows cannot be encoded as CSV text."""


class WorkbookReadError(TabularFileError):
    """Raised when an .xls/.xlsx workbook cannot be opened or read."""


class UnsupportedFormatError(TabularFileError):
    """
    Raised when a file's extension is not one of csv, xls, xlsx.

    Directory loads never hit this (they filter by extension first); it only
    fires when a caller passes an explicit path with an unknown extension.
    """


class FileLockError(TabularFileError):
    """Raised when the rename-based lock (or unlock) of a file fails."""

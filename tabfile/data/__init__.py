"""
Tabular data model, readers, and writers.

Handles loading CSV and Excel files (single files, lists of files, whole
directories) into TabularFile objects and writing them back out as
timestamped CSV files.
"""

from tabfile.data.errors import (
    TabularFileError,
    CsvParseError,
    CsvEncodeError,
    WorkbookReadError,
    UnsupportedFormatError,
    FileLockError,
)
from tabfile.data.formats import FileKind, file_kind_for
from tabfile.data.tabular import TabularFile
from tabfile.data.readers import FileResult, load, iter_directory, parse_csv_text
from tabfile.data.writers import WriteResult, write

__all__ = [
    "TabularFileError",
    "CsvParseError",
    "CsvEncodeError",
    "WorkbookReadError",
    "UnsupportedFormatError",
    "FileLockError",
    "FileKind",
    "file_kind_for",
    "TabularFile",
    "FileResult",
    "load",
    "iter_directory",
    "parse_csv_text",
    "WriteResult",
    "write",
]

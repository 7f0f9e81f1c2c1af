"""
File kinds understood by the loader, keyed by file extension.
"""

from enum import Enum
from pathlib import Path

from tabfile.utils.fs import get_ext


class FileKind(Enum):
    """Closed set of file formats the loader can dispatch on."""

    CSV = "csv"
    XLS = "xls"
    XLSX = "xlsx"
    UNSUPPORTED = "unsupported"


# Extensions picked up when scanning a directory
SUPPORTED_EXTENSIONS = ("csv", "xls", "xlsx")


def file_kind_for(path: Path | str) -> FileKind:
    """
    Map a path to its FileKind by extension (case-insensitive).

    Anything outside csv/xls/xlsx maps to FileKind.UNSUPPORTED; the loader
    turns that into an UnsupportedFormatError rather than silently skipping.

    Example:
        >>> file_kind_for("orders.csv")
        <FileKind.CSV: 'csv'>
        >>> file_kind_for("notes.txt")
        <FileKind.UNSUPPORTED: 'unsupported'>
    """
    ext = get_ext(path)
    if ext in SUPPORTED_EXTENSIONS:
        return FileKind(ext)
    return FileKind.UNSUPPORTED

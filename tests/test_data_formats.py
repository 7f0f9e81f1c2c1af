"""
Tests for tabfile/data/formats.py

Extension -> FileKind mapping, including the explicit UNSUPPORTED variant.
"""

import pytest
from pathlib import Path

from tabfile.data.formats import SUPPORTED_EXTENSIONS, FileKind, file_kind_for


@pytest.mark.parametrize("path, kind", [
    ("orders.csv", FileKind.CSV),
    ("ORDERS.CSV", FileKind.CSV),
    ("legacy.xls", FileKind.XLS),
    (Path("dir/report.Xlsx"), FileKind.XLSX),
    ("LOCKED_report.xlsx", FileKind.XLSX),
])
def test_supported_kinds(path, kind):
    assert file_kind_for(path) is kind


@pytest.mark.parametrize("path", ["notes.txt", "README", "archive.csv.gz", "book.xlsm"])
def test_unsupported_kinds(path):
    assert file_kind_for(path) is FileKind.UNSUPPORTED


def test_supported_extensions_cover_every_readable_kind():
    assert {FileKind(ext) for ext in SUPPORTED_EXTENSIONS} == {FileKind.CSV, FileKind.XLS, FileKind.XLSX}

"""
Tests for tabfile/data/readers.py

This module tests:
  - CSV text parsing (header mapping, headerless mode, quoting, errors).
  - Excel reading (.xlsx via real openpyxl workbooks, .xls via a stubbed xlrd book).
  - Dispatch by extension, locking, and unsupported formats.
  - Multi-file loads (directories and path lists): order and fail-fast behavior.

All file tests use temporary directories (via tmp_path fixture).
"""

import openpyxl
import pandas as pd
import pytest
import xlrd
from datetime import datetime
from pathlib import Path

from tabfile.data.errors import (
    CsvParseError,
    FileLockError,
    UnsupportedFormatError,
    WorkbookReadError,
)
from tabfile.data.readers import (
    FileResult,
    iter_directory,
    load,
    parse_csv_text,
    read_excel_file,
    read_file,
    rows_to_table,
)
from tabfile.data.tabular import TabularFile


# ============================================================================
# Helper functions for test data generation
# ============================================================================

def write_csv(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def write_xlsx(path: Path, rows: list, start_row: int = 1) -> Path:
    """Save ``rows`` to the first worksheet of a new workbook, starting at ``start_row``."""
    wb = openpyxl.Workbook()
    ws = wb.active
    for r, row in enumerate(rows, start=start_row):
        for c, value in enumerate(row, start=1):
            if value is not None:
                ws.cell(row=r, column=c, value=value)
    wb.save(path)
    return path


class FakeCell:
    def __init__(self, ctype, value):
        self.ctype = ctype
        self.value = value


class FakeSheet:
    def __init__(self, rows):
        self._rows = rows
        self.nrows = len(rows)

    def row(self, r):
        return self._rows[r]


class FakeBook:
    datemode = 0

    def __init__(self, rows):
        self._sheet = FakeSheet(rows)
        self.released = False

    def sheet_by_index(self, index):
        assert index == 0
        return self._sheet

    def release_resources(self):
        self.released = True


# ============================================================================
# parse_csv_text
# ============================================================================

def test_parse_csv_with_headers():
    table = parse_csv_text("a,b\n1,2\n3,4")

    assert table.columns == ["a", "b"]
    assert table.rows == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]


def test_parse_csv_without_headers():
    table = parse_csv_text("a,b\n1,2\n3,4", headers=False)

    assert table.columns == []
    assert table.rows == [["a", "b"], ["1", "2"], ["3", "4"]]


def test_parse_csv_keeps_cells_as_strings():
    table = parse_csv_text("code,amount,flag\n007,1.50,NA\n")

    assert table.rows == [{"code": "007", "amount": "1.50", "flag": "NA"}]


def test_parse_csv_quoted_cells():
    table = parse_csv_text('name,note\nx,"a, b"\ny,"line1\nline2"\nz,"say ""hi"""\n')

    assert [row["note"] for row in table.rows] == ["a, b", "line1\nline2", 'say "hi"']


def test_parse_csv_empty_cells_and_short_rows():
    table = parse_csv_text("a,b,c\n1,,3\n4\n")

    assert table.rows == [
        {"a": "1", "b": "", "c": "3"},
        {"a": "4", "b": "", "c": ""},
    ]


def test_parse_csv_skips_blank_lines():
    table = parse_csv_text("a,b\n\n1,2\n\n")

    assert table.rows == [{"a": "1", "b": "2"}]


def test_parse_csv_header_only():
    table = parse_csv_text("a,b\n")

    assert table.columns == ["a", "b"]
    assert table.rows == []


@pytest.mark.parametrize("text", ["", "   \n\n"])
def test_parse_csv_empty_text(text):
    assert parse_csv_text(text) == TabularFile()


def test_parse_csv_too_many_fields_raises():
    with pytest.raises(CsvParseError) as exc_info:
        parse_csv_text("a,b\n1,2,3\n")

    assert isinstance(exc_info.value.__cause__, pd.errors.ParserError)
    assert exc_info.value.cause is exc_info.value.__cause__


def test_parse_csv_unterminated_quote_raises():
    with pytest.raises(CsvParseError):
        parse_csv_text('a,b\n1,"unterminated\n')


# ============================================================================
# Excel: rows_to_table and .xlsx / .xls files
# ============================================================================

def test_rows_to_table_skips_empty_rows_and_normalizes():
    raw = [
        ("name", "qty", None),
        (None, None, None),
        (" widget ", 0, None),
        ("gadget", None, None),
        ("gizmo", "#N/A", None),
    ]

    table = rows_to_table(raw)

    assert table.columns == ["name", "qty"]
    assert table.rows == [
        {"name": "widget", "qty": 0},
        {"name": "gadget", "qty": ""},
        {"name": "gizmo", "qty": ""},
    ]


def test_rows_to_table_headerless():
    raw = [("a", "b"), (), ("0", None), (1, 2)]

    table = rows_to_table(raw, headers=False)

    assert table.columns == []
    assert table.rows == [["a", "b"], ["0"], [1, 2]]


def test_rows_to_table_header_values_become_strings():
    table = rows_to_table([(2023, " total "), (1, 2)])

    assert table.columns == ["2023", "total"]
    assert table.rows == [{"2023": 1, "total": 2}]


def test_rows_to_table_unwraps_formula_mappings():
    raw = [("a", "b"), ({"formula": "1+1", "result": 2}, {"error": "#N/A"})]

    assert rows_to_table(raw).rows == [{"a": 2, "b": ""}]


def test_read_xlsx_with_headers(tmp_path):
    path = write_xlsx(tmp_path / "stock.xlsx", [
        ["name", "qty", "price"],
        ["widget", 0, 2.5],
        ["  gadget  ", "0", None],
        [None, None, None],
        ["gizmo", "#N/A", 1],
    ])

    table = read_excel_file(path)

    assert table.columns == ["name", "qty", "price"]
    assert table.rows == [
        {"name": "widget", "qty": 0, "price": 2.5},
        {"name": "gadget", "qty": "0", "price": ""},
        {"name": "gizmo", "qty": "", "price": 1},
    ]


def test_read_xlsx_headers_from_first_non_empty_row(tmp_path):
    path = write_xlsx(tmp_path / "offset.xlsx", [["a", "b"], ["1", "2"]], start_row=3)

    table = read_excel_file(path)

    assert table.columns == ["a", "b"]
    assert table.rows == [{"a": "1", "b": "2"}]


def test_read_xlsx_without_headers(tmp_path):
    path = write_xlsx(tmp_path / "raw.xlsx", [["a", "b"], [1, 2]])

    table = read_excel_file(path, headers=False)

    assert table.columns == []
    assert table.rows == [["a", "b"], [1, 2]]


def test_read_xlsx_dates_become_iso_strings(tmp_path):
    path = write_xlsx(tmp_path / "dates.xlsx", [["when"], [datetime(2024, 1, 5)]])

    assert read_excel_file(path).rows == [{"when": "2024-01-05T00:00:00"}]


def test_read_xlsx_only_first_sheet(tmp_path):
    path = tmp_path / "two_sheets.xlsx"
    wb = openpyxl.Workbook()
    wb.active.append(["first"])
    wb.create_sheet("second").append(["second"])
    wb.save(path)

    assert read_excel_file(path).columns == ["first"]


def test_read_corrupt_workbook_raises(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"this is not a zip file")

    with pytest.raises(WorkbookReadError) as exc_info:
        read_excel_file(path)

    assert "broken.xlsx" in str(exc_info.value)
    assert exc_info.value.__cause__ is not None


def test_read_missing_workbook_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_excel_file(tmp_path / "missing.xlsx")


def test_read_xls_uses_xlrd(tmp_path, monkeypatch):
    path = tmp_path / "legacy.xls"
    path.write_bytes(b"stub")
    book = FakeBook([
        [FakeCell(xlrd.XL_CELL_TEXT, "name"), FakeCell(xlrd.XL_CELL_TEXT, "qty"),
         FakeCell(xlrd.XL_CELL_TEXT, "when"), FakeCell(xlrd.XL_CELL_TEXT, "ok")],
        [FakeCell(xlrd.XL_CELL_EMPTY, ""), FakeCell(xlrd.XL_CELL_BLANK, ""),
         FakeCell(xlrd.XL_CELL_EMPTY, ""), FakeCell(xlrd.XL_CELL_EMPTY, "")],
        [FakeCell(xlrd.XL_CELL_TEXT, " widget "), FakeCell(xlrd.XL_CELL_NUMBER, 0.0),
         FakeCell(xlrd.XL_CELL_DATE, 45296.0), FakeCell(xlrd.XL_CELL_BOOLEAN, 1)],
        [FakeCell(xlrd.XL_CELL_TEXT, "gadget"), FakeCell(xlrd.XL_CELL_ERROR, 0x2A),
         FakeCell(xlrd.XL_CELL_EMPTY, ""), FakeCell(xlrd.XL_CELL_NUMBER, 2.5)],
    ])
    opened = []

    def fake_open_workbook(filename, on_demand=False):
        opened.append(filename)
        return book

    monkeypatch.setattr(xlrd, "open_workbook", fake_open_workbook)

    table = read_excel_file(path)

    assert opened == [str(path)]
    assert book.released
    assert table.columns == ["name", "qty", "when", "ok"]
    assert table.rows == [
        {"name": "widget", "qty": 0, "when": "2024-01-05T00:00:00", "ok": True},
        {"name": "gadget", "qty": "", "when": "", "ok": 2.5},
    ]


def test_read_xls_error_is_wrapped(tmp_path, monkeypatch):
    path = tmp_path / "legacy.xls"
    path.write_bytes(b"stub")

    def fake_open_workbook(filename, on_demand=False):
        raise xlrd.XLRDError("Unsupported format, or corrupt file")

    monkeypatch.setattr(xlrd, "open_workbook", fake_open_workbook)

    with pytest.raises(WorkbookReadError) as exc_info:
        read_excel_file(path)

    assert isinstance(exc_info.value.cause, xlrd.XLRDError)


# ============================================================================
# read_file: dispatch, locking, errors
# ============================================================================

def test_read_file_dispatches_on_uppercase_extension(tmp_path, settings):
    path = write_csv(tmp_path / "ORDERS.CSV", "a\n1\n")

    result = read_file(path, settings=settings)

    assert result.path == path
    assert result.file.rows == [{"a": "1"}]
    assert result.locked_path is None


def test_read_file_unsupported_extension(tmp_path, settings):
    path = write_csv(tmp_path / "notes.txt", "a\n1\n")

    with pytest.raises(UnsupportedFormatError) as exc_info:
        read_file(path, lock=True, settings=settings)

    assert "notes.txt" in str(exc_info.value)
    # Nothing was locked
    assert path.exists()


def test_read_file_missing(tmp_path, settings):
    with pytest.raises(FileNotFoundError):
        read_file(tmp_path / "missing.csv", settings=settings)


def test_read_file_parse_error_names_file(tmp_path, settings):
    path = write_csv(tmp_path / "bad.csv", "a,b\n1,2,3\n")

    with pytest.raises(CsvParseError) as exc_info:
        read_file(path, settings=settings)

    assert "bad.csv" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, pd.errors.ParserError)


def test_read_file_with_lock_renames_before_reading(tmp_path, settings):
    path = write_csv(tmp_path / "orders.csv", "a\n1\n")

    result = read_file(path, lock=True, settings=settings)

    assert result.locked_path == tmp_path / "LOCKED_orders.csv"
    assert result.locked_path.exists()
    assert not path.exists()
    assert result.file.rows == [{"a": "1"}]


def test_read_file_lock_conflict(tmp_path, settings):
    path = write_csv(tmp_path / "orders.csv", "a\n1\n")
    write_csv(tmp_path / "LOCKED_orders.csv", "a\n2\n")

    with pytest.raises(FileLockError):
        read_file(path, lock=True, settings=settings)


def test_read_file_uses_configured_encoding(tmp_path):
    from tabfile.config.settings import TabularSettings

    path = tmp_path / "latin.csv"
    path.write_bytes("name\ncafé\n".encode("latin-1"))

    result = read_file(path, settings=TabularSettings(encoding="latin-1"))

    assert result.file.rows == [{"name": "café"}]


# ============================================================================
# load: input shapes
# ============================================================================

def test_load_single_csv_file(tmp_path, settings):
    path = write_csv(tmp_path / "a.csv", "a,b\n1,2\n")

    table = load(path, settings=settings)

    assert isinstance(table, TabularFile)
    assert table.rows == [{"a": "1", "b": "2"}]


def test_load_accepts_string_path(tmp_path, settings):
    write_csv(tmp_path / "a.csv", "a\n1\n")

    assert load(str(tmp_path / "a.csv"), settings=settings).rows == [{"a": "1"}]


def test_load_headerless_file(tmp_path, settings):
    path = write_csv(tmp_path / "a.csv", "a,b\n1,2\n")

    assert load(path, headers=False, settings=settings).rows == [["a", "b"], ["1", "2"]]


def test_load_in_memory_rows():
    table = load([["a", "b"], ["1", "2"]])

    assert table.columns == ["a", "b"]
    assert table.rows == [{"a": "1", "b": "2"}]


def test_load_in_memory_rows_headerless():
    assert load([("a", "b"), ("1", "2")], headers=False).rows == [["a", "b"], ["1", "2"]]


def test_load_empty_list():
    assert load([]) == TabularFile()


def test_load_tabular_file_passthrough():
    table = TabularFile(rows=[["x"]])

    assert load(table) is table


def test_load_rejects_unknown_input():
    with pytest.raises(TypeError):
        load(42)
    with pytest.raises(TypeError):
        load(["a.csv", ["not", "a", "path"]])


def test_load_list_of_paths_in_given_order(tmp_path, settings):
    first = write_csv(tmp_path / "z.csv", "a\n1\n")
    second = write_xlsx(tmp_path / "a.xlsx", [["b"], [2]])

    results = load([first, second], settings=settings)

    assert [r.path for r in results] == [first, second]
    assert results[0].file.rows == [{"a": "1"}]
    assert results[1].file.rows == [{"b": 2}]


# ============================================================================
# Directory loads
# ============================================================================

def test_load_directory_in_listing_order(tmp_path, settings):
    write_csv(tmp_path / "b.csv", "x\n2\n")
    write_csv(tmp_path / "a.csv", "x\n1\n")
    write_csv(tmp_path / "ignored.txt", "not,tabular\n")
    write_xlsx(tmp_path / "c.xlsx", [["x"], [3]])

    results = load(tmp_path, settings=settings)

    assert all(isinstance(r, FileResult) for r in results)
    assert [r.path.name for r in results] == ["a.csv", "b.csv", "c.xlsx"]
    assert [r.file.rows for r in results] == [[{"x": "1"}], [{"x": "2"}], [{"x": 3}]]


def test_load_directory_fails_fast_on_malformed_file(tmp_path, settings):
    write_csv(tmp_path / "a.csv", "x,y\n1,2\n")
    write_csv(tmp_path / "b.csv", "x,y\n1,2,3\n")

    with pytest.raises(CsvParseError) as exc_info:
        load(tmp_path, settings=settings)

    assert "b.csv" in str(exc_info.value)


def test_load_empty_directory(tmp_path, settings):
    assert load(tmp_path, settings=settings) == []


def test_load_directory_with_lock(tmp_path, settings):
    write_csv(tmp_path / "a.csv", "x\n1\n")
    write_csv(tmp_path / "b.csv", "x\n2\n")

    results = load(tmp_path, lock=True, settings=settings)

    assert [r.locked_path.name for r in results] == ["LOCKED_a.csv", "LOCKED_b.csv"]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["LOCKED_a.csv", "LOCKED_b.csv"]


def test_iter_directory_is_lazy_and_stops_at_first_error(tmp_path, settings):
    write_csv(tmp_path / "a.csv", "x\n1\n")
    write_csv(tmp_path / "b.csv", "x,y\n1,2,3\n")
    write_csv(tmp_path / "c.csv", "x\n3\n")

    results = iter_directory(tmp_path, settings=settings)

    first = next(results)
    assert first.path.name == "a.csv"
    with pytest.raises(CsvParseError):
        next(results)
    # The generator is finished after the error
    with pytest.raises(StopIteration):
        next(results)

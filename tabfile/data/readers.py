"""
Readers that turn CSV and Excel files into TabularFile objects.

**Conceptual**: This module is the loading half of tabfile. It accepts a
single file, a list of files, a directory, in-memory rows, or CSV text, and
always hands back the same shape: a TabularFile, or a list of FileResult for
multi-file loads. The actual parsing is delegated:
  - CSV text: pandas.read_csv (every cell kept as a string, no NA guessing).
  - .xlsx workbooks: openpyxl (cached formula results, first worksheet).
  - .xls workbooks: xlrd (first worksheet).

**Error policy**: Fail fast. The first error aborts the whole load, including
multi-file loads: there are no partial results. Missing files raise
FileNotFoundError; decoder failures raise CsvParseError / WorkbookReadError
with the library error chained as ``__cause__``; unknown extensions raise
UnsupportedFormatError.

**Ordering**: Multi-file loads run strictly one file at a time, in listing
order (sorted by name for directories), each file fully read before the next.
"""

import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

import openpyxl
import pandas as pd
import xlrd

from tabfile.config.settings import TabularSettings, get_settings
from tabfile.data.cells import normalize_cell
from tabfile.data.errors import CsvParseError, UnsupportedFormatError, WorkbookReadError
from tabfile.data.formats import SUPPORTED_EXTENSIONS, FileKind, file_kind_for
from tabfile.data.tabular import TabularFile, records_for_columns
from tabfile.utils.fs import is_dir, list_files, lock_file, read_text

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    """
    One entry of a multi-file load.

    Attributes:
        path: The file as it was listed (before any lock rename).
        file: The parsed table.
        locked_path: Where the file lives now if it was locked, else None.
    """
    path: Path
    file: TabularFile
    locked_path: Optional[Path] = None


# ============================================================================
# CSV
# ============================================================================

def parse_csv_text(text: str, headers: bool = True) -> TabularFile:
    """
    Parse CSV text into a TabularFile.

    **Functionally**:
      - Decodes with pandas (no header inference, all cells as strings,
        empty cells as "", blank lines skipped).
      - With ``headers``, row 0 becomes ``columns`` and the remaining rows
        become dicts. Without, rows are returned as lists.
      - Empty (or whitespace-only) text gives an empty TabularFile.

    Args:
        text: CSV text.
        headers: Whether the first row holds column names (default True).

    Returns:
        TabularFile with the parsed rows.

    Raises:
        CsvParseError: If the text is not valid CSV, e.g. a row has more
                       fields than the first row or a quote is unterminated.

    Example:
        >>> table = parse_csv_text("a,b\\n1,2\\n3,4")
        >>> table.columns
        ['a', 'b']
        >>> table.rows
        [{'a': '1', 'b': '2'}, {'a': '3', 'b': '4'}]
    """
    if not text.strip():
        return TabularFile()

    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except ValueError as e:
        # pandas ParserError and EmptyDataError are both ValueErrors
        raise CsvParseError(f"Unable to parse CSV: {e}", cause=e) from e

    rows = df.fillna("").values.tolist()
    logger.debug("Parsed %d CSV rows", len(rows))
    return TabularFile.from_rows(rows, headers=headers)


def read_csv_file(path: Path | str, headers: bool = True, encoding: str = "utf-8") -> TabularFile:
    """
    Read and parse one CSV file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        CsvParseError: If the contents are not valid CSV (message names the file).
    """
    path = Path(path)
    text = read_text(path, encoding=encoding)

    try:
        return parse_csv_text(text, headers=headers)
    except CsvParseError as e:
        raise CsvParseError(f"Unable to parse \"{path}\": {e.cause}", cause=e.cause) from e.cause


# ============================================================================
# Excel
# ============================================================================

def _trim_trailing(values: list[Any]) -> list[Any]:
    """Drop trailing empty cells (workbook rows are padded to the sheet width)."""
    end = len(values)
    while end > 0 and values[end - 1] in (None, ""):
        end -= 1
    return values[:end]


def rows_to_table(raw_rows: Iterable[Iterable[Any]], headers: bool = True) -> TabularFile:
    """
    Shape raw worksheet rows into a TabularFile.

    **Functionally**:
      - Rows with no values at all are skipped.
      - Every cell goes through normalize_cell (unwrap, "#N/A" -> "",
        zeros kept, blanks -> "", strings trimmed).
      - With ``headers``, the first non-empty row supplies ``columns`` (as
        strings); later rows become dicts keyed by them.

    Args:
        raw_rows: Iterable of rows of raw cell values, in sheet order.
        headers: Whether the first non-empty row holds column names.

    Returns:
        TabularFile with normalized cell values.
    """
    columns: list[str] = []
    records: list[Any] = []
    header_seen = False

    for raw in raw_rows:
        values = _trim_trailing(list(raw))
        if not values:
            continue

        cells = [normalize_cell(value) for value in values]

        if headers and not header_seen:
            columns = [str(cell) for cell in cells]
            header_seen = True
        elif headers:
            records.append(records_for_columns(cells, columns))
        else:
            records.append(cells)

    return TabularFile(rows=records, columns=columns)


def _xlsx_rows(path: Path) -> list[tuple]:
    workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        return list(sheet.iter_rows(values_only=True))
    finally:
        workbook.close()


def _xls_cell_value(cell: Any, datemode: int) -> Any:
    """Translate an xlrd cell into the value openpyxl would report for it."""
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if cell.ctype == xlrd.XL_CELL_ERROR:
        return xlrd.error_text_from_code.get(cell.value, "")
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype == xlrd.XL_CELL_DATE:
        return xlrd.xldate_as_datetime(cell.value, datemode)
    if cell.ctype == xlrd.XL_CELL_NUMBER and float(cell.value).is_integer():
        return int(cell.value)
    return cell.value


def _xls_rows(path: Path) -> list[list]:
    book = xlrd.open_workbook(str(path), on_demand=True)
    try:
        sheet = book.sheet_by_index(0)
        return [
            [_xls_cell_value(cell, book.datemode) for cell in sheet.row(r)]
            for r in range(sheet.nrows)
        ]
    finally:
        book.release_resources()


def read_excel_file(path: Path | str, headers: bool = True) -> TabularFile:
    """
    Read the first worksheet of an .xlsx or .xls workbook.

    .xlsx files are opened with openpyxl (``data_only=True``, so formula cells
    yield their cached results); .xls files with xlrd.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        WorkbookReadError: If the workbook can't be opened or read.
    """
    path = Path(path)
    kind = file_kind_for(path)

    if not path.exists():
        raise FileNotFoundError(f"Workbook not found: {path}")

    try:
        raw_rows = _xls_rows(path) if kind is FileKind.XLS else _xlsx_rows(path)
    except Exception as e:
        raise WorkbookReadError(f"Unable to read workbook \"{path}\": {e}", cause=e) from e

    logger.debug("Read %d worksheet rows from %s", len(raw_rows), path)
    return rows_to_table(raw_rows, headers=headers)


# ============================================================================
# Dispatch
# ============================================================================

def read_file(
    path: Path | str,
    headers: bool = True,
    lock: bool = False,
    settings: Optional[TabularSettings] = None,
) -> FileResult:
    """
    Load a single file, dispatching on its extension.

    **Functionally**:
      - Resolves the FileKind first; unsupported extensions fail before any
        lock is taken.
      - If ``lock`` is set, renames the file with the lock prefix and reads it
        under the locked name.
      - CSV goes to read_csv_file, xls/xlsx to read_excel_file.

    Args:
        path: File to load.
        headers: Whether the first row holds column names.
        lock: Whether to lock (rename) the file before reading.
        settings: Encoding and lock prefix; defaults to get_settings().

    Returns:
        FileResult for the file.

    Raises:
        UnsupportedFormatError: If the extension isn't csv, xls, or xlsx.
        FileLockError: If locking fails.
        FileNotFoundError: If the file doesn't exist.
        CsvParseError / WorkbookReadError: If parsing fails.
    """
    settings = settings or get_settings()
    path = Path(path)
    kind = file_kind_for(path)

    if kind is FileKind.UNSUPPORTED:
        raise UnsupportedFormatError(
            f"Unsupported file type \"{path.suffix}\" for \"{path}\". "
            f"Expected one of: {', '.join(SUPPORTED_EXTENSIONS)}."
        )

    locked_path = lock_file(path, prefix=settings.lock_prefix) if lock else None
    source = locked_path or path

    if kind is FileKind.CSV:
        table = read_csv_file(source, headers=headers, encoding=settings.encoding)
    else:
        table = read_excel_file(source, headers=headers)

    logger.info("Loaded %s (%d rows, %d columns)", path.name, len(table.rows), len(table.columns))
    return FileResult(path=path, file=table, locked_path=locked_path)


def iter_directory(
    directory: Path | str,
    headers: bool = True,
    lock: bool = False,
    settings: Optional[TabularSettings] = None,
) -> Iterator[FileResult]:
    """
    Lazily load every csv/xls/xlsx file in a directory, one at a time.

    **Conceptual**: A finite, single-use generator. Files are listed once up
    front (sorted by name) and each is fully loaded before it is yielded. The
    first error propagates out of the generator and ends it.

    Args:
        directory: Directory to scan (non-recursive).
        headers: Whether each file's first row holds column names.
        lock: Whether to lock each file before reading it.
        settings: Encoding and lock prefix; defaults to get_settings().

    Yields:
        FileResult per file, in listing order.
    """
    settings = settings or get_settings()
    files = list_files(directory, extensions=SUPPORTED_EXTENSIONS)
    logger.debug("Found %d tabular files in %s", len(files), directory)

    for path in files:
        yield read_file(path, headers=headers, lock=lock, settings=settings)


def _is_path_like(item: Any) -> bool:
    return isinstance(item, (str, os.PathLike))


def load(
    source: Any,
    headers: bool = True,
    lock: bool = False,
    settings: Optional[TabularSettings] = None,
) -> TabularFile | list[FileResult]:
    """
    Load tabular data from a file, a list of files, a directory, or memory.

    **Dispatch**:
      - TabularFile: returned as-is.
      - Path to a directory: every csv/xls/xlsx file in it -> list[FileResult].
      - Path to a file: that file -> TabularFile.
      - List of paths: each file in order -> list[FileResult].
      - List of rows (lists/tuples), or an empty list: shaped directly,
        no file I/O -> TabularFile.

    Multi-file loads are fail-fast: if any file fails, its error is raised and
    nothing is returned for the batch.

    Args:
        source: What to load (see above).
        headers: Whether the first row holds column names (default True).
        lock: Whether to lock files (rename-based) before reading (default False).
        settings: Encoding and lock prefix; defaults to get_settings().

    Returns:
        TabularFile for single inputs, list[FileResult] for multi-file inputs.

    Raises:
        TypeError: If ``source`` is none of the supported input shapes.
        Anything raised by read_file.

    Example:
        >>> load([["a", "b"], ["1", "2"]]).rows
        [{'a': '1', 'b': '2'}]
        >>> [r.path.name for r in load("inbox/")]
        ['january.csv', 'february.xlsx']
    """
    if isinstance(source, TabularFile):
        return source

    if _is_path_like(source):
        if is_dir(source):
            return list(iter_directory(source, headers=headers, lock=lock, settings=settings))
        return read_file(source, headers=headers, lock=lock, settings=settings).file

    if isinstance(source, (list, tuple)):
        items = list(source)
        if items and all(_is_path_like(item) for item in items):
            return [
                read_file(item, headers=headers, lock=lock, settings=settings)
                for item in items
            ]
        if all(isinstance(item, (list, tuple)) for item in items):
            return TabularFile.from_rows(items, headers=headers)

    raise TypeError(
        f"Cannot load {type(source).__name__}: expected a path, a list of paths, "
        f"or a list of rows."
    )

"""
Writer that saves a TabularFile as a timestamped CSV file.

**Conceptual**: Each write produces a new file named
``<base_name>_<YYYYMMDD_HHMMSS>.csv`` in the target directory, so repeated
exports never overwrite each other. The rows are encoded with pandas
(DataFrame.to_csv) and written through the filesystem helper.

**Error policy**: Encoder failures raise CsvEncodeError; filesystem failures
(OSError and subclasses) propagate unchanged.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd

from tabfile.config.settings import TabularSettings, get_settings
from tabfile.data.errors import CsvEncodeError
from tabfile.data.tabular import TabularFile
from tabfile.utils.fs import ensure_directory, write_text
from tabfile.utils.time import Clock, RealClock, format_file_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteResult:
    """
    Where a write landed.

    Attributes:
        saved_name: File name written (e.g. "orders_20240105_093007.csv").
        directory: Directory it was written to.
    """
    saved_name: str
    directory: Path

    @property
    def path(self) -> Path:
        return self.directory / self.saved_name


def build_file_name(base_name: str, clock: Optional[Clock] = None) -> str:
    """
    Build the output file name ``<base_name>_<timestamp>.csv``.

    Example:
        >>> build_file_name("orders", FrozenClock(datetime(2024, 1, 5, 9, 30, 7)))
        'orders_20240105_093007.csv'
    """
    clock = clock or RealClock()
    return f"{base_name}_{format_file_timestamp(clock.now())}.csv"


def encode_csv(file: TabularFile) -> str:
    """
    Encode a TabularFile as CSV text.

    **Functionally**:
      - With columns: a header row, then each row positioned by ``columns``
        ("" for missing keys).
      - Without columns: rows as-is, no header row. Short rows are padded
        with "" to the widest row.

    Raises:
        CsvEncodeError: If pandas can't build or encode the frame.
    """
    rows = file.to_rows()
    if not rows and not file.columns:
        return ""

    try:
        if file.columns:
            width = len(file.columns)
            # Positional rows passed through to_rows may not match the header width
            rows = [row[:width] + [""] * (width - len(row)) for row in rows]
            df = pd.DataFrame(rows, columns=range(width), dtype=object)
            return df.to_csv(index=False, header=list(file.columns), lineterminator="\n", na_rep="")
        df = pd.DataFrame(rows, dtype=object)
        return df.to_csv(index=False, header=False, lineterminator="\n", na_rep="")
    except (ValueError, TypeError) as e:
        raise CsvEncodeError(f"Unable to stringify CSV file: {e}", cause=e) from e


def write(
    file: TabularFile,
    directory: Path | str,
    base_name: str,
    clock: Optional[Clock] = None,
    settings: Optional[TabularSettings] = None,
) -> WriteResult:
    """
    Write a TabularFile to ``<directory>/<base_name>_<timestamp>.csv``.

    **Functionally**:
      - Timestamp from ``clock`` (default: RealClock), formatted YYYYMMDD_HHMMSS.
      - Rows encoded with encode_csv.
      - Directory created if missing, then the file is written in the
        configured encoding (UTF-8 by default).

    Args:
        file: Table to write.
        directory: Target directory.
        base_name: File name stem; the timestamp and ".csv" are appended.
        clock: Time source for the timestamp (inject FrozenClock in tests).
        settings: Encoding; defaults to get_settings().

    Returns:
        WriteResult naming the saved file and its directory.

    Raises:
        CsvEncodeError: If the rows can't be encoded.
        OSError: If the directory can't be created or the file can't be written.

    Example:
        >>> table = TabularFile(rows=[{"a": "1"}], columns=["a", "b"])
        >>> write(table, "exports", "orders").saved_name
        'orders_20240105_093007.csv'
    """
    settings = settings or get_settings()
    saved_name = build_file_name(base_name, clock)
    content = encode_csv(file)

    directory = ensure_directory(directory)
    write_text(directory / saved_name, content, encoding=settings.encoding)

    logger.info("Saved %d rows to %s", len(file.rows), directory / saved_name)
    return WriteResult(saved_name=saved_name, directory=directory)

"""
The TabularFile data model.

**Conceptual**: A TabularFile is the one in-memory shape every reader
produces and the writer consumes: an ordered list of rows plus an ordered
list of column names.

  - With headers, ``columns`` holds the header row and each row is a dict
    keyed by those column names. Every dict has exactly the keys in
    ``columns``; cells missing from a short row are filled with "".
  - Without headers, ``columns`` is empty and each row is a plain list of
    cell values.

Duplicate header names are not special-cased: the later cell overwrites the
earlier one in the row dict, while ``columns`` keeps the header row as read.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

# A single row: keyed by column name, or positional
Record = Union[dict[str, Any], list[Any]]


@dataclass
class TabularFile:
    """
    Parsed rows plus optional column headers.

    Attributes:
        rows: Records in file order (dicts when ``columns`` is set, lists otherwise).
        columns: Column names from the header row; empty for headerless data.
    """
    rows: list[Record] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def has_headers(self) -> bool:
        return bool(self.columns)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]], headers: bool = True) -> "TabularFile":
        """
        Build a TabularFile from already-split rows.

        Args:
            rows: Rows as sequences of cell values.
            headers: If True, row 0 supplies the column names and the rest
                     become dicts; if False, rows are kept as lists.

        Returns:
            TabularFile shaped according to ``headers``.

        Example:
            >>> TabularFile.from_rows([["a", "b"], ["1", "2"]])
            TabularFile(rows=[{'a': '1', 'b': '2'}], columns=['a', 'b'])
        """
        rows = [list(row) for row in rows]

        if not headers:
            return cls(rows=rows, columns=[])
        if not rows:
            return cls(rows=[], columns=[])

        columns = rows[0]
        records = [records_for_columns(row, columns) for row in rows[1:]]
        return cls(rows=records, columns=columns)

    @classmethod
    def from_text(cls, text: str, headers: bool = True) -> "TabularFile":
        """Parse CSV text (see tabfile.data.readers.parse_csv_text)."""
        from tabfile.data.readers import parse_csv_text

        return parse_csv_text(text, headers=headers)

    def to_rows(self) -> list[list[Any]]:
        """
        Return the rows in positional form, ready for CSV encoding.

        **Functionally**:
          - Without columns: rows are copied as lists, unchanged.
          - With columns: each dict row becomes a list ordered by ``columns``,
            with "" for missing keys and None values. List rows pass through.

        Example:
            >>> TabularFile(rows=[{"a": "1"}], columns=["a", "b"]).to_rows()
            [['1', '']]
        """
        if not self.columns:
            return [list(row) for row in self.rows]

        positional = []
        for row in self.rows:
            if isinstance(row, Mapping):
                positional.append([_blank_if_missing(row.get(col)) for col in self.columns])
            else:
                positional.append(list(row))
        return positional

    def write(self, directory: Path | str, base_name: str, **kwargs):
        """Write this table as a timestamped CSV (see tabfile.data.writers.write)."""
        from tabfile.data.writers import write

        return write(self, directory, base_name, **kwargs)


def records_for_columns(row: Sequence[Any], columns: Sequence[str]) -> dict[str, Any]:
    """
    Key one row by ``columns``.

    Cells beyond the last column are dropped; columns beyond the end of the
    row get "".
    """
    return {col: (row[i] if i < len(row) else "") for i, col in enumerate(columns)}


def _blank_if_missing(value: Any) -> Any:
    return "" if value is None else value

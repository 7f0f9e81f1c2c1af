"""
Cell value normalization for spreadsheet rows.

**Conceptual**: Workbook readers hand back raw cell values in whatever shape
the library uses: numbers, strings with stray whitespace, None for blank
cells, dates, and sometimes nested mappings for formula cells (a formula plus
its cached ``result``, or an ``error`` marker). Everything that leaves the
spreadsheet reader passes through normalize_cell so that every TabularFile
holds the same small set of value types: str, int, float, or "".

**Rules** (in order):
  1. Mapping values are unwrapped to the scalar they carry (unwrap_cell_value).
  2. The error value "#N/A" becomes "".
  3. Zero (0, 0.0) and the string "0" are kept; they are real values.
  4. Any other empty value (None, False, "") becomes "".
  5. Strings are trimmed.
  6. date/time values become ISO 8601 strings.
"""

from collections.abc import Mapping
from datetime import date, datetime, time
from typing import Any

# Keys that carry a formula cell's computed value
RESULT_KEYS = ("result", "error")

# Spreadsheet error value that reads back as an empty cell
NOT_AVAILABLE = "#N/A"


def unwrap_cell_value(value: Any) -> Any:
    """
    Extract the scalar carried by a (possibly nested) mapping cell value.

    **Functionally**:
      - Non-mapping values are returned unchanged.
      - For a mapping, keys are visited in order. A ``result`` or ``error`` key
        holding a scalar ends the search with that scalar. Any key holding a
        nested mapping is searched recursively, and the last value found that
        way is kept while the search continues.
      - A mapping with nothing to unwrap yields None.

    Args:
        value: Raw cell value.

    Returns:
        The scalar found, or None.

    Example:
        >>> unwrap_cell_value({"formula": "A1*2", "result": 84})
        84
        >>> unwrap_cell_value({"shared": {"result": {"error": "#N/A"}}})
        '#N/A'
        >>> unwrap_cell_value({"richText": "x"}) is None
        True
    """
    if not isinstance(value, Mapping):
        return value

    found = None
    for key, item in value.items():
        if isinstance(item, Mapping):
            found = unwrap_cell_value(item)
        elif key in RESULT_KEYS:
            return item
    return found


def is_present(value: Any) -> bool:
    """
    Return True if a cell value counts as filled in.

    Zero and "0" count as present; None, False, and "" don't.
    """
    if value is False or value is None:
        return False
    if isinstance(value, (int, float)) and value == 0:
        return True
    if isinstance(value, str):
        return value != ""
    return bool(value)


def normalize_cell(value: Any) -> Any:
    """
    Normalize one raw spreadsheet cell value.

    Args:
        value: Raw value from the workbook reader.

    Returns:
        A str, int, or float; "" for empty cells.

    Example:
        >>> normalize_cell("  widget ")
        'widget'
        >>> normalize_cell(0)
        0
        >>> normalize_cell(None)
        ''
        >>> normalize_cell({"error": "#N/A"})
        ''
    """
    value = unwrap_cell_value(value)

    if value == NOT_AVAILABLE:
        return ""
    if not is_present(value):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value

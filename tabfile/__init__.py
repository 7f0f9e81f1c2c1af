"""
tabfile – read and write tabular data (CSV, .xls, .xlsx) as uniform rows.

The public entrypoints live in tabfile.data:

    from tabfile.data import TabularFile, load, write
"""

from tabfile.data.tabular import TabularFile
from tabfile.data.readers import FileResult, load
from tabfile.data.writers import WriteResult, write

__all__ = ["TabularFile", "FileResult", "WriteResult", "load", "write"]

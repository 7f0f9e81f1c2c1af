#!/usr/bin/env python3
"""
Convert CSV / Excel files to timestamped CSV exports.

**Purpose**: Load a single file or every csv/xls/xlsx file in a directory and
write each one back out as ``<name>_<YYYYMMDD_HHMMSS>.csv`` in the output
directory. Handy for normalizing a folder of mixed spreadsheets into plain
CSV.

**Usage**:
    From project root:
    ```bash
    # Convert one workbook into output/ (TABFILE_OUTPUT_DIR)
    python actions/convert_to_csv.py data/inbox/orders.xlsx

    # Convert a whole folder into exports/, locking each file while it is read
    python actions/convert_to_csv.py data/inbox/ -o exports --lock

    # Headerless data, custom output name
    python actions/convert_to_csv.py raw.csv --no-headers --name cleaned
    ```

**Behavior**: Fail-fast. The first file that can't be read stops the run and
nothing further is written; the script exits with status 1.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

# Add project root to Python path so we can import tabfile
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from tabfile.config.settings import TabularSettings, get_settings
from tabfile.data.errors import TabularFileError
from tabfile.data.readers import load
from tabfile.data.tabular import TabularFile
from tabfile.data.writers import WriteResult, write
from tabfile.utils.fs import is_dir
from tabfile.utils.log import setup_logging
from tabfile.utils.time import Clock

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Namespace with attributes: source, output, name, headers, lock, log_level.
    """
    parser = argparse.ArgumentParser(
        description="Convert CSV / Excel files to timestamped CSV exports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "source",
        help="A .csv/.xls/.xlsx file, or a directory of them",
    )

    parser.add_argument(
        "-o", "--output",
        help="Output directory (default: TABFILE_OUTPUT_DIR or ./output)",
        default=None,
    )

    parser.add_argument(
        "--name",
        help="Base name for the output file(s) (default: each input file's stem)",
        default=None,
    )

    parser.add_argument(
        "--no-headers",
        dest="headers",
        action="store_false",
        help="Treat the first row as data, not column names",
    )

    parser.add_argument(
        "--lock",
        action="store_true",
        help="Lock (rename) each input file before reading it",
    )

    parser.add_argument(
        "--log-level",
        help="Log level (default: TABFILE_LOG_LEVEL or INFO)",
        default=None,
    )

    return parser.parse_args(argv)


def convert(
    source: Path | str,
    output_dir: Path | str,
    name: Optional[str] = None,
    headers: bool = True,
    lock: bool = False,
    clock: Optional[Clock] = None,
    settings: Optional[TabularSettings] = None,
) -> list[WriteResult]:
    """
    Load ``source`` and write every table in it to ``output_dir``.

    For a directory, ``name`` (when given) prefixes each file's stem:
    ``<name>_<stem>_<timestamp>.csv``. For a single file it replaces the stem.

    Args:
        source: File or directory to convert.
        output_dir: Where to write the CSV files.
        name: Optional base name (see above).
        headers: Whether inputs have a header row.
        lock: Whether to lock inputs before reading.
        clock: Time source for the filename timestamps.
        settings: Settings to use; defaults to get_settings().

    Returns:
        One WriteResult per file written, in input order.
    """
    source = Path(source)
    settings = settings or get_settings()

    if is_dir(source):
        loaded = load(source, headers=headers, lock=lock, settings=settings)
        jobs = [
            (f"{name}_{result.path.stem}" if name else result.path.stem, result.file)
            for result in loaded
        ]
    else:
        table: TabularFile = load(source, headers=headers, lock=lock, settings=settings)
        jobs = [(name or source.stem, table)]

    return [
        write(table, output_dir, base_name, clock=clock, settings=settings)
        for base_name, table in jobs
    ]


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entrypoint.

    Returns:
        Process exit status: 0 on success, 1 on any load/write failure.
    """
    args = parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        setup_logging(logging.INFO)
        logger.error("Invalid configuration: %s", e)
        return 1

    setup_logging(args.log_level or settings.log_level)
    output_dir = Path(args.output) if args.output else settings.output_dir

    try:
        results = convert(
            args.source,
            output_dir,
            name=args.name,
            headers=args.headers,
            lock=args.lock,
            settings=settings,
        )
    except (TabularFileError, OSError) as e:
        logger.error("Conversion failed: %s", e)
        return 1

    if not results:
        logger.warning("No csv/xls/xlsx files found in %s", args.source)
    for result in results:
        logger.info("Wrote %s", result.path)

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
tabfile – Main entry point.

Thin wrapper around actions/convert_to_csv.py so the converter can be run as
``python main.py <source> [-o OUTPUT] ...``.
"""

import sys

from actions.convert_to_csv import main


if __name__ == "__main__":
    sys.exit(main())

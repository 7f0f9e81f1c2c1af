"""
Tests for tabfile/utils/log.py
"""

import logging

from rich.logging import RichHandler

from tabfile.utils.log import setup_logging


def test_setup_logging_installs_rich_handler():
    logger = setup_logging("debug")

    root = logging.getLogger()
    assert logger.name == "tabfile"
    assert root.level == logging.DEBUG
    assert any(isinstance(h, RichHandler) for h in root.handlers)


def test_setup_logging_accepts_level_constant():
    setup_logging(logging.WARNING)

    assert logging.getLogger().level == logging.WARNING

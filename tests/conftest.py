"""
Pytest configuration file.

Ensures the repo root is on sys.path so that 'import tabfile...' works, and
provides shared fixtures for settings and clocks.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add the repo root to sys.path
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from tabfile.config.settings import TabularSettings  # noqa: E402
from tabfile.utils.time import FrozenClock  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    """Settings that don't depend on the developer's environment or .env."""
    return TabularSettings(output_dir=tmp_path / "output")


@pytest.fixture
def frozen_clock():
    """Clock frozen at 2024-01-05 09:30:07 UTC."""
    return FrozenClock(datetime(2024, 1, 5, 9, 30, 7, tzinfo=timezone.utc))

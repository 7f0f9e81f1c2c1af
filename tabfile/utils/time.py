"""
Time and clock abstractions for timestamped output filenames.

This module provides a simple, testable way to obtain "now" via a clock object
rather than calling datetime.now() directly. The writer stamps every CSV it
saves with the current date/time; by injecting a Clock, tests can freeze that
timestamp and assert on exact filenames.
"""

from datetime import datetime, timezone
from typing import Protocol


# Filename timestamp layout: YYYYMMDD_HHMMSS (zero-padded, sortable)
FILE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


class Clock(Protocol):
    """
    Abstract time source protocol.

    **Conceptual**: A Clock is any object that can answer the question "what time
    is it right now?" Code that names files after the current time accepts a
    Clock instead of reading the system clock, so the same code produces
    predictable names under test.

    **Usage**: In production, pass a RealClock (or nothing; writers default to
    one); in tests, pass a FrozenClock.

    **Example**:
        write(table, "out/", "orders", clock=FrozenClock(datetime(2024, 1, 5)))
        # -> out/orders_20240105_000000.csv
    """

    def now(self) -> datetime:
        """
        Return the current time according to this clock.

        Returns:
            datetime object representing "now".
        """
        ...


class RealClock:
    """
    Clock that returns the actual current system time (UTC).

    **Usage**:
        clock = RealClock()
        current_time = clock.now()  # Returns current UTC time
    """

    def now(self) -> datetime:
        """Return the current UTC time from the system clock."""
        return datetime.now(timezone.utc)


class FrozenClock:
    """
    Clock that always returns a fixed timestamp.

    Use this in tests to make output filenames deterministic.

    **Usage**:
        clock = FrozenClock(datetime(2015, 1, 5, 9, 30, tzinfo=timezone.utc))
        clock.now()  # Always 2015-01-05T09:30:00+00:00
    """

    def __init__(self, fixed_now: datetime):
        """
        Initialize a FrozenClock with a fixed timestamp.

        Args:
            fixed_now: The datetime to return on every call to now().
        """
        self._fixed_now = fixed_now

    def now(self) -> datetime:
        return self._fixed_now


def get_real_clock() -> Clock:
    """Factory function to create a RealClock instance."""
    return RealClock()


def get_frozen_clock(fixed_now: datetime) -> Clock:
    """
    Factory function to create a FrozenClock with a given timestamp.

    Args:
        fixed_now: The datetime to freeze at.

    Returns:
        FrozenClock instance configured with fixed_now.
    """
    return FrozenClock(fixed_now)


def format_file_timestamp(moment: datetime) -> str:
    """
    Format a datetime as the zero-padded filename suffix YYYYMMDD_HHMMSS.

    Sub-second precision and timezone are dropped; the components are taken
    as-is from ``moment`` (no timezone conversion).

    Args:
        moment: The datetime to format.

    Returns:
        Timestamp string such as "20240105_093007".

    Example:
        >>> format_file_timestamp(datetime(2024, 1, 5, 9, 30, 7))
        '20240105_093007'
    """
    return moment.strftime(FILE_TIMESTAMP_FORMAT)

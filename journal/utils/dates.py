"""Timestamp helpers for trades recorded with and without a timezone."""

from datetime import datetime


def wall_clock(moment: datetime) -> datetime:
    """The recorded local time, with any offset dropped."""
    return moment.replace(tzinfo=None)


def align(first: datetime, second: datetime) -> tuple[datetime, datetime]:
    """Make two timestamps comparable.

    SQLite hands back naive timestamps, so when only one side carries an
    offset both are compared as wall-clock values.
    """
    if (first.tzinfo is None) != (second.tzinfo is None):
        return wall_clock(first), wall_clock(second)
    return first, second

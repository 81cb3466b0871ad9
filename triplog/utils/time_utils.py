"""
Time parsing utilities for triplog.

Trip exports carry local wall-clock timestamps such as '2026-02-19, 15:05'
with no timezone. They are parsed to naive datetimes and compared as-is.
"""

import logging
from datetime import date, datetime, time
from typing import Optional, Union

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)


# Formats seen in trip exports, most common first
TRIP_TIMESTAMP_FORMATS = [
    "%Y-%m-%d, %H:%M",  # 2026-02-19, 15:05
    "%Y-%m-%d, %H:%M:%S",  # 2026-02-19, 15:05:30
    "%Y-%m-%d %H:%M",  # 2026-02-19 15:05
    "%Y-%m-%d %H:%M:%S",  # 2026-02-19 15:05:30
    "%Y-%m-%dT%H:%M",  # 2026-02-19T15:05
    "%Y-%m-%dT%H:%M:%S",  # 2026-02-19T15:05:30
]


def parse_trip_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a trip timestamp string into a naive local datetime.

    Args:
        value: Timestamp string from the export

    Returns:
        datetime, or None if the value is empty or unparseable

    Example:
        >>> parse_trip_timestamp("2026-02-19, 15:05")
        datetime.datetime(2026, 2, 19, 15, 5)
    """
    if not value:
        return None

    value = value.strip()
    if not value:
        return None

    for fmt in TRIP_TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    # Try dateutil parser (handles most other formats)
    try:
        dt = date_parser.parse(value)
    except (ValueError, OverflowError, TypeError):
        logger.debug(f"Could not parse trip timestamp: {value}")
        return None

    # Keep wall-clock time, drop any offset
    return dt.replace(tzinfo=None)


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Parse a calendar date from a string or date-like value.

    Example:
        >>> parse_date("2026-02-19")
        datetime.date(2026, 2, 19)
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return date_parser.parse(str(value).strip()).date()
    except (ValueError, OverflowError, TypeError):
        logger.warning(f"Failed to parse date string: {value}")
        return None


def start_of_day(day: date) -> datetime:
    """First instant of the given day."""
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    """Last instant of the given day."""
    return datetime.combine(day, time.max)


def duration_minutes(start: datetime, end: datetime) -> int:
    """
    Whole minutes between two datetimes, truncated toward zero.

    Example:
        >>> duration_minutes(datetime(2024, 1, 1, 10, 0), datetime(2024, 1, 1, 10, 30, 59))
        30
    """
    return int((end - start).total_seconds() / 60)

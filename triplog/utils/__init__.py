"""Utility modules for triplog."""

from .csv_parser import TripCSVParser
from .time_utils import (
    parse_trip_timestamp,
    parse_date,
    start_of_day,
    end_of_day,
    duration_minutes,
)
from .weather import get_hourly_temperature

__all__ = [
    'TripCSVParser',
    'parse_trip_timestamp',
    'parse_date',
    'start_of_day',
    'end_of_day',
    'duration_minutes',
    'get_hourly_temperature',
]

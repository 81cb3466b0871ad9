"""
Unit Conversions

Converts canonical (imperial) trip values to the user's display unit system
and display input back to canonical:
- Distance and odometer (mi <-> km)
- Efficiency (mi/kWh <-> km/kWh)
- Speed (mph <-> km/h)
- Temperature (°F <-> °C)

All functions are pure. Stored data is never converted in place.
"""

from typing import Optional

from triplog.exceptions import ConfigurationError

from .constants import (
    FAHRENHEIT_OFFSET,
    IMPERIAL,
    KM_PER_MILE,
    METRIC,
    UNIT_SYSTEMS,
)


def normalize_unit_system(unit_system: str) -> str:
    """
    Validate a unit system flag.

    Examples:
        >>> normalize_unit_system('Metric')
        'metric'
    """
    value = (unit_system or '').strip().lower()
    if value not in UNIT_SYSTEMS:
        raise ConfigurationError(
            f"Unknown unit system: {unit_system!r} (expected one of {', '.join(UNIT_SYSTEMS)})",
            config_key='unit_system',
        )
    return value


def is_metric(unit_system: str) -> bool:
    return unit_system == METRIC


def to_display_distance(miles: float, unit_system: str) -> float:
    """
    Convert canonical miles to the display distance unit.

    Examples:
        >>> round(to_display_distance(10.0, 'metric'), 2)
        16.09
        >>> to_display_distance(10.0, 'imperial')
        10.0
    """
    return miles * KM_PER_MILE if is_metric(unit_system) else miles


def from_display_distance(value: float, unit_system: str) -> float:
    """Convert a displayed distance (mi or km) back to canonical miles."""
    return value / KM_PER_MILE if is_metric(unit_system) else value


def to_display_efficiency(mi_per_kwh: float, unit_system: str) -> float:
    """
    Convert canonical mi/kWh to the display efficiency unit.

    Efficiency scales like distance (km/kWh), it is not inverted.
    """
    return mi_per_kwh * KM_PER_MILE if is_metric(unit_system) else mi_per_kwh


def from_display_efficiency(value: float, unit_system: str) -> float:
    return value / KM_PER_MILE if is_metric(unit_system) else value


def to_display_speed(mph: float, unit_system: str) -> float:
    return mph * KM_PER_MILE if is_metric(unit_system) else mph


def from_display_speed(value: float, unit_system: str) -> float:
    return value / KM_PER_MILE if is_metric(unit_system) else value


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    """
    Examples:
        >>> fahrenheit_to_celsius(212.0)
        100.0
    """
    return (fahrenheit - FAHRENHEIT_OFFSET) * 5 / 9


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + FAHRENHEIT_OFFSET


def to_display_temperature(fahrenheit: Optional[float], unit_system: str) -> Optional[float]:
    """Convert canonical °F to the display unit; unknown temperatures stay None."""
    if fahrenheit is None:
        return None
    return fahrenheit_to_celsius(fahrenheit) if is_metric(unit_system) else fahrenheit


def from_display_temperature(value: Optional[float], unit_system: str) -> Optional[float]:
    if value is None:
        return None
    return celsius_to_fahrenheit(value) if is_metric(unit_system) else value


def get_distance_label(unit_system: str) -> str:
    return 'km' if is_metric(unit_system) else 'mi'


def get_efficiency_label(unit_system: str) -> str:
    return 'km/kWh' if is_metric(unit_system) else 'mi/kWh'


def get_speed_label(unit_system: str) -> str:
    return 'km/h' if is_metric(unit_system) else 'mph'


def get_temperature_label(unit_system: str) -> str:
    return '°C' if is_metric(unit_system) else '°F'


def get_co2_label(unit_system: str) -> str:
    return 'kg' if is_metric(unit_system) else 'lbs'


def get_unit_labels(unit_system: str) -> dict:
    """All display labels for a unit system, keyed by quantity."""
    return {
        'distance': get_distance_label(unit_system),
        'efficiency': get_efficiency_label(unit_system),
        'speed': get_speed_label(unit_system),
        'temperature': get_temperature_label(unit_system),
        'co2': get_co2_label(unit_system),
        'energy': 'kWh',
    }


__all__ = [
    'IMPERIAL',
    'METRIC',
    'normalize_unit_system',
    'is_metric',
    'to_display_distance',
    'from_display_distance',
    'to_display_efficiency',
    'from_display_efficiency',
    'to_display_speed',
    'from_display_speed',
    'to_display_temperature',
    'from_display_temperature',
    'fahrenheit_to_celsius',
    'celsius_to_fahrenheit',
    'get_distance_label',
    'get_efficiency_label',
    'get_speed_label',
    'get_temperature_label',
    'get_co2_label',
    'get_unit_labels',
]

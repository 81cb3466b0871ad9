"""
Statistics service for triplog.

Dashboard aggregates and chart series computed from a (filtered) trip set.
Sums are taken over canonical values and converted to the display unit
system once, at the end.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from triplog.calculations.constants import (
    DISTANCE_DECIMALS,
    EFFICIENCY_DECIMALS,
    SPEED_DECIMALS,
    TEMPERATURE_DECIMALS,
)
from triplog.calculations.efficiency import (
    calculate_average_efficiency,
    calculate_average_speed,
    calculate_estimated_range,
)
from triplog.calculations.financial import calculate_co2_saved, calculate_fuel_savings
from triplog.calculations.regression import calculate_linear_regression, generate_trendline
from triplog.calculations.units import (
    get_distance_label,
    get_efficiency_label,
    get_speed_label,
    get_temperature_label,
    get_unit_labels,
    normalize_unit_system,
    to_display_distance,
    to_display_efficiency,
    to_display_speed,
    to_display_temperature,
)
from triplog.exceptions import ConfigurationError
from triplog.models import Trip
from triplog.utils.time_utils import duration_minutes, parse_trip_timestamp

logger = logging.getLogger(__name__)

REGRESSION_DIMENSIONS = ('temperature', 'speed', 'distance')


def _trip_start(trip: Trip) -> Optional[datetime]:
    return trip.start_time or parse_trip_timestamp(trip.start_key)


def calculate_trip_speed(trip: Trip) -> Optional[float]:
    """
    Average speed of a trip in mph.

    Uses whole minutes between start and end, with a one minute floor.

    Returns:
        mph, or None when either timestamp cannot be parsed
    """
    start = _trip_start(trip)
    end = parse_trip_timestamp(trip.end_timestamp)
    if start is None or end is None:
        return None
    return calculate_average_speed(trip.distance, duration_minutes(start, end))


def calculate_dashboard_summary(trips: List[Trip], settings) -> Dict[str, Any]:
    """
    Aggregate cards for the dashboard.

    Args:
        trips: Trips to summarize (usually the filtered view)
        settings: AppSettings with the unit system and cost parameters

    Returns:
        Dict of display values with unit labels, plus the canonical totals
    """
    unit_system = normalize_unit_system(settings.unit_system)

    total_distance = sum(trip.distance for trip in trips)
    total_energy = sum(trip.consumption for trip in trips)
    average_efficiency = calculate_average_efficiency(total_distance, total_energy)

    display_efficiency = to_display_efficiency(average_efficiency, unit_system)
    estimated_range = calculate_estimated_range(display_efficiency, settings.battery_capacity_kwh)

    co2_saved = calculate_co2_saved(total_distance, unit_system)
    fuel_savings = calculate_fuel_savings(
        total_distance,
        total_energy,
        unit_system,
        settings.gas_price,
        settings.ice_efficiency,
        settings.elec_rate,
    )

    return {
        'unit_system': unit_system,
        'trip_count': len(trips),
        'total_distance': round(to_display_distance(total_distance, unit_system), DISTANCE_DECIMALS),
        'total_energy': round(total_energy, 1),
        'average_efficiency': round(display_efficiency, EFFICIENCY_DECIMALS),
        'estimated_range': round(estimated_range),
        'co2_saved': round(co2_saved, 1),
        'fuel_savings': round(fuel_savings, 2),
        'labels': get_unit_labels(unit_system),
        'canonical': {
            'total_distance_miles': total_distance,
            'total_energy_kwh': total_energy,
            'average_efficiency_mi_per_kwh': average_efficiency,
        },
    }


def _sorted_by_start(trips: List[Trip]) -> List[Trip]:
    """Ascending start time; trips with an unparseable start go last."""
    def sort_key(trip):
        start = _trip_start(trip)
        return (start is None, start or datetime.min, trip.start_key)

    return sorted(trips, key=sort_key)


def build_efficiency_timeseries(trips: List[Trip], unit_system: str) -> List[Dict[str, Any]]:
    """Efficiency per trip over time, skipping trips with no distance."""
    unit_system = normalize_unit_system(unit_system)

    series = []
    for trip in _sorted_by_start(trips):
        if trip.distance <= 0:
            continue
        start = _trip_start(trip)
        series.append({
            'start_key': trip.start_key,
            'date': start.date().isoformat() if start else None,
            'efficiency': round(to_display_efficiency(trip.efficiency, unit_system), EFFICIENCY_DECIMALS),
            'distance': round(to_display_distance(trip.distance, unit_system), DISTANCE_DECIMALS),
        })
    return series


def _regression_x(trip: Trip, dimension: str, unit_system: str) -> Optional[float]:
    if dimension == 'temperature':
        return to_display_temperature(trip.temperature, unit_system)
    if dimension == 'speed':
        speed = calculate_trip_speed(trip)
        return to_display_speed(speed, unit_system) if speed is not None else None
    return to_display_distance(trip.distance, unit_system)


_X_DECIMALS = {
    'temperature': TEMPERATURE_DECIMALS,
    'speed': SPEED_DECIMALS,
    'distance': DISTANCE_DECIMALS,
}

_X_LABELS = {
    'temperature': get_temperature_label,
    'speed': get_speed_label,
    'distance': get_distance_label,
}


def build_regression_series(trips: List[Trip], dimension: str, unit_system: str) -> Dict[str, Any]:
    """
    Efficiency against temperature, speed or distance, with an OLS trendline.

    Only trips with positive distance and a value for the dimension are
    plotted. The trendline is left empty when fewer than two points exist or
    every x value is equal.
    """
    if dimension not in REGRESSION_DIMENSIONS:
        raise ConfigurationError(
            f"Unknown regression dimension: {dimension!r} (expected one of {', '.join(REGRESSION_DIMENSIONS)})",
            config_key='dimension',
        )
    unit_system = normalize_unit_system(unit_system)

    raw_points = []
    for trip in trips:
        if trip.distance <= 0:
            continue
        x = _regression_x(trip, dimension, unit_system)
        if x is None:
            continue
        raw_points.append((x, to_display_efficiency(trip.efficiency, unit_system), trip))

    raw_points.sort(key=lambda point: point[0])

    xy = [(x, y) for x, y, _ in raw_points]
    line = calculate_linear_regression(xy)
    decimals = _X_DECIMALS[dimension]

    points = [
        {
            'start_key': trip.start_key,
            'x': round(x, decimals),
            'efficiency': round(y, EFFICIENCY_DECIMALS),
            'distance': round(to_display_distance(trip.distance, unit_system), DISTANCE_DECIMALS),
        }
        for x, y, trip in raw_points
    ]

    trendline = [
        {'x': round(x, decimals), 'y': round(y, EFFICIENCY_DECIMALS)}
        for x, y in generate_trendline(xy)
    ]

    return {
        'dimension': dimension,
        'x_label': _X_LABELS[dimension](unit_system),
        'y_label': get_efficiency_label(unit_system),
        'points': points,
        'trendline': trendline,
        'slope': line.slope if line is not None else None,
        'intercept': line.intercept if line is not None else None,
    }


def build_chart_data(trips: List[Trip], unit_system: str) -> Dict[str, Any]:
    """Every chart series for the current trip set in one payload."""
    unit_system = normalize_unit_system(unit_system)
    return {
        'unit_system': unit_system,
        'labels': get_unit_labels(unit_system),
        'timeseries': build_efficiency_timeseries(trips, unit_system),
        'regressions': {
            dimension: build_regression_series(trips, dimension, unit_system)
            for dimension in REGRESSION_DIMENSIONS
        },
    }

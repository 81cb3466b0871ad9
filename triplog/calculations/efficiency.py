"""
Efficiency Calculations

Handles distance-per-energy metrics for electric trips:
- Per-trip efficiency (mi/kWh)
- Aggregate efficiency and range estimates
- Average speed from trip duration
"""

from .constants import MIN_TRIP_DURATION_MINUTES


def calculate_efficiency(distance: float, consumption: float) -> float:
    """
    Calculate efficiency as distance per kWh.

    Args:
        distance: Distance driven (miles)
        consumption: Energy consumed (kWh)

    Returns:
        mi/kWh, or 0.0 when no energy was consumed

    Examples:
        >>> calculate_efficiency(10.0, 5.0)
        2.0
        >>> calculate_efficiency(8.0, 0.0)
        0.0
    """
    if consumption > 0:
        return distance / consumption
    return 0.0


def calculate_average_efficiency(total_distance: float, total_energy: float) -> float:
    """
    Average efficiency over many trips: total distance / total energy.

    Weighted by energy, not a mean of per-trip efficiencies.

    Examples:
        >>> round(calculate_average_efficiency(18.0, 7.0), 2)
        2.57
    """
    if total_energy > 0:
        return total_distance / total_energy
    return 0.0


def calculate_estimated_range(efficiency: float, battery_capacity_kwh: float) -> float:
    """
    Estimated range on a full battery at the given efficiency.

    Examples:
        >>> calculate_estimated_range(3.0, 78.0)
        234.0
    """
    if efficiency <= 0 or battery_capacity_kwh <= 0:
        return 0.0
    return efficiency * battery_capacity_kwh


def calculate_average_speed(distance: float, duration_minutes: int) -> float:
    """
    Average speed in distance units per hour.

    Durations under one minute are floored to one minute.

    Examples:
        >>> calculate_average_speed(30.0, 30)
        60.0
        >>> calculate_average_speed(1.0, 0)
        60.0
    """
    minutes = max(duration_minutes, MIN_TRIP_DURATION_MINUTES)
    return distance / minutes * 60

"""
Financial and Emissions Calculations

Handles what driving electric saved compared to a gas car:
- CO2 conserved
- Fuel cost savings
- Conversion of cost parameters between unit systems
"""

from typing import Tuple

from .constants import (
    CO2_LBS_PER_MILE,
    KG_PER_LB,
    KM_PER_MILE,
    LITERS_PER_GALLON,
    MPG_L100KM_CONSTANT,
)
from .units import is_metric, normalize_unit_system


def calculate_co2_saved(distance_miles: float, unit_system: str) -> float:
    """
    Calculate CO2 a comparable gas car would have emitted over the distance.

    Always computed from canonical miles, then returned in lbs (imperial)
    or kg (metric).

    Args:
        distance_miles: Distance driven (miles)
        unit_system: 'imperial' or 'metric'

    Returns:
        CO2 conserved in lbs or kg

    Examples:
        >>> round(calculate_co2_saved(100.0, 'imperial'), 1)
        65.3
    """
    co2_lbs = distance_miles * CO2_LBS_PER_MILE
    return co2_lbs * KG_PER_LB if is_metric(unit_system) else co2_lbs


def calculate_ev_cost(energy_kwh: float, elec_rate: float) -> float:
    """Cost of the electricity used ($)."""
    return energy_kwh * elec_rate


def calculate_ice_cost(
    distance_miles: float,
    unit_system: str,
    gas_price: float,
    ice_efficiency: float
) -> float:
    """
    Cost of driving the distance in a gas car.

    Args:
        distance_miles: Distance (canonical miles)
        unit_system: Selects how gas_price and ice_efficiency are expressed
        gas_price: $/gal (imperial) or $/L (metric)
        ice_efficiency: mpg (imperial) or L/100km (metric)

    Returns:
        Fuel cost in dollars, 0.0 if the fuel figure is unusable
    """
    if is_metric(unit_system):
        distance_km = distance_miles * KM_PER_MILE
        liters_used = (distance_km / 100) * ice_efficiency
        return liters_used * gas_price

    if not ice_efficiency or ice_efficiency <= 0:
        return 0.0
    gallons_used = distance_miles / ice_efficiency
    return gallons_used * gas_price


def calculate_fuel_savings(
    distance_miles: float,
    energy_kwh: float,
    unit_system: str,
    gas_price: float,
    ice_efficiency: float,
    elec_rate: float
) -> float:
    """
    Calculate dollars saved by driving electric instead of a gas car.

    Args:
        distance_miles: Distance driven (canonical miles)
        energy_kwh: Energy used (kWh)
        unit_system: 'imperial' or 'metric', governs the units of the gas parameters
        gas_price: $/gal or $/L
        ice_efficiency: mpg or L/100km
        elec_rate: $/kWh

    Returns:
        ice_cost - ev_cost (negative when electricity cost more)

    Examples:
        >>> calculate_fuel_savings(30.0, 10.0, 'imperial', 3.00, 30.0, 0.15)
        1.5
    """
    ev_cost = calculate_ev_cost(energy_kwh, elec_rate)
    ice_cost = calculate_ice_cost(distance_miles, unit_system, gas_price, ice_efficiency)
    return ice_cost - ev_cost


def convert_cost_parameters(
    gas_price: float,
    ice_efficiency: float,
    from_system: str,
    to_system: str
) -> Tuple[float, float]:
    """
    Convert gas price and ICE efficiency when the unit system changes.

    Keeps calculate_fuel_savings() numerically unchanged across a switch:
    $/gal <-> $/L via 3.78541 L/gal, mpg <-> L/100km via 235.215 / value.
    Values are not rounded.

    Returns:
        Tuple of (gas_price, ice_efficiency) in the target system's units

    Examples:
        >>> price, l_per_100km = convert_cost_parameters(3.78541, 30.0, 'imperial', 'metric')
        >>> price
        1.0
    """
    from_system = normalize_unit_system(from_system)
    to_system = normalize_unit_system(to_system)

    if from_system == to_system:
        return gas_price, ice_efficiency

    converted_efficiency = MPG_L100KM_CONSTANT / ice_efficiency if ice_efficiency else 0.0

    if is_metric(to_system):
        return gas_price / LITERS_PER_GALLON, converted_efficiency
    return gas_price * LITERS_PER_GALLON, converted_efficiency


def calculate_trip_co2_saved(distance_miles: float, unit_system: str) -> float:
    """
    CO2 conserved by a single trip, rounded for the trip listing.

    Examples:
        >>> calculate_trip_co2_saved(10.0, 'imperial')
        6.5
    """
    return round(calculate_co2_saved(max(distance_miles or 0.0, 0.0), unit_system), 1)

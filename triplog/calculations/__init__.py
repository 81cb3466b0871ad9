"""
triplog Calculation Module

Pure calculation utilities for unit conversion, cost and emissions models,
and regression. Stored trip data is canonical (imperial); conversions happen
here and only at display or input boundaries.

Usage:
    from triplog.calculations import to_display_distance, calculate_fuel_savings
    from triplog.calculations.constants import KM_PER_MILE
"""

# Unit conversions
from .units import (
    celsius_to_fahrenheit,
    fahrenheit_to_celsius,
    from_display_distance,
    from_display_efficiency,
    from_display_speed,
    from_display_temperature,
    get_unit_labels,
    is_metric,
    normalize_unit_system,
    to_display_distance,
    to_display_efficiency,
    to_display_speed,
    to_display_temperature,
)

# Efficiency calculations
from .efficiency import (
    calculate_average_efficiency,
    calculate_average_speed,
    calculate_efficiency,
    calculate_estimated_range,
)

# Financial and emissions calculations
from .financial import (
    calculate_co2_saved,
    calculate_ev_cost,
    calculate_fuel_savings,
    calculate_ice_cost,
    calculate_trip_co2_saved,
    convert_cost_parameters,
)

# Regression
from .regression import (
    RegressionLine,
    calculate_linear_regression,
    generate_trendline,
)

# Constants (re-export for convenience)
from .constants import (
    CO2_LBS_PER_MILE,
    IMPERIAL,
    KG_PER_LB,
    KM_PER_MILE,
    LITERS_PER_GALLON,
    METRIC,
    MPG_L100KM_CONSTANT,
)

__all__ = [
    # Units
    "normalize_unit_system",
    "is_metric",
    "to_display_distance",
    "from_display_distance",
    "to_display_efficiency",
    "from_display_efficiency",
    "to_display_speed",
    "from_display_speed",
    "to_display_temperature",
    "from_display_temperature",
    "fahrenheit_to_celsius",
    "celsius_to_fahrenheit",
    "get_unit_labels",
    # Efficiency
    "calculate_efficiency",
    "calculate_average_efficiency",
    "calculate_estimated_range",
    "calculate_average_speed",
    # Financial
    "calculate_co2_saved",
    "calculate_ev_cost",
    "calculate_ice_cost",
    "calculate_fuel_savings",
    "calculate_trip_co2_saved",
    "convert_cost_parameters",
    # Regression
    "RegressionLine",
    "calculate_linear_regression",
    "generate_trendline",
    # Constants
    "IMPERIAL",
    "METRIC",
    "KM_PER_MILE",
    "LITERS_PER_GALLON",
    "MPG_L100KM_CONSTANT",
    "KG_PER_LB",
    "CO2_LBS_PER_MILE",
]

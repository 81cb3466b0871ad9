"""
Calculation Constants for triplog

Centralized location for the conversion factors and physical constants used in calculations.
Stored trip data is always imperial; these factors are applied only at the display boundary.
"""

# Unit Systems
IMPERIAL = 'imperial'
METRIC = 'metric'
UNIT_SYSTEMS = (IMPERIAL, METRIC)

# Distance Constants
KM_PER_MILE = 1.60934  # Also used for mph <-> km/h and mi/kWh <-> km/kWh

# Volume / Consumption Constants
LITERS_PER_GALLON = 3.78541
MPG_L100KM_CONSTANT = 235.215  # mpg = 235.215 / (L/100km) and vice versa

# Mass Constants
KG_PER_LB = 0.453592

# Emissions Constants
CO2_LBS_PER_GALLON = 19.6  # CO2 from burning one gallon of gasoline
BASELINE_ICE_MPG = 30.0  # Comparison gas car
CO2_LBS_PER_MILE = 0.653  # 19.6 / 30, rounded as published

# Temperature Constants
FAHRENHEIT_OFFSET = 32.0

# Speed Constants
MIN_TRIP_DURATION_MINUTES = 1  # Floor for sub-minute trips when deriving speed

# Display Precision
EFFICIENCY_DECIMALS = 2
DISTANCE_DECIMALS = 1
TEMPERATURE_DECIMALS = 1
SPEED_DECIMALS = 1

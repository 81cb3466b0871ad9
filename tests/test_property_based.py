"""
Property-based tests using Hypothesis.

These tests generate many inputs to check invariants that should always
hold: unit conversions invert, efficiency follows distance and energy,
a unit toggle never changes the money saved, and temperature filters
never let an unknown temperature through.
"""

from datetime import datetime, timedelta

import pytest
from hypothesis import HealthCheck, assume, given, settings, strategies as st

from triplog.calculations.efficiency import calculate_average_efficiency, calculate_efficiency
from triplog.calculations.financial import calculate_fuel_savings, calculate_ice_cost, convert_cost_parameters
from triplog.calculations.regression import calculate_linear_regression
from triplog.calculations.units import (
    from_display_distance,
    from_display_temperature,
    to_display_distance,
    to_display_temperature,
)
from triplog.services.filter_service import FilterSpec, apply_filters
from triplog.utils.time_utils import duration_minutes, parse_trip_timestamp
from tests.factories import build_trip

distances = st.floats(min_value=0, max_value=10_000, allow_nan=False, allow_infinity=False)
energies = st.floats(min_value=0, max_value=1_000, allow_nan=False, allow_infinity=False)
temperatures = st.floats(min_value=-60, max_value=140, allow_nan=False, allow_infinity=False)
unit_systems = st.sampled_from(['imperial', 'metric'])


class TestUnitConversions:
    """Property-based tests for display conversions."""

    @given(distances, unit_systems)
    def test_distance_round_trip(self, miles, unit_system):
        """
        Property: converting to the display unit and back returns the canonical value.
        """
        back = from_display_distance(to_display_distance(miles, unit_system), unit_system)
        assert back == pytest.approx(miles, rel=1e-9, abs=1e-9)

    @given(temperatures, unit_systems)
    def test_temperature_round_trip(self, fahrenheit, unit_system):
        back = from_display_temperature(to_display_temperature(fahrenheit, unit_system), unit_system)
        assert back == pytest.approx(fahrenheit, rel=1e-9, abs=1e-9)

    @given(distances, distances)
    def test_distance_order_preserved(self, a, b):
        """Property: metric display keeps the ordering of canonical distances."""
        assume(a < b)
        assert to_display_distance(a, 'metric') <= to_display_distance(b, 'metric')


class TestEfficiency:

    @given(distances, energies)
    def test_efficiency_definition(self, distance, consumption):
        """
        Property: efficiency is distance / consumption, or 0 without consumption.
        """
        efficiency = calculate_efficiency(distance, consumption)
        if consumption > 0:
            assert efficiency == pytest.approx(distance / consumption)
        else:
            assert efficiency == 0.0
        assert efficiency >= 0

    @given(st.lists(st.tuples(distances, energies), min_size=1, max_size=20))
    def test_average_is_weighted(self, trips):
        """Property: the average equals total distance over total energy."""
        total_distance = sum(d for d, _ in trips)
        total_energy = sum(e for _, e in trips)
        average = calculate_average_efficiency(total_distance, total_energy)
        if total_energy > 0:
            assert average == pytest.approx(total_distance / total_energy)
        else:
            assert average == 0.0


class TestSavingsInvariance:

    @given(
        distances,
        energies,
        st.floats(min_value=0.5, max_value=10, allow_nan=False),
        st.floats(min_value=5, max_value=150, allow_nan=False),
        st.floats(min_value=0, max_value=1, allow_nan=False),
    )
    @settings(suppress_health_check=[HealthCheck.too_slow])
    def test_toggle_keeps_savings(self, distance, energy, gas_price, mpg, elec_rate):
        """
        Property: converting cost parameters on a unit toggle leaves fuel savings unchanged.
        """
        imperial = calculate_fuel_savings(distance, energy, 'imperial', gas_price, mpg, elec_rate)
        price, l_per_100km = convert_cost_parameters(gas_price, mpg, 'imperial', 'metric')
        metric = calculate_fuel_savings(distance, energy, 'metric', price, l_per_100km, elec_rate)
        # 235.215 and 3.78541 are rounded, so allow a few ppm of the fuel cost
        fuel_cost = calculate_ice_cost(distance, 'imperial', gas_price, mpg)
        assert metric == pytest.approx(imperial, abs=1e-5 * fuel_cost + 1e-9)


class TestRegression:

    @given(
        st.floats(min_value=-5, max_value=5, allow_nan=False),
        st.floats(min_value=-50, max_value=50, allow_nan=False),
        st.lists(st.integers(min_value=-100, max_value=100), min_size=2, max_size=30, unique=True),
    )
    def test_exact_line_recovered(self, slope, intercept, xs):
        """Property: points on a line fit back to that line."""
        line = calculate_linear_regression([(x, slope * x + intercept) for x in xs])
        assert line is not None
        assert line.slope == pytest.approx(slope, abs=1e-6)
        assert line.intercept == pytest.approx(intercept, abs=1e-4)


class TestTemperatureFilter:

    @given(
        st.lists(st.one_of(st.none(), temperatures), min_size=1, max_size=15),
        st.one_of(st.none(), temperatures),
        st.one_of(st.none(), temperatures),
    )
    @settings(suppress_health_check=[HealthCheck.too_slow])
    def test_unknown_temperature_never_passes_active_filter(self, temps, low, high):
        """
        Property: with a temperature bound set, only trips with a known
        temperature inside the bounds are included.
        """
        assume(low is not None or high is not None)
        trips = [
            build_trip(f"2026-01-01, {i:02d}:00", temperature=temp)
            for i, temp in enumerate(temps)
        ]
        result = apply_filters(trips, FilterSpec(temperature_min=low, temperature_max=high))

        for trip in result.trips:
            assert trip.temperature is not None
            assert low is None or trip.temperature >= low
            assert high is None or trip.temperature <= high
        assert result.total_count == len(trips)


class TestTripTimestamps:

    @given(st.datetimes(min_value=datetime(2000, 1, 1), max_value=datetime(2099, 12, 31)))
    def test_export_format_round_trip(self, dt):
        """Property: any minute-precision export timestamp parses to itself."""
        dt = dt.replace(second=0, microsecond=0)
        assert parse_trip_timestamp(dt.strftime("%Y-%m-%d, %H:%M")) == dt

    @given(
        st.datetimes(min_value=datetime(2020, 1, 1), max_value=datetime(2030, 1, 1)),
        st.integers(min_value=0, max_value=600),
    )
    def test_duration_matches_offset(self, start, minutes):
        end = start + timedelta(minutes=minutes)
        assert duration_minutes(start, end) == minutes

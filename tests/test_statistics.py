"""
Tests for dashboard aggregates and chart series
"""

from unittest.mock import patch

import pytest

from triplog.calculations.regression import generate_trendline
from triplog.exceptions import ConfigurationError
from triplog.services.settings_service import AppSettings
from triplog.services.statistics_service import (
    build_chart_data,
    build_efficiency_timeseries,
    build_regression_series,
    calculate_dashboard_summary,
    calculate_trip_speed,
)


@pytest.fixture
def example_trips(make_trip):
    """The three-row example: 10 mi / 5 kWh, 0 mi / 2 kWh, 8 mi / 0 kWh."""
    return [
        make_trip("2026-02-19, 15:05", distance=10.0, consumption=5.0, end_timestamp="2026-02-19, 15:35"),
        make_trip("2026-02-20, 08:00", distance=0.0, consumption=2.0, end_timestamp="2026-02-20, 08:10"),
        make_trip("2026-02-21, 17:30", distance=8.0, consumption=0.0, end_timestamp="2026-02-21, 17:50"),
    ]


class TestTripSpeed:

    def test_speed_from_whole_minutes(self, make_trip):
        trip = make_trip(distance=15.0, end_timestamp="2026-02-19, 15:35")
        assert calculate_trip_speed(trip) == pytest.approx(30.0)

    def test_sub_minute_floor(self, make_trip):
        trip = make_trip(distance=1.0, end_timestamp="2026-02-19, 15:05")
        assert calculate_trip_speed(trip) == pytest.approx(60.0)

    def test_unparseable_end(self, make_trip):
        assert calculate_trip_speed(make_trip(end_timestamp=None)) is None


class TestDashboardSummary:
    """Test the dashboard cards"""

    def test_imperial_example(self, example_trips):
        summary = calculate_dashboard_summary(example_trips, AppSettings())

        assert summary['trip_count'] == 3
        assert summary['total_distance'] == 18.0
        assert summary['total_energy'] == 7.0
        assert summary['average_efficiency'] == 2.57
        assert summary['canonical']['average_efficiency_mi_per_kwh'] == pytest.approx(18 / 7)
        assert summary['estimated_range'] == round(18 / 7 * 78)
        assert summary['co2_saved'] == round(18 * 0.653, 1)
        assert summary['labels']['distance'] == 'mi'

    def test_fuel_savings(self, example_trips):
        """18 mi / 30 mpg * $3 - 7 kWh * $0.15 = $1.80 - $1.05"""
        summary = calculate_dashboard_summary(example_trips, AppSettings())
        assert summary['fuel_savings'] == pytest.approx(0.75)

    def test_metric_display(self, example_trips):
        settings = AppSettings(unit_system='metric', gas_price=1.0, ice_efficiency=7.8405)
        summary = calculate_dashboard_summary(example_trips, settings)

        assert summary['total_distance'] == round(18 * 1.60934, 1)
        assert summary['average_efficiency'] == round(18 / 7 * 1.60934, 2)
        assert summary['co2_saved'] == round(18 * 0.653 * 0.453592, 1)
        assert summary['labels']['efficiency'] == 'km/kWh'

    def test_empty(self):
        summary = calculate_dashboard_summary([], AppSettings())
        assert summary['trip_count'] == 0
        assert summary['average_efficiency'] == 0.0
        assert summary['estimated_range'] == 0
        assert summary['fuel_savings'] == 0.0


class TestTimeseries:

    def test_zero_distance_omitted_and_sorted(self, make_trip):
        trips = [
            make_trip("2026-02-21, 17:30", distance=8.0, consumption=2.0),
            make_trip("2026-02-19, 15:05", distance=10.0, consumption=5.0),
            make_trip("2026-02-20, 08:00", distance=0.0, consumption=2.0),
        ]
        series = build_efficiency_timeseries(trips, 'imperial')

        assert [p['start_key'] for p in series] == ["2026-02-19, 15:05", "2026-02-21, 17:30"]
        assert series[0]['date'] == "2026-02-19"
        assert series[0]['efficiency'] == 2.0
        assert series[1]['efficiency'] == 4.0

    def test_unparseable_start_last(self, make_trip):
        trips = [make_trip("later?", start_time=None), make_trip("2026-02-19, 15:05")]
        series = build_efficiency_timeseries(trips, 'imperial')
        assert [p['start_key'] for p in series] == ["2026-02-19, 15:05", "later?"]
        assert series[1]['date'] is None

    def test_metric_values(self, make_trip):
        series = build_efficiency_timeseries([make_trip(distance=10.0, consumption=5.0)], 'metric')
        assert series[0]['efficiency'] == round(2.0 * 1.60934, 2)
        assert series[0]['distance'] == round(10 * 1.60934, 1)


class TestRegressionSeries:
    """Efficiency vs. temperature, speed and distance"""

    def test_temperature_fit(self, make_trip):
        trips = [
            make_trip("2026-02-19, 15:05", distance=10.0, consumption=5.0, temperature=30.0),
            make_trip("2026-02-20, 08:00", distance=12.0, consumption=4.0, temperature=50.0),
            make_trip("2026-02-21, 17:30", distance=16.0, consumption=4.0, temperature=70.0),
        ]
        series = build_regression_series(trips, 'temperature', 'imperial')

        assert [p['x'] for p in series['points']] == [30.0, 50.0, 70.0]
        assert series['slope'] == pytest.approx(0.05)
        assert series['intercept'] == pytest.approx(0.5)
        assert [p['y'] for p in series['trendline']] == [2.0, 3.0, 4.0]
        assert series['x_label'] == '°F'
        assert series['y_label'] == 'mi/kWh'

    def test_trendline_rounds_fitted_values(self, make_trip):
        trips = [
            make_trip("2026-02-19, 15:05", distance=10.0, consumption=3.0, temperature=30.0),
            make_trip("2026-02-20, 08:00", distance=10.0, consumption=7.0, temperature=45.0),
            make_trip("2026-02-21, 17:30", distance=10.0, consumption=6.0, temperature=70.0),
        ]
        with patch(
            "triplog.services.statistics_service.generate_trendline", wraps=generate_trendline
        ) as trend:
            series = build_regression_series(trips, 'temperature', 'imperial')

        trend.assert_called_once()
        expected = [(round(x, 1), round(y, 2)) for x, y in generate_trendline(trend.call_args[0][0])]
        assert [(p['x'], p['y']) for p in series['trendline']] == expected

    def test_unknown_temperature_omitted(self, make_trip):
        trips = [make_trip(temperature=None), make_trip("2026-02-20, 08:00", temperature=40.0)]
        series = build_regression_series(trips, 'temperature', 'imperial')
        assert len(series['points']) == 1
        assert series['trendline'] == []
        assert series['slope'] is None

    def test_zero_distance_omitted(self, make_trip):
        trips = [make_trip(distance=0.0, consumption=1.0), make_trip("2026-02-20, 08:00", distance=5.0)]
        series = build_regression_series(trips, 'distance', 'imperial')
        assert [p['start_key'] for p in series['points']] == ["2026-02-20, 08:00"]

    def test_identical_x_no_trendline(self, make_trip):
        trips = [
            make_trip("2026-02-19, 15:05", distance=10.0, consumption=5.0),
            make_trip("2026-02-20, 08:00", distance=10.0, consumption=2.0),
        ]
        series = build_regression_series(trips, 'distance', 'imperial')
        assert len(series['points']) == 2
        assert series['trendline'] == []

    def test_speed_metric(self, make_trip):
        trips = [
            make_trip("2026-02-19, 15:05", distance=15.0, consumption=5.0, end_timestamp="2026-02-19, 15:35"),
            make_trip("2026-02-20, 08:00", distance=30.0, consumption=8.0, end_timestamp="2026-02-20, 08:30"),
        ]
        series = build_regression_series(trips, 'speed', 'metric')
        assert [p['x'] for p in series['points']] == [round(30 * 1.60934, 1), round(60 * 1.60934, 1)]
        assert series['x_label'] == 'km/h'

    def test_unknown_dimension(self, make_trip):
        with pytest.raises(ConfigurationError):
            build_regression_series([make_trip()], 'altitude', 'imperial')


class TestChartData:

    def test_all_series(self, example_trips):
        data = build_chart_data(example_trips, 'imperial')
        assert data['unit_system'] == 'imperial'
        assert set(data['regressions']) == {'temperature', 'speed', 'distance'}
        assert len(data['timeseries']) == 2

"""
Tests for the trip filter engine
"""

import pytest

from triplog.exceptions import ConfigurationError
from triplog.services.filter_service import (
    FilterSpec,
    apply_filters,
    range_to_display,
    update_range_from_display,
)


@pytest.fixture
def trips(make_trip):
    return [
        make_trip("2026-02-19, 15:05", distance=10.0, consumption=5.0, temperature=30.0,
                  notes="Snowy commute", tags=['work']),
        make_trip("2026-02-20, 08:00", distance=3.0, consumption=1.0, temperature=None, tags=['errand']),
        make_trip("2026-02-21, 17:30", distance=40.0, consumption=10.0, temperature=65.0,
                  notes="Beach", tags=['weekend', 'family']),
        make_trip("2026-02-22, 09:15", distance=0.0, consumption=0.5, temperature=50.0),
    ]


def keys(result):
    return [t.start_key for t in result.trips]


class TestApplyFilters:
    """Test predicate evaluation"""

    def test_default_spec_keeps_everything(self, trips):
        result = apply_filters(trips, FilterSpec())
        assert result.included_count == 4
        assert result.total_count == 4
        assert result.excluded_by_tag_count == 0
        assert keys(result) == [t.start_key for t in trips]

    def test_date_range_inclusive_whole_days(self, trips):
        spec = FilterSpec(date_start="2026-02-20", date_end="2026-02-21")
        assert keys(apply_filters(trips, spec)) == ["2026-02-20, 08:00", "2026-02-21, 17:30"]

    def test_date_range_needs_both_ends(self, trips):
        spec = FilterSpec(date_start="2026-02-21")
        assert apply_filters(trips, spec).included_count == 4

    def test_date_range_excludes_unparseable_starts(self, trips, make_trip):
        trips.append(make_trip("whenever", start_time=None))
        spec = FilterSpec(date_start="2026-01-01", date_end="2026-12-31")
        assert "whenever" not in keys(apply_filters(trips, spec))

    def test_distance_bounds_inclusive(self, trips):
        spec = FilterSpec(distance_min=3.0, distance_max=10.0)
        assert keys(apply_filters(trips, spec)) == ["2026-02-19, 15:05", "2026-02-20, 08:00"]

    def test_efficiency_bounds(self, trips):
        spec = FilterSpec(efficiency_min=2.5)
        assert keys(apply_filters(trips, spec)) == ["2026-02-20, 08:00", "2026-02-21, 17:30"]

    def test_temperature_excludes_unknown(self, trips):
        spec = FilterSpec(temperature_min=-100.0, temperature_max=200.0)
        result = apply_filters(trips, spec)
        assert "2026-02-20, 08:00" not in keys(result)
        assert result.included_count == 3

    def test_no_temperature_filter_keeps_unknown(self, trips):
        assert "2026-02-20, 08:00" in keys(apply_filters(trips, FilterSpec()))

    def test_search_notes_case_insensitive(self, trips):
        assert keys(apply_filters(trips, FilterSpec(search_text="SNOWY"))) == ["2026-02-19, 15:05"]

    def test_search_tags(self, trips):
        assert keys(apply_filters(trips, FilterSpec(search_text="fam"))) == ["2026-02-21, 17:30"]

    def test_blank_search_ignored(self, trips):
        assert apply_filters(trips, FilterSpec(search_text="   ")).included_count == 4

    def test_excluded_tags_counted(self, trips):
        result = apply_filters(trips, FilterSpec(excluded_tags=['Weekend', 'errand']))
        assert keys(result) == ["2026-02-19, 15:05", "2026-02-22, 09:15"]
        assert result.excluded_by_tag_count == 2
        assert result.total_count == 4

    def test_predicates_combine(self, trips):
        spec = FilterSpec(distance_min=5.0, temperature_max=40.0, search_text="commute")
        assert keys(apply_filters(trips, spec)) == ["2026-02-19, 15:05"]

    def test_trips_not_modified(self, trips):
        before = [t.to_dict() for t in trips]
        apply_filters(trips, FilterSpec(distance_min=5.0, excluded_tags=['work']))
        assert [t.to_dict() for t in trips] == before

    def test_counts(self, trips):
        result = apply_filters(trips, FilterSpec(excluded_tags=['work']))
        assert result.counts() == {'total_count': 4, 'included_count': 3, 'excluded_by_tag_count': 1}


class TestFilterSpecFromDict:

    def test_merge_onto_base(self):
        base = FilterSpec(distance_min=2.0, search_text="x")
        spec = FilterSpec.from_dict({'distance_max': "12.5"}, base=base)
        assert spec.distance_min == 2.0
        assert spec.distance_max == 12.5
        assert spec.search_text == "x"
        assert base.distance_max is None

    def test_unknown_keys_ignored(self):
        assert FilterSpec.from_dict({'colour': 'blue'}) == FilterSpec()

    def test_blank_bound_clears(self):
        spec = FilterSpec.from_dict({'distance_min': ''}, base=FilterSpec(distance_min=4.0))
        assert spec.distance_min is None

    def test_dates_normalized(self):
        spec = FilterSpec.from_dict({'date_start': '2026-02-19T10:00:00', 'date_end': None})
        assert spec.date_start == '2026-02-19'
        assert spec.date_end is None

    def test_tags_normalized(self):
        assert FilterSpec.from_dict({'excluded_tags': ['Work', 'work ']}).excluded_tags == ['work']

    @pytest.mark.parametrize("data", [
        {'distance_min': 'far'},
        {'temperature_max': float('inf')},
        {'efficiency_min': True},
        {'date_start': 'someday'},
        {'excluded_tags': 'work'},
    ])
    def test_invalid_values(self, data):
        with pytest.raises(ConfigurationError):
            FilterSpec.from_dict(data)

    def test_to_dict(self):
        data = FilterSpec(search_text="a").to_dict()
        assert data['search_text'] == "a"
        assert data['excluded_tags'] == []
        assert FilterSpec.from_dict(data) == FilterSpec(search_text="a")


class TestDisplayRanges:
    """Range bounds are typed in display units and kept canonical"""

    def test_metric_distance_to_miles(self):
        spec = update_range_from_display(FilterSpec(), 'distance', 16.0934, None, 'metric')
        assert spec.distance_min == pytest.approx(10.0)
        assert spec.distance_max is None

    def test_metric_temperature_to_fahrenheit(self):
        spec = update_range_from_display(FilterSpec(), 'temperature', 0, 20, 'metric')
        assert spec.temperature_min == pytest.approx(32.0)
        assert spec.temperature_max == pytest.approx(68.0)

    def test_imperial_unchanged(self):
        spec = update_range_from_display(FilterSpec(), 'efficiency', 2, 4, 'imperial')
        assert (spec.efficiency_min, spec.efficiency_max) == (2.0, 4.0)

    def test_back_to_display(self):
        spec = FilterSpec(temperature_min=32.0, temperature_max=None)
        low, high = range_to_display(spec, 'temperature', 'metric')
        assert low == pytest.approx(0.0)
        assert high is None

    def test_unit_toggle_does_not_change_filtered_set(self, trips):
        spec = update_range_from_display(FilterSpec(), 'distance', 5, 50, 'imperial')
        low, high = range_to_display(spec, 'distance', 'metric')
        metric_spec = update_range_from_display(FilterSpec(), 'distance', low, high, 'metric')
        assert keys(apply_filters(trips, metric_spec)) == keys(apply_filters(trips, spec))

    def test_unknown_dimension(self):
        with pytest.raises(ConfigurationError):
            update_range_from_display(FilterSpec(), 'speed', 1, 2, 'imperial')
        with pytest.raises(ConfigurationError):
            range_to_display(FilterSpec(), 'altitude', 'imperial')

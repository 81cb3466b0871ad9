"""
Trip filter engine.

Evaluates a FilterSpec against a trip collection in one pass. All bounds are
held in canonical units (miles, °F, mi/kWh); the display-unit conversion
happens only in update_range_from_display() and range_to_display().
"""

import logging
import math
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from triplog.calculations.units import (
    from_display_distance,
    from_display_efficiency,
    from_display_temperature,
    normalize_unit_system,
    to_display_distance,
    to_display_efficiency,
    to_display_temperature,
)
from triplog.exceptions import ConfigurationError
from triplog.models import Trip, normalize_tags
from triplog.utils.time_utils import end_of_day, parse_date, parse_trip_timestamp, start_of_day

logger = logging.getLogger(__name__)

RANGE_DIMENSIONS = ('distance', 'temperature', 'efficiency')

_TO_CANONICAL = {
    'distance': from_display_distance,
    'temperature': from_display_temperature,
    'efficiency': from_display_efficiency,
}

_TO_DISPLAY = {
    'distance': to_display_distance,
    'temperature': to_display_temperature,
    'efficiency': to_display_efficiency,
}


@dataclass
class FilterSpec:
    """User filter state. Numeric bounds are inclusive and canonical."""

    date_start: Optional[str] = None
    date_end: Optional[str] = None
    distance_min: Optional[float] = None
    distance_max: Optional[float] = None
    temperature_min: Optional[float] = None
    temperature_max: Optional[float] = None
    efficiency_min: Optional[float] = None
    efficiency_max: Optional[float] = None
    search_text: str = ''
    excluded_tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], base: Optional['FilterSpec'] = None) -> 'FilterSpec':
        """
        Build a spec from a (possibly partial or stale) dict.

        Values are merged onto ``base`` (defaults when omitted); unknown keys
        are ignored.

        Raises:
            ConfigurationError: If a known key holds an unusable value
        """
        spec = replace(base) if base is not None else cls()
        if not data:
            return spec

        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key not in known:
                continue

            if key in ('date_start', 'date_end'):
                setattr(spec, key, _coerce_date(key, value))
            elif key == 'search_text':
                setattr(spec, key, '' if value is None else str(value))
            elif key == 'excluded_tags':
                if value is not None and not isinstance(value, (list, tuple)):
                    raise ConfigurationError("excluded_tags must be a list", config_key=key)
                setattr(spec, key, normalize_tags(value))
            else:
                setattr(spec, key, _coerce_bound(key, value))

        return spec

    @property
    def date_active(self) -> bool:
        return bool(self.date_start and self.date_end)

    @property
    def temperature_active(self) -> bool:
        return self.temperature_min is not None or self.temperature_max is not None


@dataclass
class FilterResult:
    """Filtered view plus the counts shown next to it."""

    trips: List[Trip]
    total_count: int
    included_count: int
    excluded_by_tag_count: int

    def counts(self) -> Dict[str, int]:
        return {
            'total_count': self.total_count,
            'included_count': self.included_count,
            'excluded_by_tag_count': self.excluded_by_tag_count,
        }


def _coerce_date(key: str, value: Any) -> Optional[str]:
    if value in (None, ''):
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ConfigurationError(f"Invalid date for {key}: {value!r}", config_key=key)
    return parsed.isoformat()


def _coerce_bound(key: str, value: Any) -> Optional[float]:
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid number for {key}: {value!r}", config_key=key)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid number for {key}: {value!r}", config_key=key)
    if not math.isfinite(number):
        raise ConfigurationError(f"Invalid number for {key}: {value!r}", config_key=key)
    return number


def _in_range(value: float, low: Optional[float], high: Optional[float]) -> bool:
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def _matches_search(trip: Trip, term: str) -> bool:
    if term in (trip.notes or '').lower():
        return True
    return any(term in tag.lower() for tag in trip.tags or [])


def apply_filters(trips: Iterable[Trip], spec: FilterSpec) -> FilterResult:
    """
    Select the trips satisfying every active predicate of ``spec``.

    Predicates (logical AND):
    - date range, only when both dates are set; inclusive whole days
    - distance and efficiency bounds, each inclusive when set
    - temperature bounds; a trip with unknown temperature never passes
    - search text against notes or any tag, case-insensitive
    - excluded tags

    Input order is preserved and the trips are not modified.
    """
    window = None
    if spec.date_active:
        start_day = parse_date(spec.date_start)
        end_day = parse_date(spec.date_end)
        if start_day is not None and end_day is not None:
            window = (start_of_day(start_day), end_of_day(end_day))

    term = (spec.search_text or '').strip().lower()
    excluded = set(normalize_tags(spec.excluded_tags))

    total = 0
    included: List[Trip] = []
    excluded_by_tag = 0

    for trip in trips:
        total += 1

        has_excluded_tag = bool(excluded) and any(tag.lower() in excluded for tag in trip.tags or [])
        if has_excluded_tag:
            excluded_by_tag += 1
            continue

        if window is not None:
            started = trip.start_time or parse_trip_timestamp(trip.start_key)
            if started is None or not (window[0] <= started <= window[1]):
                continue

        if not _in_range(trip.distance, spec.distance_min, spec.distance_max):
            continue

        if not _in_range(trip.efficiency, spec.efficiency_min, spec.efficiency_max):
            continue

        if spec.temperature_active:
            if trip.temperature is None:
                continue
            if not _in_range(trip.temperature, spec.temperature_min, spec.temperature_max):
                continue

        if term and not _matches_search(trip, term):
            continue

        included.append(trip)

    return FilterResult(
        trips=included,
        total_count=total,
        included_count=len(included),
        excluded_by_tag_count=excluded_by_tag,
    )


def _check_dimension(dimension: str) -> str:
    if dimension not in RANGE_DIMENSIONS:
        raise ConfigurationError(
            f"Unknown filter dimension: {dimension!r} (expected one of {', '.join(RANGE_DIMENSIONS)})",
            config_key='dimension',
        )
    return dimension


def update_range_from_display(
    spec: FilterSpec,
    dimension: str,
    low: Optional[float],
    high: Optional[float],
    unit_system: str
) -> FilterSpec:
    """
    Set a range from values typed in the display unit system.

    Returns:
        New FilterSpec with canonical bounds for ``dimension``
    """
    _check_dimension(dimension)
    unit_system = normalize_unit_system(unit_system)
    convert = _TO_CANONICAL[dimension]

    low = _coerce_bound(f'{dimension}_min', low)
    high = _coerce_bound(f'{dimension}_max', high)

    return replace(
        spec,
        **{
            f'{dimension}_min': convert(low, unit_system) if low is not None else None,
            f'{dimension}_max': convert(high, unit_system) if high is not None else None,
        }
    )


def range_to_display(
    spec: FilterSpec,
    dimension: str,
    unit_system: str
) -> Tuple[Optional[float], Optional[float]]:
    """Current bounds for ``dimension`` in the display unit system."""
    _check_dimension(dimension)
    unit_system = normalize_unit_system(unit_system)
    convert = _TO_DISPLAY[dimension]

    low = getattr(spec, f'{dimension}_min')
    high = getattr(spec, f'{dimension}_max')
    return (
        convert(low, unit_system) if low is not None else None,
        convert(high, unit_system) if high is not None else None,
    )

"""
Trips routes for triplog.

Handles the trip listings, note/tag edits and CSV import.
"""

import logging
from typing import Tuple, Union

from flask import Blueprint, Response, jsonify, request

from triplog.calculations.financial import calculate_trip_co2_saved
from triplog.calculations.units import (
    to_display_distance,
    to_display_efficiency,
    to_display_temperature,
)
from triplog.exceptions import TripValidationError
from triplog.extensions import get_services
from triplog.services.filter_service import apply_filters
from triplog.services.ingest_service import import_trips
from triplog.services.scheduler import trigger_enrichment

logger = logging.getLogger(__name__)

trips_bp = Blueprint('trips', __name__)

# Fields the trip editor may change
USER_EDITABLE_FIELDS = ('notes', 'tags')


def serialize_trip(trip, unit_system: str) -> dict:
    """Stored (canonical) trip fields plus display-unit values."""
    data = trip.to_dict()
    data['display'] = {
        'distance': round(to_display_distance(trip.distance, unit_system), 1),
        'efficiency': round(to_display_efficiency(trip.efficiency, unit_system), 2),
        'temperature': (
            round(to_display_temperature(trip.temperature, unit_system), 1)
            if trip.temperature is not None else None
        ),
        'co2_saved': calculate_trip_co2_saved(trip.distance, unit_system),
    }
    return data


@trips_bp.route('/trips', methods=['GET'])
def get_trips():
    """
    Get the filtered trip list.

    Uses the persisted filters; the response carries the total, included and
    excluded-by-tag counts from the same pass.
    """
    services = get_services()
    settings = services.settings.settings
    spec = services.settings.filters

    result = apply_filters(services.store.scan_all(), spec)

    return jsonify({
        'trips': [serialize_trip(t, settings.unit_system) for t in result.trips],
        'counts': result.counts(),
        'unit_system': settings.unit_system,
        'filters': spec.to_dict(),
    })


@trips_bp.route('/trips/all', methods=['GET'])
def get_all_trips():
    """Get every stored trip, ignoring filters."""
    services = get_services()
    unit_system = services.settings.settings.unit_system
    trips = services.store.scan_all()

    return jsonify({
        'trips': [serialize_trip(t, unit_system) for t in trips],
        'total': len(trips),
        'unit_system': unit_system,
    })


@trips_bp.route('/trips/<start_key>', methods=['GET'])
def get_trip(start_key):
    """Get one trip by its start key."""
    services = get_services()
    trip = services.store.get(start_key)
    return jsonify({'trip': serialize_trip(trip, services.settings.settings.unit_system)})


@trips_bp.route('/trips/<start_key>', methods=['PATCH'])
def update_trip(start_key):
    """
    Update a trip's notes and tags.

    Allowed fields:
        - notes: Free text
        - tags: List of strings (stored lowercase, deduplicated)
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    for field in data:
        if field not in USER_EDITABLE_FIELDS:
            raise TripValidationError(f"Field cannot be edited: {field}", field=field)

    services = get_services()
    trip = services.store.update_fields(start_key, data)
    logger.info(f"Updated trip {start_key}: {', '.join(sorted(data))}")

    return jsonify({'trip': serialize_trip(trip, services.settings.settings.unit_system)})


@trips_bp.route('/import/csv', methods=['POST'])
def import_csv() -> Union[Response, Tuple[Response, int]]:
    """
    Import a trip export CSV.

    Accepts multipart form data with a 'file' field. After a successful
    import the display unit system follows the file's dialect and a
    background enrichment pass is queued.
    """
    if 'file' not in request.files:
        return jsonify({'error': 'No file provided'}), 400

    file = request.files['file']
    if file.filename == '':
        return jsonify({'error': 'No file selected'}), 400

    if not file.filename.lower().endswith('.csv'):
        return jsonify({'error': 'File must be a CSV'}), 400

    services = get_services()
    result = import_trips(services.store, file.read(), filename=file.filename)
    settings = services.settings.align_unit_system(result.dialect)
    queued = trigger_enrichment()

    return jsonify({
        'message': f'Successfully imported {result.imported} trips',
        'result': result.to_dict(),
        'settings': settings.to_dict(),
        'enrichment_queued': queued,
    })

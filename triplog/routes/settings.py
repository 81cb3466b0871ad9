"""
Settings routes for triplog.

Reads and updates the persisted display settings and filter state.
"""

import logging

from flask import Blueprint, jsonify, request

from triplog.calculations.units import get_unit_labels
from triplog.extensions import get_services
from triplog.services.filter_service import RANGE_DIMENSIONS, range_to_display

logger = logging.getLogger(__name__)

settings_bp = Blueprint('settings', __name__)


def _filters_payload(services):
    spec = services.settings.filters
    unit_system = services.settings.settings.unit_system
    display_ranges = {}
    for dimension in RANGE_DIMENSIONS:
        low, high = range_to_display(spec, dimension, unit_system)
        display_ranges[dimension] = {'min': low, 'max': high}
    return {
        'filters': spec.to_dict(),
        'display_ranges': display_ranges,
        'unit_system': unit_system,
    }


@settings_bp.route('/settings', methods=['GET'])
def get_settings():
    settings = get_services().settings.settings
    return jsonify({
        'settings': settings.to_dict(),
        'labels': get_unit_labels(settings.unit_system),
    })


@settings_bp.route('/settings', methods=['PATCH'])
def update_settings():
    """
    Update settings.

    Changing unit_system also converts gas_price and ice_efficiency.
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    settings = get_services().settings.update_settings(data)
    return jsonify({
        'settings': settings.to_dict(),
        'labels': get_unit_labels(settings.unit_system),
    })


@settings_bp.route('/filters', methods=['GET'])
def get_filters():
    return jsonify(_filters_payload(get_services()))


@settings_bp.route('/filters', methods=['PATCH'])
def update_filters():
    """
    Update filters.

    Body: FilterSpec fields (bounds in canonical units) and/or
    'display_ranges': {dimension: {'min': x, 'max': y}} in display units.
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    data = dict(data)
    display_ranges = data.pop('display_ranges', None)
    if display_ranges is not None and not isinstance(display_ranges, dict):
        return jsonify({'error': 'display_ranges must be an object'}), 400

    services = get_services()
    services.settings.update_filters(data, display_ranges=display_ranges)
    return jsonify(_filters_payload(services))


@settings_bp.route('/filters/reset', methods=['POST'])
def reset_filters():
    services = get_services()
    services.settings.reset_filters()
    return jsonify(_filters_payload(services))

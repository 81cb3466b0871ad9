"""
Statistics routes for triplog.

Dashboard aggregates and chart series over the filtered trip set.
"""

import logging

from flask import Blueprint, jsonify

from triplog.extensions import get_services
from triplog.services.filter_service import apply_filters
from triplog.services.statistics_service import build_chart_data, calculate_dashboard_summary

logger = logging.getLogger(__name__)

stats_bp = Blueprint('stats', __name__)


def _filtered_trips(services):
    return apply_filters(services.store.scan_all(), services.settings.filters)


@stats_bp.route('/stats/summary', methods=['GET'])
def get_summary():
    """Aggregate cards (distance, energy, efficiency, range, CO2, savings)."""
    services = get_services()
    result = _filtered_trips(services)

    summary = calculate_dashboard_summary(result.trips, services.settings.settings)
    summary['counts'] = result.counts()
    return jsonify(summary)


@stats_bp.route('/stats/charts', methods=['GET'])
def get_charts():
    """Efficiency time series and regressions against temperature, speed and distance."""
    services = get_services()
    result = _filtered_trips(services)
    return jsonify(build_chart_data(result.trips, services.settings.settings.unit_system))

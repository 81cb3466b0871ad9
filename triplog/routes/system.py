"""
System routes for triplog: health check and manual enrichment trigger.
"""

import logging

from flask import Blueprint, jsonify

from triplog import __version__
from triplog.extensions import get_services
from triplog.services import scheduler as scheduler_service

logger = logging.getLogger(__name__)

system_bp = Blueprint('system', __name__)


@system_bp.route('/health', methods=['GET'])
def health():
    services = get_services()
    running_scheduler = scheduler_service.scheduler
    return jsonify({
        'status': 'ok',
        'version': __version__,
        'trips': services.store.count(),
        'scheduler_running': bool(running_scheduler and running_scheduler.running),
        'enrichment_running': services.worker.running,
    })


@system_bp.route('/enrichment/run', methods=['POST'])
def run_enrichment():
    """Queue a background temperature enrichment pass."""
    if not scheduler_service.trigger_enrichment():
        return jsonify({'error': 'Background scheduler is not running', 'queued': False}), 503
    return jsonify({'message': 'Enrichment pass queued', 'queued': True}), 202

"""
triplog - Flask Application

Imports EV trip exports and serves the trip, statistics and preference API.
"""

import atexit
import logging

from flask import Flask, jsonify
from werkzeug.exceptions import RequestEntityTooLarge

from triplog import database
from triplog.config import Config
from triplog.database import SessionLocal
from triplog.exceptions import (
    ConfigurationError,
    CSVImportError,
    DatabaseError,
    TripNotFoundError,
    TripValidationError,
)
from triplog.extensions import TripLogServices, init_services
from triplog.routes import register_blueprints
from triplog.services.enrichment_service import EnrichmentWorker
from triplog.services.scheduler import init_scheduler, shutdown_scheduler
from triplog.services.settings_service import SettingsStore
from triplog.services.trip_store import TripStore

logger = logging.getLogger(__name__)


def configure_logging(level: str = None):
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_services(lookup=None) -> TripLogServices:
    """Create the store, preference store and enrichment worker."""
    store = TripStore(SessionLocal)
    settings = SettingsStore(SessionLocal)
    if lookup is None:
        worker = EnrichmentWorker(store)
    else:
        worker = EnrichmentWorker(store, lookup=lookup)
    return TripLogServices(store=store, settings=settings, worker=worker)


def register_error_handlers(app):
    """Map domain exceptions to JSON error responses."""

    @app.errorhandler(TripNotFoundError)
    def handle_not_found(e):
        return jsonify({'error': e.message, 'details': e.details}), 404

    @app.errorhandler(TripValidationError)
    def handle_validation_error(e):
        return jsonify({'error': e.message, 'details': e.details}), 400

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(e):
        return jsonify({'error': e.message, 'details': e.details}), 400

    @app.errorhandler(CSVImportError)
    def handle_import_error(e):
        return jsonify({'error': e.message, 'reason': e.reason, 'details': e.details}), 400

    @app.errorhandler(DatabaseError)
    def handle_database_error(e):
        logger.error(f"Database error during request: {e}")
        return jsonify({'error': 'Database error'}), 500

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e):
        return jsonify({'error': 'File too large'}), 413


def create_app(testing: bool = False, lookup=None) -> Flask:
    """
    Create and configure the Flask app.

    Args:
        testing: Disables the background scheduler
        lookup: Optional temperature lookup for the enrichment worker

    Returns:
        Configured Flask application
    """
    configure_logging()

    app = Flask(__name__)
    app.config.from_object(Config)
    app.config['TESTING'] = testing

    database.init_app(app)
    services = init_services(app, build_services(lookup))
    register_blueprints(app)
    register_error_handlers(app)

    if Config.ENABLE_SCHEDULER and not testing:
        init_scheduler(services.worker)
        atexit.register(shutdown_scheduler)

    logger.info(f"triplog started (database: {Config.DATABASE_URL.split('://')[0]})")
    return app

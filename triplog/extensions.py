"""
Application services shared across blueprints.

The services are created once in create_app() and stored on the Flask app,
so blueprints look them up instead of importing module-level globals.
"""

from dataclasses import dataclass

from flask import current_app

from triplog.services.enrichment_service import EnrichmentWorker
from triplog.services.settings_service import SettingsStore
from triplog.services.trip_store import TripStore

EXTENSION_KEY = 'triplog'


@dataclass
class TripLogServices:
    """Everything a request handler needs."""

    store: TripStore
    settings: SettingsStore
    worker: EnrichmentWorker


def init_services(app, services: TripLogServices):
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> TripLogServices:
    """Services for the current app."""
    return current_app.extensions[EXTENSION_KEY]

"""
Routes module for triplog Flask blueprints.

This module contains Flask blueprints that handle different areas of the API.
"""

from triplog.routes.settings import settings_bp
from triplog.routes.stats import stats_bp
from triplog.routes.system import system_bp
from triplog.routes.trips import trips_bp

__all__ = [
    "trips_bp",
    "stats_bp",
    "settings_bp",
    "system_bp",
]


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(trips_bp, url_prefix="/api")
    app.register_blueprint(stats_bp, url_prefix="/api")
    app.register_blueprint(settings_bp, url_prefix="/api")
    app.register_blueprint(system_bp, url_prefix="/api")

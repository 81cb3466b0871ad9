"""
Pytest fixtures for triplog tests.
"""

import os

# Set DATABASE_URL BEFORE importing triplog to use in-memory SQLite for tests
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['ENABLE_SCHEDULER'] = 'false'

import pytest  # noqa: E402

from triplog.app import create_app  # noqa: E402
from triplog.database import SessionLocal, engine  # noqa: E402
from triplog.extensions import get_services  # noqa: E402
from triplog.models import Base  # noqa: E402
from triplog.services.settings_service import AppSettings, SettingsStore  # noqa: E402
from triplog.services.trip_store import TripStore  # noqa: E402
from tests.factories import CSV_HEADER_IMPERIAL, CSV_HEADER_METRIC, build_trip, csv_row  # noqa: E402


def fake_lookup(latitude, longitude, when):
    """Temperature lookup double that never touches the network."""
    return 55.0


@pytest.fixture
def db():
    """Fresh schema in the in-memory database."""
    Base.metadata.create_all(engine)
    yield
    SessionLocal.remove()
    Base.metadata.drop_all(engine)


@pytest.fixture
def app(db):
    """Create application for testing."""
    flask_app = create_app(testing=True, lookup=fake_lookup)
    yield flask_app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def services(app):
    """Services bound to the test app."""
    with app.app_context():
        yield get_services()


@pytest.fixture
def store(db):
    """Trip store on the test database."""
    return TripStore(SessionLocal)


@pytest.fixture
def settings_store(db):
    """Preference store with stock defaults."""
    return SettingsStore(SessionLocal, defaults=AppSettings())


@pytest.fixture
def make_trip():
    """Factory for detached Trip objects with sensible defaults."""
    return build_trip


@pytest.fixture
def imperial_csv():
    """The three-row example export: efficiencies 2, 0 and 0."""
    return "\n".join([
        CSV_HEADER_IMPERIAL,
        csv_row("2026-02-19, 15:05", "2026-02-19, 15:35", "10", "5"),
        csv_row("2026-02-20, 08:00", "2026-02-20, 08:10", "0", "2"),
        csv_row("2026-02-21, 17:30", "2026-02-21, 17:50", "8", "0"),
    ]) + "\n"


@pytest.fixture
def metric_csv():
    return "\n".join([
        CSV_HEADER_METRIC,
        csv_row("2026-03-01, 09:00", "2026-03-01, 09:30", "16.0934", "4", odo_start="1609.34", odo_end="1625.4334"),
    ]) + "\n"

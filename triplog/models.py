from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Float, DateTime, Text, create_engine, JSON
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, validates
from sqlalchemy.pool import StaticPool
from sqlalchemy import TypeDecorator


Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


# Custom JSON type that works with both PostgreSQL (JSONB) and SQLite (JSON)
class JSONType(TypeDecorator):
    """Platform-independent JSON type.

    Uses PostgreSQL's JSONB type when available, otherwise uses JSON.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB)
        else:
            return dialect.type_descriptor(JSON)


def normalize_tags(tags) -> list:
    """Lowercase, strip and deduplicate tags, keeping first-seen order."""
    normalized = []
    for tag in tags or []:
        if tag is None:
            continue
        value = str(tag).strip().lower()
        if value and value not in normalized:
            normalized.append(value)
    return normalized


class Trip(Base):
    """One completed journey from an exported trip log.

    Distance-like fields are miles and temperature is Fahrenheit no matter
    which unit dialect the source file used.
    """

    __tablename__ = 'trips'

    # Start timestamp string exactly as exported, e.g. '2026-02-19, 15:05'
    start_key = Column(String(64), primary_key=True)
    start_time = Column(DateTime, index=True)
    end_timestamp = Column(String(64))
    start_address = Column(Text)
    end_address = Column(Text)

    distance = Column(Float, nullable=False, default=0.0)  # miles
    consumption = Column(Float, nullable=False, default=0.0)  # kWh
    efficiency = Column(Float, nullable=False, default=0.0)  # mi/kWh

    start_lat = Column(Float)
    start_lng = Column(Float)
    end_lat = Column(Float)
    end_lng = Column(Float)
    start_odometer = Column(Float)  # miles
    end_odometer = Column(Float)  # miles

    trip_type = Column(String(64))
    soc_source = Column(Integer)
    soc_destination = Column(Integer)

    # NULL until the enrichment worker fills it in
    temperature = Column(Float, index=True)  # °F

    notes = Column(Text, nullable=False, default='')
    tags = Column(JSONType(), nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    @validates('tags')
    def _validate_tags(self, key, value):
        return normalize_tags(value)

    def to_dict(self):
        return {
            'start_key': self.start_key,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_timestamp': self.end_timestamp,
            'start_address': self.start_address,
            'end_address': self.end_address,
            'distance': self.distance,
            'consumption': self.consumption,
            'efficiency': self.efficiency,
            'start_lat': self.start_lat,
            'start_lng': self.start_lng,
            'end_lat': self.end_lat,
            'end_lng': self.end_lng,
            'start_odometer': self.start_odometer,
            'end_odometer': self.end_odometer,
            'trip_type': self.trip_type,
            'soc_source': self.soc_source,
            'soc_destination': self.soc_destination,
            'temperature': self.temperature,
            'notes': self.notes or '',
            'tags': list(self.tags or []),
        }


class Preference(Base):
    """Persisted user preferences (display settings, filter state)."""

    __tablename__ = 'preferences'

    key = Column(String(64), primary_key=True)
    value = Column(JSONType())
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


def get_engine(database_url):
    """Create database engine."""
    if database_url.startswith('sqlite') and ':memory:' in database_url:
        # Share one connection so every session sees the same in-memory database
        return create_engine(
            database_url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
    if database_url.startswith('sqlite'):
        return create_engine(database_url, connect_args={'check_same_thread': False})
    return create_engine(database_url, pool_pre_ping=True)

"""
Trip record store.

Durable keyed collection of trips backed by SQLAlchemy. Every write is a
point operation on the ``start_key`` primary key, so the enrichment worker
and the importer never interfere with each other beyond last-write-wins on
the same key. Returned trips are detached and safe to read after the
session is gone.
"""

import logging
import math
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from triplog.exceptions import DatabaseError, TripNotFoundError, TripValidationError
from triplog.models import Trip, normalize_tags

logger = logging.getLogger(__name__)

# Fields that may change after import
EDITABLE_FIELDS = ('notes', 'tags', 'temperature')


class TripStore:
    """Upsert, scan and point-update access to stored trips."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def upsert_many(self, trips: Iterable[Trip]) -> int:
        """
        Insert or replace trips by start key in a single transaction.

        Returns:
            Number of trips written
        """
        trips = list(trips)
        if not trips:
            return 0

        session = self._session_factory()
        try:
            for trip in trips:
                session.merge(trip)
            session.commit()
            logger.debug(f"Upserted {len(trips)} trips")
            return len(trips)
        except SQLAlchemyError as e:
            session.rollback()
            error = DatabaseError(f"Failed to upsert trips: {e}", {'count': len(trips)})
            logger.error(str(error), exc_info=True)
            raise error from e
        finally:
            session.close()

    def scan_all(self) -> List[Trip]:
        """Every stored trip, ordered by start key."""
        return self._query_all(lambda query: query, 'scan trips')

    def scan_missing_temperature(self) -> List[Trip]:
        """Trips still waiting for a temperature lookup."""
        return self._query_all(
            lambda query: query.filter(Trip.temperature.is_(None)),
            'scan trips missing temperature',
        )

    def scan_range(self, start: datetime, end: datetime) -> List[Trip]:
        """Trips whose parsed start time falls within [start, end]."""
        return self._query_all(
            lambda query: query.filter(Trip.start_time >= start, Trip.start_time <= end),
            'scan trip range',
        )

    def get(self, start_key: str) -> Trip:
        """
        Point lookup by start key.

        Raises:
            TripNotFoundError: If no trip has this key
        """
        session = self._session_factory()
        try:
            trip = session.get(Trip, start_key)
            if trip is None:
                raise TripNotFoundError(start_key)
            return trip
        except SQLAlchemyError as e:
            error = DatabaseError(f"Failed to load trip: {e}", {'start_key': start_key})
            logger.error(str(error), exc_info=True)
            raise error from e
        finally:
            session.close()

    def update_fields(self, start_key: str, partial: Dict[str, Any]) -> Trip:
        """
        Change only the supplied editable fields of one trip.

        Args:
            start_key: Trip to update
            partial: Subset of notes, tags and temperature

        Returns:
            The updated trip

        Raises:
            TripValidationError: For non-editable fields or invalid values
            TripNotFoundError: If no trip has this key
        """
        changes = self._validate_partial(partial)

        session = self._session_factory()
        try:
            trip = session.get(Trip, start_key)
            if trip is None:
                raise TripNotFoundError(start_key)

            for field, value in changes.items():
                setattr(trip, field, value)

            session.commit()
            return trip
        except SQLAlchemyError as e:
            session.rollback()
            error = DatabaseError(f"Failed to update trip: {e}", {'start_key': start_key})
            logger.error(str(error), exc_info=True)
            raise error from e
        finally:
            session.close()

    def count(self) -> int:
        session = self._session_factory()
        try:
            return session.query(func.count(Trip.start_key)).scalar() or 0
        except SQLAlchemyError as e:
            error = DatabaseError(f"Failed to count trips: {e}")
            logger.error(str(error), exc_info=True)
            raise error from e
        finally:
            session.close()

    def _query_all(self, refine, description: str) -> List[Trip]:
        session = self._session_factory()
        try:
            query = refine(session.query(Trip))
            return query.order_by(Trip.start_key).all()
        except SQLAlchemyError as e:
            error = DatabaseError(f"Failed to {description}: {e}")
            logger.error(str(error), exc_info=True)
            raise error from e
        finally:
            session.close()

    @staticmethod
    def _validate_partial(partial: Dict[str, Any]) -> Dict[str, Any]:
        """Check field names and value types before touching the database."""
        if not isinstance(partial, dict):
            raise TripValidationError("Trip update must be an object")

        changes = {}
        for field, value in partial.items():
            if field not in EDITABLE_FIELDS:
                raise TripValidationError(f"Field cannot be edited: {field}", field=field)

            if field == 'notes':
                if value is None:
                    value = ''
                if not isinstance(value, str):
                    raise TripValidationError("Notes must be text", field=field, value=value)

            elif field == 'tags':
                if value is None:
                    value = []
                if not isinstance(value, (list, tuple)) or not all(isinstance(tag, str) for tag in value):
                    raise TripValidationError("Tags must be a list of strings", field=field, value=value)
                value = normalize_tags(value)

            elif field == 'temperature':
                if value is not None:
                    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                        raise TripValidationError("Temperature must be a finite number", field=field, value=value)
                    value = float(value)

            changes[field] = value

        return changes

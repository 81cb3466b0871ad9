"""
Trip import service.

Parses an uploaded export, turns each accepted row into a fresh Trip and
upserts the whole batch in one transaction.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Optional, Union

from triplog.exceptions import CSVImportError
from triplog.models import Trip
from triplog.services.trip_store import TripStore
from triplog.utils.csv_parser import TripCSVParser
from triplog.utils.import_utils import format_reportable

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Outcome of one import call."""

    imported: int
    dialect: str
    total_rows: int
    skipped_rows: int

    def to_dict(self):
        return asdict(self)


def build_trip(record: dict) -> Trip:
    """
    Create a new, not-yet-enriched Trip from a parsed record.

    Every replaceable field is set explicitly so an upsert over an existing
    key resets temperature, notes and tags.
    """
    return Trip(
        **record,
        temperature=None,
        notes='',
        tags=[],
    )


def import_trips(
    store: TripStore,
    content: Union[str, bytes],
    filename: Optional[str] = None
) -> ImportResult:
    """
    Import a trip export into the store.

    Args:
        store: Destination record store
        content: Raw CSV content
        filename: Original file name, for logs and error details

    Returns:
        ImportResult with the accepted row count and detected dialect

    Raises:
        CSVImportError: If the file cannot be parsed at all; nothing is stored
    """
    try:
        records, stats = TripCSVParser.parse_csv(content, filename=filename)
    except CSVImportError as e:
        logger.warning(format_reportable(filename, 'failed', failure_reason=e.reason))
        raise

    trips = [build_trip(record) for record in records]
    store.upsert_many(trips)

    result = ImportResult(
        imported=stats['parsed_rows'],
        dialect=stats['dialect'],
        total_rows=stats['total_rows'],
        skipped_rows=stats['skipped_rows'],
    )

    logger.info(
        format_reportable(
            filename,
            'success',
            imported=result.imported,
            total_rows=result.total_rows,
            dialect=result.dialect,
        )
    )
    if stats['duplicate_keys']:
        logger.info(f"{stats['duplicate_keys']} rows repeated an earlier start date; the last one was kept")

    return result

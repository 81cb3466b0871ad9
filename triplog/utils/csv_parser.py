"""CSV parser for exported EV trip logs."""

import csv
import io
import logging
import math
from typing import Any, Dict, List, Optional, Tuple, Union

from triplog.calculations.constants import IMPERIAL, METRIC
from triplog.calculations.efficiency import calculate_efficiency
from triplog.calculations.units import from_display_distance
from triplog.exceptions import CSVImportError
from triplog.utils.import_utils import get_failure_suggestion
from triplog.utils.time_utils import parse_trip_timestamp

logger = logging.getLogger(__name__)


class TripCSVParser:
    """
    Parse journey exports into canonical (imperial) trip records.

    Export format:
    - One row per trip, keyed by 'Start Date' ('2026-02-19, 15:05')
    - 'Distance in Mile' (imperial export) or 'Distance in KM' (metric export)
    - 'Consumption in Kwh' is always kWh
    - Odometers use the same unit as the distance column
    """

    METRIC_DISTANCE_COLUMN = 'distance in km'
    IMPERIAL_DISTANCE_COLUMN = 'distance in mile'

    # Column name mappings (case-insensitive)
    COLUMN_MAP = {
        'start date': 'start_key',
        'end date': 'end_timestamp',
        'start address': 'start_address',
        'end address': 'end_address',
        'distance in mile': 'distance',
        'distance in km': 'distance',
        'consumption in kwh': 'consumption',
        'start latitude': 'start_lat',
        'start longitude': 'start_lng',
        'end latitude': 'end_lat',
        'end longitude': 'end_lng',
        'start odometer': 'start_odometer',
        'end odometer': 'end_odometer',
        'trip type': 'trip_type',
        'soc source': 'soc_source',
        'soc destination': 'soc_destination',
    }

    TEXT_FIELDS = ('end_timestamp', 'start_address', 'end_address', 'trip_type')
    COORDINATE_FIELDS = ('start_lat', 'start_lng', 'end_lat', 'end_lng')
    ODOMETER_FIELDS = ('start_odometer', 'end_odometer')
    SOC_FIELDS = ('soc_source', 'soc_destination')

    @classmethod
    def decode_content(cls, content: Union[str, bytes], filename: Optional[str] = None) -> str:
        """Decode uploaded bytes as UTF-8, tolerating a byte order mark."""
        if isinstance(content, bytes):
            try:
                text = content.decode('utf-8-sig')
            except UnicodeDecodeError as e:
                logger.warning(f"Could not decode {filename or 'upload'} as UTF-8: {e}")
                raise CSVImportError(
                    get_failure_suggestion('encoding_error'),
                    reason='encoding_error',
                    filename=filename,
                ) from e
        else:
            text = content.lstrip('\ufeff')

        if not text.strip():
            raise CSVImportError(
                get_failure_suggestion('empty_file'),
                reason='empty_file',
                filename=filename,
            )
        return text

    @classmethod
    def detect_dialect(cls, fieldnames: List[str]) -> Optional[str]:
        """
        Decide the unit dialect from the header row.

        Returns:
            'metric', 'imperial', or None when no distance column is present
        """
        normalized = {name.strip().lower() for name in fieldnames if name}
        if cls.METRIC_DISTANCE_COLUMN in normalized:
            return METRIC
        if cls.IMPERIAL_DISTANCE_COLUMN in normalized:
            return IMPERIAL
        return None

    @classmethod
    def _sniff_delimiter(cls, text: str) -> str:
        """Detect the delimiter from the header line, defaulting to commas."""
        header_line = text.splitlines()[0]
        try:
            return csv.Sniffer().sniff(header_line, delimiters=",;\t").delimiter
        except csv.Error:
            return csv.excel.delimiter

    @classmethod
    def parse_csv(
        cls,
        content: Union[str, bytes],
        filename: Optional[str] = None
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        Parse trip export content into trip records.

        Rows with an empty start date or a non-numeric distance or consumption
        are skipped. When a start date repeats within one file the last row wins.

        Args:
            content: Raw file content (bytes or text)
            filename: Original file name, used in error details

        Returns:
            Tuple of (list of trip dicts, stats dict)

        Raises:
            CSVImportError: If the file cannot be read as a trip export
        """
        text = cls.decode_content(content, filename)

        stats = {
            'dialect': None,
            'total_rows': 0,
            'parsed_rows': 0,
            'skipped_rows': 0,
            'duplicate_keys': 0,
            'columns_found': [],
        }

        reader = csv.DictReader(io.StringIO(text), delimiter=cls._sniff_delimiter(text))

        try:
            fieldnames = reader.fieldnames or []
        except csv.Error as e:
            raise CSVImportError(
                get_failure_suggestion('invalid_csv'), reason='invalid_csv', filename=filename
            ) from e

        dialect = cls.detect_dialect(fieldnames)
        if dialect is None:
            raise CSVImportError(
                get_failure_suggestion('missing_distance_column', fieldnames),
                reason='missing_distance_column',
                filename=filename,
            )
        stats['dialect'] = dialect

        # Map columns to our field names; the dialect's distance column wins
        column_mapping = {}
        distance_column = cls.METRIC_DISTANCE_COLUMN if dialect == METRIC else cls.IMPERIAL_DISTANCE_COLUMN
        for col in fieldnames:
            if not col:
                continue
            col_lower = col.lower().strip()
            if col_lower not in cls.COLUMN_MAP:
                continue
            if cls.COLUMN_MAP[col_lower] == 'distance' and col_lower != distance_column:
                continue
            column_mapping[col] = cls.COLUMN_MAP[col_lower]
        stats['columns_found'] = list(column_mapping.values())
        logger.debug(
            f"Mapped {len(column_mapping)} columns in {filename or 'upload'} "
            f"({dialect}): {', '.join(stats['columns_found'])}"
        )

        records_by_key: Dict[str, Dict[str, Any]] = {}

        try:
            for row_num, row in enumerate(reader, start=2):  # Start at 2 (header is row 1)
                stats['total_rows'] += 1

                record = cls._parse_row(row, column_mapping, dialect)
                if record is None:
                    stats['skipped_rows'] += 1
                    logger.debug(f"Skipped row {row_num} of {filename or 'upload'}")
                    continue

                stats['parsed_rows'] += 1
                if record['start_key'] in records_by_key:
                    stats['duplicate_keys'] += 1
                records_by_key[record['start_key']] = record
        except csv.Error as e:
            raise CSVImportError(
                get_failure_suggestion('invalid_csv'), reason='invalid_csv', filename=filename
            ) from e

        return list(records_by_key.values()), stats

    @classmethod
    def _parse_row(
        cls,
        row: Dict[str, Any],
        column_mapping: Dict[str, str],
        dialect: str
    ) -> Optional[Dict[str, Any]]:
        """Parse a single CSV row into a canonical trip record, or None to reject it."""
        values = {}
        for csv_col, field_name in column_mapping.items():
            raw = row.get(csv_col)
            values[field_name] = raw.strip() if isinstance(raw, str) else ''

        start_key = values.get('start_key', '')
        if not start_key:
            return None

        distance = cls._parse_float(values.get('distance'))
        consumption = cls._parse_float(values.get('consumption'))
        if distance is None or consumption is None:
            return None

        record: Dict[str, Any] = {
            'start_key': start_key,
            'start_time': parse_trip_timestamp(start_key),
        }

        for field in cls.TEXT_FIELDS:
            record[field] = values.get(field) or None

        for field in cls.COORDINATE_FIELDS:
            record[field] = cls._parse_float(values.get(field))

        for field in cls.ODOMETER_FIELDS:
            odometer = cls._parse_float(values.get(field))
            if odometer is not None:
                odometer = from_display_distance(odometer, dialect)
            record[field] = odometer

        for field in cls.SOC_FIELDS:
            record[field] = cls._parse_int(values.get(field))

        record['distance'] = from_display_distance(distance, dialect)
        record['consumption'] = consumption
        record['efficiency'] = calculate_efficiency(record['distance'], consumption)

        return record

    @staticmethod
    def _parse_float(value: Optional[str]) -> Optional[float]:
        """Parse a finite float; blanks, garbage, NaN and infinities become None."""
        if not value:
            return None
        try:
            number = float(value)
        except (ValueError, TypeError):
            return None
        if not math.isfinite(number):
            return None
        return number

    @classmethod
    def _parse_int(cls, value: Optional[str]) -> Optional[int]:
        """Parse an integer percentage, truncating any fractional part."""
        number = cls._parse_float(value)
        if number is None:
            return None
        return int(number)

"""
Temperature enrichment worker.

Backfills the outside temperature of trips imported without one. The pass
is a plain scan-and-update loop over the ``temperature`` column: a trip
stays NULL until a lookup succeeds, so nothing beyond the stored trips
needs to survive a restart, and re-running a pass is always safe.
"""

import logging
import math
import threading
from typing import Any, Callable, Dict, Optional

from triplog.config import Config
from triplog.exceptions import TripNotFoundError
from triplog.services.trip_store import TripStore
from triplog.utils.time_utils import parse_trip_timestamp
from triplog.utils.weather import get_hourly_temperature

logger = logging.getLogger(__name__)


def _is_finite(value) -> bool:
    return value is not None and math.isfinite(value)


class EnrichmentWorker:
    """
    Sequential, throttled, cancellable temperature backfill.

    Args:
        store: Trip store to scan and update
        lookup: Callable (latitude, longitude, when) -> °F or None
        throttle_seconds: Pause after every external lookup
        sleep: Callable used for the pause; defaults to waiting on the stop event
    """

    def __init__(
        self,
        store: TripStore,
        lookup: Callable = get_hourly_temperature,
        throttle_seconds: Optional[float] = None,
        sleep: Optional[Callable[[float], Any]] = None
    ):
        self.store = store
        self.lookup = lookup
        self.throttle_seconds = Config.WEATHER_THROTTLE_SECONDS if throttle_seconds is None else throttle_seconds
        self._stop_event = threading.Event()
        self._sleep = sleep or self._stop_event.wait
        self._state_lock = threading.Lock()
        self._running = False
        self._rescan_requested = False

    @property
    def running(self) -> bool:
        return self._running

    def stop(self):
        """Ask a running (or the next) pass to finish after the current record."""
        self._stop_event.set()

    def run_pass(self) -> Dict[str, Any]:
        """
        Look up temperatures for every trip that has none.

        A call that arrives while a pass is running returns 'busy' and asks
        the running pass to scan again once it finishes, so trips stored
        after that pass took its snapshot are still picked up.

        Returns:
            Summary dict: status ('completed', 'stopped' or 'busy'),
            candidates, enriched, skipped, missed, lookups and scans
        """
        summary = {
            'status': 'completed',
            'candidates': 0,
            'enriched': 0,
            'skipped': 0,
            'missed': 0,
            'lookups': 0,
            'scans': 0,
        }

        with self._state_lock:
            if self._running:
                self._rescan_requested = True
                logger.info("Enrichment pass already running, rescan requested")
                summary['status'] = 'busy'
                return summary
            self._running = True
            self._rescan_requested = False

        try:
            while True:
                self._scan(summary)
                with self._state_lock:
                    if summary['status'] == 'stopped' or not self._rescan_requested:
                        self._finish()
                        break
                    self._rescan_requested = False
                logger.info("Trips changed during the pass, scanning again")
        except Exception:
            with self._state_lock:
                self._finish()
            raise

        logger.info(
            f"Enrichment pass {summary['status']}: {summary['enriched']} enriched, "
            f"{summary['missed']} missed, {summary['skipped']} skipped"
        )
        return summary

    def _finish(self):
        """Mark the pass over. Caller holds the state lock."""
        self._running = False
        self._rescan_requested = False
        # A stop is kept until the pass it was aimed at has ended
        self._stop_event.clear()

    def _scan(self, summary: Dict[str, Any]):
        """One scan over the trips missing temperature, accumulating into summary."""
        trips = self.store.scan_missing_temperature()
        summary['scans'] += 1
        summary['candidates'] += len(trips)
        if not trips:
            logger.debug("No trips missing temperature")
            return

        logger.info(f"Found {len(trips)} trips missing temperature, starting lookups")

        for trip in trips:
            if self._stop_event.is_set():
                summary['status'] = 'stopped'
                logger.info("Enrichment pass stopped")
                return

            started = trip.start_time or parse_trip_timestamp(trip.start_key)
            if not _is_finite(trip.start_lat) or not _is_finite(trip.start_lng) or started is None:
                summary['skipped'] += 1
                logger.debug(f"Skipping trip {trip.start_key}: no usable location or start time")
                continue

            temperature = self.lookup(trip.start_lat, trip.start_lng, started)
            summary['lookups'] += 1

            if temperature is None:
                summary['missed'] += 1
                logger.debug(f"No temperature found for trip {trip.start_key}")
            else:
                try:
                    self.store.update_fields(trip.start_key, {'temperature': temperature})
                    summary['enriched'] += 1
                    logger.debug(f"Updated trip {trip.start_key} with temp: {temperature}°F")
                except TripNotFoundError as e:
                    logger.warning(f"Trip disappeared before enrichment: {e}")

            # Stay polite to the free weather API
            self._sleep(self.throttle_seconds)

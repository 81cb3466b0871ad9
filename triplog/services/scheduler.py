"""
Background scheduler service for triplog.

Runs the temperature enrichment pass periodically and on demand, off the
request path.
"""

import logging
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler

from triplog.config import Config
from triplog.exceptions import DatabaseError
from triplog.services.enrichment_service import EnrichmentWorker

logger = logging.getLogger(__name__)

ENRICHMENT_JOB_ID = 'temperature_enrichment'

# Module-level scheduler instance
scheduler = None
_worker = None


def run_enrichment_job(worker: EnrichmentWorker):
    """Scheduler entry point; a failed pass is logged and retried next interval."""
    try:
        return worker.run_pass()
    except DatabaseError as e:
        logger.error(f"Enrichment pass failed: {e}", exc_info=True)
    except Exception as e:
        logger.exception(f"Unexpected error during enrichment pass: {e}")
    return None


def init_scheduler(worker: EnrichmentWorker, interval_minutes: int = None):
    """
    Initialize and start the background scheduler.

    The enrichment job runs once right away, then every interval.

    Returns:
        The BackgroundScheduler instance
    """
    global scheduler, _worker
    _worker = worker
    if interval_minutes is None:
        interval_minutes = Config.ENRICHMENT_INTERVAL_MINUTES

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_enrichment_job,
        "interval",
        minutes=interval_minutes,
        args=[worker],
        id=ENRICHMENT_JOB_ID,
        next_run_time=datetime.now(),
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"Background scheduler initialized (enrichment every {interval_minutes} min)")
    return scheduler


def trigger_enrichment() -> bool:
    """
    Queue an immediate one-off enrichment pass.

    Returns:
        True if a pass was queued, False when the scheduler is not running
    """
    if scheduler is None or not scheduler.running or _worker is None:
        logger.debug("Scheduler not running, enrichment not triggered")
        return False

    scheduler.add_job(run_enrichment_job, args=[_worker], id=f"{ENRICHMENT_JOB_ID}_manual", replace_existing=True)
    logger.info("Enrichment pass queued")
    return True


def shutdown_scheduler():
    """Shutdown the background scheduler gracefully."""
    global scheduler, _worker
    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler shut down")
    if _worker:
        _worker.stop()
    scheduler = None
    _worker = None

#!/usr/bin/env python3
"""
Command line interface for triplog.

Usage:
    triplog import FILE [FILE ...]
    triplog enrich [--dry-run] [--limit N]
    triplog stats [--json]
    triplog serve [--host HOST] [--port PORT]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from triplog.app import build_services, configure_logging, create_app
from triplog.config import Config
from triplog.database import init_db
from triplog.exceptions import CSVImportError, TripLogError
from triplog.services.filter_service import apply_filters
from triplog.services.ingest_service import import_trips
from triplog.services.statistics_service import calculate_dashboard_summary
from triplog.utils.time_utils import parse_trip_timestamp

logger = logging.getLogger(__name__)


def cmd_import(services, args) -> int:
    """Import one or more trip exports."""
    failures = 0
    for path in args.files:
        try:
            content = Path(path).read_bytes()
        except OSError as e:
            logger.error(f"{path}: could not read file - {e}")
            failures += 1
            continue

        try:
            result = import_trips(services.store, content, filename=Path(path).name)
        except CSVImportError as e:
            logger.error(f"{path}: {e.message}")
            failures += 1
            continue

        services.settings.align_unit_system(result.dialect)
        print(
            f"{path}: imported {result.imported} trips ({result.dialect}), "
            f"skipped {result.skipped_rows} of {result.total_rows} rows"
        )

    return 1 if failures else 0


def cmd_enrich(services, args) -> int:
    """Backfill missing trip temperatures."""
    if args.dry_run:
        trips = services.store.scan_missing_temperature()
        logger.info("DRY RUN MODE - no lookups will be made")
        for trip in (trips[:args.limit] if args.limit else trips):
            when = trip.start_time or parse_trip_timestamp(trip.start_key)
            print(f"{trip.start_key}: would look up ({trip.start_lat}, {trip.start_lng}) at {when}")
        print(f"{len(trips)} trips missing temperature")
        return 0

    summary = services.worker.run_pass()
    print(
        f"Enrichment {summary['status']}: {summary['enriched']} enriched, {summary['missed']} missed, "
        f"{summary['skipped']} skipped of {summary['candidates']} candidates"
    )
    return 0


def cmd_stats(services, args) -> int:
    """Print the dashboard summary for the filtered trips."""
    result = apply_filters(services.store.scan_all(), services.settings.filters)
    summary = calculate_dashboard_summary(result.trips, services.settings.settings)
    summary['counts'] = result.counts()

    if args.json:
        print(json.dumps(summary, indent=2))
        return 0

    labels = summary['labels']
    print(f"Trips:          {summary['trip_count']} of {result.total_count}")
    print(f"Total distance: {summary['total_distance']} {labels['distance']}")
    print(f"Energy used:    {summary['total_energy']} kWh")
    print(f"Avg efficiency: {summary['average_efficiency']} {labels['efficiency']}")
    print(f"Est. max range: {summary['estimated_range']} {labels['distance']}")
    print(f"CO2 saved:      {summary['co2_saved']} {labels['co2']}")
    print(f"Fuel savings:   ${summary['fuel_savings']:.2f}")
    return 0


def cmd_serve(args) -> int:
    """Run the JSON API with the development server."""
    app = create_app()
    app.run(host=args.host, port=args.port, debug=Config.DEBUG)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="triplog", description="EV trip log analytics")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import trip export CSV files")
    import_parser.add_argument("files", nargs="+", help="CSV files to import")

    enrich_parser = subparsers.add_parser("enrich", help="Backfill missing temperatures")
    enrich_parser.add_argument("--dry-run", action="store_true", help="Show what would be done")
    enrich_parser.add_argument("--limit", type=int, help="Only list N trips in dry-run mode")

    stats_parser = subparsers.add_parser("stats", help="Print the dashboard summary")
    stats_parser.add_argument("--json", action="store_true", help="Print JSON instead of text")

    serve_parser = subparsers.add_parser("serve", help="Run the JSON API")
    serve_parser.add_argument("--host", default=Config.FLASK_HOST)
    serve_parser.add_argument("--port", type=int, default=Config.FLASK_PORT)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "serve":
        return cmd_serve(args)

    init_db()
    try:
        services = build_services()
        handlers = {
            "import": cmd_import,
            "enrich": cmd_enrich,
            "stats": cmd_stats,
        }
        return handlers[args.command](services, args)
    except TripLogError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())

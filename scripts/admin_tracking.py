"""Admin CLI for the aircraft tracking database.

Usage examples:
    python scripts/admin_tracking.py run-cycle
    python scripts/admin_tracking.py stats --json
    python scripts/admin_tracking.py clear --yes
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from aircraft_tracker.db import SessionLocal, init_db
from aircraft_tracker.services import FusionEngine, IngestionCycle, TrackingStore


def _get_session():
    init_db()
    return SessionLocal()


def cmd_run_cycle(args) -> None:
    init_db()
    cycle = IngestionCycle(FusionEngine(), SessionLocal)
    summary = asyncio.run(cycle.run())
    if summary is None:
        sys.stderr.write("Ingestion cycle already running.\n")
        raise SystemExit(1)

    if args.json:
        print(json.dumps(summary.model_dump(), indent=2))
    else:
        print(f"Tracked {summary.tracked} aircraft, stored {summary.stored} positions")


def cmd_stats(args) -> None:
    session = _get_session()
    try:
        store = TrackingStore(session)
        output = {
            "aircraft": store.count_aircraft(),
            "positions": store.count_positions(),
            "top_aircraft": [
                {"icao24": a.icao24, "callsign": a.callsign, "sightings": a.total_sightings}
                for a in store.top_aircraft(args.top)
            ],
        }
        if args.json:
            print(json.dumps(output, indent=2))
        else:
            print(f"aircraft: {output['aircraft']}")
            print(f"positions: {output['positions']}")
            for item in output["top_aircraft"]:
                print(
                    f"  {item['icao24']} callsign={item['callsign'] or 'n/a'}"
                    f" sightings={item['sightings']}"
                )
    finally:
        session.close()


def cmd_clear(args) -> None:
    session = _get_session()
    try:
        if not args.yes:
            confirmation = input("Delete all aircraft and positions? [y/N]: ").strip().lower()
            if confirmation not in {"y", "yes"}:
                print("Cancelled.")
                return

        positions, aircraft = TrackingStore(session).delete_all()
        print(f"Deleted {positions} positions and {aircraft} aircraft")
    finally:
        session.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage aircraft tracking data")
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run-cycle", help="Fetch all feeds once and store the results")
    run_cmd.add_argument("--json", action="store_true", help="Return JSON output")
    run_cmd.set_defaults(func=cmd_run_cycle)

    stats_cmd = sub.add_parser("stats", help="Show table counts and most-seen aircraft")
    stats_cmd.add_argument("--top", type=int, default=10, help="Number of aircraft to list")
    stats_cmd.add_argument("--json", action="store_true", help="Return JSON output")
    stats_cmd.set_defaults(func=cmd_stats)

    clear_cmd = sub.add_parser("clear", help="Delete all aircraft and position rows")
    clear_cmd.add_argument("--yes", action="store_true", help="Confirm deletion without prompt")
    clear_cmd.set_defaults(func=cmd_clear)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()

"""Maintenance command line for the floor inventory database."""

import argparse
import logging
import os

from dotenv import load_dotenv  # type: ignore

from database.DatabaseProvider import DatabaseProvider  # type: ignore
from database.LogRepository import LogRepository  # type: ignore
from database.QueryExecutor import QueryExecutor  # type: ignore
from database.StationRepository import StationRepository  # type: ignore
from inventory.ChangeLog import DEFAULT_RETENTION_DAYS, ChangeLog  # type: ignore
from inventory.models import DEVICE_TYPES  # type: ignore
from layout.LayoutEngine import LayoutEngine  # type: ignore

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="floor-inventory",
        description="Maintain the floor inventory database.",
    )
    parser.add_argument("--db", help="SQLite database path (defaults to DB_PATH)")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create the schema if it does not exist")

    for name, help_text in (
        ("validate", "Report layout issues"),
        ("autofix", "Nudge overlapping and too-close stations apart"),
        ("stats", "Print station and registration statistics"),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("device_type", choices=DEVICE_TYPES)
        if name != "stats":
            command.add_argument("--bay", help="Limit to one bay")

    cleanup = commands.add_parser("cleanup-logs", help="Delete old change-log entries")
    cleanup.add_argument(
        "--days",
        type=int,
        default=int(os.environ.get("LOG_RETENTION_DAYS", DEFAULT_RETENTION_DAYS)),
        help="Days of history to keep",
    )
    return parser


def _print_validation(report: dict) -> None:
    state = "valid" if report["valid"] else "has issues"
    print(f"{report['total_stations']} stations checked, layout {state}")
    for issue in report["issues"]:
        print(f"  [{issue['type']}] {issue['message']}")


def _print_stats(stats: dict) -> None:
    print(f"Stations:           {stats['total_stations']}")
    print(f"Registered devices: {stats['registered_devices']}")
    print(f"Empty stations:     {stats['empty_stations']}")
    print(f"Registration rate:  {stats['registration_rate']}%")
    print("-" * 40)
    for entry in stats["bay_stats"]:
        print(
            f"  {entry['bay'] or '(unassigned)':<16} "
            f"{entry['registered_devices']}/{entry['total_stations']}"
        )


def main(argv: list[str] | None = None) -> int:
    """Run one maintenance command and return the process exit code.

    Validation exits with 1 when the layout has issues so the command can
    gate scripts.
    """
    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format=LOG_FORMAT,
    )
    args = _build_parser().parse_args(argv)

    db_path = args.db or os.environ["DB_PATH"]
    logger.info("Running %s on %s", args.command, db_path)
    db_provider = DatabaseProvider(db_path)
    try:
        db_provider.initialize_schema()
        executor = QueryExecutor(db_provider.get_connection())
        engine = LayoutEngine(StationRepository(executor))

        if args.command == "init-db":
            print("Schema ready")
        elif args.command == "validate":
            report = engine.validate_layout(args.device_type, args.bay)
            _print_validation(report)
            if not report["valid"]:
                logger.warning("Layout check failed with %d issues", len(report["issues"]))
                return 1
        elif args.command == "autofix":
            result = engine.auto_fix_layout(args.device_type, args.bay)
            print(result["message"])
            for line in result["fixed_issues"]:
                print(f"  {line}")
        elif args.command == "stats":
            _print_stats(engine.get_comprehensive_stats(args.device_type))
        elif args.command == "cleanup-logs":
            removed = ChangeLog(LogRepository(executor)).clean_old_logs(args.days)
            print(f"Removed {removed} log entries older than {args.days} days")
    finally:
        db_provider.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
Floor inventory - mock layout generation.

Builds a SQLite database with bays, numbered stations laid out with the
layout patterns, a share of registered devices, and one audit per site.

Usage:
    python scripts/generate_mock_layout.py [--output PATH] [--seed N]
"""

import argparse
import datetime
import random
import sys
from pathlib import Path

# The core packages live under packages/core/src, outside the script's folder.
_CORE_SRC = Path(__file__).resolve().parent.parent / "packages" / "core" / "src"
if str(_CORE_SRC) not in sys.path:
    sys.path.insert(0, str(_CORE_SRC))

from database.AuditRepository import AuditRepository  # type: ignore
from database.BayRepository import BayRepository  # type: ignore
from database.DatabaseProvider import DatabaseProvider  # type: ignore
from database.LogRepository import LogRepository  # type: ignore
from database.QueryExecutor import QueryExecutor  # type: ignore
from database.StationRepository import StationRepository  # type: ignore
from inventory.AuditService import AuditService  # type: ignore
from inventory.BayService import BayService  # type: ignore
from inventory.ChangeLog import ChangeLog  # type: ignore
from inventory.StationService import StationService  # type: ignore
from inventory.models import DEVICE_TYPES, MAIN_ITEMS, SITES, Position  # type: ignore
from layout.LayoutEngine import LayoutEngine  # type: ignore


BAYS_PER_DEVICE_TYPE = 4
STATIONS_PER_BAY = (6, 16)
REGISTERED_FRACTION = 0.7
BAY_SPACING_X = 320
BAY_SPACING_Y = 280

PATTERNS = ("grid", "row", "staggered", "circle")
BRANDS = {
    "mouse": [("Logitech", "M185"), ("Logitech", "B100"), ("HP", "X500")],
    "keyboard": [("Logitech", "K120"), ("A4Tech", "KR-85"), ("HP", "K1500")],
    "headset": [("Jabra", "Evolve 20"), ("Plantronics", "Blackwire 3220")],
}
DEPARTMENTS = ["Operations", "Support", "Training", "IT"]


# =============================================================================
# CLI Argument Parsing
# =============================================================================


def parse_args():
    """Parse command-line arguments for the mock layout generator.

    Returns:
        argparse.Namespace with 'output' (Path) and 'seed' (int or None).
    """
    parser = argparse.ArgumentParser(
        description="Generate a mock floor inventory database (SQLite).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("data/inventory.db"),
        help="Output path for the SQLite database file (default: data/inventory.db)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible data generation (default: random)",
    )
    return parser.parse_args()


# =============================================================================
# Generation
# =============================================================================


def _serial(device_type, index):
    prefix = {"mouse": "MS", "keyboard": "KB", "headset": "HS"}[device_type]
    return f"{prefix}{random.randint(100000, 999999)}{index:03d}"


def generate_floor(bay_service, station_service, engine, device_type):
    """Create the bays of one device type and fill them with stations.

    Returns:
        Tuple of (bay count, station count, registered device count).
    """
    station_count = 0
    registered = 0
    for bay_index in range(BAYS_PER_DEVICE_TYPE):
        name = f"{chr(ord('A') + bay_index)}1"
        origin = Position(
            60 + (bay_index % 2) * BAY_SPACING_X,
            60 + (bay_index // 2) * BAY_SPACING_Y,
        )
        bay, _ = bay_service.create_bay(name, device_type, origin)

        count = random.randint(*STATIONS_PER_BAY)
        for _ in range(count):
            station_service.create_station(device_type, Position(origin.x, origin.y), bay.name)

        pattern = PATTERNS[bay_index % len(PATTERNS)]
        engine.arrange_bay(bay.name, device_type, pattern)
        for station in station_service.list_stations(device_type, bay=bay.name):
            station_service.update_position(
                station.id, station.position.x + origin.x, station.position.y + origin.y
            )
        engine.renumber_bay(bay.name, device_type)

        for index, station in enumerate(station_service.list_stations(device_type, bay=bay.name)):
            if random.random() >= REGISTERED_FRACTION:
                continue
            brand, model = random.choice(BRANDS[device_type])
            station_service.register_device(station.id, _serial(device_type, index), brand, model)
            registered += 1
        station_count += count
    return BAYS_PER_DEVICE_TYPE, station_count, registered


def generate_audits(audit_service, audit_date):
    """Create one audit per site with random department counts."""
    for site in SITES:
        items = {
            name: {
                "departments": {d: random.randint(0, 40) for d in DEPARTMENTS},
                "stock": random.randint(0, 15),
                "defectives": random.randint(0, 5),
            }
            for name in MAIN_ITEMS
        }
        audit_service.create_audit(audit_date, site, items, DEPARTMENTS, created_by="mock")


def main():
    args = parse_args()
    if args.seed is not None:
        random.seed(args.seed)

    if args.output.exists():
        args.output.unlink()

    db_provider = DatabaseProvider(str(args.output))
    db_provider.initialize_schema()
    executor = QueryExecutor(db_provider.get_connection())

    stations = StationRepository(executor)
    station_service = StationService(stations)
    bay_service = BayService(BayRepository(executor), stations)
    engine = LayoutEngine(stations)
    audit_service = AuditService(AuditRepository(executor), ChangeLog(LogRepository(executor)))

    try:
        for device_type in DEVICE_TYPES:
            bays, count, registered = generate_floor(
                bay_service, station_service, engine, device_type
            )
            print(f"{device_type:<9} {bays} bays, {count} stations, {registered} registered")
        generate_audits(audit_service, datetime.date.today())
        print(f"Audits    {len(SITES)} sites")
    finally:
        db_provider.close()

    print(f"Wrote {args.output}")


if __name__ == "__main__":
    main()

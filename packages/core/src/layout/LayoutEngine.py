"""Layout engine for station maps.

Positions, validates, duplicates and renumbers the stations of a bay. The
engine holds no state between calls: every operation reads what it needs
from the station repository and writes each changed record back one at a
time. There is no locking, so concurrent arrange/renumber/duplicate calls
on the same bay can interleave and leave inconsistent numbering. A failure
part-way through a batch keeps the records already written; renumbering is
the exception and runs as one transaction.
"""

import logging
import math
import time
from dataclasses import replace
from datetime import datetime

from database.StationRepository import StationRepository
from inventory.errors import ConflictError, InvalidRequestError, NotFoundError
from inventory.models import Device, Position, Station
from layout.patterns import generate_positions

logger = logging.getLogger(__name__)

# Pairs closer than this (but not coincident) are reported as too close.
MIN_STATION_DISTANCE = 30
# Distance auto-fix moves a station by, or places it at.
FIX_DISTANCE = 60


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _distance(a: Position, b: Position) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def _registration_rate(registered: int, total: int) -> float:
    return round(registered / total * 100, 1) if total else 0.0


class LayoutEngine:
    """Spatial operations over the stations of one device type."""

    def __init__(self, stations: StationRepository) -> None:
        """
        Args:
            stations: Repository the engine reads and writes through.
        """
        self._stations = stations

    # ------------------------------------------------------------------
    # Arrangement
    # ------------------------------------------------------------------

    def arrange_bay(
        self,
        bay: str,
        device_type: str,
        pattern: str = "grid",
        spacing: float | None = None,
    ) -> dict:
        """Reposition every station of a bay using a layout pattern.

        Stations are taken in station-number order; the i-th generated
        position goes to the i-th station.

        Raises:
            NotFoundError: If the bay has no active stations.
        """
        stations = self._stations.find(device_type, bay=bay, order_by="number")
        if not stations:
            raise NotFoundError(f"No stations found in bay {bay}")

        positions = generate_positions(pattern, len(stations), spacing)
        for station, position in zip(stations, positions):
            station.position = position
            self._stations.save(station)

        logger.info("Arranged %d %s stations in bay %s (%s)", len(stations), device_type, bay, pattern)
        return {
            "message": f"Arranged {len(stations)} stations in {pattern} pattern",
            "updated_stations": len(stations),
        }

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_layout(self, device_type: str, bay: str | None = None) -> dict:
        """Report overlapping, duplicate-numbered and too-close stations.

        Read-only. Overlap compares positions rounded to whole pixels;
        too-close compares exact distances strictly between 0 and
        ``MIN_STATION_DISTANCE``.
        """
        stations = self._stations.find(device_type, bay=bay)
        issues: list[dict] = []

        seen_positions: dict[tuple[int, int], Station] = {}
        for station in stations:
            key = (_round_half_up(station.position.x), _round_half_up(station.position.y))
            existing = seen_positions.get(key)
            if existing is None:
                seen_positions[key] = station
                continue
            issues.append({
                "type": "overlap",
                "stations": [existing.station_number, station.station_number],
                "position": station.position.to_dict(),
                "message": (
                    f"Stations {existing.station_number} and "
                    f"{station.station_number} overlap"
                ),
            })

        seen_numbers: dict[int, Station] = {}
        for station in stations:
            if station.station_number is None:
                continue
            existing = seen_numbers.get(station.station_number)
            if existing is None:
                seen_numbers[station.station_number] = station
                continue
            issues.append({
                "type": "duplicate_number",
                "stations": [existing.id, station.id],
                "station_number": station.station_number,
                "message": f"Duplicate station number {station.station_number}",
            })

        for i, first in enumerate(stations):
            for second in stations[i + 1:]:
                distance = _distance(first.position, second.position)
                if 0 < distance < MIN_STATION_DISTANCE:
                    issues.append({
                        "type": "too_close",
                        "stations": [first.station_number, second.station_number],
                        "distance": _round_half_up(distance),
                        "message": (
                            f"Stations {first.station_number} and {second.station_number} "
                            f"are too close ({_round_half_up(distance)}px)"
                        ),
                    })

        summary = {
            "overlaps": sum(1 for issue in issues if issue["type"] == "overlap"),
            "duplicates": sum(1 for issue in issues if issue["type"] == "duplicate_number"),
            "too_close": sum(1 for issue in issues if issue["type"] == "too_close"),
        }
        return {
            "valid": not issues,
            "total_stations": len(stations),
            "issues": issues,
            "summary": summary,
        }

    def auto_fix_layout(self, device_type: str, bay: str | None = None) -> dict:
        """Nudge stations to clear overlap and too-close issues.

        Works from a fresh validation report: every overlap moves the second
        station ``FIX_DISTANCE`` to the right, then every too-close pair puts
        the second station exactly ``FIX_DISTANCE`` from the first along the
        line between them. Fixes run in report order and re-read stations
        each time, so one station may move several times. This is best
        effort; callers re-run it until validation is clean and there is no
        convergence guarantee.
        """
        report = self.validate_layout(device_type, bay)
        fixed_issues: list[str] = []

        for issue in report["issues"]:
            if issue["type"] != "overlap":
                continue
            _, second_number = issue["stations"]
            second = self._lookup(second_number, device_type)
            if second is None:
                continue
            second.position = Position(second.position.x + FIX_DISTANCE, second.position.y)
            self._stations.save(second)
            fixed_issues.append(f"Moved station {second_number} to resolve overlap")

        for issue in report["issues"]:
            if issue["type"] != "too_close":
                continue
            first_number, second_number = issue["stations"]
            first = self._lookup(first_number, device_type)
            second = self._lookup(second_number, device_type)
            if first is None or second is None:
                continue
            angle = math.atan2(
                second.position.y - first.position.y,
                second.position.x - first.position.x,
            )
            second.position = Position(
                first.position.x + math.cos(angle) * FIX_DISTANCE,
                first.position.y + math.sin(angle) * FIX_DISTANCE,
            )
            self._stations.save(second)
            fixed_issues.append(f"Moved station {second_number} to maintain minimum distance")

        if fixed_issues:
            logger.info("Auto-fix moved %d %s stations", len(fixed_issues), device_type)
        return {
            "fixed_issues": fixed_issues,
            "message": f"Fixed {len(fixed_issues)} layout issues",
        }

    def _lookup(self, station_number: int | None, device_type: str) -> Station | None:
        if station_number is None:
            logger.warning("Skipping layout fix for an unnumbered %s station", device_type)
            return None
        return self._stations.find_by_number(station_number, device_type)

    # ------------------------------------------------------------------
    # Duplication and templates
    # ------------------------------------------------------------------

    def duplicate_bay(
        self,
        source_bay: str,
        target_bay: str,
        device_type: str,
        copy_devices: bool = False,
        overwrite: bool = False,
    ) -> dict:
        """Copy every station of ``source_bay`` into ``target_bay``.

        New stations get fresh numbers after the current maximum. Devices
        are only copied when ``copy_devices`` is set, and the copy's serial
        gets a ``_COPY_<millis>`` suffix.

        Raises:
            ConflictError: If the target bay has stations and ``overwrite``
                is not set.
            NotFoundError: If the source bay has no stations.
        """
        if not overwrite and self._stations.exists_in_bay(target_bay, device_type):
            raise ConflictError(f"Bay {target_bay} already exists")

        sources = self._stations.find(device_type, bay=source_bay, order_by="number")
        if not sources:
            raise NotFoundError(f"Source bay {source_bay} not found or empty")

        if overwrite:
            replaced = self._stations.deactivate_bay(target_bay, device_type)
            if replaced:
                logger.info("Deactivated %d stations in bay %s before overwrite", replaced, target_bay)

        first_number = self._stations.max_station_number(device_type) + 1
        stamp = int(time.time() * 1000)
        created = []
        for offset, source in enumerate(sources):
            station = Station(
                device_type=device_type,
                bay=target_bay,
                station_number=first_number + offset,
                position=Position(source.position.x, source.position.y),
            )
            if copy_devices and source.has_device:
                station.device = Device(
                    serial_number=f"{source.device.serial_number}_COPY_{stamp}",
                    brand=source.device.brand,
                    model=source.device.model,
                    notes=source.device.notes,
                )
            created.append(self._stations.insert(station))

        logger.info("Duplicated bay %s to %s (%d stations)", source_bay, target_bay, len(created))
        return {
            "message": f"Duplicated bay {source_bay} to {target_bay}",
            "source_stations": len(sources),
            "created_stations": len(created),
            "new_stations": created,
        }

    def export_bay_template(self, bay: str, device_type: str) -> dict:
        """Describe a bay's layout relative to its top-left station.

        Station numbers, devices and the bay name are not part of the
        layout, so the template can be applied under any name.

        Raises:
            NotFoundError: If the bay has no stations.
        """
        stations = self._stations.find(device_type, bay=bay, order_by="number")
        if not stations:
            raise NotFoundError(f"Bay {bay} not found or empty")

        min_x = min(s.position.x for s in stations)
        min_y = min(s.position.y for s in stations)
        return {
            "name": bay,
            "device_type": device_type,
            "station_count": len(stations),
            "created_at": datetime.now(),
            "layout": [
                {
                    "index": index,
                    "relative_position": {
                        "x": station.position.x - min_x,
                        "y": station.position.y - min_y,
                    },
                }
                for index, station in enumerate(stations, start=1)
            ],
        }

    def create_bay_from_template(
        self,
        template: dict,
        new_bay_name: str,
        device_type: str,
        start_position: Position | None = None,
    ) -> dict:
        """Create a populated bay from an exported template.

        Raises:
            InvalidRequestError: If the template is for another device type.
            ConflictError: If ``new_bay_name`` already has stations.
        """
        if template.get("device_type") != device_type:
            raise InvalidRequestError(
                f"Template is for {template.get('device_type')}, not {device_type}"
            )
        if self._stations.exists_in_bay(new_bay_name, device_type):
            raise ConflictError(f"Bay {new_bay_name} already exists")

        origin = start_position or Position()
        first_number = self._stations.max_station_number(device_type) + 1
        created = []
        for offset, item in enumerate(template.get("layout", [])):
            relative = item["relative_position"]
            station = Station(
                device_type=device_type,
                bay=new_bay_name,
                station_number=first_number + offset,
                position=Position(origin.x + relative["x"], origin.y + relative["y"]),
            )
            created.append(self._stations.insert(station))

        logger.info("Created bay %s from template (%d stations)", new_bay_name, len(created))
        return {
            "message": f"Created bay {new_bay_name} from template",
            "created_stations": len(created),
            "new_stations": created,
        }

    def clone_stations(
        self,
        station_ids: list[str],
        target_bay: str | None = None,
        offset_x: float = 100,
        offset_y: float = 50,
    ) -> dict:
        """Clone individual stations, shifted by an offset, without their devices.

        Raises:
            NotFoundError: If none of the ids match an active station.
        """
        sources = self._stations.get_many(station_ids)
        if not sources:
            raise NotFoundError("No stations found with provided IDs")

        next_numbers: dict[str, int] = {}
        cloned = []
        for source in sources:
            if source.device_type not in next_numbers:
                next_numbers[source.device_type] = (
                    self._stations.max_station_number(source.device_type) + 1
                )
            station = Station(
                device_type=source.device_type,
                bay=target_bay or source.bay,
                station_number=next_numbers[source.device_type],
                position=Position(source.position.x + offset_x, source.position.y + offset_y),
            )
            next_numbers[source.device_type] += 1
            cloned.append(self._stations.insert(station))

        return {"message": f"Cloned {len(cloned)} stations", "cloned_stations": cloned}

    # ------------------------------------------------------------------
    # Numbering
    # ------------------------------------------------------------------

    def renumber_bay(self, bay: str, device_type: str, start_number: int | None = None) -> dict:
        """Number a bay's stations consecutively in reading order.

        Reading order is top-to-bottom, then left-to-right. Only stations
        whose number changes are written. Numbers already used by stations
        outside the bay are not checked up front; such a collision is
        rejected by the store and leaves every station of the bay with the
        number it had before the call.

        Raises:
            NotFoundError: If the bay has no stations.
        """
        stations = self._stations.find(device_type, bay=bay, order_by="position")
        if not stations:
            raise NotFoundError(f"No stations found in bay {bay}")

        if start_number is None:
            start_number = self._stations.max_station_number(device_type) + 1

        changes = [
            (station, start_number + offset)
            for offset, station in enumerate(stations)
            if station.station_number != start_number + offset
        ]

        # Old numbers are released first so stations swapping numbers within
        # the bay do not trip the uniqueness index. A collision rolls the
        # whole batch back, so no station is left without its number.
        updates = []
        with self._stations.transaction():
            for station, _ in changes:
                if station.station_number is not None:
                    self._stations.save(replace(station, station_number=None))

            for station, new_number in changes:
                self._stations.save(replace(station, station_number=new_number))
                updates.append({"old_number": station.station_number, "new_number": new_number})

        logger.info("Renumbered %d stations in bay %s", len(updates), bay)
        return {
            "message": f"Renumbered {len(updates)} stations in bay {bay}",
            "updates": updates,
        }

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_comprehensive_stats(self, device_type: str) -> dict:
        total = self._stations.count(device_type)
        registered = self._stations.count(device_type, registered=True)
        bay_stats = self._stations.bay_summary(device_type)
        bays = [entry["bay"] for entry in bay_stats]
        return {
            "total_stations": total,
            "registered_devices": registered,
            "empty_stations": total - registered,
            "registration_rate": _registration_rate(registered, total),
            "bay_count": len(bays),
            "bays": bays,
            "bay_stats": bay_stats,
        }

    def get_bay_stats(self, bay: str, device_type: str) -> dict:
        stations = self._stations.find(device_type, bay=bay)
        total = len(stations)
        registered = sum(1 for s in stations if s.has_device)
        bounds = None
        if stations:
            xs = [s.position.x for s in stations]
            ys = [s.position.y for s in stations]
            bounds = {"min_x": min(xs), "max_x": max(xs), "min_y": min(ys), "max_y": max(ys)}
        return {
            "bay_name": bay,
            "device_type": device_type,
            "total_stations": total,
            "registered_devices": registered,
            "empty_stations": total - registered,
            "registration_rate": _registration_rate(registered, total),
            "bounds": bounds,
            "last_updated": datetime.now(),
        }

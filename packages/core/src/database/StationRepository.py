"""Persistence for station records."""

import sqlite3
from contextlib import AbstractContextManager
from datetime import datetime

from database.QueryExecutor import QueryExecutor
from inventory.models import Device, Position, Station

_COLUMNS = (
    "id, station_number, bay, device_type, position_x, position_y, "
    "device_serial_number, device_brand, device_model, device_notes, "
    "device_registered_at, device_updated_at, is_active, created_at, updated_at"
)

_ORDERINGS = {
    "bay": "bay ASC, station_number ASC",
    "number": "station_number ASC",
    "position": "position_y ASC, position_x ASC",
}

_REGISTERED = "device_serial_number IS NOT NULL"


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _row_to_station(row: sqlite3.Row) -> Station:
    device = None
    if row["device_serial_number"] is not None:
        device = Device(
            serial_number=row["device_serial_number"],
            brand=row["device_brand"] or "",
            model=row["device_model"] or "",
            notes=row["device_notes"] or "",
            registered_at=_parse_ts(row["device_registered_at"]) or datetime.now(),
            updated_at=_parse_ts(row["device_updated_at"]) or datetime.now(),
        )
    return Station(
        id=row["id"],
        station_number=row["station_number"],
        bay=row["bay"],
        device_type=row["device_type"],
        position=Position(row["position_x"], row["position_y"]),
        device=device,
        is_active=bool(row["is_active"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _station_params(station: Station) -> dict:
    device = station.device
    return {
        "id": station.id,
        "station_number": station.station_number,
        "bay": station.bay,
        "device_type": station.device_type,
        "position_x": float(station.position.x),
        "position_y": float(station.position.y),
        "device_serial_number": device.serial_number if device else None,
        "device_brand": device.brand if device else None,
        "device_model": device.model if device else None,
        "device_notes": device.notes if device else None,
        "device_registered_at": device.registered_at.isoformat() if device else None,
        "device_updated_at": device.updated_at.isoformat() if device else None,
        "is_active": int(station.is_active),
        "created_at": station.created_at.isoformat(),
        "updated_at": station.updated_at.isoformat(),
    }


class StationRepository:
    """Reads and writes stations.

    Every method that filters by device type only sees active stations
    unless it says otherwise. Each write is its own round-trip.
    """

    def __init__(self, executor: QueryExecutor) -> None:
        self._executor = executor

    def transaction(self) -> AbstractContextManager[None]:
        """Group the writes made inside the block; see ``QueryExecutor.transaction``."""
        return self._executor.transaction()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find(
        self,
        device_type: str,
        bay: str | None = None,
        has_device: bool | None = None,
        order_by: str = "bay",
    ) -> list[Station]:
        """Return active stations of a device type.

        Args:
            device_type: Partition to search.
            bay: Restrict to one bay name.
            has_device: True for registered stations only, False for empty ones.
            order_by: "bay" (bay, number), "number" or "position" (y, x).
        """
        clauses = ["device_type = :device_type", "is_active = 1"]
        params: dict = {"device_type": device_type}
        if bay is not None:
            clauses.append("bay = :bay")
            params["bay"] = bay
        if has_device is True:
            clauses.append(_REGISTERED)
        elif has_device is False:
            clauses.append("device_serial_number IS NULL")

        query = (
            f"SELECT {_COLUMNS} FROM stations WHERE {' AND '.join(clauses)} "
            f"ORDER BY {_ORDERINGS[order_by]}"
        )
        return [_row_to_station(r) for r in self._executor.fetch_all(query, params)]

    def get(self, station_id: str, include_inactive: bool = False) -> Station | None:
        query = f"SELECT {_COLUMNS} FROM stations WHERE id = ?"
        if not include_inactive:
            query += " AND is_active = 1"
        row = self._executor.fetch_one(query, (station_id,))
        return _row_to_station(row) if row else None

    def get_many(self, station_ids: list[str]) -> list[Station]:
        """Return the active stations among ``station_ids``, in the given order."""
        if not station_ids:
            return []
        placeholders = ", ".join("?" for _ in station_ids)
        rows = self._executor.fetch_all(
            f"SELECT {_COLUMNS} FROM stations WHERE is_active = 1 AND id IN ({placeholders})",
            tuple(station_ids),
        )
        by_id = {row["id"]: _row_to_station(row) for row in rows}
        return [by_id[i] for i in dict.fromkeys(station_ids) if i in by_id]

    def find_by_number(self, station_number: int, device_type: str) -> Station | None:
        row = self._executor.fetch_one(
            f"SELECT {_COLUMNS} FROM stations "
            "WHERE station_number = ? AND device_type = ? AND is_active = 1",
            (station_number, device_type),
        )
        return _row_to_station(row) if row else None

    def find_by_serial(self, serial_number: str, device_type: str) -> list[Station]:
        """Return every active station holding this exact serial; there may be several."""
        rows = self._executor.fetch_all(
            f"SELECT {_COLUMNS} FROM stations "
            "WHERE device_serial_number = ? AND device_type = ? AND is_active = 1 "
            "ORDER BY station_number ASC",
            (serial_number, device_type),
        )
        return [_row_to_station(r) for r in rows]

    def search(
        self,
        device_type: str,
        serial_number: str | None = None,
        station_number: int | None = None,
        bay: str | None = None,
    ) -> list[Station]:
        """Search active stations; ``serial_number`` is a case-insensitive substring."""
        clauses = ["device_type = :device_type", "is_active = 1"]
        params: dict = {"device_type": device_type}
        if serial_number:
            escaped = (
                serial_number.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            )
            clauses.append("device_serial_number LIKE :serial ESCAPE '\\'")
            params["serial"] = f"%{escaped}%"
        if station_number is not None:
            clauses.append("station_number = :station_number")
            params["station_number"] = station_number
        if bay:
            clauses.append("bay = :bay")
            params["bay"] = bay

        query = (
            f"SELECT {_COLUMNS} FROM stations WHERE {' AND '.join(clauses)} "
            "ORDER BY station_number ASC"
        )
        return [_row_to_station(r) for r in self._executor.fetch_all(query, params)]

    def count(self, device_type: str, registered: bool | None = None, bay: str | None = None) -> int:
        clauses = ["device_type = ?", "is_active = 1"]
        params: list = [device_type]
        if registered:
            clauses.append(_REGISTERED)
        if bay is not None:
            clauses.append("bay = ?")
            params.append(bay)
        row = self._executor.fetch_one(
            f"SELECT COUNT(*) AS n FROM stations WHERE {' AND '.join(clauses)}",
            tuple(params),
        )
        return row["n"] if row else 0

    def exists_in_bay(self, bay: str, device_type: str) -> bool:
        return self.count(device_type, bay=bay) > 0

    def max_station_number(self, device_type: str) -> int:
        """Return the highest active station number for a device type, 0 when none."""
        row = self._executor.fetch_one(
            "SELECT MAX(station_number) AS n FROM stations "
            "WHERE device_type = ? AND is_active = 1 AND station_number IS NOT NULL",
            (device_type,),
        )
        return (row["n"] or 0) if row else 0

    def bay_summary(self, device_type: str) -> list[dict]:
        """Per-bay totals for active stations, sorted by bay (unassigned first)."""
        rows = self._executor.fetch_all(
            "SELECT bay, COUNT(*) AS total, "
            f"SUM(CASE WHEN {_REGISTERED} THEN 1 ELSE 0 END) AS registered "
            "FROM stations WHERE device_type = ? AND is_active = 1 "
            "GROUP BY bay ORDER BY bay ASC",
            (device_type,),
        )
        return [
            {
                "bay": row["bay"],
                "total_stations": row["total"],
                "registered_devices": row["registered"] or 0,
            }
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, station: Station) -> Station:
        self._executor.insert(
            f"INSERT INTO stations ({_COLUMNS}) VALUES ("
            ":id, :station_number, :bay, :device_type, :position_x, :position_y, "
            ":device_serial_number, :device_brand, :device_model, :device_notes, "
            ":device_registered_at, :device_updated_at, :is_active, :created_at, :updated_at)",
            _station_params(station),
        )
        return station

    def save(self, station: Station) -> Station:
        """Persist every field of an existing station and bump ``updated_at``."""
        station.updated_at = datetime.now()
        if station.device is not None:
            station.device.updated_at = station.updated_at
        self._executor.execute(
            "UPDATE stations SET station_number = :station_number, bay = :bay, "
            "position_x = :position_x, position_y = :position_y, "
            "device_serial_number = :device_serial_number, device_brand = :device_brand, "
            "device_model = :device_model, device_notes = :device_notes, "
            "device_registered_at = :device_registered_at, "
            "device_updated_at = :device_updated_at, is_active = :is_active, "
            "updated_at = :updated_at WHERE id = :id",
            _station_params(station),
        )
        return station

    def deactivate_bay(self, bay: str, device_type: str) -> int:
        """Soft-delete every active station in a bay; returns how many."""
        return self._executor.execute(
            "UPDATE stations SET is_active = 0, updated_at = ? "
            "WHERE bay = ? AND device_type = ? AND is_active = 1",
            (datetime.now().isoformat(), bay, device_type),
        )

    def rename_bay(self, old_name: str, new_name: str, device_type: str) -> int:
        """Point every station of ``old_name`` at ``new_name``; returns how many."""
        return self._executor.execute(
            "UPDATE stations SET bay = ?, updated_at = ? WHERE bay = ? AND device_type = ?",
            (new_name, datetime.now().isoformat(), old_name, device_type),
        )

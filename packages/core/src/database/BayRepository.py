"""Persistence for bay records."""

import json
import sqlite3
from datetime import datetime

from database.QueryExecutor import QueryExecutor
from inventory.models import Bay, BayLifecycle, Position, Size

_COLUMNS = (
    "b.id, b.name, b.device_type, b.position_x, b.position_y, b.width, b.height, "
    "b.color, b.lifecycle, b.metadata, b.created_at, b.updated_at"
)

# Active stations referencing the bay by name.
_STATIONS_COUNT = (
    "(SELECT COUNT(*) FROM stations s WHERE s.bay = b.name "
    "AND s.device_type = b.device_type AND s.is_active = 1) AS stations_count"
)

_SELECT = f"SELECT {_COLUMNS}, {_STATIONS_COUNT} FROM bays b"


def _row_to_bay(row: sqlite3.Row) -> Bay:
    return Bay(
        id=row["id"],
        name=row["name"],
        device_type=row["device_type"],
        position=Position(row["position_x"], row["position_y"]),
        size=Size(row["width"], row["height"]),
        color=row["color"],
        lifecycle=BayLifecycle(row["lifecycle"]),
        metadata=json.loads(row["metadata"]) if row["metadata"] else {},
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
        stations_count=row["stations_count"],
    )


def _bay_params(bay: Bay) -> dict:
    return {
        "id": bay.id,
        "name": bay.name,
        "device_type": bay.device_type,
        "position_x": float(bay.position.x),
        "position_y": float(bay.position.y),
        "width": float(bay.size.width),
        "height": float(bay.size.height),
        "color": bay.color,
        "lifecycle": bay.lifecycle.value,
        "metadata": json.dumps(bay.metadata, default=str),
        "created_at": bay.created_at.isoformat(),
        "updated_at": bay.updated_at.isoformat(),
    }


class BayRepository:
    """Reads and writes bays, including soft-deleted ones."""

    def __init__(self, executor: QueryExecutor) -> None:
        self._executor = executor

    def find_active(self, device_type: str) -> list[Bay]:
        rows = self._executor.fetch_all(
            f"{_SELECT} WHERE b.device_type = ? AND b.lifecycle = ? ORDER BY b.name ASC",
            (device_type, BayLifecycle.ACTIVE.value),
        )
        return [_row_to_bay(r) for r in rows]

    def get(self, bay_id: str) -> Bay | None:
        row = self._executor.fetch_one(f"{_SELECT} WHERE b.id = ?", (bay_id,))
        return _row_to_bay(row) if row else None

    def get_many(self, bay_ids: list[str]) -> list[Bay]:
        if not bay_ids:
            return []
        placeholders = ", ".join("?" for _ in bay_ids)
        rows = self._executor.fetch_all(
            f"{_SELECT} WHERE b.id IN ({placeholders})", tuple(bay_ids)
        )
        by_id = {row["id"]: _row_to_bay(row) for row in rows}
        return [by_id[i] for i in dict.fromkeys(bay_ids) if i in by_id]

    def find_by_name(self, name: str, device_type: str) -> Bay | None:
        """Return the bay with this name in any lifecycle state."""
        row = self._executor.fetch_one(
            f"{_SELECT} WHERE b.name = ? AND b.device_type = ?",
            (name.strip().upper(), device_type),
        )
        return _row_to_bay(row) if row else None

    def insert(self, bay: Bay) -> Bay:
        self._executor.insert(
            "INSERT INTO bays (id, name, device_type, position_x, position_y, width, "
            "height, color, lifecycle, metadata, created_at, updated_at) VALUES ("
            ":id, :name, :device_type, :position_x, :position_y, :width, :height, "
            ":color, :lifecycle, :metadata, :created_at, :updated_at)",
            _bay_params(bay),
        )
        return bay

    def save(self, bay: Bay) -> Bay:
        bay.updated_at = datetime.now()
        self._executor.execute(
            "UPDATE bays SET name = :name, position_x = :position_x, "
            "position_y = :position_y, width = :width, height = :height, color = :color, "
            "lifecycle = :lifecycle, metadata = :metadata, updated_at = :updated_at "
            "WHERE id = :id",
            _bay_params(bay),
        )
        return bay

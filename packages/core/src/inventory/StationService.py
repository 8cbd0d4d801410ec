"""Station CRUD: creation, numbering, device registration and soft deletion."""

import logging
from datetime import datetime

from database.StationRepository import StationRepository
from inventory.errors import ConflictError, NotFoundError
from inventory.models import Device, Position, Station

logger = logging.getLogger(__name__)


class StationService:
    """Single-station operations used by the API and the CLI."""

    def __init__(self, stations: StationRepository) -> None:
        self._stations = stations

    def list_stations(
        self,
        device_type: str,
        bay: str | None = None,
        has_device: bool | None = None,
    ) -> list[Station]:
        return self._stations.find(device_type, bay=bay, has_device=has_device)

    def get_station(self, station_id: str) -> Station:
        """Return an active station.

        Raises:
            NotFoundError: If no active station has this id.
        """
        station = self._stations.get(station_id)
        if station is None:
            raise NotFoundError("Station not found")
        return station

    def search(
        self,
        device_type: str,
        serial_number: str | None = None,
        station_number: int | None = None,
        bay: str | None = None,
    ) -> list[Station]:
        return self._stations.search(device_type, serial_number, station_number, bay)

    def find_by_serial(self, serial_number: str, device_type: str) -> list[Station]:
        return self._stations.find_by_serial(serial_number, device_type)

    def next_station_number(self, device_type: str) -> int:
        return self._stations.max_station_number(device_type) + 1

    def create_station(
        self,
        device_type: str,
        position: Position | None = None,
        bay: str | None = None,
    ) -> Station:
        station = Station(device_type=device_type, position=position or Position(), bay=bay or None)
        self._stations.insert(station)
        logger.info("Created %s station %s", device_type, station.id)
        return station

    def bulk_create(self, entries: list[dict]) -> list[Station]:
        """Create stations one after another.

        Each entry holds ``device_type``, ``position`` and optionally ``bay``.
        A failure stops the batch; stations created before it remain.
        """
        created = []
        for entry in entries:
            created.append(
                self.create_station(entry["device_type"], entry.get("position"), entry.get("bay"))
            )
        return created

    def assign_number(self, station_id: str, station_number: int) -> Station:
        """Give a station a number.

        Raises:
            NotFoundError: If the station does not exist.
            ConflictError: If another active station of the same device type
                already has the number.
        """
        station = self.get_station(station_id)
        holder = self._stations.find_by_number(station_number, station.device_type)
        if holder is not None and holder.id != station.id:
            raise ConflictError(
                f"Station number {station_number} already exists for {station.device_type}"
            )
        station.station_number = station_number
        return self._stations.save(station)

    def register_device(
        self,
        station_id: str,
        serial_number: str,
        brand: str = "",
        model: str = "",
        notes: str = "",
    ) -> Station:
        """Attach a device to a station. Duplicate serials are accepted."""
        station = self.get_station(station_id)
        station.device = Device(
            serial_number=serial_number,
            brand=brand or "",
            model=model or "",
            notes=notes or "",
            registered_at=datetime.now(),
        )
        self._stations.save(station)
        logger.info("Registered device %s on station %s", serial_number, station.display_number)
        return station

    def remove_device(self, station_id: str) -> Station:
        station = self.get_station(station_id)
        station.device = None
        return self._stations.save(station)

    def update_position(self, station_id: str, x: float, y: float) -> Station:
        station = self.get_station(station_id)
        station.position = Position(x, y)
        return self._stations.save(station)

    def assign_bay(self, station_id: str, bay: str | None) -> Station:
        station = self.get_station(station_id)
        station.bay = bay or None
        return self._stations.save(station)

    def delete_station(self, station_id: str) -> None:
        """Soft-delete a station; it is kept for history but no longer listed."""
        station = self.get_station(station_id)
        station.is_active = False
        self._stations.save(station)
        logger.info("Deactivated station %s", station.id)

    def copy_stations(self, station_ids: list[str]) -> dict:
        """Clipboard payload for the given stations; nothing is written.

        Raises:
            NotFoundError: If none of the ids is an active station.
        """
        stations = self._stations.get_many(station_ids)
        if not stations:
            raise NotFoundError("No stations found with provided IDs")
        return {
            "type": "station",
            "items": stations,
            "copied_at": datetime.now(),
            "count": len(stations),
        }

"""Bay lifecycle: creation and reactivation, renaming, moving, copying and deletion."""

import logging
from datetime import datetime

from database.BayRepository import BayRepository
from database.StationRepository import StationRepository
from inventory.errors import ConflictError, InvalidRequestError, NotFoundError
from inventory.models import (
    DEFAULT_BAY_COLOR,
    Bay,
    Position,
    Size,
    Station,
)

logger = logging.getLogger(__name__)


class BayService:
    """Bay operations. Station membership is by bay name and device type."""

    def __init__(self, bays: BayRepository, stations: StationRepository) -> None:
        self._bays = bays
        self._stations = stations

    def list_bays(self, device_type: str) -> list[Bay]:
        return self._bays.find_active(device_type)

    def get_bay(self, bay_id: str) -> Bay:
        """Return an active bay.

        Raises:
            NotFoundError: If no active bay has this id.
        """
        bay = self._bays.get(bay_id)
        if bay is None or not bay.is_active:
            raise NotFoundError("Bay not found")
        return bay

    def get_bay_with_stations(self, bay_id: str) -> tuple[Bay, list[Station]]:
        bay = self.get_bay(bay_id)
        stations = self._stations.find(bay.device_type, bay=bay.name, order_by="number")
        return bay, stations

    def create_bay(
        self,
        name: str,
        device_type: str,
        position: Position,
        size: Size | None = None,
        color: str | None = None,
        metadata: dict | None = None,
    ) -> tuple[Bay, bool]:
        """Create a bay, or bring back a deleted bay of the same name.

        Returns:
            The bay and whether it was reactivated rather than inserted.

        Raises:
            ConflictError: If an active bay already has this name.
        """
        existing = self._bays.find_by_name(name, device_type)
        if existing is not None:
            # Raises when the existing bay is still active.
            existing.reactivate()
            existing.position = position
            existing.size = size or Size()
            existing.color = color or DEFAULT_BAY_COLOR
            existing.metadata = metadata or {}
            self._bays.save(existing)
            logger.info("Reactivated bay %s for %s", existing.name, device_type)
            return existing, True

        bay = Bay(
            name=name,
            device_type=device_type,
            position=position,
            size=size or Size(),
            color=color or DEFAULT_BAY_COLOR,
            metadata=metadata or {},
        )
        self._bays.insert(bay)
        logger.info("Created bay %s for %s", bay.name, device_type)
        return bay, False

    def update_bay(
        self,
        bay_id: str,
        name: str | None = None,
        position: dict | None = None,
        size: dict | None = None,
        color: str | None = None,
        metadata: dict | None = None,
    ) -> Bay:
        """Update a bay's fields. Renaming moves its stations to the new name.

        ``position`` and ``size`` are partial: missing keys keep their value.

        Raises:
            NotFoundError: If the bay does not exist.
            ConflictError: If another active bay already has the new name.
        """
        bay = self.get_bay(bay_id)

        if name is not None and name.strip().upper() != bay.name:
            new_name = name.strip().upper()
            clash = self._bays.find_by_name(new_name, bay.device_type)
            if clash is not None and clash.id != bay.id:
                # A deleted bay still owns its name until it is reactivated.
                raise ConflictError(f"Bay {name} already exists for {bay.device_type}")
            moved = self._stations.rename_bay(bay.name, new_name, bay.device_type)
            logger.info("Renamed bay %s to %s (%d stations moved)", bay.name, new_name, moved)
            bay.name = new_name

        if position:
            bay.position = Position(
                position.get("x", bay.position.x), position.get("y", bay.position.y)
            )
        if size:
            bay.size = Size(size.get("width", bay.size.width), size.get("height", bay.size.height))
        if color is not None:
            bay.color = color
        if metadata is not None:
            bay.metadata = metadata
        return self._bays.save(bay)

    def update_position(self, bay_id: str, x: float, y: float) -> Bay:
        bay = self.get_bay(bay_id)
        bay.position = Position(x, y)
        return self._bays.save(bay)

    def bulk_update_positions(self, moves: list[dict]) -> int:
        """Move several bays; unknown ids are skipped. Returns how many moved."""
        moved = 0
        for move in moves:
            bay = self._bays.get(move["id"])
            if bay is None or not bay.is_active:
                continue
            bay.position = Position(move["x"], move["y"])
            self._bays.save(bay)
            moved += 1
        return moved

    def delete_bay(self, bay_id: str) -> None:
        """Soft-delete an empty bay.

        Raises:
            NotFoundError: If the bay does not exist.
            ConflictError: If active stations still reference the bay.
        """
        bay = self.get_bay(bay_id)
        if bay.stations_count > 0:
            raise ConflictError(
                f"Cannot delete bay with {bay.stations_count} stations. "
                "Please remove or reassign stations first."
            )
        bay.soft_delete()
        self._bays.save(bay)
        logger.info("Deleted bay %s for %s", bay.name, bay.device_type)

    def bulk_delete(self, bay_ids: list[str]) -> int:
        """Soft-delete several bays, or none if any of them still has stations.

        Raises:
            ConflictError: Listing every bay that still has stations.
        """
        bays = [bay for bay in self._bays.get_many(bay_ids) if bay.is_active]
        populated = [
            {"name": bay.name, "station_count": bay.stations_count}
            for bay in bays
            if bay.stations_count > 0
        ]
        if populated:
            details = ", ".join(f"{p['name']} ({p['station_count']})" for p in populated)
            raise ConflictError(f"Cannot delete bays with stations: {details}")

        for bay in bays:
            bay.soft_delete()
            self._bays.save(bay)
        return len(bays)

    def duplicate_bay_record(
        self,
        bay_id: str,
        new_name: str | None = None,
        offset: Position | None = None,
        include_stations: bool = False,
    ) -> tuple[Bay, list[Station]]:
        """Copy a bay under a free name, optionally with empty copies of its stations.

        The copy is named ``new_name`` or ``<NAME>_DUPLICATE``, with a
        numeric suffix added until the name is free.
        """
        source = self.get_bay(bay_id)
        offset = offset or Position(50, 50)

        candidate = (new_name or f"{source.name}_DUPLICATE").upper()
        counter = 1
        while self._bays.find_by_name(candidate, source.device_type) is not None:
            base = new_name or f"{source.name}_DUPLICATE"
            candidate = f"{base}_{counter}".upper()
            counter += 1

        bay = Bay(
            name=candidate,
            device_type=source.device_type,
            position=Position(source.position.x + offset.x, source.position.y + offset.y),
            size=Size(source.size.width, source.size.height),
            color=source.color,
            metadata={
                **source.metadata,
                "duplicated_from": source.id,
                "duplicated_at": datetime.now().isoformat(),
            },
        )
        self._bays.insert(bay)

        stations: list[Station] = []
        if include_stations:
            originals = self._stations.find(source.device_type, bay=source.name, order_by="number")
            first_number = self._stations.max_station_number(source.device_type) + 1
            for index, original in enumerate(originals):
                station = Station(
                    device_type=original.device_type,
                    bay=bay.name,
                    station_number=first_number + index,
                    position=Position(original.position.x + offset.x, original.position.y + offset.y),
                )
                stations.append(self._stations.insert(station))
        bay.stations_count = len(stations)

        logger.info("Duplicated bay %s as %s with %d stations", source.name, bay.name, len(stations))
        return bay, stations

    # ------------------------------------------------------------------
    # Clipboard
    # ------------------------------------------------------------------

    def copy_bays(self, bay_ids: list[str]) -> dict:
        """Clipboard payload for the given bays; nothing is written.

        Raises:
            NotFoundError: If none of the ids is an active bay.
        """
        bays = [bay for bay in self._bays.get_many(bay_ids) if bay.is_active]
        if not bays:
            raise NotFoundError("No bays found with provided IDs")
        return {"type": "bay", "items": bays, "copied_at": datetime.now(), "count": len(bays)}

    def paste_bays(self, kind: str, items: list[Bay], position: Position | None = None) -> list[Bay]:
        """Create a new bay for every copied one.

        Copies are named ``<NAME>_COPY`` (then ``_COPY_1``, ``_COPY_2``, ...)
        and placed at the source position plus ``position``, each one
        100 right and 20 down from the previous. Stations are not copied.

        Raises:
            InvalidRequestError: If the clipboard does not hold bays.
        """
        if kind != "bay":
            raise InvalidRequestError("Invalid data type for bay paste operation")
        position = position or Position(50, 50)

        created = []
        for index, source in enumerate(items):
            name = f"{source.name}_COPY"
            counter = 1
            while self._bays.find_by_name(name, source.device_type) is not None:
                name = f"{source.name}_COPY_{counter}"
                counter += 1

            bay = Bay(
                name=name,
                device_type=source.device_type,
                position=Position(
                    source.position.x + position.x + index * 100,
                    source.position.y + position.y + index * 20,
                ),
                size=Size(source.size.width, source.size.height),
                color=source.color or DEFAULT_BAY_COLOR,
                metadata={
                    **source.metadata,
                    "copied_from": source.id,
                    "copied_at": datetime.now().isoformat(),
                },
            )
            created.append(self._bays.insert(bay))

        logger.info("Pasted %d bays", len(created))
        return created

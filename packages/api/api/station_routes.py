"""Station routes: listing, search, creation, numbering and devices."""

from fastapi import APIRouter, Depends, status

from api.auth import require_api_key
from api.dependencies import get_layout_engine, get_station_service
from api.rate_limit import rate_limit
from api.schemas import (
    BayAssignment,
    BulkStationCreate,
    CloneStationsRequest,
    CloneStationsResponse,
    ComprehensiveStats,
    CopyStationsRequest,
    DeviceRegistration,
    DeviceType,
    MessageResponse,
    PositionUpdate,
    StationClipboard,
    StationCreate,
    StationNumberUpdate,
    StationSchema,
)
from inventory.StationService import StationService
from inventory.models import Position
from layout.LayoutEngine import LayoutEngine

router = APIRouter(prefix="/stations", tags=["stations"])


def to_station_schemas(stations) -> list[StationSchema]:
    return [StationSchema.model_validate(s) for s in stations]


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@router.get("/{device_type}", response_model=list[StationSchema])
async def list_stations(
    device_type: DeviceType,
    bay: str | None = None,
    has_device: bool | None = None,
    api_key: str = Depends(require_api_key),
    service: StationService = Depends(get_station_service),
):
    """List active stations of a device type, ordered by bay then number."""
    return to_station_schemas(service.list_stations(device_type, bay=bay, has_device=has_device))


@router.get("/{device_type}/search", response_model=list[StationSchema])
async def search_stations(
    device_type: DeviceType,
    serial_number: str | None = None,
    station_number: int | None = None,
    bay: str | None = None,
    api_key: str = Depends(require_api_key),
    service: StationService = Depends(get_station_service),
):
    """Search by partial serial number, exact station number or bay."""
    return to_station_schemas(service.search(device_type, serial_number, station_number, bay))


@router.get("/{device_type}/serial/{serial_number}", response_model=list[StationSchema])
async def find_by_serial(
    device_type: DeviceType,
    serial_number: str,
    api_key: str = Depends(require_api_key),
    service: StationService = Depends(get_station_service),
):
    return to_station_schemas(service.find_by_serial(serial_number, device_type))


@router.get("/{device_type}/next-number")
async def next_station_number(
    device_type: DeviceType,
    api_key: str = Depends(require_api_key),
    service: StationService = Depends(get_station_service),
):
    return {"next_number": service.next_station_number(device_type)}


@router.get("/{device_type}/comprehensive-stats", response_model=ComprehensiveStats)
async def comprehensive_stats(
    device_type: DeviceType,
    api_key: str = Depends(require_api_key),
    engine: LayoutEngine = Depends(get_layout_engine),
):
    return engine.get_comprehensive_stats(device_type)


@router.get("/id/{station_id}", response_model=StationSchema)
async def get_station(
    station_id: str,
    api_key: str = Depends(require_api_key),
    service: StationService = Depends(get_station_service),
):
    return StationSchema.model_validate(service.get_station(station_id))


@router.post("/copy", response_model=StationClipboard)
async def copy_stations(
    body: CopyStationsRequest,
    api_key: str = Depends(require_api_key),
    service: StationService = Depends(get_station_service),
):
    """Clipboard payload for the given stations; paste with /stations/clone-multiple."""
    clipboard = service.copy_stations(body.station_ids)
    return StationClipboard(
        items=to_station_schemas(clipboard["items"]),
        copied_at=clipboard["copied_at"],
        count=clipboard["count"],
    )


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


@router.post("", response_model=StationSchema, status_code=status.HTTP_201_CREATED)
async def create_station(
    body: StationCreate,
    api_key: str = Depends(rate_limit),
    service: StationService = Depends(get_station_service),
):
    """Create an unnumbered, empty station."""
    position = Position(body.position.x, body.position.y) if body.position else None
    station = service.create_station(body.device_type, position, body.bay)
    return StationSchema.model_validate(station)


@router.post("/bulk", response_model=list[StationSchema], status_code=status.HTTP_201_CREATED)
async def bulk_create_stations(
    body: BulkStationCreate,
    api_key: str = Depends(rate_limit),
    service: StationService = Depends(get_station_service),
):
    entries = [
        {
            "device_type": entry.device_type,
            "position": Position(entry.position.x, entry.position.y) if entry.position else None,
            "bay": entry.bay,
        }
        for entry in body.stations
    ]
    return to_station_schemas(service.bulk_create(entries))


@router.post(
    "/clone-multiple",
    response_model=CloneStationsResponse,
    status_code=status.HTTP_201_CREATED,
)
async def clone_stations(
    body: CloneStationsRequest,
    api_key: str = Depends(rate_limit),
    engine: LayoutEngine = Depends(get_layout_engine),
):
    """Clone stations by id, shifted by the offset, without their devices."""
    result = engine.clone_stations(body.station_ids, body.target_bay, body.offset_x, body.offset_y)
    return CloneStationsResponse(
        message=result["message"],
        cloned_stations=to_station_schemas(result["cloned_stations"]),
    )


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------


@router.patch("/{station_id}/number", response_model=StationSchema)
async def assign_number(
    station_id: str,
    body: StationNumberUpdate,
    api_key: str = Depends(rate_limit),
    service: StationService = Depends(get_station_service),
):
    return StationSchema.model_validate(service.assign_number(station_id, body.station_number))


@router.post("/{station_id}/device", response_model=StationSchema)
async def register_device(
    station_id: str,
    body: DeviceRegistration,
    api_key: str = Depends(rate_limit),
    service: StationService = Depends(get_station_service),
):
    station = service.register_device(
        station_id, body.serial_number, body.brand, body.model, body.notes
    )
    return StationSchema.model_validate(station)


@router.delete("/{station_id}/device", response_model=StationSchema)
async def remove_device(
    station_id: str,
    api_key: str = Depends(rate_limit),
    service: StationService = Depends(get_station_service),
):
    return StationSchema.model_validate(service.remove_device(station_id))


@router.patch("/{station_id}/position", response_model=StationSchema)
async def update_position(
    station_id: str,
    body: PositionUpdate,
    api_key: str = Depends(rate_limit),
    service: StationService = Depends(get_station_service),
):
    return StationSchema.model_validate(service.update_position(station_id, body.x, body.y))


@router.patch("/{station_id}/bay", response_model=StationSchema)
async def assign_bay(
    station_id: str,
    body: BayAssignment,
    api_key: str = Depends(rate_limit),
    service: StationService = Depends(get_station_service),
):
    return StationSchema.model_validate(service.assign_bay(station_id, body.bay))


@router.delete("/{station_id}", response_model=MessageResponse)
async def delete_station(
    station_id: str,
    api_key: str = Depends(rate_limit),
    service: StationService = Depends(get_station_service),
):
    """Soft-delete a station."""
    service.delete_station(station_id)
    return MessageResponse(message="Station deleted successfully")

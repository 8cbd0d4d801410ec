"""Bay routes: bay records, their stations, and bulk moves and deletes."""

from fastapi import APIRouter, Depends, status

from api.auth import require_api_key
from api.dependencies import get_bay_service
from api.rate_limit import rate_limit
from api.schemas import (
    BayClipboard,
    BayCreate,
    BayCreateResponse,
    BayRecordDuplicate,
    BaySchema,
    BayUpdate,
    BayWithStations,
    BulkBayDelete,
    BulkBayPositions,
    BulkResult,
    CopyBaysRequest,
    DeviceType,
    MessageResponse,
    PasteBaysRequest,
    PasteBaysResponse,
    PositionUpdate,
)
from api.station_routes import to_station_schemas
from inventory.BayService import BayService
from inventory.models import Bay, Position, Size

router = APIRouter(prefix="/bays", tags=["bays"])


# ---------------------------------------------------------------------------
# Bulk operations
# ---------------------------------------------------------------------------


@router.patch("/bulk/positions", response_model=BulkResult)
async def bulk_update_positions(
    body: BulkBayPositions,
    api_key: str = Depends(rate_limit),
    service: BayService = Depends(get_bay_service),
):
    """Move several bays at once; unknown ids are skipped."""
    moved = service.bulk_update_positions([move.model_dump() for move in body.bays])
    return BulkResult(message=f"Updated positions for {moved} bays", count=moved)


@router.delete("/bulk/delete", response_model=BulkResult)
async def bulk_delete_bays(
    body: BulkBayDelete,
    api_key: str = Depends(rate_limit),
    service: BayService = Depends(get_bay_service),
):
    """Delete several bays, or none if any still has stations."""
    deleted = service.bulk_delete(body.bay_ids)
    return BulkResult(message=f"Deleted {deleted} bays", count=deleted)


# ---------------------------------------------------------------------------
# Clipboard
# ---------------------------------------------------------------------------


@router.post("/copy", response_model=BayClipboard)
async def copy_bays(
    body: CopyBaysRequest,
    api_key: str = Depends(require_api_key),
    service: BayService = Depends(get_bay_service),
):
    clipboard = service.copy_bays(body.bay_ids)
    return BayClipboard(
        items=[BaySchema.model_validate(bay) for bay in clipboard["items"]],
        copied_at=clipboard["copied_at"],
        count=clipboard["count"],
    )


@router.post("/paste", response_model=PasteBaysResponse, status_code=status.HTTP_201_CREATED)
async def paste_bays(
    body: PasteBaysRequest,
    api_key: str = Depends(rate_limit),
    service: BayService = Depends(get_bay_service),
):
    """Create copies of clipboard bays, offset by ``position``."""
    sources = [
        Bay(
            id=item.id,
            name=item.name,
            device_type=item.device_type,
            position=Position(item.position.x, item.position.y),
            size=Size(item.size.width, item.size.height) if item.size else Size(),
            color=item.color,
            metadata=item.metadata,
        )
        for item in body.data.items
    ]
    offset = Position(body.position.x, body.position.y)
    created = service.paste_bays(body.data.type, sources, offset)
    return PasteBaysResponse(
        message=f"Pasted {len(created)} bay(s)",
        created_bays=[BaySchema.model_validate(bay) for bay in created],
        count=len(created),
    )


# ---------------------------------------------------------------------------
# Bay records
# ---------------------------------------------------------------------------


@router.get("/{device_type}", response_model=list[BaySchema])
async def list_bays(
    device_type: DeviceType,
    api_key: str = Depends(require_api_key),
    service: BayService = Depends(get_bay_service),
):
    """List active bays with their station counts."""
    return [BaySchema.model_validate(bay) for bay in service.list_bays(device_type)]


@router.post("", response_model=BayCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_bay(
    body: BayCreate,
    api_key: str = Depends(rate_limit),
    service: BayService = Depends(get_bay_service),
):
    """Create a bay, reactivating a deleted bay of the same name if there is one."""
    bay, reactivated = service.create_bay(
        body.name,
        body.device_type,
        Position(body.position.x, body.position.y),
        size=Size(body.size.width, body.size.height) if body.size else None,
        color=body.color,
        metadata=body.metadata,
    )
    message = "Bay reactivated successfully" if reactivated else "Bay created successfully"
    return BayCreateResponse(
        bay=BaySchema.model_validate(bay), reactivated=reactivated, message=message
    )


@router.put("/{bay_id}", response_model=BaySchema)
async def update_bay(
    bay_id: str,
    body: BayUpdate,
    api_key: str = Depends(rate_limit),
    service: BayService = Depends(get_bay_service),
):
    bay = service.update_bay(
        bay_id,
        name=body.name,
        position=body.position.model_dump(exclude_none=True) if body.position else None,
        size=body.size.model_dump(exclude_none=True) if body.size else None,
        color=body.color,
        metadata=body.metadata,
    )
    return BaySchema.model_validate(bay)


@router.patch("/{bay_id}/position", response_model=BaySchema)
async def update_bay_position(
    bay_id: str,
    body: PositionUpdate,
    api_key: str = Depends(rate_limit),
    service: BayService = Depends(get_bay_service),
):
    return BaySchema.model_validate(service.update_position(bay_id, body.x, body.y))


@router.delete("/{bay_id}", response_model=MessageResponse)
async def delete_bay(
    bay_id: str,
    api_key: str = Depends(rate_limit),
    service: BayService = Depends(get_bay_service),
):
    """Soft-delete an empty bay."""
    service.delete_bay(bay_id)
    return MessageResponse(message="Bay deleted successfully")


@router.get("/{bay_id}/stations", response_model=BayWithStations)
async def get_bay_with_stations(
    bay_id: str,
    api_key: str = Depends(require_api_key),
    service: BayService = Depends(get_bay_service),
):
    bay, stations = service.get_bay_with_stations(bay_id)
    return BayWithStations(
        bay=BaySchema.model_validate(bay),
        stations=to_station_schemas(stations),
        station_count=len(stations),
    )


@router.post(
    "/{bay_id}/duplicate",
    response_model=BayWithStations,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_bay_record(
    bay_id: str,
    body: BayRecordDuplicate,
    api_key: str = Depends(rate_limit),
    service: BayService = Depends(get_bay_service),
):
    """Copy a bay record under a free name, optionally with empty station copies."""
    offset = Position(body.position.x, body.position.y) if body.position else None
    bay, stations = service.duplicate_bay_record(
        bay_id, body.new_name, offset, body.include_stations
    )
    return BayWithStations(
        bay=BaySchema.model_validate(bay),
        stations=to_station_schemas(stations),
        station_count=len(stations),
    )

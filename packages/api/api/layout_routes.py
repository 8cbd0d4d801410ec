"""Layout engine routes: arranging, validating, duplicating and renumbering bays."""

from fastapi import APIRouter, Depends, status

from api.auth import require_api_key
from api.dependencies import get_layout_engine
from api.rate_limit import rate_limit
from api.schemas import (
    ArrangeRequest,
    ArrangeResponse,
    AutoFixRequest,
    AutoFixResponse,
    BayStats,
    BayTemplate,
    DeviceType,
    DuplicateBayRequest,
    DuplicateBayResponse,
    FromTemplateRequest,
    FromTemplateResponse,
    RenumberRequest,
    RenumberResponse,
    ValidationReport,
)
from api.station_routes import to_station_schemas
from inventory.models import Position
from layout.LayoutEngine import LayoutEngine

router = APIRouter(tags=["layout"])


# ---------------------------------------------------------------------------
# Whole-floor checks
# ---------------------------------------------------------------------------


@router.get("/layout/{device_type}/validate", response_model=ValidationReport)
async def validate_layout(
    device_type: DeviceType,
    bay: str | None = None,
    api_key: str = Depends(require_api_key),
    engine: LayoutEngine = Depends(get_layout_engine),
):
    """Report overlapping, duplicate-numbered and too-close stations."""
    return engine.validate_layout(device_type, bay)


@router.post("/layout/{device_type}/autofix", response_model=AutoFixResponse)
async def auto_fix_layout(
    device_type: DeviceType,
    body: AutoFixRequest | None = None,
    api_key: str = Depends(rate_limit),
    engine: LayoutEngine = Depends(get_layout_engine),
):
    """Nudge overlapping and too-close stations apart."""
    return engine.auto_fix_layout(device_type, body.bay if body else None)


# ---------------------------------------------------------------------------
# Per-bay operations
# ---------------------------------------------------------------------------


@router.post("/bays/{bay}/{device_type}/arrange", response_model=ArrangeResponse)
async def arrange_bay(
    bay: str,
    device_type: DeviceType,
    body: ArrangeRequest,
    api_key: str = Depends(rate_limit),
    engine: LayoutEngine = Depends(get_layout_engine),
):
    return engine.arrange_bay(bay, device_type, body.pattern, body.spacing)


@router.post(
    "/bays/{bay}/{device_type}/duplicate",
    response_model=DuplicateBayResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_bay(
    bay: str,
    device_type: DeviceType,
    body: DuplicateBayRequest,
    api_key: str = Depends(rate_limit),
    engine: LayoutEngine = Depends(get_layout_engine),
):
    """Copy every station of a bay into another bay with fresh numbers."""
    result = engine.duplicate_bay(
        bay, body.target_bay, device_type, body.copy_devices, body.overwrite
    )
    return DuplicateBayResponse(
        message=result["message"],
        source_stations=result["source_stations"],
        created_stations=result["created_stations"],
        new_stations=to_station_schemas(result["new_stations"]),
    )


@router.post("/bays/{bay}/{device_type}/renumber", response_model=RenumberResponse)
async def renumber_bay(
    bay: str,
    device_type: DeviceType,
    body: RenumberRequest | None = None,
    api_key: str = Depends(rate_limit),
    engine: LayoutEngine = Depends(get_layout_engine),
):
    """Number a bay's stations in reading order."""
    return engine.renumber_bay(bay, device_type, body.start_number if body else None)


@router.get("/bays/{bay}/{device_type}/template", response_model=BayTemplate)
async def export_bay_template(
    bay: str,
    device_type: DeviceType,
    api_key: str = Depends(require_api_key),
    engine: LayoutEngine = Depends(get_layout_engine),
):
    return engine.export_bay_template(bay, device_type)


@router.get("/bays/{bay}/{device_type}/stats", response_model=BayStats)
async def bay_stats(
    bay: str,
    device_type: DeviceType,
    api_key: str = Depends(require_api_key),
    engine: LayoutEngine = Depends(get_layout_engine),
):
    return engine.get_bay_stats(bay, device_type)


@router.post(
    "/bays/{device_type}/from-template",
    response_model=FromTemplateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_bay_from_template(
    device_type: DeviceType,
    body: FromTemplateRequest,
    api_key: str = Depends(rate_limit),
    engine: LayoutEngine = Depends(get_layout_engine),
):
    """Create a populated bay from an exported template."""
    result = engine.create_bay_from_template(
        body.template.model_dump(mode="json"),
        body.bay_name,
        device_type,
        Position(body.start_position.x, body.start_position.y),
    )
    return FromTemplateResponse(
        message=result["message"],
        created_stations=result["created_stations"],
        new_stations=to_station_schemas(result["new_stations"]),
    )

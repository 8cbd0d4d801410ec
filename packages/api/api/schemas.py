"""Pydantic request/response models for the API."""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from inventory.models import Audit, BayLifecycle

DeviceType = Literal["mouse", "keyboard", "headset"]
Site = Literal["Calamba", "Bay", "Los Baños", "La Espacio"]
LayoutPattern = Literal["grid", "row", "circle", "staggered"]
LogAction = Literal["create", "update", "delete"]


# ---------------------------------------------------------------------------
# Shared shapes
# ---------------------------------------------------------------------------


class PositionSchema(BaseModel):
    """A point on the floor map."""

    model_config = ConfigDict(from_attributes=True)

    x: float = 0
    y: float = 0


class PartialPosition(BaseModel):
    x: float | None = None
    y: float | None = None


class SizeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    width: float = Field(55, gt=0)
    height: float = Field(50, gt=0)


class PartialSize(BaseModel):
    width: float | None = Field(None, gt=0)
    height: float | None = Field(None, gt=0)


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Stations
# ---------------------------------------------------------------------------


class DeviceSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    serial_number: str
    brand: str
    model: str
    notes: str
    registered_at: datetime
    updated_at: datetime


class StationSchema(BaseModel):
    """A station as returned by every station-producing endpoint."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    station_number: int | None
    bay: str | None
    device_type: str
    position: PositionSchema
    device: DeviceSchema | None
    is_active: bool
    has_device: bool
    status: str
    display_number: int | str
    created_at: datetime
    updated_at: datetime


class StationCreate(BaseModel):
    device_type: DeviceType
    position: PositionSchema | None = None
    bay: str | None = None


class BulkStationCreate(BaseModel):
    stations: list[StationCreate]


class StationNumberUpdate(BaseModel):
    station_number: int = Field(gt=0)


class DeviceRegistration(BaseModel):
    """Body for registering a device; serials are not checked for duplicates."""

    serial_number: str = Field(min_length=1)
    brand: str = Field("", max_length=50)
    model: str = Field("", max_length=50)
    notes: str = Field("", max_length=200)


class PositionUpdate(BaseModel):
    x: float
    y: float


class BayAssignment(BaseModel):
    bay: str | None = None


class CloneStationsRequest(BaseModel):
    station_ids: list[str] = Field(min_length=1)
    target_bay: str | None = None
    offset_x: float = 100
    offset_y: float = 50


class CloneStationsResponse(BaseModel):
    message: str
    cloned_stations: list[StationSchema]


class CopyStationsRequest(BaseModel):
    station_ids: list[str] = Field(min_length=1)


class StationClipboard(BaseModel):
    type: Literal["station"] = "station"
    items: list[StationSchema]
    copied_at: datetime
    count: int


# ---------------------------------------------------------------------------
# Bays
# ---------------------------------------------------------------------------


class BaySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    device_type: str
    position: PositionSchema
    size: SizeSchema
    color: str
    metadata: dict[str, Any]
    lifecycle: BayLifecycle
    is_active: bool
    stations_count: int
    created_at: datetime
    updated_at: datetime


class BayCreate(BaseModel):
    name: str = Field(min_length=1, max_length=20)
    device_type: DeviceType
    position: PositionSchema
    size: SizeSchema | None = None
    color: str | None = None
    metadata: dict[str, Any] | None = None


class BayCreateResponse(BaseModel):
    bay: BaySchema
    reactivated: bool
    message: str


class BayUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=20)
    position: PartialPosition | None = None
    size: PartialSize | None = None
    color: str | None = None
    metadata: dict[str, Any] | None = None


class BayMove(BaseModel):
    id: str
    x: float
    y: float


class BulkBayPositions(BaseModel):
    bays: list[BayMove]


class BulkBayDelete(BaseModel):
    bay_ids: list[str] = Field(min_length=1)


class BulkResult(BaseModel):
    message: str
    count: int


class BayRecordDuplicate(BaseModel):
    new_name: str | None = Field(None, min_length=1, max_length=20)
    position: PositionSchema | None = None
    include_stations: bool = False


class BayWithStations(BaseModel):
    bay: BaySchema
    stations: list[StationSchema]
    station_count: int


class CopyBaysRequest(BaseModel):
    bay_ids: list[str] = Field(min_length=1)


class BayClipboard(BaseModel):
    type: Literal["bay"] = "bay"
    items: list[BaySchema]
    copied_at: datetime
    count: int


class ClipboardBay(BaseModel):
    """A copied bay as pasted back; extra fields from ``BaySchema`` are ignored."""

    id: str
    name: str = Field(min_length=1)
    device_type: DeviceType
    position: PositionSchema
    size: SizeSchema | None = None
    color: str | None = None
    metadata: dict[str, Any] = {}


class ClipboardData(BaseModel):
    type: str
    items: list[ClipboardBay]


class PasteBaysRequest(BaseModel):
    data: ClipboardData
    position: PositionSchema = PositionSchema(x=50, y=50)


class PasteBaysResponse(BaseModel):
    message: str
    created_bays: list[BaySchema]
    count: int


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class ArrangeRequest(BaseModel):
    pattern: LayoutPattern = "grid"
    spacing: float | None = Field(None, gt=0)


class ArrangeResponse(BaseModel):
    message: str
    updated_stations: int


class DuplicateBayRequest(BaseModel):
    target_bay: str = Field(min_length=1)
    copy_devices: bool = False
    overwrite: bool = False


class DuplicateBayResponse(BaseModel):
    message: str
    source_stations: int
    created_stations: int
    new_stations: list[StationSchema]


class LayoutIssue(BaseModel):
    """One finding of layout validation.

    ``stations`` holds station numbers for overlap and too-close issues and
    station ids for duplicate-number issues.
    """

    type: Literal["overlap", "duplicate_number", "too_close"]
    stations: list[int | str | None]
    message: str
    position: PositionSchema | None = None
    station_number: int | None = None
    distance: int | None = None


class ValidationSummary(BaseModel):
    overlaps: int
    duplicates: int
    too_close: int


class ValidationReport(BaseModel):
    valid: bool
    total_stations: int
    issues: list[LayoutIssue]
    summary: ValidationSummary


class AutoFixRequest(BaseModel):
    bay: str | None = None


class AutoFixResponse(BaseModel):
    message: str
    fixed_issues: list[str]


class RenumberRequest(BaseModel):
    start_number: int | None = Field(None, ge=1)


class RenumberUpdate(BaseModel):
    old_number: int | None
    new_number: int


class RenumberResponse(BaseModel):
    message: str
    updates: list[RenumberUpdate]


class TemplateLayoutItem(BaseModel):
    index: int
    relative_position: PositionSchema


class BayTemplate(BaseModel):
    """A bay layout detached from any bay name or station numbering."""

    name: str | None = None
    device_type: DeviceType
    station_count: int | None = None
    created_at: datetime | None = None
    layout: list[TemplateLayoutItem]


class FromTemplateRequest(BaseModel):
    template: BayTemplate
    bay_name: str = Field(min_length=1)
    start_position: PositionSchema = PositionSchema()


class FromTemplateResponse(BaseModel):
    message: str
    created_stations: int
    new_stations: list[StationSchema]


class BayStatEntry(BaseModel):
    bay: str | None
    total_stations: int
    registered_devices: int


class ComprehensiveStats(BaseModel):
    total_stations: int
    registered_devices: int
    empty_stations: int
    registration_rate: float
    bay_count: int
    bays: list[str | None]
    bay_stats: list[BayStatEntry]


class LayoutBounds(BaseModel):
    min_x: float
    max_x: float
    min_y: float
    max_y: float


class BayStats(BaseModel):
    bay_name: str
    device_type: str
    total_stations: int
    registered_devices: int
    empty_stations: int
    registration_rate: float
    bounds: LayoutBounds | None
    last_updated: datetime


# ---------------------------------------------------------------------------
# Audits and logs
# ---------------------------------------------------------------------------


class ItemCountsInput(BaseModel):
    departments: dict[str, int] = {}
    stock: int = Field(0, ge=0)
    defectives: int = Field(0, ge=0)


class ItemCountsSchema(ItemCountsInput):
    total: int
    overall_total: int


class AuditCreate(BaseModel):
    date: date
    site: Site
    items: dict[str, ItemCountsInput] = {}
    other_items: dict[str, int] | None = None
    missing_items: dict[str, int] | None = None
    departments: list[str] = []
    created_by: str | None = None


class AuditUpdate(BaseModel):
    items: dict[str, ItemCountsInput] | None = None
    other_items: dict[str, int] | None = None
    missing_items: dict[str, int] | None = None
    user_id: str | None = None


class AuditSchema(BaseModel):
    id: str
    date: date
    site: str
    items: dict[str, ItemCountsSchema]
    other_items: dict[str, int]
    missing_items: dict[str, int]
    created_by: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_audit(cls, audit: Audit) -> "AuditSchema":
        return cls(
            id=audit.id,
            date=audit.date,
            site=audit.site,
            items={name: counts.to_dict() for name, counts in audit.items.items()},
            other_items=audit.other_items,
            missing_items=audit.missing_items,
            created_by=audit.created_by,
            created_at=audit.created_at,
            updated_at=audit.updated_at,
        )


class LogEntrySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    audit_date: date
    item: str | None
    field: str | None = Field(validation_alias=AliasChoices("field", "field_name"))
    old_value: Any
    new_value: Any
    description: str
    user_id: str | None
    timestamp: datetime
    change_magnitude: float | None


class LogCreate(BaseModel):
    action: LogAction
    audit_date: date
    description: str = Field(min_length=1)
    item: str | None = None
    field: str | None = None
    old_value: Any = None
    new_value: Any = None
    user_id: str | None = None


class LogActivity(BaseModel):
    action: str
    count: int
    last_activity: datetime


class CleanupResponse(BaseModel):
    message: str
    deleted_count: int


class ActionCount(BaseModel):
    action: str
    count: int


class ItemCount(BaseModel):
    item: str
    count: int


class UserCount(BaseModel):
    user_id: str
    count: int


class DailyCount(BaseModel):
    date: date
    count: int


class LogStats(BaseModel):
    total_logs: int
    by_action: list[ActionCount]
    by_item: list[ItemCount]
    by_user: list[UserCount]
    daily_activity: list[DailyCount]
    period: int


class LogExport(BaseModel):
    export_date: datetime
    total_records: int
    filters: dict[str, datetime]
    data: list[LogEntrySchema]


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class ReportPeriod(BaseModel):
    month: int | None
    year: int | None


class MonthlySummary(BaseModel):
    month: int
    year: int
    audit_count: int
    total_units: int
    total_defectives: int
    defect_rate: float
    item_totals: dict[str, int]
    departments: list[str]


class ItemTrendPoint(BaseModel):
    date: date
    site: str
    total: int
    defectives: int


class DefectsAnalysis(BaseModel):
    defects_by_item: dict[str, int]
    defects_by_department: dict[str, int]
    total_audits: int
    departments: list[str]


class DepartmentPerformanceEntry(BaseModel):
    total_items: int
    item_breakdown: dict[str, int]


class DepartmentPerformance(BaseModel):
    department_performance: dict[str, DepartmentPerformanceEntry]
    total_audits: int
    report_period: ReportPeriod


class PeakDay(BaseModel):
    date: date | None
    count: int


class DepartmentComparisonEntry(BaseModel):
    total_production: int
    average_per_audit: float
    peak_day: PeakDay
    item_distribution: dict[str, int]


class DepartmentComparison(BaseModel):
    comparison: dict[str, DepartmentComparisonEntry]
    total_audits: int
    report_period: ReportPeriod


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------


class RateLimitStatus(BaseModel):
    """Current rate-limit status for the calling API key."""

    limit: int
    remaining: int
    reset: str

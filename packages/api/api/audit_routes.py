"""Audit and change-log routes."""

from datetime import date, datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response, status

from api.auth import require_api_key
from api.dependencies import get_audit_service, get_change_log
from api.rate_limit import rate_limit
from api.schemas import (
    AuditCreate,
    AuditSchema,
    AuditUpdate,
    CleanupResponse,
    LogActivity,
    LogAction,
    LogCreate,
    LogEntrySchema,
    LogExport,
    LogStats,
    MessageResponse,
    Site,
)
from inventory.AuditService import AuditService
from inventory.ChangeLog import DEFAULT_RETENTION_DAYS, ChangeLog

router = APIRouter(tags=["audits"])


def _entries(entries) -> list[LogEntrySchema]:
    return [LogEntrySchema.model_validate(e) for e in entries]


# ---------------------------------------------------------------------------
# Audits
# ---------------------------------------------------------------------------


@router.get("/audits", response_model=list[AuditSchema])
async def list_audits(
    site: Site | None = None,
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = None,
    api_key: str = Depends(require_api_key),
    service: AuditService = Depends(get_audit_service),
):
    """List audits, optionally for one site and one calendar month."""
    return [AuditSchema.from_audit(a) for a in service.list_audits(site, month, year)]


@router.get("/audits/template")
async def audit_template(
    departments: list[str] = Query(default=[]),
    api_key: str = Depends(require_api_key),
):
    """Empty audit structure for the given departments."""
    return AuditService.audit_template(departments)


@router.get("/audits/{audit_date}/{site}", response_model=AuditSchema)
async def get_audit(
    audit_date: date,
    site: Site,
    api_key: str = Depends(require_api_key),
    service: AuditService = Depends(get_audit_service),
):
    return AuditSchema.from_audit(service.get_audit(audit_date, site))


@router.post("/audits", response_model=AuditSchema, status_code=status.HTTP_201_CREATED)
async def create_audit(
    body: AuditCreate,
    api_key: str = Depends(rate_limit),
    service: AuditService = Depends(get_audit_service),
):
    audit = service.create_audit(
        body.date,
        body.site,
        {name: counts.model_dump() for name, counts in body.items.items()},
        body.departments,
        other_items=body.other_items,
        missing_items=body.missing_items,
        created_by=body.created_by,
    )
    return AuditSchema.from_audit(audit)


@router.put("/audits/{audit_date}/{site}", response_model=AuditSchema)
async def update_audit(
    audit_date: date,
    site: Site,
    body: AuditUpdate,
    api_key: str = Depends(rate_limit),
    service: AuditService = Depends(get_audit_service),
):
    """Replace item counts; every changed value is written to the change log."""
    items = (
        {name: counts.model_dump() for name, counts in body.items.items()}
        if body.items is not None
        else None
    )
    audit = service.update_audit(
        audit_date,
        site,
        items=items,
        other_items=body.other_items,
        missing_items=body.missing_items,
        user_id=body.user_id,
    )
    return AuditSchema.from_audit(audit)


@router.delete("/audits/{audit_date}/{site}", response_model=MessageResponse)
async def delete_audit(
    audit_date: date,
    site: Site,
    user_id: str | None = None,
    api_key: str = Depends(rate_limit),
    service: AuditService = Depends(get_audit_service),
):
    service.delete_audit(audit_date, site, user_id=user_id)
    return MessageResponse(message="Audit deleted successfully")


# ---------------------------------------------------------------------------
# Change log
# ---------------------------------------------------------------------------


@router.get("/logs", response_model=list[LogEntrySchema])
async def list_logs(
    start: datetime | None = None,
    end: datetime | None = None,
    action: LogAction | None = None,
    item: str | None = None,
    field: str | None = None,
    user_id: str | None = None,
    limit: int = Query(1000, ge=1, le=5000),
    api_key: str = Depends(require_api_key),
    change_log: ChangeLog = Depends(get_change_log),
):
    """Filtered change history, newest first."""
    return _entries(
        change_log.filtered(
            start=start,
            end=end,
            action=action,
            item=item,
            field_name=field,
            user_id=user_id,
            limit=limit,
        )
    )


@router.get("/logs/recent", response_model=list[LogEntrySchema])
async def recent_logs(
    limit: int = Query(100, ge=1, le=1000),
    api_key: str = Depends(require_api_key),
    change_log: ChangeLog = Depends(get_change_log),
):
    return _entries(change_log.recent(limit))


@router.get("/logs/audit/{audit_date}", response_model=list[LogEntrySchema])
async def logs_for_audit(
    audit_date: date,
    api_key: str = Depends(require_api_key),
    change_log: ChangeLog = Depends(get_change_log),
):
    return _entries(change_log.for_audit(audit_date))


@router.get("/logs/item/{item}", response_model=list[LogEntrySchema])
async def logs_for_item(
    item: str,
    limit: int = Query(500, ge=1, le=5000),
    api_key: str = Depends(require_api_key),
    change_log: ChangeLog = Depends(get_change_log),
):
    return _entries(change_log.for_item(item, limit))


@router.get("/logs/activity", response_model=list[LogActivity])
async def activity_summary(
    user_id: str | None = None,
    days: int = Query(30, ge=1),
    api_key: str = Depends(require_api_key),
    change_log: ChangeLog = Depends(get_change_log),
):
    """Entry count and last activity per action."""
    return change_log.activity_summary(user_id, days)


@router.get("/logs/stats", response_model=LogStats)
async def log_stats(
    days: int = Query(30, ge=1),
    api_key: str = Depends(require_api_key),
    change_log: ChangeLog = Depends(get_change_log),
):
    """Entry counts by action, item, user and day."""
    return change_log.stats(days)


@router.get("/logs/export", response_model=LogExport)
async def export_logs(
    format: Literal["csv", "json"] = "csv",
    start: datetime | None = None,
    end: datetime | None = None,
    api_key: str = Depends(require_api_key),
    change_log: ChangeLog = Depends(get_change_log),
):
    """Download the change log as CSV or JSON."""
    entries = change_log.export(start, end)
    filename = f"change_log_{date.today().isoformat()}.{format}"
    disposition = {"Content-Disposition": f'attachment; filename="{filename}"'}
    if format == "csv":
        return Response(
            content=ChangeLog.to_csv(entries), media_type="text/csv", headers=disposition
        )

    filters = {key: value for key, value in (("start", start), ("end", end)) if value is not None}
    export = LogExport(
        export_date=datetime.now(),
        total_records=len(entries),
        filters=filters,
        data=_entries(entries),
    )
    return Response(
        content=export.model_dump_json(),
        media_type="application/json",
        headers=disposition,
    )


@router.post("/logs", response_model=LogEntrySchema, status_code=status.HTTP_201_CREATED)
async def create_log(
    body: LogCreate,
    api_key: str = Depends(rate_limit),
    change_log: ChangeLog = Depends(get_change_log),
):
    """Record a manual change-log entry."""
    entry = change_log.record(
        body.action,
        body.audit_date,
        body.description,
        item=body.item,
        field_name=body.field,
        old_value=body.old_value,
        new_value=body.new_value,
        user_id=body.user_id,
    )
    return LogEntrySchema.model_validate(entry)


@router.delete("/logs/cleanup", response_model=CleanupResponse)
async def cleanup_logs(
    days_to_keep: int = Query(DEFAULT_RETENTION_DAYS, ge=1),
    api_key: str = Depends(rate_limit),
    change_log: ChangeLog = Depends(get_change_log),
):
    """Delete entries older than the retention period."""
    deleted = change_log.clean_old_logs(days_to_keep)
    return CleanupResponse(message=f"Cleaned up {deleted} old log entries", deleted_count=deleted)

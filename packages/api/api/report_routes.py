"""Audit report routes. All read-only."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from api.auth import require_api_key
from api.dependencies import get_audit_reports
from api.schemas import (
    DefectsAnalysis,
    DepartmentComparison,
    DepartmentPerformance,
    ItemTrendPoint,
    MonthlySummary,
)
from inventory.AuditReports import AuditReports

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/monthly-summary", response_model=MonthlySummary)
async def monthly_summary(
    month: int = Query(ge=1, le=12),
    year: int = Query(ge=1),
    api_key: str = Depends(require_api_key),
    reports: AuditReports = Depends(get_audit_reports),
):
    """Unit and defect totals across every audit of one month."""
    return reports.monthly_summary(month, year)


@router.get("/item-trends", response_model=list[ItemTrendPoint])
async def item_trends(
    item: str = Query(min_length=1),
    start: date | None = None,
    end: date | None = None,
    api_key: str = Depends(require_api_key),
    reports: AuditReports = Depends(get_audit_reports),
):
    return reports.item_trends(item, start, end)


@router.get("/defects-analysis", response_model=DefectsAnalysis)
async def defects_analysis(
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = None,
    api_key: str = Depends(require_api_key),
    reports: AuditReports = Depends(get_audit_reports),
):
    return reports.defects_analysis(month, year)


@router.get("/department-performance", response_model=DepartmentPerformance)
async def department_performance(
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = None,
    department: str | None = None,
    api_key: str = Depends(require_api_key),
    reports: AuditReports = Depends(get_audit_reports),
):
    return reports.department_performance(month, year, department)


@router.get("/department-comparison", response_model=DepartmentComparison)
async def department_comparison(
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = None,
    departments: str | None = Query(None, description="Comma-separated department names"),
    api_key: str = Depends(require_api_key),
    reports: AuditReports = Depends(get_audit_reports),
):
    """Side-by-side totals for the requested departments (all by default)."""
    names = [name.strip() for name in departments.split(",") if name.strip()] if departments else None
    return reports.department_comparison(month, year, names)

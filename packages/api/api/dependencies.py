"""Accessors for the shared services held on ``app.state``."""

from fastapi import Request

from inventory.AuditReports import AuditReports
from inventory.AuditService import AuditService
from inventory.BayService import BayService
from inventory.ChangeLog import ChangeLog
from inventory.StationService import StationService
from layout.LayoutEngine import LayoutEngine


def get_station_service(request: Request) -> StationService:
    return request.app.state.station_service


def get_bay_service(request: Request) -> BayService:
    return request.app.state.bay_service


def get_layout_engine(request: Request) -> LayoutEngine:
    return request.app.state.layout_engine


def get_audit_service(request: Request) -> AuditService:
    return request.app.state.audit_service


def get_change_log(request: Request) -> ChangeLog:
    return request.app.state.change_log


def get_audit_reports(request: Request) -> AuditReports:
    return request.app.state.audit_reports

"""FastAPI application entry point."""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database.AuditRepository import AuditRepository
from database.BayRepository import BayRepository
from database.DatabaseProvider import DatabaseProvider
from database.LogRepository import LogRepository
from database.QueryExecutor import QueryExecutor
from database.StationRepository import StationRepository
from inventory.AuditReports import AuditReports
from inventory.AuditService import AuditService
from inventory.BayService import BayService
from inventory.ChangeLog import ChangeLog
from inventory.StationService import StationService
from inventory.errors import ConflictError, InvalidRequestError, NotFoundError
from layout.LayoutEngine import LayoutEngine

from api import (
    audit_routes,
    bay_routes,
    layout_routes,
    report_routes,
    service_routes,
    station_routes,
)
from api.auth import parse_api_keys
from api.rate_limit import SlidingWindowRateLimiter

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from ``LOG_LEVEL``."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format=LOG_FORMAT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Set up and tear down application-wide resources."""
    load_dotenv()
    configure_logging()

    db_provider = DatabaseProvider(os.environ["DB_PATH"])
    db_provider.initialize_schema()
    executor = QueryExecutor(db_provider.get_connection())
    app.state.executor = executor

    stations = StationRepository(executor)
    bays = BayRepository(executor)
    audits = AuditRepository(executor)
    change_log = ChangeLog(LogRepository(executor))

    app.state.station_service = StationService(stations)
    app.state.bay_service = BayService(bays, stations)
    app.state.layout_engine = LayoutEngine(stations)
    app.state.change_log = change_log
    app.state.audit_service = AuditService(audits, change_log)
    app.state.audit_reports = AuditReports(audits)
    app.state.api_keys = parse_api_keys(os.environ.get("API_KEYS"))
    app.state.rate_limiter = SlidingWindowRateLimiter.from_env()
    logger.info("Floor inventory API ready (rate limit %d/hour)", app.state.rate_limiter.limit)

    yield

    db_provider.close()


app = FastAPI(
    title="Floor Inventory API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "X-RateLimit-Limit",
        "X-RateLimit-Remaining",
        "X-RateLimit-Reset",
    ],
)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(InvalidRequestError)
async def invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


app.include_router(service_routes.router)
app.include_router(station_routes.router)
app.include_router(bay_routes.router)
app.include_router(layout_routes.router)
app.include_router(audit_routes.router)
app.include_router(report_routes.router)


def serve() -> None:
    """Start the uvicorn server using environment configuration."""
    load_dotenv()
    host = os.environ.get("API_HOST", "0.0.0.0")
    port = int(os.environ.get("API_PORT", "3000"))
    uvicorn.run("api.main:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    serve()

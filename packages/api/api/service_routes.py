"""Operational routes: liveness with a store check, and rate-limit status."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from api.auth import require_api_key
from api.rate_limit import SlidingWindowRateLimiter, get_rate_limiter
from api.schemas import RateLimitStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["service"])


@router.get("/health")
async def health_check(request: Request):
    """Unauthenticated health check; 503 when the database does not answer."""
    try:
        request.app.state.executor.fetch_one("SELECT 1 AS ok")
    except RuntimeError as e:
        logger.error("Health check failed: %s", e)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "database": "unavailable"},
        )
    return {"status": "ok", "database": "ok"}


@router.get("/rate-limit", response_model=RateLimitStatus)
async def rate_limit_status(
    api_key: str = Depends(require_api_key),
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
):
    """Allowance left for the calling key; does not count as a request."""
    return RateLimitStatus(
        limit=limiter.limit,
        remaining=limiter.remaining(api_key),
        reset=limiter.reset_time(api_key),
    )

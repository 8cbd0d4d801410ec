"""Bearer API-key check shared by every protected route.

Accepted keys come from ``API_KEYS`` (comma-separated) and are parsed once
at startup into ``app.state.api_keys``.
"""

import hashlib
import hmac
import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

logger = logging.getLogger(__name__)

_authorization_header = APIKeyHeader(name="Authorization")


def parse_api_keys(raw: str | None) -> frozenset[str]:
    """Split a comma-separated key list, dropping blanks."""
    return frozenset(key.strip() for key in (raw or "").split(",") if key.strip())


def key_fingerprint(key: str) -> str:
    """Short, non-reversible label for a key, safe to write to logs."""
    return hashlib.sha256(key.encode()).hexdigest()[:8]


async def require_api_key(
    request: Request,
    authorization: str = Depends(_authorization_header),
) -> str:
    """Validate ``Authorization: Bearer <key>`` (a bare key is accepted too).

    Returns:
        The key, which also identifies the caller to the rate limiter.

    Raises:
        HTTPException 401 for an unknown key, 500 when no keys are configured.
    """
    valid_keys: frozenset[str] = request.app.state.api_keys
    if not valid_keys:
        logger.error("API_KEYS is empty; rejecting all requests")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server has no API keys configured",
        )

    token = authorization.removeprefix("Bearer ").strip()
    if not any(hmac.compare_digest(token.encode(), key.encode()) for key in valid_keys):
        logger.warning("Rejected request with unknown key %s", key_fingerprint(token))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
    return token

"""Per-API-key sliding-window rate limiter."""

import os
import time
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime, timezone

from fastapi import Depends, HTTPException, Request, Response, status

from api.auth import require_api_key

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

WINDOW_SECONDS = 3600  # 1 hour
DEFAULT_LIMIT = 120


# ---------------------------------------------------------------------------
# Limiter
# ---------------------------------------------------------------------------


class SlidingWindowRateLimiter:
    """Counts requests per key over a trailing time window.

    Timestamps older than the window are pruned on every access, so the
    store only ever holds the requests that still count.
    """

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window_seconds: float = WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: dict[str, list[float]] = defaultdict(list)

    @classmethod
    def from_env(cls) -> "SlidingWindowRateLimiter":
        """Build a limiter from ``RATE_LIMIT_PER_HOUR``."""
        return cls(limit=int(os.environ.get("RATE_LIMIT_PER_HOUR", str(DEFAULT_LIMIT))))

    def _prune(self, key: str, now: float) -> list[float]:
        cutoff = now - self.window_seconds
        timestamps = [ts for ts in self._requests[key] if ts > cutoff]
        self._requests[key] = timestamps
        return timestamps

    def hit(self, key: str) -> bool:
        """Record a request for ``key`` if the allowance permits it.

        Returns:
            True when the request was recorded, False when the key has
            exhausted its allowance for the current window.
        """
        now = self._clock()
        timestamps = self._prune(key, now)
        if len(timestamps) >= self.limit:
            return False
        timestamps.append(now)
        return True

    def remaining(self, key: str) -> int:
        """Return how many requests remain in the current window."""
        return max(0, self.limit - len(self._prune(key, self._clock())))

    def reset_time(self, key: str) -> str:
        """Return an ISO-8601 timestamp for when the oldest request expires."""
        timestamps = self._prune(key, self._clock())
        if not timestamps:
            return datetime.fromtimestamp(self._clock(), tz=timezone.utc).isoformat()
        reset_at = min(timestamps) + self.window_seconds
        return datetime.fromtimestamp(reset_at, tz=timezone.utc).isoformat()

    def headers(self, key: str) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining(key)),
            "X-RateLimit-Reset": self.reset_time(key),
        }


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    """Retrieve the shared limiter from app state."""
    return request.app.state.rate_limiter


async def rate_limit(
    response: Response,
    api_key: str = Depends(require_api_key),
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
) -> str:
    """Enforce the per-key rate limit on mutating endpoints.

    Records the request and raises 429 if the caller has exhausted their
    allowance. Successful responses carry the ``X-RateLimit-*`` headers.

    Returns:
        The validated API key (pass-through from auth).
    """
    if not limiter.hit(api_key):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded",
            headers={**limiter.headers(api_key), "X-RateLimit-Remaining": "0"},
        )

    response.headers.update(limiter.headers(api_key))
    return api_key

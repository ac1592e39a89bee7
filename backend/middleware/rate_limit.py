"""
In-memory rate limiting for credential and checkout endpoints.

Sliding-window counter keyed by client IP + route path. State lives in the
process, so limits are per worker.
"""
import time
import logging
from collections import defaultdict, deque

from fastapi import Request

from domain.errors import RateLimitError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window limiter: one deque of hit timestamps per key."""

    def __init__(self):
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def _cleanup(self, key: str, window_seconds: int) -> deque:
        hits = self._hits[key]
        cutoff = time.monotonic() - window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()
        return hits

    def check(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """Record a hit and return True, or return False if the window is full."""
        hits = self._cleanup(key, window_seconds)
        if len(hits) >= max_requests:
            return False
        hits.append(time.monotonic())
        return True

    def remaining(self, key: str, max_requests: int, window_seconds: int) -> int:
        hits = self._cleanup(key, window_seconds)
        return max(0, max_requests - len(hits))

    def reset(self) -> None:
        self._hits.clear()


limiter = RateLimiter()


def rate_limit(max_requests: int = 10, window_seconds: int = 60):
    """
    FastAPI dependency factory.

    Usage:
        @router.post("/login")
        async def login(..., _rate=Depends(rate_limit(10, 60))):
            ...
    """
    async def _check_rate_limit(request: Request):
        client_ip = request.client.host if request.client else "unknown"
        key = f"{client_ip}:{request.url.path}"

        if not limiter.check(key, max_requests, window_seconds):
            logger.warning(
                f"Rate limit exceeded: {client_ip} on {request.url.path} "
                f"({max_requests}/{window_seconds}s)"
            )
            exc = RateLimitError(
                f"Rate limit exceeded. Maximum {max_requests} requests "
                f"per {window_seconds} seconds. Try again later.",
                details={"limit": max_requests, "windowSeconds": window_seconds},
            )
            exc.headers = {
                "Retry-After": str(window_seconds),
                "X-RateLimit-Limit": str(max_requests),
                "X-RateLimit-Remaining": "0",
            }
            raise exc

    return _check_rate_limit

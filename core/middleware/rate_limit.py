"""Rate Limiting Middleware for FastAPI.

Throttles credential endpoints (signup/login) per client IP to slow down
online password guessing. Counters live in Upstash Redis when configured so
the limit holds across instances; otherwise an in-memory sliding window is
used.

The client IP is the socket peer address. ``X-Forwarded-For`` is only read
when ``trust_forwarded_for`` is set, i.e. when the app runs behind a proxy
that overwrites the header; otherwise any caller could pick its own key.
"""

import time
from collections.abc import Callable, Iterable
from typing import Any

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.db import TTL, RedisKeys
from core.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)

DEFAULT_LIMITED_PATHS = ("/signup", "/login")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Limits requests per IP address per endpoint."""

    def __init__(
        self,
        app: Any,
        requests_per_minute: int = 30,
        redis_client: Any = None,
        paths: Iterable[str] = DEFAULT_LIMITED_PATHS,
        trust_forwarded_for: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.redis_client = redis_client
        self.paths = frozenset(paths)
        self.trust_forwarded_for = trust_forwarded_for
        self._clock = clock
        self._cache: dict[str, list[float]] = {}  # Fallback in-memory windows
        self._next_sweep = 0.0

    def client_ip(self, request: Request) -> str:
        if self.trust_forwarded_for:
            if forwarded_for := request.headers.get("X-Forwarded-For"):
                # First IP is the original client, as written by the proxy
                return forwarded_for.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    async def dispatch(self, request: Request, call_next: Callable[..., Any]) -> Response:
        if request.url.path not in self.paths:
            return await call_next(request)  # type: ignore[no-any-return]

        client_ip = self.client_ip(request)
        key = RedisKeys.rate_limit_key(client_ip, request.url.path)

        if await self._hit(key) > self.requests_per_minute:
            logger.warning(
                "Rate limit exceeded for %s on %s",
                sanitize_string_for_logging(client_ip),
                request.url.path,
            )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "success": False,
                    "error": "RateLimited",
                    "message": "Too many requests. Please try again later.",
                },
                headers={"Retry-After": str(TTL.RATE_LIMIT_WINDOW)},
            )

        return await call_next(request)  # type: ignore[no-any-return]

    async def _hit(self, key: str) -> int:
        """Record a request and return the count inside the current window."""
        if self.redis_client:
            try:
                count = int(await self.redis_client.incr(key))
                if count == 1:
                    await self.redis_client.expire(key, TTL.RATE_LIMIT_WINDOW)
                return count
            except Exception as e:
                logger.warning(
                    "Redis rate limit failed: %s, falling back to in-memory", type(e).__name__
                )

        now = self._clock()
        self._sweep(now)
        window = [t for t in self._cache.get(key, []) if now - t < TTL.RATE_LIMIT_WINDOW]
        window.append(now)
        self._cache[key] = window
        return len(window)

    def _sweep(self, now: float) -> None:
        """Drop keys whose newest hit is outside the window (at most once per window)."""
        if now < self._next_sweep:
            return
        self._next_sweep = now + TTL.RATE_LIMIT_WINDOW
        stale = [k for k, hits in self._cache.items() if now - hits[-1] >= TTL.RATE_LIMIT_WINDOW]
        for k in stale:
            del self._cache[k]

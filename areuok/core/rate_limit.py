"""Per-client request limits.

Requests are counted per client and per route template, so
``GET /api/v1/devices/{device_id}`` shares one budget across all device ids.
Counts live in redis when it is reachable and in process memory otherwise.
"""

import logging
import time
from collections import deque
from typing import Optional

import redis
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Match

from areuok.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

EXEMPT_PATHS = {"/health", "/api/v1/health"}
WINDOW_SECONDS = 60
UNMATCHED_ROUTE = "<unmatched>"


def route_template(request: Request) -> str:
    """Path template of the route that will serve ``request``."""
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", UNMATCHED_ROUTE)
    return UNMATCHED_ROUTE


class SlidingWindowStore:
    """In-process sliding window; idle keys are swept once per window."""

    def __init__(self, window_seconds: int = WINDOW_SECONDS) -> None:
        self.window_seconds = window_seconds
        self._hits: dict[str, deque[float]] = {}
        self._next_sweep = 0.0

    def __len__(self) -> int:
        return len(self._hits)

    def hit(self, key: str, limit: int, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        threshold = now - self.window_seconds
        if now >= self._next_sweep:
            self._sweep(threshold)
            self._next_sweep = now + self.window_seconds

        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= threshold:
            hits.popleft()
        if len(hits) >= limit:
            return False
        hits.append(now)
        return True

    def _sweep(self, threshold: float) -> None:
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= threshold]
        for key in idle:
            del self._hits[key]


class RateLimiter:
    def __init__(self, redis_url: str, limit_per_minute: int) -> None:
        self.limit_per_minute = limit_per_minute
        self.memory_store = SlidingWindowStore()
        self.redis_client: Optional[redis.Redis] = None
        try:
            client = redis.from_url(redis_url, decode_responses=True)
            client.ping()
            self.redis_client = client
        except (redis.RedisError, ValueError):
            logger.info("redis unavailable at %s, rate limiting in memory", redis_url)

    def allow(self, key: str) -> bool:
        if self.redis_client is None:
            return self.memory_store.hit(key, self.limit_per_minute)
        # fixed window per minute; the key expires with its window
        redis_key = f"areuok:rl:{key}:{int(time.time() // WINDOW_SECONDS)}"
        pipe = self.redis_client.pipeline()
        pipe.incr(redis_key)
        pipe.expire(redis_key, WINDOW_SECONDS)
        current, _ = pipe.execute()
        return current <= self.limit_per_minute


rate_limiter = RateLimiter(settings.redis_url, settings.rate_limit_per_minute)


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_host = request.client.host if request.client else "unknown"
        key = f"{client_host}:{request.method}:{route_template(request)}"
        if not rate_limiter.allow(key):
            logger.warning("rate limit exceeded for %s", key)
            return JSONResponse(status_code=429, content={"error": "rate_limit_exceeded"})

        return await call_next(request)

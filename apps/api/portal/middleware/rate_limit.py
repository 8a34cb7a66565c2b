from __future__ import annotations

import math
import threading
import time
import uuid
from dataclasses import dataclass

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from portal.context import get_correlation_id
from portal.core.config import get_settings
from portal.metrics import observe_rate_limited


@dataclass
class _BucketState:
    tokens: float
    last_refill: float
    capacity: float
    refill_rate: float

    def refill(self, now: float) -> None:
        elapsed = max(0.0, now - self.last_refill)
        self.tokens = min(self.capacity, self.tokens + (elapsed * self.refill_rate))
        self.last_refill = now


class _TokenBucketLimiter:
    def __init__(self, sweep_interval: float = 60.0) -> None:
        self._lock = threading.Lock()
        self._buckets: dict[tuple[str, str], _BucketState] = {}
        self._sweep_interval = sweep_interval
        self._last_sweep: float | None = None

    def take(
        self,
        client_key: str,
        route_group: str,
        capacity: int,
        window_seconds: int,
        now: float | None = None,
    ) -> tuple[bool, int]:
        if capacity <= 0:
            return False, window_seconds

        now = time.monotonic() if now is None else now
        refill_rate = capacity / float(window_seconds)
        key = (client_key, route_group)

        with self._lock:
            self._sweep(now)
            current = self._buckets.get(key)
            if current is None:
                current = _BucketState(
                    tokens=float(capacity), last_refill=now, capacity=float(capacity), refill_rate=refill_rate
                )
                self._buckets[key] = current

            current.refill(now)

            if current.tokens < 1.0:
                retry_after = max(1, math.ceil((1.0 - current.tokens) / refill_rate))
                return False, retry_after

            current.tokens -= 1.0
            return True, 0

    def _sweep(self, now: float) -> None:
        # A bucket back at capacity behaves exactly like a missing one.
        if self._last_sweep is not None and now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now
        for key, state in list(self._buckets.items()):
            state.refill(now)
            if state.tokens >= state.capacity:
                del self._buckets[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def clear(self) -> None:
        with self._lock:
            self._buckets.clear()


_limiter = _TokenBucketLimiter()

_LIMITED_ROUTES = {
    ("POST", "/api/login"): "login",
    ("PUT", "/api/users/change-password"): "change_password",
}


class LoginRateLimitMiddleware(BaseHTTPMiddleware):
    """Throttles credential-checking endpoints per client address."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        settings = get_settings()
        if settings.rate_limit_disabled:
            return await call_next(request)

        route_group = _LIMITED_ROUTES.get((request.method.upper(), request.url.path.rstrip("/")))
        if route_group is None:
            return await call_next(request)

        allowed, retry_after = _limiter.take(
            client_key=_resolve_client_key(request),
            route_group=route_group,
            capacity=settings.rate_limit_login_per_minute,
            window_seconds=60,
        )
        if allowed:
            return await call_next(request)

        observe_rate_limited(route_group)
        correlation_id = (
            get_correlation_id()
            or getattr(request.state, "correlation_id", None)
            or request.headers.get("x-correlation-id")
            or str(uuid.uuid4())
        )
        response = JSONResponse(
            status_code=429,
            content={
                "code": "rate_limited",
                "message": "Too many requests",
                "details": None,
                "correlation_id": correlation_id,
            },
        )
        response.headers["Retry-After"] = str(retry_after)
        response.headers["X-Correlation-Id"] = correlation_id
        return response


def _resolve_client_key(request: Request) -> str:
    # Forwarded headers are trusted only through the server's proxy support
    # (uvicorn --proxy-headers --forwarded-allow-ips), which rewrites client.
    if request.client is not None:
        return request.client.host
    return "unknown"


def reset_rate_limiter() -> None:
    _limiter.clear()

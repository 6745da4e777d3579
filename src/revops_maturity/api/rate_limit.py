"""In-memory fixed-window rate limiter for the /api routes.

Each client IP gets a counter that resets when its window expires. The
standard ``RateLimit-Limit`` / ``RateLimit-Remaining`` / ``RateLimit-Reset``
headers are set on every response; legacy ``X-RateLimit-*`` headers are not.

State is per process. In a multi-worker deployment each worker enforces
its own window.
"""

import math
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from revops_maturity.observability import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of counting one request.

    Attributes:
        allowed: Whether the request is within the limit.
        limit: Maximum requests per window.
        remaining: Requests left in the current window.
        reset_after: Seconds until the window resets.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_after: int

    def headers(self) -> dict[str, str]:
        """Standard rate-limit response headers."""
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }


class FixedWindowRateLimiter:
    """Per-key fixed-window request counter.

    Args:
        max_requests: Requests allowed per window and key.
        window_seconds: Window length in seconds.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock
        # key -> (window_start, request_count)
        self._windows: dict[str, tuple[float, int]] = {}

    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for ``key`` and decide whether it is allowed.

        Args:
            key: Rate limit key (typically a client IP address).

        Returns:
            The decision including header values.
        """
        now = self._clock()
        window_start, count = self._windows.get(key, (now, 0))
        if now - window_start >= self._window_seconds:
            self._prune(now)
            window_start, count = now, 0

        count += 1
        self._windows[key] = (window_start, count)

        reset_after = max(0, math.ceil(window_start + self._window_seconds - now))
        return RateLimitDecision(
            allowed=count <= self._max_requests,
            limit=self._max_requests,
            remaining=max(0, self._max_requests - count),
            reset_after=reset_after,
        )

    def _prune(self, now: float) -> None:
        expired = [
            key
            for key, (window_start, _) in self._windows.items()
            if now - window_start >= self._window_seconds
        ]
        for key in expired:
            del self._windows[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply the application's rate limiter to every request under ``path_prefix``.

    Headers are attached to every limited response, including error replies
    produced by exception handlers and handlers returning their own
    ``Response``. Unhandled exceptions reach the server error middleware
    without them.

    Args:
        app: Wrapped ASGI application.
        path_prefix: Only paths equal to or below this prefix are counted.
    """

    def __init__(self, app: ASGIApp, path_prefix: str = "/api") -> None:
        super().__init__(app)
        self._path_prefix = path_prefix.rstrip("/")

    def _is_limited(self, path: str) -> bool:
        return path == self._path_prefix or path.startswith(f"{self._path_prefix}/")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._is_limited(request.url.path):
            return await call_next(request)

        limiter: FixedWindowRateLimiter = request.app.state.rate_limiter
        client_ip: str = (request.client.host if request.client else "") or "unknown"
        decision = limiter.hit(client_ip)

        if not decision.allowed:
            logger.warning("Rate limit exceeded", client_ip=client_ip, path=request.url.path)
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "Too many requests, please try again later."},
                headers={**decision.headers(), "Retry-After": str(decision.reset_after)},
            )

        response = await call_next(request)
        response.headers.update(decision.headers())
        return response

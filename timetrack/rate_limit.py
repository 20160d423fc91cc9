"""Fixed-window, per-client request rate limiting."""

import math
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from threading import Lock

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from timetrack.errors import ErrorEnvelope, too_many_requests


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Counts requests per client key inside a fixed time window.

    Held on ``app.state`` so every worker thread shares one instance.
    """

    def __init__(self, window_seconds: float, max_requests: int, clock=time.time):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = Lock()

    def now(self) -> float:
        return self._clock()

    def hit(self, key: str) -> _Window:
        """Record one request for ``key`` and return its current window."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                window = _Window(count=0, reset_at=now + self.window_seconds)
                self._windows[key] = window
            window.count += 1
            self._purge_expired(now)
            return window

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if now > window.reset_at]
        for key in expired:
            del self._windows[key]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def headers(self, window: _Window) -> dict[str, str]:
        """``X-RateLimit-*`` headers describing ``window``."""
        return {
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(max(0, self.max_requests - window.count)),
            "X-RateLimit-Reset": datetime.fromtimestamp(window.reset_at, UTC).isoformat(),
        }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply the app's shared ``RateLimiter`` to every request under ``path_prefix``.

    The limit headers are attached to every response on those paths,
    error responses included.
    """

    def __init__(self, app, path_prefix: str) -> None:
        super().__init__(app)
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        limiter: RateLimiter = request.app.state.rate_limiter
        key = request.client.host if request.client else "unknown"
        window = limiter.hit(key)
        limit_headers = limiter.headers(window)

        if window.count > limiter.max_requests:
            retry_after = max(1, math.ceil(window.reset_at - limiter.now()))
            exc = too_many_requests(
                f"Rate limit exceeded. Try again in {retry_after} seconds.", retry_after
            )
            return ErrorEnvelope(
                status_code=exc.status_code,
                code=exc.code,
                message=exc.message,
                headers={**limit_headers, **exc.headers},
            )

        response = await call_next(request)
        response.headers.update(limit_headers)
        return response

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

MIN_RPM = 10


@dataclass
class _Window:
    minute: int
    count: int = 0


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed one-minute window per client, /api/ paths only (best-effort,
    in-process). Configured from:
      MEMCALC_RATE_LIMIT_ENABLED=true/false
      MEMCALC_RATE_LIMIT_RPM=120
    """

    def __init__(self, app, enabled: bool = False, rpm: int = 120):
        super().__init__(app)
        self.enabled = enabled
        self.rpm = max(MIN_RPM, int(rpm))
        self._windows: Dict[str, _Window] = {}
        self._current_minute = -1

    @staticmethod
    def client_key(request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _hit(self, key: str) -> int:
        minute = int(time.time() // 60)
        if minute != self._current_minute:
            # Windows from earlier minutes can never limit again.
            self._windows = {k: w for k, w in self._windows.items() if w.minute == minute}
            self._current_minute = minute
        w = self._windows.get(key)
        if w is None or w.minute != minute:
            w = self._windows[key] = _Window(minute)
        w.count += 1
        return w.count

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled or not request.url.path.startswith("/api/"):
            return await call_next(request)

        if self._hit(self.client_key(request)) > self.rpm:
            return JSONResponse(
                status_code=429,
                content={"detail": f"Rate limit exceeded ({self.rpm} requests per minute)"},
                headers={"Retry-After": "60"},
            )
        return await call_next(request)

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from memcalc.api.observability.metrics import observe_request

log = logging.getLogger("memcalc.request")

REQUEST_ID_HEADER = "X-Request-Id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Per-request context:
      request.state.request_id          echoed back as X-Request-Id
      request.state.calculation_outcome set by /api/v1/memory/calculate
    Every request is counted and timed; /api/ requests get one log line.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = rid
        request.state.calculation_outcome = None

        start = time.perf_counter()
        resp = await call_next(request)
        elapsed = time.perf_counter() - start

        resp.headers[REQUEST_ID_HEADER] = rid

        observe_request(request.method, request.url.path, resp.status_code, elapsed)

        if request.url.path.startswith("/api/"):
            fields = {
                "event": "request",
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status_code": resp.status_code,
                "duration_ms": int(elapsed * 1000),
            }
            outcome = getattr(request.state, "calculation_outcome", None)
            if outcome:
                fields["outcome"] = outcome
            log.info("%s", fields)
        return resp

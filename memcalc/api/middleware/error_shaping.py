from __future__ import annotations

import logging
import traceback
from typing import Callable, Dict, Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from memcalc.core.calc.errors import MemoryCalculatorError

log = logging.getLogger("memcalc.errors")


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """
    - Calculator errors that escape a route become 400 with code/message/context
    - Anything else becomes a bare 500; the traceback is only logged
    - request_id is echoed in both cases when known
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except MemoryCalculatorError as e:
            log.warning("Calculator error: %s path=%s", e, request.url.path)
            return JSONResponse(status_code=400, content=self._payload(request, e.to_dict()))
        except Exception as e:
            log.error(
                "Unhandled error: %s rid=%s path=%s\n%s",
                str(e),
                self._rid(request),
                request.url.path,
                traceback.format_exc(),
            )
            return JSONResponse(status_code=500, content=self._payload(request, "Internal Server Error"))

    @staticmethod
    def _rid(request: Request):
        return getattr(request.state, "request_id", None) or request.headers.get("x-request-id")

    def _payload(self, request: Request, detail: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"detail": detail}
        rid = self._rid(request)
        if rid:
            payload["request_id"] = rid
        return payload

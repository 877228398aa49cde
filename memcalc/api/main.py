from __future__ import annotations

import os

from fastapi import FastAPI

from memcalc import __version__
from memcalc.api.endpoints import health
from memcalc.api.endpoints import metrics as metrics_ep
from memcalc.api.endpoints import metrics_export
from memcalc.api.endpoints.memory import router as memory_router
from memcalc.api.middleware.error_shaping import SafeErrorMiddleware
from memcalc.api.middleware.rate_limit import RateLimitMiddleware
from memcalc.api.middleware.request_context import RequestContextMiddleware


def _env_flag(name: str, default: str = "0") -> bool:
    return (os.getenv(name) or default).strip().lower() in ("1", "true", "yes")


def create_app() -> FastAPI:
    app = FastAPI(
        title="JVM Memory Calculator API",
        version=__version__,
    )

    # ------------------------------------------------------------
    # Middleware stack (ORDER MATTERS)
    # Starlette reverses add_middleware order: the LAST call is the OUTERMOST wrapper.
    # Runtime order (outermost -> innermost):
    #   SafeErrorMiddleware -> RateLimit -> RequestContext -> handler
    # ------------------------------------------------------------
    app.add_middleware(RequestContextMiddleware)

    rl_enabled = _env_flag("MEMCALC_RATE_LIMIT_ENABLED")
    rl_rpm = int((os.getenv("MEMCALC_RATE_LIMIT_RPM") or "120").strip())
    app.add_middleware(RateLimitMiddleware, enabled=rl_enabled, rpm=rl_rpm)

    app.add_middleware(SafeErrorMiddleware)

    app.include_router(health.router)
    app.include_router(metrics_ep.router)
    app.include_router(metrics_export.router)
    app.include_router(memory_router)

    return app


app = create_app()

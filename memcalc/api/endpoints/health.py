from __future__ import annotations

from fastapi import APIRouter

from memcalc.core.observability.metrics import inc_named

router = APIRouter()


@router.get("/health/live")
def live():
    inc_named("health_live")
    return {"status": "ok"}


@router.get("/health/ready")
def ready():
    """
    The calculator has no external dependencies; ready once the
    app has imported.
    """
    inc_named("health_ready")
    return {"status": "ready"}


@router.get("/api/v1/health/live")
def liveness():
    inc_named("health_live")
    return {"status": "alive"}

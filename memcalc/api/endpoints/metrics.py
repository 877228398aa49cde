from fastapi import APIRouter

from memcalc.core.observability.metrics import snapshot_named

router = APIRouter()


@router.get("/api/v1/metrics/snapshot")
def metrics_snapshot():
    return snapshot_named()

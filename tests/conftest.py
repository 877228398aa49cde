import pytest
from fastapi.testclient import TestClient

from memcalc.api.main import app
from memcalc.core.observability.metrics import reset_metrics

_CALCULATOR_ENV = (
    "BPL_JVM_TOTAL_MEMORY",
    "BPL_JVM_THREAD_COUNT",
    "BPL_JVM_LOADED_CLASS_COUNT",
    "BPL_JVM_HEAD_ROOM",
    "BPL_JVM_HEADROOM",
    "BPI_APPLICATION_PATH",
    "BPI_JVM_CLASS_COUNT",
    "BPI_CLASS_ADJUSTMENT_FACTOR",
    "BPI_CLASS_STATIC_ADJUSTMENT",
    "JAVA_TOOL_OPTIONS",
    "MEMCALC_CONFIG_FILE",
    "MEMCALC_FLAG_MATCHING",
    "QUIET",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    # The calculator reads buildpack variables; never inherit them from the host.
    for key in _CALCULATOR_ENV:
        monkeypatch.delenv(key, raising=False)
    reset_metrics()


@pytest.fixture()
def client():
    return TestClient(app)

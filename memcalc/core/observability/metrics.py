from __future__ import annotations

from collections import Counter
from typing import Dict

from prometheus_client import Counter as PromCounter

# Named counters (in-process snapshot, served by /api/v1/metrics/snapshot)
_NAMED = Counter()

_PROM_CALCULATIONS = PromCounter(
    "memcalc_calculations_total",
    "Memory layout calculations by outcome",
    ["outcome"],
)


def reset_metrics() -> None:
    """
    Test helper: clears in-process counters to avoid cross-test leakage.
    Prometheus counters are process-global and are not reset.
    """
    _NAMED.clear()


def inc_named(name: str, value: int = 1) -> None:
    if not name:
        return
    _NAMED[name] += int(value)


def record_calculation(outcome: str) -> None:
    """outcome: "ok" or an ErrorCode value."""
    o = outcome or "unknown"
    _NAMED["calculations_total"] += 1
    _NAMED[f"calculations_{o}"] += 1
    _PROM_CALCULATIONS.labels(outcome=o).inc()


def snapshot_named() -> Dict[str, int]:
    return dict(_NAMED)

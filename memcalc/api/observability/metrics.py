from __future__ import annotations

import re

from prometheus_client import Counter, Histogram

# Calculations are in-memory arithmetic plus an optional class scan.
_LATENCY_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)

_HEX_SEGMENT = re.compile(r"/[0-9a-fA-F]{16,}")
_NUMERIC_SEGMENT = re.compile(r"/\d+")

HTTP_REQUESTS_TOTAL = Counter(
    "memcalc_http_requests_total",
    "HTTP requests by method, normalized path and status",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "memcalc_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=_LATENCY_BUCKETS,
)


def normalize_path(path: str) -> str:
    """Collapse id-like path segments so label cardinality stays bounded."""
    p = path or "/"
    p = _HEX_SEGMENT.sub("/:hex", p)
    return _NUMERIC_SEGMENT.sub("/:id", p)


def observe_request(method: str, path: str, status: int, seconds: float) -> None:
    p = normalize_path(path)
    m = method.upper()
    HTTP_REQUESTS_TOTAL.labels(method=m, path=p, status=str(status)).inc()
    HTTP_REQUEST_DURATION_SECONDS.labels(method=m, path=p).observe(seconds)

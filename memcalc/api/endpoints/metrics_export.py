"""Prometheus scrape endpoint.

Honors the scraper's Accept header (text format or OpenMetrics) and the
optional `name[]` query filter, as prometheus_client's own exporters do.
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query, Request, Response
from prometheus_client import REGISTRY
from prometheus_client.exposition import choose_encoder

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
def prometheus_metrics(request: Request, name: Optional[List[str]] = Query(default=None, alias="name[]")) -> Response:
    encoder, content_type = choose_encoder(request.headers.get("accept"))
    registry = REGISTRY.restricted_registry(name) if name else REGISTRY
    return Response(encoder(registry), media_type=content_type)

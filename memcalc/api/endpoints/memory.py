from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request

from memcalc.api.schemas.memory import (
    CalculateRequest,
    CalculateResponse,
    ErrorResponse,
    ParsedToken,
    ParseFlagsRequest,
    ParseFlagsResponse,
)
from memcalc.core.calc.calculator import CLASS_OVERHEAD, CLASS_SIZE, MAX_HEAD_ROOM
from memcalc.core.calc.errors import MemoryCalculatorError, RegionOverflowError, SizeFormatError
from memcalc.core.calc.flags import parse_flags
from memcalc.core.calc.regions import (
    DEFAULT_DIRECT_MEMORY,
    DEFAULT_RESERVED_CODE_CACHE,
    DEFAULT_STACK,
    FLAG_REGION_TYPES,
    match_codec,
)
from memcalc.core.config import CalculatorConfig
from memcalc.core.detection.memory_parser import parse_memory_string
from memcalc.core.runtime.memory_calculator import MemoryCalculatorService

router = APIRouter(prefix="/api/v1/memory", tags=["memory"])

service = MemoryCalculatorService()


def _error_status(exc: MemoryCalculatorError) -> int:
    # Budget too small for the requested layout vs. malformed input.
    return 422 if isinstance(exc, RegionOverflowError) else 400


@router.post(
    "/calculate",
    response_model=CalculateResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def calculate(req: CalculateRequest, request: Request):
    if req.total_memory is not None:
        try:
            parse_memory_string(req.total_memory)
        except SizeFormatError as exc:
            request.state.calculation_outcome = exc.code.value
            raise HTTPException(status_code=400, detail=exc.to_dict())

    config = CalculatorConfig(
        total_memory=req.total_memory,
        thread_count=req.thread_count,
        loaded_class_count=req.loaded_class_count,
        head_room=req.head_room,
        java_tool_options=req.flags,
        match_strategy=req.match_strategy,
    )

    try:
        result = service.execute(config)
    except MemoryCalculatorError as exc:
        inner = exc.cause if isinstance(exc.cause, MemoryCalculatorError) else exc
        request.state.calculation_outcome = inner.code.value
        raise HTTPException(status_code=_error_status(inner), detail=inner.to_dict())

    request.state.calculation_outcome = "ok"
    return result.to_dict()


@router.post("/flags/parse", response_model=ParseFlagsResponse)
def parse_flags_endpoint(req: ParseFlagsRequest):
    tokens = []
    for token in parse_flags(req.flags):
        codec = match_codec(token, req.match_strategy)
        tokens.append(ParsedToken(token=token, region=codec.region_type.field_name if codec else None))
    return ParseFlagsResponse(tokens=tokens)


@router.get("/defaults")
def defaults() -> Dict[str, Any]:
    return {
        "regions": {
            r.field_name: {"bytes": r.value, "flag": r.render()}
            for r in (DEFAULT_DIRECT_MEMORY, DEFAULT_RESERVED_CODE_CACHE, DEFAULT_STACK)
        },
        "flag_prefixes": {t.field_name: t.flag_prefix for t in FLAG_REGION_TYPES},
        "metaspace": {"class_overhead": CLASS_OVERHEAD, "class_size": CLASS_SIZE},
        "max_head_room": MAX_HEAD_ROOM,
    }

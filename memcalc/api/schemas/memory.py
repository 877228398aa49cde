from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from memcalc.core.calc.calculator import MAX_HEAD_ROOM
from memcalc.core.calc.regions import MatchStrategy


class CalculateRequest(BaseModel):
    total_memory: Optional[str] = Field(
        default=None,
        description="Total memory, e.g. '2G', '1.5G', '2147483648'. Detected from the host when omitted.",
    )
    thread_count: int = Field(default=250, ge=0)
    loaded_class_count: int = Field(default=35_000, ge=0)
    head_room: int = Field(default=0, ge=0, le=MAX_HEAD_ROOM)
    flags: str = Field(default="", description="Existing JVM options; region flags found here are kept.")
    match_strategy: MatchStrategy = MatchStrategy.STRICT


class RegionOut(BaseModel):
    bytes: int
    size: str
    provenance: str
    flag: Optional[str] = None


class CalculateResponse(BaseModel):
    total_memory: int
    total_memory_source: str
    thread_count: int
    loaded_class_count: int
    head_room: int
    regions: Dict[str, RegionOut]
    calculated_options: List[str] = Field(default_factory=list)
    java_tool_options: str


class ParseFlagsRequest(BaseModel):
    flags: str = ""
    match_strategy: MatchStrategy = MatchStrategy.STRICT


class ParsedToken(BaseModel):
    token: str
    region: Optional[str] = None


class ParseFlagsResponse(BaseModel):
    tokens: List[ParsedToken]


class ErrorDetail(BaseModel):
    code: str
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    detail: ErrorDetail

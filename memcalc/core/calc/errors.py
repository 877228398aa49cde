from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    INVALID_MEMORY_FORMAT = "INVALID_MEMORY_FORMAT"
    INVALID_FLAG = "INVALID_FLAG"
    FIXED_REGION_OVERFLOW = "FIXED_REGION_OVERFLOW"
    NON_HEAP_REGION_OVERFLOW = "NON_HEAP_REGION_OVERFLOW"
    ALL_REGION_OVERFLOW = "ALL_REGION_OVERFLOW"
    TOKENIZATION_ANOMALY = "TOKENIZATION_ANOMALY"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    MEMORY_CALCULATION = "MEMORY_CALCULATION_ERROR"


class MemoryCalculatorError(Exception):
    """Base error: human message plus machine-readable code and context."""

    code: ErrorCode = ErrorCode.MEMORY_CALCULATION

    def __init__(
        self,
        message: str,
        *,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": str(self),
            "context": self.context,
        }


class SizeFormatError(MemoryCalculatorError):
    code = ErrorCode.INVALID_MEMORY_FORMAT

    def __init__(self, text: str, reason: str):
        super().__init__(f"memory size {text!r} {reason}", context={"input": text})
        self.text = text


class RegionParseError(MemoryCalculatorError):
    """A token carried a region prefix but its size was unusable."""

    code = ErrorCode.INVALID_FLAG

    def __init__(self, region: str, token: str, cause: BaseException):
        super().__init__(
            f"unable to parse {region}",
            context={"region": region, "flag": token},
            cause=cause,
        )
        self.region = region
        self.token = token


class TokenizationAnomaly(MemoryCalculatorError):
    # Reserved; parse_flags tolerates malformed quoting.
    code = ErrorCode.TOKENIZATION_ANOMALY


class ConfigurationError(MemoryCalculatorError):
    code = ErrorCode.INVALID_CONFIGURATION

    def __init__(self, parameter: str, value: Any, reason: str):
        super().__init__(
            f"invalid configuration for {parameter}: {reason}",
            context={"parameter": parameter, "value": value},
        )
        self.parameter = parameter
        self.value = value


class RegionOverflowError(MemoryCalculatorError):
    """A budget checkpoint found the regions larger than total memory."""

    stage: str = ""

    def __init__(self, *, required: int, available: int, regions: Dict[str, int], description: str):
        from .size import Size

        shortfall = required - available
        super().__init__(
            f"{self.stage} memory regions require {Size(required)} which is greater than "
            f"{Size(available)} available for allocation: {description} "
            f"(short by {shortfall} bytes)",
            context={
                "stage": self.stage,
                "required": required,
                "available": available,
                "shortfall": shortfall,
                "regions": dict(regions),
            },
        )
        self.required = required
        self.available = available
        self.shortfall = shortfall
        self.regions = dict(regions)


class FixedRegionOverflowError(RegionOverflowError):
    code = ErrorCode.FIXED_REGION_OVERFLOW
    stage = "fixed"


class NonHeapRegionOverflowError(RegionOverflowError):
    code = ErrorCode.NON_HEAP_REGION_OVERFLOW
    stage = "non-heap"


class AllRegionOverflowError(RegionOverflowError):
    code = ErrorCode.ALL_REGION_OVERFLOW
    stage = "all"

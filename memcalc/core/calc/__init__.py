from .size import GIBI, KIBI, MEBI, TEBI, Provenance, Size, format_size, parse_size
from .flags import parse_flags
from .regions import (
    DirectMemory,
    HeadRoom,
    Heap,
    MatchStrategy,
    Metaspace,
    Region,
    RegionCodec,
    ReservedCodeCache,
    Stack,
    codecs_for,
)
from .memory_regions import MemoryRegions
from .calculator import CLASS_OVERHEAD, CLASS_SIZE, Calculator, calculate

__all__ = [
    "KIBI",
    "MEBI",
    "GIBI",
    "TEBI",
    "Provenance",
    "Size",
    "format_size",
    "parse_size",
    "parse_flags",
    "DirectMemory",
    "HeadRoom",
    "Heap",
    "MatchStrategy",
    "Metaspace",
    "Region",
    "RegionCodec",
    "ReservedCodeCache",
    "Stack",
    "codecs_for",
    "MemoryRegions",
    "CLASS_OVERHEAD",
    "CLASS_SIZE",
    "Calculator",
    "calculate",
]

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

from .regions import (
    DEFAULT_DIRECT_MEMORY,
    DEFAULT_RESERVED_CODE_CACHE,
    DEFAULT_STACK,
    DirectMemory,
    HeadRoom,
    Heap,
    Metaspace,
    Region,
    ReservedCodeCache,
    Stack,
)


@dataclass(frozen=True)
class MemoryRegions:
    """One computed JVM memory layout.

    direct_memory, reserved_code_cache and stack always carry a value
    (seeded from defaults). heap, metaspace and head_room stay None until
    the calculator fills them in.
    """

    direct_memory: DirectMemory = DEFAULT_DIRECT_MEMORY
    reserved_code_cache: ReservedCodeCache = DEFAULT_RESERVED_CODE_CACHE
    stack: Stack = DEFAULT_STACK
    heap: Optional[Heap] = None
    metaspace: Optional[Metaspace] = None
    head_room: Optional[HeadRoom] = None

    def fixed_regions_size(self, thread_count: int) -> int:
        if self.metaspace is None:
            raise ValueError("unable to calculate fixed regions size without metaspace")
        return (
            self.direct_memory.value
            + self.metaspace.value
            + self.reserved_code_cache.value
            + self.stack.value * thread_count
        )

    def non_heap_regions_size(self, thread_count: int) -> int:
        if self.head_room is None:
            raise ValueError("unable to calculate non-heap regions size without headroom")
        return self.head_room.value + self.fixed_regions_size(thread_count)

    def all_regions_size(self, thread_count: int) -> int:
        if self.heap is None:
            raise ValueError("unable to calculate all regions size without heap")
        return self.heap.value + self.non_heap_regions_size(thread_count)

    # ------------------------------------------------------------------
    # Human-readable breakdowns used in overflow errors
    # ------------------------------------------------------------------
    def fixed_regions_string(self, thread_count: int) -> str:
        parts: List[str] = [self.direct_memory.describe()]
        if self.metaspace is not None:
            parts.append(self.metaspace.describe())
        parts.append(self.reserved_code_cache.describe())
        parts.append(f"{self.stack.describe()} * {thread_count} threads")
        return ", ".join(parts)

    def non_heap_regions_string(self, thread_count: int) -> str:
        parts: List[str] = []
        if self.head_room is not None:
            parts.append(self.head_room.describe())
        parts.append(self.fixed_regions_string(thread_count))
        return ", ".join(parts)

    def all_regions_string(self, thread_count: int) -> str:
        parts: List[str] = []
        if self.heap is not None:
            parts.append(self.heap.describe())
        parts.append(self.non_heap_regions_string(thread_count))
        return ", ".join(parts)

    def fixed_regions_breakdown(self, thread_count: int) -> Dict[str, int]:
        out = {
            "direct_memory": self.direct_memory.value,
            "reserved_code_cache": self.reserved_code_cache.value,
            "stack_total": self.stack.value * thread_count,
        }
        if self.metaspace is not None:
            out["metaspace"] = self.metaspace.value
        return out

    def regions(self) -> List[Region]:
        """All regions that are set, in field order."""
        out: List[Region] = []
        for f in fields(self):
            r = getattr(self, f.name)
            if r is not None:
                out.append(r)
        return out

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for r in self.regions():
            out[r.field_name] = {
                "bytes": r.value,
                "size": str(r.size),
                "provenance": r.provenance.value,
                "flag": r.render() if r.flag_prefix else None,
            }
        return out

"""
JVM memory layout calculator.

Splits a fixed total-memory budget into heap, metaspace, thread stacks,
direct memory, code cache and head room. Regions the caller already pinned
with JVM flags are kept as-is; everything else is defaulted or derived.

Budget is checked at three points, in order:
  1) fixed regions (direct memory + metaspace + code cache + stack * threads)
  2) non-heap regions (fixed + head room)  -> heap gets the remainder
  3) all regions (non-heap + heap)         -> catches an oversized -Xmx
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Union

from .errors import (
    AllRegionOverflowError,
    ConfigurationError,
    FixedRegionOverflowError,
    MemoryCalculatorError,
    NonHeapRegionOverflowError,
    RegionParseError,
)
from .flags import parse_flags
from .memory_regions import MemoryRegions
from .regions import HeadRoom, Heap, MatchStrategy, Metaspace, match_codec
from .size import Provenance, Size

log = logging.getLogger("memcalc.calc")

# Metaspace estimate: fixed JVM class-loading overhead plus a per-class cost.
CLASS_OVERHEAD = 14_000_000
CLASS_SIZE = 5_800

MAX_HEAD_ROOM = 99


@dataclass(frozen=True)
class Calculator:
    total_memory: Size
    thread_count: int = 250
    loaded_class_count: int = 0
    head_room: int = 0
    match_strategy: MatchStrategy = MatchStrategy.STRICT

    def validate(self) -> None:
        if not 0 <= self.head_room <= MAX_HEAD_ROOM:
            raise ConfigurationError("head_room", self.head_room, f"must be between 0 and {MAX_HEAD_ROOM}")
        if self.thread_count < 0:
            raise ConfigurationError("thread_count", self.thread_count, "must not be negative")
        if self.loaded_class_count < 0:
            raise ConfigurationError("loaded_class_count", self.loaded_class_count, "must not be negative")
        if self.total_memory.value <= 0:
            raise ConfigurationError("total_memory", self.total_memory.value, "must be greater than zero")

    def calculate(self, flags: str = "") -> MemoryRegions:
        self.validate()

        m = MemoryRegions()
        m = self._apply_flags(flags, m)
        m = self._metaspace_if_needed(m)
        m = replace(m, head_room=self._head_room())
        m = self._validate_and_calculate_heap(m)

        log.debug(
            "memory regions computed: %s (total=%s threads=%d classes=%d head_room=%d%%)",
            m.all_regions_string(self.thread_count),
            self.total_memory,
            self.thread_count,
            self.loaded_class_count,
            self.head_room,
        )
        return m

    # ------------------------------------------------------------------
    # Stage 1: user overrides
    # ------------------------------------------------------------------
    def _apply_flags(self, flags: str, m: MemoryRegions) -> MemoryRegions:
        for token in parse_flags(flags):
            codec = match_codec(token, self.match_strategy)
            if codec is None:
                continue

            try:
                region = codec.parse(token)
            except MemoryCalculatorError as e:
                raise RegionParseError(codec.name, token, e) from e

            m = replace(m, **{region.field_name: region.stamped(Provenance.USER_CONFIGURED)})
        return m

    # ------------------------------------------------------------------
    # Stage 2: derived regions
    # ------------------------------------------------------------------
    def _metaspace_if_needed(self, m: MemoryRegions) -> MemoryRegions:
        if m.metaspace is not None:
            return m
        value = CLASS_OVERHEAD + self.loaded_class_count * CLASS_SIZE
        return replace(m, metaspace=Metaspace.of(value, Provenance.CALCULATED))

    def _head_room(self) -> HeadRoom:
        # Integer floor division; no float intermediate.
        value = self.total_memory.value * self.head_room // 100
        return HeadRoom.of(value, Provenance.CALCULATED)

    # ------------------------------------------------------------------
    # Stage 3: budget checkpoints
    # ------------------------------------------------------------------
    def _validate_and_calculate_heap(self, m: MemoryRegions) -> MemoryRegions:
        total = self.total_memory.value
        threads = self.thread_count

        fixed = m.fixed_regions_size(threads)
        if fixed > total:
            raise FixedRegionOverflowError(
                required=fixed,
                available=total,
                regions=m.fixed_regions_breakdown(threads),
                description=m.fixed_regions_string(threads),
            )

        non_heap = m.non_heap_regions_size(threads)
        if non_heap > total:
            raise NonHeapRegionOverflowError(
                required=non_heap,
                available=total,
                regions=_with(m.fixed_regions_breakdown(threads), head_room=m.head_room),
                description=m.non_heap_regions_string(threads),
            )

        if m.heap is None:
            m = replace(m, heap=Heap.of(total - non_heap, Provenance.CALCULATED))

        everything = m.all_regions_size(threads)
        if everything > total:
            raise AllRegionOverflowError(
                required=everything,
                available=total,
                regions=_with(m.fixed_regions_breakdown(threads), head_room=m.head_room, heap=m.heap),
                description=m.all_regions_string(threads),
            )

        return m


def _with(breakdown: dict, **regions) -> dict:
    out = dict(breakdown)
    for k, r in regions.items():
        if r is not None:
            out[k] = r.value
    return out


def calculate(
    *,
    total_memory: Union[Size, int],
    thread_count: int = 250,
    loaded_class_count: int = 0,
    head_room: int = 0,
    flags: str = "",
    match_strategy: MatchStrategy = MatchStrategy.STRICT,
) -> MemoryRegions:
    """Functional entrypoint around Calculator."""
    if isinstance(total_memory, int):
        if total_memory <= 0:
            raise ConfigurationError("total_memory", total_memory, "must be greater than zero")
        total_memory = Size(total_memory)
    return Calculator(
        total_memory=total_memory,
        thread_count=thread_count,
        loaded_class_count=loaded_class_count,
        head_room=head_room,
        match_strategy=match_strategy,
    ).calculate(flags)

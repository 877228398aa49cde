from __future__ import annotations

from typing import Iterable, List, Optional

from memcalc.core.calc.memory_regions import MemoryRegions
from memcalc.core.calc.size import GIBI, KIBI, MEBI, Provenance

_SEPARATOR = "=" * 50
_RULE = "-" * 30

_LABELS = (
    ("heap", "Max Heap Size:         "),
    ("stack", "Thread Stack Size:     "),
    ("metaspace", "Max Metaspace Size:    "),
    ("reserved_code_cache", "Code Cache Size:       "),
    ("direct_memory", "Direct Memory Size:    "),
)


def calculated_options(regions: MemoryRegions) -> List[str]:
    """Flags for every region the caller did not set themselves.

    UserConfigured regions are already in the caller's options string.
    """
    out: List[str] = []
    for region in (
        regions.direct_memory,
        regions.heap,
        regions.metaspace,
        regions.reserved_code_cache,
        regions.stack,
    ):
        if region is None or region.provenance is Provenance.USER_CONFIGURED:
            continue
        out.append(region.render())
    return out


def build_java_tool_options(existing: Optional[str], calculated: Iterable[str]) -> str:
    parts = [existing] if existing else []
    parts.extend(calculated)
    return " ".join(parts)


def format_memory(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "Unknown"
    if num_bytes >= GIBI:
        return f"{num_bytes / GIBI:.2f} GB"
    if num_bytes >= MEBI:
        return f"{num_bytes / MEBI:.0f} MB"
    if num_bytes >= KIBI:
        return f"{num_bytes / KIBI:.0f} KB"
    return f"{num_bytes} B"


def render_report(
    regions: MemoryRegions,
    *,
    total_memory: int,
    thread_count: int,
    loaded_class_count: int,
    head_room: int,
    java_tool_options: str,
) -> str:
    lines = [
        "",
        _SEPARATOR,
        "JVM Memory Configuration",
        _SEPARATOR,
        f"Total Memory:     {format_memory(total_memory)}",
        f"Thread Count:     {thread_count}",
        f"Loaded Classes:   {loaded_class_count}",
        f"Head Room:        {head_room}%",
        "",
        "Calculated JVM Arguments:",
        _RULE,
    ]
    for field_name, label in _LABELS:
        region = getattr(regions, field_name)
        if region is not None:
            lines.append(f"{label}{region.size}")

    lines += [
        "",
        "Complete JVM Options:",
        _RULE,
        f"JAVA_TOOL_OPTIONS={java_tool_options}",
    ]
    return "\n".join(lines)

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from memcalc.core.calc.errors import SizeFormatError
from memcalc.core.calc.size import GIBI, TEBI, Size

from .cgroups import CgroupsDetector
from .host import HostDetector
from .memory_parser import parse_memory_string

log = logging.getLogger("memcalc.detection")

MAX_JVM_SIZE = 64 * TEBI
FALLBACK_TOTAL_MEMORY = GIBI


@dataclass(frozen=True)
class ResolvedMemory:
    size: Size
    source: str  # override | cgroups_v2 | cgroups_v1 | host | fallback


def resolve_total_memory(
    override: Optional[str] = None,
    *,
    cgroups: Optional[CgroupsDetector] = None,
    host: Optional[HostDetector] = None,
) -> ResolvedMemory:
    """Resolution order:

      1) explicit override (decimal units accepted)
      2) cgroup v2 limit
      3) cgroup v1 limit
      4) host MemTotal
      5) 1 GiB fallback

    The result is capped at 64 TiB.
    """
    cgroups = cgroups or CgroupsDetector()
    host = host or HostDetector()

    value: Optional[int] = None
    source = "fallback"

    if override is not None and override.strip():
        try:
            value = parse_memory_string(override)
            source = "override"
            log.info("Using specified memory: %s", Size(value))
        except SizeFormatError as exc:
            log.warning("Unable to parse total memory %r: %s, falling back to detection", override, exc)

    if value is None:
        value = cgroups.read_v2()
        source = "cgroups_v2"
    if value is None:
        value = cgroups.read_v1()
        source = "cgroups_v1"
    if value is None:
        value = host.detect()
        source = "host"
        if value is not None:
            log.info("Calculating JVM memory based on %s host memory", Size(value))

    if not value:
        log.warning("Unable to determine memory limit. Configuring JVM for 1G container.")
        return ResolvedMemory(Size(FALLBACK_TOTAL_MEMORY), "fallback")

    if value > MAX_JVM_SIZE:
        log.warning("Container memory limit too large. Configuring JVM for 64T container.")
        return ResolvedMemory(Size(MAX_JVM_SIZE), source)

    return ResolvedMemory(Size(value), source)

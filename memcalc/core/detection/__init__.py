from .cgroups import CgroupsDetector
from .host import HostDetector
from .memory_parser import parse_memory_string
from .total_memory import ResolvedMemory, resolve_total_memory

__all__ = [
    "CgroupsDetector",
    "HostDetector",
    "parse_memory_string",
    "ResolvedMemory",
    "resolve_total_memory",
]

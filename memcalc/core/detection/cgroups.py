from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from memcalc.core.calc.size import TEBI

log = logging.getLogger("memcalc.detection")

CGROUPS_V2_PATH = Path("/sys/fs/cgroup/memory.max")
CGROUPS_V1_PATH = Path("/sys/fs/cgroup/memory/memory.limit_in_bytes")

# Anything above this is the kernel's "unlimited" sentinel for our purposes.
MAX_REALISTIC_MEMORY = TEBI


@dataclass
class CgroupsDetector:
    """Reads the container memory limit from cgroup v2, then v1."""

    v2_path: Path = CGROUPS_V2_PATH
    v1_path: Path = CGROUPS_V1_PATH

    def detect(self) -> Optional[int]:
        limit = self.read_v2()
        if limit:
            return limit
        limit = self.read_v1()
        if limit:
            return limit
        return None

    def read_v2(self) -> Optional[int]:
        line = _first_line(self.v2_path)
        if line is None or line == "max":
            return None
        return _limit(line, self.v2_path)

    def read_v1(self) -> Optional[int]:
        line = _first_line(self.v1_path)
        if line is None:
            return None
        return _limit(line, self.v1_path)


def _first_line(path: Path) -> Optional[str]:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        log.warning("Unable to read %s: %s", path, exc)
        return None
    lines = text.splitlines()
    return lines[0].strip() if lines else None


def _limit(line: str, path: Path) -> Optional[int]:
    try:
        value = int(line)
    except ValueError:
        log.warning("Unable to convert memory limit %r from %s to an integer", line, path)
        return None
    if value <= 0 or value > MAX_REALISTIC_MEMORY:
        return None
    return value

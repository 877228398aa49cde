from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from memcalc.core.calc.size import KIBI

log = logging.getLogger("memcalc.detection")

MEMINFO_PATH = Path("/proc/meminfo")


@dataclass
class HostDetector:
    meminfo_path: Path = MEMINFO_PATH

    def detect(self) -> Optional[int]:
        if not sys.platform.startswith("linux") and self.meminfo_path == MEMINFO_PATH:
            return None
        return self.read_meminfo()

    def read_meminfo(self) -> Optional[int]:
        try:
            text = Path(self.meminfo_path).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            log.warning("failed to read %s: %s", self.meminfo_path, exc)
            return None
        return parse_meminfo(text)


def parse_meminfo(text: str, key: str = "MemTotal") -> Optional[int]:
    """Return the byte value of `key` from /proc/meminfo content.

    Lines look like "MemTotal:        8062332 kB".
    """
    prefix = f"{key}:"
    for raw in text.splitlines():
        line = raw.strip()
        if not line.startswith(prefix):
            continue
        parts = line.split()
        if len(parts) < 2:
            continue
        try:
            value = int(parts[1])
        except ValueError:
            log.warning("Unable to convert %s value %r to an integer", key, parts[1])
            return None
        unit = parts[2].lower() if len(parts) > 2 else "b"
        return value * {"kb": KIBI, "mb": KIBI * KIBI, "gb": KIBI * KIBI * KIBI}.get(unit, 1)
    return None

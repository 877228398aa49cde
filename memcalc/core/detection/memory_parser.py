"""
Total-memory string parser.

This grammar is looser than the JVM flag grammar in memcalc.core.calc.size:
decimals ("1.5G") and two-letter units ("512MB") are accepted because the
value comes from humans and environment variables, not from JVM options.
"""
from __future__ import annotations

import math
import re

from memcalc.core.calc.errors import SizeFormatError
from memcalc.core.calc.size import GIBI, KIBI, MEBI, TEBI

MAX_MEMORY_SIZE = 1_024 * TEBI  # 1 PiB
_MAX_DIGITS = len(str(MAX_MEMORY_SIZE))

_UNITS = {
    "": 1,
    "B": 1,
    "K": KIBI,
    "KB": KIBI,
    "M": MEBI,
    "MB": MEBI,
    "G": GIBI,
    "GB": GIBI,
    "T": TEBI,
    "TB": TEBI,
}

_INTEGER_RE = re.compile(r"^-?[0-9]+$")
_NUMBER_UNIT_RE = re.compile(r"^([0-9.]*)(.*)$")


def parse_memory_string(text: str) -> int:
    """Parse "2G", "512MB", "1.5g", "2147483648" into bytes."""
    if not text or not text.strip():
        raise SizeFormatError(text or "", "is empty")

    t = text.strip().upper()

    if _INTEGER_RE.match(t):
        if len(t.lstrip("-").lstrip("0")) > _MAX_DIGITS:
            raise SizeFormatError(t, "exceeds the maximum supported size of 1 PiB")
        return _bounded(int(t), t)

    m = _NUMBER_UNIT_RE.match(t)
    number, unit = m.group(1), m.group(2).strip()

    if not number:
        raise SizeFormatError(t, "has no numeric value")

    try:
        num = float(number)
    except ValueError:
        raise SizeFormatError(t, f"has an invalid numeric value {number!r}") from None

    if unit not in _UNITS:
        raise SizeFormatError(t, f"has an unsupported unit {unit!r}")

    scaled = num * _UNITS[unit]
    if not math.isfinite(scaled):
        raise SizeFormatError(t, "exceeds the maximum supported size of 1 PiB")
    return _bounded(int(scaled), t)


def _bounded(value: int, text: str) -> int:
    if value < 0:
        raise SizeFormatError(text, "is negative")
    if value > MAX_MEMORY_SIZE:
        raise SizeFormatError(text, "exceeds the maximum supported size of 1 PiB")
    return value

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum

from .errors import SizeFormatError


KIBI = 1_024
MEBI = 1_024 * KIBI
GIBI = 1_024 * MEBI
TEBI = 1_024 * GIBI

INT64_MAX = (1 << 63) - 1
_INT64_DIGITS = len(str(INT64_MAX))

SIZE_PATTERN = r"([0-9]+)([kmgtKMGT]?)"
SIZE_RE = re.compile(rf"^{SIZE_PATTERN}$")

_MULTIPLIERS = {
    "": 1,
    "k": KIBI,
    "m": MEBI,
    "g": GIBI,
    "t": TEBI,
}


class Provenance(str, Enum):
    UNKNOWN = "unknown"
    DEFAULT = "default"
    USER_CONFIGURED = "user_configured"
    CALCULATED = "calculated"


@dataclass(frozen=True)
class Size:
    """A byte count plus where it came from.

    Values are whole bytes in the signed 64-bit range. Provenance decides
    whether the calculator may still replace the value (DEFAULT, CALCULATED)
    or must leave it alone (USER_CONFIGURED).
    """

    value: int
    provenance: Provenance = Provenance.UNKNOWN

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"memory size must not be negative, got {self.value}")

    def with_provenance(self, provenance: Provenance) -> "Size":
        return replace(self, provenance=provenance)

    def __str__(self) -> str:
        return format_size(self)


def parse_size(text: str) -> Size:
    """Parse "<digits>[KMGT]" (any case) into a Size.

    Units are binary. No decimals, no inner whitespace.
    """
    t = (text or "").strip()

    m = SIZE_RE.match(t)
    if m is None:
        raise SizeFormatError(t, f"does not match pattern {SIZE_RE.pattern!r}")

    digits, unit = m.groups()
    if len(digits.lstrip("0")) > _INT64_DIGITS:
        raise SizeFormatError(t, "exceeds the signed 64-bit byte range")
    size = int(digits) * _MULTIPLIERS[unit.lower()]
    if size > INT64_MAX:
        raise SizeFormatError(t, "exceeds the signed 64-bit byte range")

    return Size(value=size)


def format_size(size: Size) -> str:
    # Truncates below 1K; values produced by the calculator are whole units.
    kib = size.value // KIBI

    if kib == 0:
        return "0"
    if kib % GIBI == 0:
        return f"{kib // GIBI}T"
    if kib % MEBI == 0:
        return f"{kib // MEBI}G"
    if kib % KIBI == 0:
        return f"{kib // KIBI}M"
    return f"{kib}K"

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import lru_cache
from typing import ClassVar, Optional, Pattern, Tuple, Type, TypeVar

from .errors import SizeFormatError
from .size import MEBI, SIZE_PATTERN, Provenance, Size, parse_size


R = TypeVar("R", bound="Region")


class MatchStrategy(str, Enum):
    # STRICT: the whole token must match prefix + size grammar.
    # PREFIX: only the prefix is checked; parse() validates the size.
    STRICT = "strict"
    PREFIX = "prefix"


@dataclass(frozen=True)
class Region:
    size: Size

    name: ClassVar[str] = "region"
    field_name: ClassVar[str] = ""
    flag_prefix: ClassVar[Optional[str]] = None

    @property
    def value(self) -> int:
        return self.size.value

    @property
    def provenance(self) -> Provenance:
        return self.size.provenance

    @classmethod
    def of(cls: Type[R], value: int, provenance: Provenance = Provenance.UNKNOWN) -> R:
        return cls(Size(value=value, provenance=provenance))

    def stamped(self: R, provenance: Provenance) -> R:
        return replace(self, size=self.size.with_provenance(provenance))

    def render(self) -> str:
        if self.flag_prefix is None:
            raise ValueError(f"{self.name} has no JVM flag")
        return f"{self.flag_prefix}{self.size}"

    def describe(self) -> str:
        return self.render()


@dataclass(frozen=True)
class DirectMemory(Region):
    name: ClassVar[str] = "direct memory"
    field_name: ClassVar[str] = "direct_memory"
    flag_prefix: ClassVar[Optional[str]] = "-XX:MaxDirectMemorySize="


@dataclass(frozen=True)
class Heap(Region):
    name: ClassVar[str] = "heap"
    field_name: ClassVar[str] = "heap"
    flag_prefix: ClassVar[Optional[str]] = "-Xmx"


@dataclass(frozen=True)
class Metaspace(Region):
    name: ClassVar[str] = "metaspace"
    field_name: ClassVar[str] = "metaspace"
    flag_prefix: ClassVar[Optional[str]] = "-XX:MaxMetaspaceSize="


@dataclass(frozen=True)
class ReservedCodeCache(Region):
    name: ClassVar[str] = "reserved code cache"
    field_name: ClassVar[str] = "reserved_code_cache"
    flag_prefix: ClassVar[Optional[str]] = "-XX:ReservedCodeCacheSize="


@dataclass(frozen=True)
class Stack(Region):
    name: ClassVar[str] = "stack"
    field_name: ClassVar[str] = "stack"
    flag_prefix: ClassVar[Optional[str]] = "-Xss"


@dataclass(frozen=True)
class HeadRoom(Region):
    name: ClassVar[str] = "headroom"
    field_name: ClassVar[str] = "head_room"

    def describe(self) -> str:
        return f"{self.size} headroom"


DEFAULT_DIRECT_MEMORY = DirectMemory.of(10 * MEBI, Provenance.DEFAULT)
DEFAULT_RESERVED_CODE_CACHE = ReservedCodeCache.of(240 * MEBI, Provenance.DEFAULT)
DEFAULT_STACK = Stack.of(MEBI, Provenance.DEFAULT)

# Codec order is significant: the first match wins for a token.
FLAG_REGION_TYPES: Tuple[Type[Region], ...] = (
    DirectMemory,
    Heap,
    Metaspace,
    ReservedCodeCache,
    Stack,
)


@dataclass(frozen=True)
class RegionCodec:
    """Recognizes, parses and renders the JVM flag of one region type."""

    region_type: Type[Region]
    strategy: MatchStrategy = MatchStrategy.STRICT
    pattern: Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.region_type.flag_prefix is None:
            raise ValueError(f"{self.region_type.name} has no JVM flag")
        object.__setattr__(
            self,
            "pattern",
            re.compile(rf"^{re.escape(self.prefix)}({SIZE_PATTERN})$"),
        )

    @property
    def prefix(self) -> str:
        return self.region_type.flag_prefix or ""

    @property
    def name(self) -> str:
        return self.region_type.name

    def match(self, token: str) -> bool:
        t = token.strip()
        if self.strategy is MatchStrategy.PREFIX:
            return t.startswith(self.prefix)
        return self.pattern.match(t) is not None

    def parse(self, token: str) -> Region:
        t = token.strip()
        if not t.startswith(self.prefix):
            raise SizeFormatError(t, f"does not match {self.name} pattern {self.pattern.pattern!r}")
        return self.region_type(parse_size(t[len(self.prefix):]))

    def render(self, region: Region) -> str:
        return f"{self.prefix}{region.size}"


@lru_cache(maxsize=None)
def codecs_for(strategy: MatchStrategy = MatchStrategy.STRICT) -> Tuple[RegionCodec, ...]:
    return tuple(RegionCodec(t, strategy) for t in FLAG_REGION_TYPES)


def match_codec(token: str, strategy: MatchStrategy = MatchStrategy.STRICT) -> Optional[RegionCodec]:
    for codec in codecs_for(strategy):
        if codec.match(token):
            return codec
    return None

import pytest

from memcalc.core.calc.errors import SizeFormatError
from memcalc.core.calc.regions import (
    DEFAULT_DIRECT_MEMORY,
    DEFAULT_RESERVED_CODE_CACHE,
    DEFAULT_STACK,
    DirectMemory,
    HeadRoom,
    Heap,
    MatchStrategy,
    Metaspace,
    RegionCodec,
    ReservedCodeCache,
    Stack,
    codecs_for,
    match_codec,
)
from memcalc.core.calc.size import GIBI, KIBI, MEBI, TEBI, Provenance


def test_codec_order_is_fixed():
    names = [c.region_type for c in codecs_for(MatchStrategy.STRICT)]
    assert names == [DirectMemory, Heap, Metaspace, ReservedCodeCache, Stack]


def test_defaults_carry_default_provenance():
    assert DEFAULT_DIRECT_MEMORY.value == 10 * MEBI
    assert DEFAULT_RESERVED_CODE_CACHE.value == 240 * MEBI
    assert DEFAULT_STACK.value == MEBI
    for r in (DEFAULT_DIRECT_MEMORY, DEFAULT_RESERVED_CODE_CACHE, DEFAULT_STACK):
        assert r.provenance is Provenance.DEFAULT


@pytest.mark.parametrize(
    "region,expected",
    [
        (DirectMemory.of(10 * MEBI), "-XX:MaxDirectMemorySize=10M"),
        (Heap.of(2 * GIBI), "-Xmx2G"),
        (Metaspace.of(217_000_000), "-XX:MaxMetaspaceSize=211914K"),
        (ReservedCodeCache.of(240 * MEBI), "-XX:ReservedCodeCacheSize=240M"),
        (Stack.of(512 * KIBI), "-Xss512K"),
    ],
)
def test_render(region, expected):
    assert region.render() == expected
    assert RegionCodec(type(region)).render(region) == expected


def test_head_room_has_no_flag():
    hr = HeadRoom.of(GIBI)
    with pytest.raises(ValueError):
        hr.render()
    assert hr.describe() == "1G headroom"
    with pytest.raises(ValueError):
        RegionCodec(HeadRoom)


@pytest.mark.parametrize("value", [KIBI, 3 * MEBI, 1536 * KIBI, 2 * GIBI, 5 * TEBI, 1025 * MEBI])
def test_render_then_parse_preserves_unit_aligned_values(value):
    for codec in codecs_for(MatchStrategy.STRICT):
        region = codec.region_type.of(value)
        assert codec.parse(codec.render(region)).value == value


def test_strict_matches_only_well_formed_tokens():
    heap = RegionCodec(Heap, MatchStrategy.STRICT)
    assert heap.match("-Xmx1G")
    assert heap.match("  -Xmx1024  ")
    assert not heap.match("-Xmx1.5G")
    assert not heap.match("-Xmx")
    assert not heap.match("-Xmx1G1")
    assert not heap.match("-Xms1G")


def test_prefix_matches_any_token_with_prefix():
    heap = RegionCodec(Heap, MatchStrategy.PREFIX)
    assert heap.match("-Xmx1G")
    assert heap.match("-Xmx1.5G")
    assert heap.match("-Xmx")
    assert not heap.match("-Xms1G")


@pytest.mark.parametrize(
    "token",
    [
        "-Xmx1G",
        "-Xmx2g",
        "-Xmx1.5G",
        "-Xss256k",
        "-Xss",
        "-XX:MaxDirectMemorySize=64m",
        "-XX:MaxDirectMemorySize=64mb",
        "-XX:MaxMetaspaceSize=128M",
        "-XX:ReservedCodeCacheSize=1T",
        "-XX:ReservedCodeCacheSize=abc",
    ],
)
def test_strategies_agree_on_parsed_bytes(token):
    strict = match_codec(token, MatchStrategy.STRICT)
    prefix = match_codec(token, MatchStrategy.PREFIX)
    assert prefix is not None

    if strict is not None:
        assert strict.region_type is prefix.region_type
        assert strict.parse(token).value == prefix.parse(token).value
    else:
        with pytest.raises(SizeFormatError):
            prefix.parse(token)


def test_parse_rejects_foreign_prefix():
    with pytest.raises(SizeFormatError):
        RegionCodec(Heap).parse("-Xss1M")


def test_unrelated_tokens_match_nothing():
    for strategy in MatchStrategy:
        assert match_codec("-XX:+UseG1GC", strategy) is None
        assert match_codec("-Dfoo=bar", strategy) is None
        assert match_codec("-Xms1G", strategy) is None


def test_stamped_keeps_bytes():
    h = Heap.of(GIBI).stamped(Provenance.USER_CONFIGURED)
    assert h.value == GIBI
    assert h.provenance is Provenance.USER_CONFIGURED

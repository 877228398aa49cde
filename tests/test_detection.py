import logging

from memcalc.core.calc.size import GIBI, KIBI, TEBI
from memcalc.core.detection.cgroups import CgroupsDetector
from memcalc.core.detection.host import HostDetector, parse_meminfo
from memcalc.core.detection.total_memory import FALLBACK_TOTAL_MEMORY, MAX_JVM_SIZE, resolve_total_memory


def _detectors(tmp_path, *, v2=None, v1=None, meminfo=None):
    v2_path = tmp_path / "memory.max"
    v1_path = tmp_path / "memory.limit_in_bytes"
    meminfo_path = tmp_path / "meminfo"
    if v2 is not None:
        v2_path.write_text(v2, encoding="utf-8")
    if v1 is not None:
        v1_path.write_text(v1, encoding="utf-8")
    if meminfo is not None:
        meminfo_path.write_text(meminfo, encoding="utf-8")
    return CgroupsDetector(v2_path=v2_path, v1_path=v1_path), HostDetector(meminfo_path=meminfo_path)


def test_cgroups_v2_limit(tmp_path):
    cg, _ = _detectors(tmp_path, v2="2147483648\n")
    assert cg.read_v2() == 2 * GIBI
    assert cg.detect() == 2 * GIBI


def test_cgroups_v2_unlimited_falls_through_to_v1(tmp_path):
    cg, _ = _detectors(tmp_path, v2="max\n", v1="1073741824\n")
    assert cg.read_v2() is None
    assert cg.detect() == GIBI


def test_cgroups_v1_unlimited_sentinel(tmp_path):
    cg, _ = _detectors(tmp_path, v1="9223372036854771712\n")
    assert cg.read_v1() is None
    assert cg.detect() is None


def test_cgroups_garbage_is_logged(tmp_path, caplog):
    cg, _ = _detectors(tmp_path, v2="lots\n")
    with caplog.at_level(logging.WARNING, logger="memcalc.detection"):
        assert cg.read_v2() is None
    assert "Unable to convert memory limit" in caplog.text


def test_cgroups_missing_files(tmp_path):
    cg, _ = _detectors(tmp_path)
    assert cg.detect() is None


def test_parse_meminfo():
    text = "MemTotal:        8062332 kB\nMemFree:          123456 kB\n"
    assert parse_meminfo(text) == 8062332 * KIBI
    assert parse_meminfo(text, key="MemFree") == 123456 * KIBI
    assert parse_meminfo("MemFree: 1 kB\n") is None


def test_host_detector_reads_file(tmp_path):
    _, host = _detectors(tmp_path, meminfo="MemTotal: 4194304 kB\n")
    assert host.detect() == 4 * GIBI


def test_override_wins(tmp_path):
    cg, host = _detectors(tmp_path, v2="1073741824\n")
    r = resolve_total_memory("1.5G", cgroups=cg, host=host)
    assert r.size.value == 3 * GIBI // 2
    assert r.source == "override"


def test_bad_override_falls_back_to_detection(tmp_path, caplog):
    cg, host = _detectors(tmp_path, v2="1073741824\n")
    with caplog.at_level(logging.WARNING, logger="memcalc.detection"):
        r = resolve_total_memory("lots", cgroups=cg, host=host)
    assert r.source == "cgroups_v2"
    assert r.size.value == GIBI
    assert "falling back to detection" in caplog.text


def test_resolution_order(tmp_path):
    cg, host = _detectors(tmp_path, v1="536870912\n", meminfo="MemTotal: 8388608 kB\n")
    r = resolve_total_memory(None, cgroups=cg, host=host)
    assert (r.source, r.size.value) == ("cgroups_v1", GIBI // 2)

    bare = tmp_path / "host-only"
    bare.mkdir()
    cg, host = _detectors(bare, meminfo="MemTotal: 8388608 kB\n")
    r = resolve_total_memory(None, cgroups=cg, host=host)
    assert (r.source, r.size.value) == ("host", 8 * GIBI)


def test_fallback_when_nothing_detected(tmp_path):
    cg, host = _detectors(tmp_path)
    r = resolve_total_memory(None, cgroups=cg, host=host)
    assert r.source == "fallback"
    assert r.size.value == FALLBACK_TOTAL_MEMORY


def test_host_memory_is_capped(tmp_path):
    cg, host = _detectors(tmp_path, meminfo=f"MemTotal: {100 * TEBI // KIBI} kB\n")
    r = resolve_total_memory(None, cgroups=cg, host=host)
    assert r.size.value == MAX_JVM_SIZE
    assert r.source == "host"


def test_unparseable_override_never_escapes(tmp_path):
    cg, host = _detectors(tmp_path, v2="1073741824\n")
    for override in ("²", "1" * 400 + "G"):
        r = resolve_total_memory(override, cgroups=cg, host=host)
        assert (r.source, r.size.value) == ("cgroups_v2", GIBI)

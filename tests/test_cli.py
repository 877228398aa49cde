import pytest

from memcalc import __version__
from memcalc.cli import build_parser, main

DEFAULT_OPTIONS = (
    "-XX:MaxDirectMemorySize=10M -Xmx1373237K -XX:MaxMetaspaceSize=211914K "
    "-XX:ReservedCodeCacheSize=240M -Xss1M"
)


def test_version(capsys):
    assert main(["--version"]) == 0
    out = capsys.readouterr().out
    assert "JVM Memory Calculator" in out
    assert f"Version: {__version__}" in out


def test_quiet_prints_only_options(capsys):
    rc = main(["--total-memory", "2G", "--thread-count", "250", "--loaded-class-count", "35000", "--quiet"])
    assert rc == 0
    assert capsys.readouterr().out == DEFAULT_OPTIONS


def test_quiet_from_env(capsys, monkeypatch):
    monkeypatch.setenv("QUIET", "true")
    monkeypatch.setenv("BPL_JVM_TOTAL_MEMORY", "2G")
    monkeypatch.setenv("BPL_JVM_LOADED_CLASS_COUNT", "35000")
    assert main([]) == 0
    assert capsys.readouterr().out == DEFAULT_OPTIONS


def test_report_includes_existing_flags(capsys):
    rc = main(["--total-memory=2G", "--loaded-class-count=35000", "--flags=-Xmx512M"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Max Heap Size:         512M" in out
    assert "JAVA_TOOL_OPTIONS=-Xmx512M -XX:MaxDirectMemorySize=10M" in out


def test_overflow_exits_nonzero(capsys):
    rc = main(["--total-memory=1M", "--loaded-class-count=1", "--thread-count=1", "--quiet"])
    assert rc == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("Error: unable to calculate memory configuration: fixed memory regions require")


def test_invalid_head_room(capsys):
    assert main(["--total-memory=2G", "--head-room=150"]) == 1
    assert "head-room" in capsys.readouterr().err


def test_bad_env_reports_error(capsys, monkeypatch):
    monkeypatch.setenv("BPL_JVM_THREAD_COUNT", "lots")
    assert main(["--total-memory=2G"]) == 1
    assert "BPL_JVM_THREAD_COUNT" in capsys.readouterr().err


def test_prefix_strategy_flag(capsys):
    rc = main(["--total-memory=2G", "--flags=-Xmx1.5G", "--match-strategy=prefix", "--quiet"])
    assert rc == 1
    assert "unable to parse heap" in capsys.readouterr().err


def test_parser_rejects_unknown_strategy():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--match-strategy", "fuzzy"])

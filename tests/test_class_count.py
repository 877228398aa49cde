import io
import logging
import zipfile

import pytest

from memcalc.core.count.classes import (
    agent_paths,
    count_classes,
    estimate_loaded_class_count,
    jar_classes,
    jar_classes_from,
)


def _jar(path, entries):
    with zipfile.ZipFile(path, "w") as z:
        for name, data in entries.items():
            z.writestr(name, data)
    return path


def _nested_jar_bytes(entries):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as z:
        for name in entries:
            z.writestr(name, b"")
    return buf.getvalue()


@pytest.fixture()
def app_dir(tmp_path):
    root = tmp_path / "app"
    (root / "classes" / "com" / "example").mkdir(parents=True)
    (root / "classes" / "com" / "example" / "A.class").write_bytes(b"")
    (root / "classes" / "com" / "example" / "B.groovy").write_text("class B {}", encoding="utf-8")
    (root / "classes" / "README.txt").write_text("docs", encoding="utf-8")

    lib = root / "lib"
    lib.mkdir()
    _jar(
        lib / "fat.jar",
        {
            "META-INF/MANIFEST.MF": "Manifest-Version: 1.0\n",
            "com/example/C.class": b"",
            "com/example/D.class": b"",
            "com/example/E.kts": b"",
            "BOOT-INF/lib/dep.jar": _nested_jar_bytes(["dep/F.class", "dep/G.class", "dep/notes.txt"]),
        },
    )
    (lib / "svm-none.jar").write_bytes(b"")
    (lib / "broken.jar").write_text("not a zip", encoding="utf-8")
    return root


def test_counts_files_and_jar_entries(app_dir):
    # A.class, B.groovy, three entries in fat.jar, two in the nested jar
    assert jar_classes(app_dir) == 7
    assert count_classes(app_dir) == 7


def test_single_jar(app_dir):
    assert jar_classes(app_dir / "lib" / "fat.jar") == 5
    assert jar_classes(app_dir / "lib" / "svm-none.jar") == 0
    assert jar_classes(app_dir / "lib" / "broken.jar") == 0


def test_missing_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        jar_classes(tmp_path / "nope")


def test_runtime_image_estimated_from_modules_size(tmp_path):
    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "modules").write_bytes(b"\0" * 500_000)
    assert count_classes(tmp_path) == 5_000

    small = tmp_path / "small"
    (small / "lib").mkdir(parents=True)
    (small / "lib" / "modules").write_bytes(b"\0" * 10)
    assert count_classes(small) == 1_000


def test_jar_classes_from_skips_missing(app_dir, tmp_path):
    count, skipped = jar_classes_from([app_dir / "lib" / "fat.jar", tmp_path / "missing.jar"])
    assert (count, skipped) == (5, 1)


def test_agent_paths():
    flags = "-Xmx1G -javaagent:/opt/agent.jar=opt1,opt2 -javaagent:'/opt/other agent.jar' -Dx=y"
    assert agent_paths(flags) == ["/opt/agent.jar", "/opt/other agent.jar"]
    assert agent_paths("") == []


def test_estimate_scales_by_load_factor(app_dir):
    # (1000 + 7) * 0.35
    assert estimate_loaded_class_count(app_dir) == 352


def test_estimate_with_adjustments_and_agent(app_dir):
    agent = app_dir / "lib" / "fat.jar"
    n = estimate_loaded_class_count(
        app_dir,
        jvm_class_count=2_000,
        adjustment_factor=50,
        static_adjustment=93,
        flags=f"-javaagent:{agent}",
    )
    # (2000 + 7 + 5 + 93) * 0.5 * 0.35
    assert n == int(2_105 * 0.5 * 0.35)


def test_estimate_without_application(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="memcalc.count"):
        n = estimate_loaded_class_count(
            tmp_path / "missing",
            flags="-javaagent:/does/not/exist.jar",
        )
    assert n == 350
    assert "does not exist" in caplog.text
    assert "skipped 1" in caplog.text

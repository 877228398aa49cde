"""
Loaded-class estimation for metaspace sizing.

Counts class-like files on disk and inside JAR archives (one level of
nested JARs, as produced by Spring Boot fat jars), then scales the raw
count down: only ~35% of the classes on the classpath are usually loaded.
"""
from __future__ import annotations

import io
import logging
import os
import zipfile
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from memcalc.core.calc.errors import MemoryCalculatorError
from memcalc.core.calc.flags import parse_flags
from memcalc.core.calc.size import MEBI

log = logging.getLogger("memcalc.count")

CLASS_EXTENSIONS = (".class", ".classdata", ".clj", ".groovy", ".kts")
CLASS_LOAD_FACTOR = 0.35
DEFAULT_JVM_CLASS_COUNT = 1_000
MAX_NESTED_JAR_SIZE = 100 * MEBI

PathLike = Union[str, Path]


class ClassCountError(MemoryCalculatorError):
    pass


def count_classes(path: PathLike) -> int:
    """Count classes under an application root.

    A Java 9+ runtime image (<path>/lib/modules) is estimated from its size.
    """
    modules = Path(path) / "lib" / "modules"
    if modules.is_file():
        return max(DEFAULT_JVM_CLASS_COUNT, modules.stat().st_size // 100)
    return jar_classes(path)


def jar_classes(path: PathLike) -> int:
    root = Path(path)
    if not root.exists():
        raise FileNotFoundError(str(root))

    if root.is_file():
        return _count_file(root)

    count = 0
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in sorted(filenames):
            count += _count_file(Path(dirpath) / name)
    return count


def jar_classes_from(paths: Iterable[PathLike]) -> Tuple[int, int]:
    """Returns (class_count, skipped) where missing paths are skipped."""
    total = 0
    skipped = 0
    for p in paths:
        try:
            total += jar_classes(p)
        except FileNotFoundError:
            skipped += 1
    return total, skipped


def agent_paths(flags: str) -> List[str]:
    """Jar paths of -javaagent:<path>[=options] tokens."""
    out: List[str] = []
    for token in parse_flags(flags):
        if token.startswith("-javaagent:"):
            out.append(token[len("-javaagent:"):].split("=", 1)[0])
    return out


def estimate_loaded_class_count(
    app_path: PathLike,
    *,
    jvm_class_count: int = DEFAULT_JVM_CLASS_COUNT,
    adjustment_factor: int = 100,
    static_adjustment: int = 0,
    flags: str = "",
) -> int:
    agent_count, skipped = jar_classes_from(agent_paths(flags))
    if skipped:
        log.warning(
            "could not count classes from all agent jars (skipped %d), "
            "class count and metaspace may not be sized correctly",
            skipped,
        )

    try:
        app_count = count_classes(app_path)
    except FileNotFoundError:
        log.warning("application path %s does not exist, counting no application classes", app_path)
        app_count = 0

    total = (jvm_class_count + app_count + agent_count + static_adjustment) * (adjustment_factor / 100.0)
    log.debug(
        "Class count: (%d%% * (%d + %d + %d + %d)) * %0.2f",
        adjustment_factor,
        jvm_class_count,
        app_count,
        agent_count,
        static_adjustment,
        CLASS_LOAD_FACTOR,
    )
    return int(total * CLASS_LOAD_FACTOR)


def _is_class_name(name: str) -> bool:
    return name.endswith(CLASS_EXTENSIONS)


def _count_file(path: Path) -> int:
    if _is_class_name(path.name):
        return 1
    if path.suffix != ".jar":
        return 0

    # Zero-byte placeholder jars such as svm-none.jar cannot be opened.
    if path.stat().st_size == 0 and "none" in path.name:
        return 0

    try:
        with zipfile.ZipFile(path) as z:
            return _count_archive(z, nested=True)
    except zipfile.BadZipFile:
        return 0
    except OSError as exc:
        raise ClassCountError(f"unable to open jar {path}: {exc}") from exc


def _count_archive(z: zipfile.ZipFile, *, nested: bool) -> int:
    count = 0
    for info in z.infolist():
        if nested and info.filename.endswith(".jar"):
            count += _count_nested(z, info)
        elif _is_class_name(info.filename):
            count += 1
    return count


def _count_nested(z: zipfile.ZipFile, info: zipfile.ZipInfo) -> int:
    with z.open(info) as fh:
        data = fh.read(MAX_NESTED_JAR_SIZE)
        if fh.read(1):
            raise ClassCountError(f"nested jar {info.filename} too large, potential decompression bomb")
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as nested:
            return _count_archive(nested, nested=False)
    except zipfile.BadZipFile:
        return 0

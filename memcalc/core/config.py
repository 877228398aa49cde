"""
Calculator configuration.

Sources, lowest to highest precedence:
  1) built-in defaults
  2) optional defaults file (YAML or JSON mapping) named by MEMCALC_CONFIG_FILE
  3) environment variables (BPL_JVM_* / BPI_* as used by Java buildpacks)
  4) explicit arguments (CLI flags, API payload)

Environment variables:
    BPL_JVM_TOTAL_MEMORY         total memory, e.g. "2G" (detected when unset)
    BPL_JVM_THREAD_COUNT         thread count (default 250)
    BPL_JVM_LOADED_CLASS_COUNT   loaded classes (estimated when unset)
    BPL_JVM_HEAD_ROOM            head room percent (default 0)
    BPL_JVM_HEADROOM             deprecated alias of BPL_JVM_HEAD_ROOM
    BPI_APPLICATION_PATH         application root scanned for classes (default /app)
    BPI_JVM_CLASS_COUNT          JVM runtime classes (default 1000)
    BPI_CLASS_ADJUSTMENT_FACTOR  percent applied to the class count (default 100)
    BPI_CLASS_STATIC_ADJUSTMENT  classes added before scaling (default 0)
    JAVA_TOOL_OPTIONS            existing JVM options, scanned for overrides
    MEMCALC_FLAG_MATCHING        "strict" (default) or "prefix"
    QUIET                        "1"/"true" prints only the options string
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from memcalc.core.calc.calculator import MAX_HEAD_ROOM
from memcalc.core.calc.errors import ConfigurationError
from memcalc.core.calc.regions import MatchStrategy

_log = logging.getLogger("memcalc.config")

DEFAULT_THREAD_COUNT = 250
DEFAULT_HEAD_ROOM = 0
DEFAULT_APPLICATION_PATH = "/app"
DEFAULT_JVM_CLASS_COUNT = 1_000

_TRUE = ("1", "true", "yes")

_INT_ENV = {
    "thread_count": "BPL_JVM_THREAD_COUNT",
    "loaded_class_count": "BPL_JVM_LOADED_CLASS_COUNT",
    "jvm_class_count": "BPI_JVM_CLASS_COUNT",
    "class_adjustment_factor": "BPI_CLASS_ADJUSTMENT_FACTOR",
    "class_static_adjustment": "BPI_CLASS_STATIC_ADJUSTMENT",
}


@dataclass(frozen=True)
class CalculatorConfig:
    total_memory: Optional[str] = None
    thread_count: int = DEFAULT_THREAD_COUNT
    loaded_class_count: Optional[int] = None   # None => estimate from application_path
    head_room: int = DEFAULT_HEAD_ROOM
    application_path: str = DEFAULT_APPLICATION_PATH
    jvm_class_count: int = DEFAULT_JVM_CLASS_COUNT
    class_adjustment_factor: int = 100
    class_static_adjustment: int = 0
    java_tool_options: str = ""
    match_strategy: MatchStrategy = MatchStrategy.STRICT
    quiet: bool = False

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CalculatorConfig":
        env = os.environ if environ is None else environ

        base = cls.from_payload(load_config_file(env.get("MEMCALC_CONFIG_FILE")))
        updates: Dict[str, Any] = {}

        total = env.get("BPL_JVM_TOTAL_MEMORY")
        if total:
            updates["total_memory"] = total

        for name, key in _INT_ENV.items():
            if key in env:
                updates[name] = _env_int(key, env[key])

        deprecated = env.get("BPL_JVM_HEADROOM")
        if deprecated is not None:
            updates["head_room"] = _env_int("BPL_JVM_HEADROOM", deprecated)
            _log.warning("BPL_JVM_HEADROOM is deprecated and will be removed, please switch to BPL_JVM_HEAD_ROOM")
        if "BPL_JVM_HEAD_ROOM" in env:
            if deprecated is not None:
                _log.warning(
                    "You have set both BPL_JVM_HEAD_ROOM and BPL_JVM_HEADROOM. "
                    "BPL_JVM_HEADROOM has been deprecated, so it will be ignored."
                )
            updates["head_room"] = _env_int("BPL_JVM_HEAD_ROOM", env["BPL_JVM_HEAD_ROOM"])

        if "BPI_APPLICATION_PATH" in env:
            updates["application_path"] = env["BPI_APPLICATION_PATH"]
        if "JAVA_TOOL_OPTIONS" in env:
            updates["java_tool_options"] = env["JAVA_TOOL_OPTIONS"]
        if env.get("MEMCALC_FLAG_MATCHING"):
            updates["match_strategy"] = _strategy(env["MEMCALC_FLAG_MATCHING"])
        if "QUIET" in env:
            updates["quiet"] = (env["QUIET"] or "").strip().lower() in _TRUE

        return replace(base, **updates)

    @classmethod
    def from_payload(cls, payload: Any) -> "CalculatorConfig":
        """
        Accepts None or a mapping with any of the field names.
        Unknown keys are ignored; values are coerced to the field types.
        """
        if not isinstance(payload, dict):
            return cls()

        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for k, v in payload.items():
            if k not in known or v is None:
                continue
            if k in ("total_memory", "application_path", "java_tool_options"):
                values[k] = str(v)
            elif k == "match_strategy":
                values[k] = v if isinstance(v, MatchStrategy) else _strategy(str(v))
            elif k == "quiet":
                values[k] = v if isinstance(v, bool) else str(v).strip().lower() in _TRUE
            else:
                values[k] = _env_int(k, v)
        return cls(**values)

    def merged(self, **overrides: Any) -> "CalculatorConfig":
        """Apply explicit overrides, skipping None values."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate(self) -> None:
        if self.thread_count < 0:
            raise ConfigurationError("thread-count", self.thread_count, "must be a non-negative integer")
        if self.loaded_class_count is not None and self.loaded_class_count < 0:
            raise ConfigurationError("loaded-class-count", self.loaded_class_count, "must be a non-negative integer")
        if not 0 <= self.head_room <= MAX_HEAD_ROOM:
            raise ConfigurationError("head-room", self.head_room, f"must be an integer between 0 and {MAX_HEAD_ROOM}")
        if self.class_adjustment_factor < 0:
            raise ConfigurationError("class-adjustment-factor", self.class_adjustment_factor, "must not be negative")


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """
    Load calculator defaults from a YAML or JSON mapping.

    Returns an empty dict when no path is given. A missing or malformed file
    is logged and ignored so that env/CLI configuration still applies.
    """
    if not path:
        return {}

    p = Path(path)
    try:
        raw_text = p.read_text(encoding="utf-8")
    except OSError as exc:
        _log.warning("Could not read config file %s: %s", p, exc)
        return {}

    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            _log.warning("Failed to parse config file %s as JSON or YAML: %s", p, exc)
            return {}

    if not isinstance(data, dict):
        _log.warning("Config file %s must be a mapping, got %s", p, type(data).__name__)
        return {}

    _log.info("Loaded %d calculator defaults from %s", len(data), p)
    return data


def _env_int(name: str, raw: Any) -> int:
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ConfigurationError(name, raw, "must be an integer") from None


def _strategy(raw: str) -> MatchStrategy:
    try:
        return MatchStrategy(raw.strip().lower())
    except ValueError:
        raise ConfigurationError("match_strategy", raw, "must be 'strict' or 'prefix'") from None

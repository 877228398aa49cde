from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from memcalc.core.calc.calculator import Calculator
from memcalc.core.calc.errors import MemoryCalculatorError
from memcalc.core.calc.memory_regions import MemoryRegions
from memcalc.core.config import CalculatorConfig
from memcalc.core.count.classes import estimate_loaded_class_count
from memcalc.core.detection.cgroups import CgroupsDetector
from memcalc.core.detection.host import HostDetector
from memcalc.core.detection.total_memory import resolve_total_memory
from memcalc.core.display.formatter import build_java_tool_options, calculated_options
from memcalc.core.observability.metrics import record_calculation

log = logging.getLogger("memcalc.calculator")


@dataclass(frozen=True)
class CalculationResult:
    regions: MemoryRegions
    total_memory: int
    total_memory_source: str
    thread_count: int
    loaded_class_count: int
    head_room: int
    calculated: List[str] = field(default_factory=list)
    java_tool_options: str = ""

    def to_env(self) -> Dict[str, str]:
        return {"JAVA_TOOL_OPTIONS": self.java_tool_options}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_memory": self.total_memory,
            "total_memory_source": self.total_memory_source,
            "thread_count": self.thread_count,
            "loaded_class_count": self.loaded_class_count,
            "head_room": self.head_room,
            "regions": self.regions.to_dict(),
            "calculated_options": list(self.calculated),
            "java_tool_options": self.java_tool_options,
        }


class MemoryCalculatorService:
    """Resolves calculator inputs from configuration and runs the calculation.

    Total memory and the loaded class count come from collaborators
    (cgroups/host detection, class scanning) unless the config pins them.
    """

    def __init__(
        self,
        *,
        cgroups: Optional[CgroupsDetector] = None,
        host: Optional[HostDetector] = None,
    ):
        self.cgroups = cgroups or CgroupsDetector()
        self.host = host or HostDetector()

    def execute(self, config: CalculatorConfig) -> CalculationResult:
        try:
            config.validate()

            resolved = resolve_total_memory(config.total_memory, cgroups=self.cgroups, host=self.host)
            class_count = self._loaded_class_count(config)

            calc = Calculator(
                total_memory=resolved.size,
                thread_count=config.thread_count,
                loaded_class_count=class_count,
                head_room=config.head_room,
                match_strategy=config.match_strategy,
            )
            regions = calc.calculate(config.java_tool_options)
        except MemoryCalculatorError as exc:
            record_calculation(exc.code.value)
            raise MemoryCalculatorError("unable to calculate memory configuration", cause=exc) from exc

        calculated = calculated_options(regions)
        result = CalculationResult(
            regions=regions,
            total_memory=resolved.size.value,
            total_memory_source=resolved.source,
            thread_count=config.thread_count,
            loaded_class_count=class_count,
            head_room=config.head_room,
            calculated=calculated,
            java_tool_options=build_java_tool_options(config.java_tool_options, calculated),
        )
        record_calculation("ok")

        log.info(
            "Calculated JVM Memory Configuration: %s (Total Memory: %s, Thread Count: %d, "
            "Loaded Class Count: %d, Headroom: %d%%)",
            " ".join(calculated),
            resolved.size,
            config.thread_count,
            class_count,
            config.head_room,
        )
        return result

    def _loaded_class_count(self, config: CalculatorConfig) -> int:
        if config.loaded_class_count is not None:
            return config.loaded_class_count
        return estimate_loaded_class_count(
            config.application_path,
            jvm_class_count=config.jvm_class_count,
            adjustment_factor=config.class_adjustment_factor,
            static_adjustment=config.class_static_adjustment,
            flags=config.java_tool_options,
        )

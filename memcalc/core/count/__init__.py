from .classes import (
    CLASS_LOAD_FACTOR,
    agent_paths,
    count_classes,
    estimate_loaded_class_count,
    jar_classes,
    jar_classes_from,
)

__all__ = [
    "CLASS_LOAD_FACTOR",
    "agent_paths",
    "count_classes",
    "estimate_loaded_class_count",
    "jar_classes",
    "jar_classes_from",
]

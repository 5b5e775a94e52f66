from .loader import load_config
from .models import (
    AnnotationConfig,
    DiffConfig,
    MergeConfig,
    OutputConfig,
    SlmergeConfig,
)

__all__ = [
    "AnnotationConfig",
    "DiffConfig",
    "MergeConfig",
    "OutputConfig",
    "SlmergeConfig",
    "load_config",
]

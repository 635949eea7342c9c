from .loader import apply_overrides, load_config, load_config_with_overrides
from .schema import (
    ClassificationConfig,
    CohortConfig,
    DependencyConfig,
    DepMapSource,
    PipelineConfig,
)

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "apply_overrides",
    "PipelineConfig",
    "DepMapSource",
    "CohortConfig",
    "ClassificationConfig",
    "DependencyConfig",
]

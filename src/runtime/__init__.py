from .context import PipelineContext
from .thresholds import ThresholdStore

__all__ = ["PipelineContext", "ThresholdStore"]

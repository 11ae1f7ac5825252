"""
Typed models for the proctoring detection pipeline.

These are plain value objects shared by the stages, backends and engine.
"""

from .frame import Frame
from .detection import Detection, BoundingBox
from .classes import COCO_CLASS_NAMES
from .model import ModelDescriptor, RawOutput
from .config import (
    Config,
    ModelConfig,
    QueueConfig,
    StubConfig,
    ThresholdConfig,
)
from .events import (
    DetectionResults,
    ModelError,
    ModelInfo,
    ModelLoaded,
    PipelineErrorEvent,
    ThresholdsUpdated,
)

__all__ = [
    # Frame
    "Frame",
    # Detection
    "Detection",
    "BoundingBox",
    "COCO_CLASS_NAMES",
    # Model
    "ModelDescriptor",
    "RawOutput",
    # Config
    "Config",
    "ModelConfig",
    "QueueConfig",
    "StubConfig",
    "ThresholdConfig",
    # Events
    "DetectionResults",
    "ModelError",
    "ModelInfo",
    "ModelLoaded",
    "PipelineErrorEvent",
    "ThresholdsUpdated",
]

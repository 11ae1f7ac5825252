"""
Pipeline module for the proctoring detection system.

The pipeline orchestrates per-frame processing:
- Frame queueing with a bounded FIFO
- Preprocess, inference, decode, NMS, relevance filtering
- A worker-thread engine with a message-style boundary
"""

from .detector import DetectionPipeline
from .engine import PipelineEngine, PipelineStats, create_engine_from_config
from .frame_queue import FrameQueue

__all__ = [
    "DetectionPipeline",
    "FrameQueue",
    "PipelineEngine",
    "PipelineStats",
    "create_engine_from_config",
]

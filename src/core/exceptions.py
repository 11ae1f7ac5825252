"""
Exceptions raised by the detection pipeline stages.

Each carries the originating frame id (when known) so the engine can tag
the terminal error event without extra bookkeeping.
"""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base exception for pipeline failures."""

    kind = "pipeline"

    def __init__(self, message: str, frame_id: Optional[str] = None):
        self.message = message
        self.frame_id = frame_id
        super().__init__(self.message)


class ModelNotLoadedError(PipelineError):
    """Raised when inference is requested before a backend is ready."""

    kind = "model_not_loaded"

    def __init__(self, frame_id: Optional[str] = None):
        super().__init__("Model not loaded", frame_id)


class PreprocessingError(PipelineError):
    """Raised when a frame buffer is malformed or undersized."""

    kind = "preprocessing"


class InferenceError(PipelineError):
    """Raised when the backend fails, times out, or cannot load its model."""

    kind = "inference"


class PostprocessingError(PipelineError):
    """Raised when a raw output tensor has an unexpected shape."""

    kind = "postprocessing"


class QueueOverflowError(PipelineError):
    """Raised for a frame dropped by the bounded queue's overflow policy."""

    kind = "queue_overflow"

    def __init__(self, frame_id: Optional[str], policy: str):
        self.policy = policy
        super().__init__(f"Frame dropped: queue full ({policy})", frame_id)

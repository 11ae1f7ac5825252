"""
Outbound pipeline events.

Every event carries a ``type`` string matching the message names used by
consumers (``detectionResults``, ``error``, ...) and serializes with to_dict().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import ThresholdConfig
from .detection import Detection, detections_to_dicts
from .model import ModelDescriptor


@dataclass(frozen=True)
class ModelLoaded:
    descriptor: ModelDescriptor
    type: str = field(default="modelLoaded", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "model": self.descriptor.to_dict()}


@dataclass(frozen=True)
class ModelError:
    message: str
    type: str = field(default="modelError", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "error": self.message}


@dataclass(frozen=True)
class DetectionResults:
    """Terminal success event for one frame."""
    frame_id: str
    timestamp: float
    detections: List[Detection]
    type: str = field(default="detectionResults", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "frame_id": self.frame_id,
            "timestamp": self.timestamp,
            "detections": detections_to_dicts(self.detections),
        }


@dataclass(frozen=True)
class PipelineErrorEvent:
    """
    Terminal failure event.

    frame_id is None for errors not tied to a frame (e.g. a rejected
    control message).
    """
    message: str
    kind: str
    frame_id: Optional[str] = None
    timestamp: Optional[float] = None
    type: str = field(default="error", init=False)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"type": self.type, "error": self.message, "kind": self.kind}
        if self.frame_id is not None:
            d["frame_id"] = self.frame_id
        if self.timestamp is not None:
            d["timestamp"] = self.timestamp
        return d


@dataclass(frozen=True)
class ThresholdsUpdated:
    thresholds: ThresholdConfig
    type: str = field(default="thresholdsUpdated", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "thresholds": self.thresholds.to_dict()}


@dataclass(frozen=True)
class ModelInfo:
    descriptor: Optional[ModelDescriptor]
    is_loaded: bool
    thresholds: ThresholdConfig
    type: str = field(default="modelInfo", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "model": self.descriptor.to_dict() if self.descriptor else None,
            "is_loaded": self.is_loaded,
            "class_count": self.descriptor.class_count if self.descriptor else 0,
            "thresholds": self.thresholds.to_dict(),
        }

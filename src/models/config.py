"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

THRESHOLD_MIN = 0.1
THRESHOLD_MAX = 1.0

OVERFLOW_DROP_OLDEST = "drop_oldest"
OVERFLOW_REJECT_NEWEST = "reject_newest"
OVERFLOW_POLICIES = (OVERFLOW_DROP_OLDEST, OVERFLOW_REJECT_NEWEST)


def clamp_threshold(value: float) -> float:
    """
    Clamp a threshold into [0.1, 1.0].

    Raises:
        ValueError: If value is NaN.
    """
    value = float(value)
    if math.isnan(value):
        raise ValueError("threshold must be a number, got NaN")
    return max(THRESHOLD_MIN, min(THRESHOLD_MAX, value))


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Confidence and NMS thresholds, both within [0.1, 1.0].

    Use from_dict() or clamped() to build one from untrusted values.
    """
    confidence: float = 0.5
    nms: float = 0.4

    @classmethod
    def clamped(cls, confidence: float, nms: float) -> "ThresholdConfig":
        return cls(confidence=clamp_threshold(confidence), nms=clamp_threshold(nms))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ThresholdConfig":
        return cls.clamped(
            confidence=d.get("confidence", 0.5),
            nms=d.get("nms", 0.4),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"confidence": self.confidence, "nms": self.nms}


@dataclass
class ModelConfig:
    """Detection model configuration."""
    name: str = "yolov8n"
    version: str = "2.0.0"
    path: Optional[str] = None
    input_size: int = 640
    output_shape: List[int] = field(default_factory=lambda: [1, 84, 8400])
    input_name: Optional[str] = None
    providers: List[str] = field(default_factory=lambda: ["CPUExecutionProvider"])
    allow_stub_fallback: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModelConfig":
        return cls(
            name=d.get("name", "yolov8n"),
            version=d.get("version", "2.0.0"),
            path=d.get("path"),
            input_size=d.get("input_size", 640),
            output_shape=d.get("output_shape", [1, 84, 8400]),
            input_name=d.get("input_name"),
            providers=d.get("providers", ["CPUExecutionProvider"]),
            allow_stub_fallback=d.get("allow_stub_fallback", True),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "name": self.name,
            "version": self.version,
            "input_size": self.input_size,
            "output_shape": self.output_shape,
            "providers": self.providers,
            "allow_stub_fallback": self.allow_stub_fallback,
        }
        if self.path is not None:
            d["path"] = self.path
        if self.input_name is not None:
            d["input_name"] = self.input_name
        return d


@dataclass
class QueueConfig:
    """Frame queue and scheduler configuration."""
    max_size: int = 32
    overflow_policy: str = OVERFLOW_DROP_OLDEST
    poll_interval: float = 0.1
    inference_timeout: float = 5.0
    stats_log_interval: float = 60.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "QueueConfig":
        return cls(
            max_size=d.get("queue_size", 32),
            overflow_policy=d.get("overflow_policy", OVERFLOW_DROP_OLDEST),
            poll_interval=d.get("poll_interval", 0.1),
            inference_timeout=d.get("inference_timeout", 5.0),
            stats_log_interval=d.get("stats_log_interval", 60.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "queue_size": self.max_size,
            "overflow_policy": self.overflow_policy,
            "poll_interval": self.poll_interval,
            "inference_timeout": self.inference_timeout,
            "stats_log_interval": self.stats_log_interval,
        }


@dataclass
class StubConfig:
    """Stand-in backend configuration."""
    latency: float = 0.05
    empty_probability: float = 0.3
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StubConfig":
        return cls(
            latency=d.get("latency", 0.05),
            empty_probability=d.get("empty_probability", 0.3),
            seed=d.get("seed"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "latency": self.latency,
            "empty_probability": self.empty_probability,
        }
        if self.seed is not None:
            d["seed"] = self.seed
        return d


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    model: ModelConfig = field(default_factory=ModelConfig)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    pipeline: QueueConfig = field(default_factory=QueueConfig)
    stub: StubConfig = field(default_factory=StubConfig)
    log_path: str = "logs/proctor_vision.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            model=ModelConfig.from_dict(d.get("model", {}) or {}),
            thresholds=ThresholdConfig.from_dict(d.get("thresholds", {}) or {}),
            pipeline=QueueConfig.from_dict(d.get("pipeline", {}) or {}),
            stub=StubConfig.from_dict(d.get("stub", {}) or {}),
            log_path=d.get("log_path", "logs/proctor_vision.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model.to_dict(),
            "thresholds": self.thresholds.to_dict(),
            "pipeline": self.pipeline.to_dict(),
            "stub": self.stub.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }

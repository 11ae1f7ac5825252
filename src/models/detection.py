"""
Detection models for object detection results.

Boxes use the center convention: (cx, cy, w, h) in model-input pixel space.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in model-input pixel coordinates.

    Attributes:
        cx: Center x coordinate.
        cy: Center y coordinate.
        width: Box width.
        height: Box height.
    """
    cx: float
    cy: float
    width: float
    height: float

    @property
    def x1(self) -> float:
        return self.cx - self.width / 2

    @property
    def y1(self) -> float:
        return self.cy - self.height / 2

    @property
    def x2(self) -> float:
        return self.cx + self.width / 2

    @property
    def y2(self) -> float:
        return self.cy + self.height / 2

    @property
    def area(self) -> float:
        return (self.x2 - self.x1) * (self.y2 - self.y1)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (cx, cy, w, h) tuple."""
        return (self.cx, self.cy, self.width, self.height)

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        """Return as corner (x1, y1, x2, y2) tuple."""
        return (self.x1, self.y1, self.x2, self.y2)

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        """Create from corner coordinates."""
        return cls(cx=(x1 + x2) / 2, cy=(y1 + y2) / 2, width=x2 - x1, height=y2 - y1)


@dataclass(frozen=True)
class Detection:
    """
    A single decoded detection.

    Attributes:
        class_id: Index into the model's class table.
        class_name: Human-readable class name.
        confidence: Class score (0-1).
        bbox: Bounding box, center convention.
    """
    class_id: int
    class_name: str
    confidence: float
    bbox: BoundingBox

    @property
    def center(self) -> Tuple[float, float]:
        return (self.bbox.cx, self.bbox.cy)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class_id": self.class_id,
            "class_name": self.class_name,
            "confidence": self.confidence,
            "bbox": list(self.bbox.as_tuple()),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Detection":
        cx, cy, w, h = d["bbox"]
        return cls(
            class_id=int(d["class_id"]),
            class_name=str(d["class_name"]),
            confidence=float(d["confidence"]),
            bbox=BoundingBox(cx=float(cx), cy=float(cy), width=float(w), height=float(h)),
        )


def detections_to_dicts(detections: List[Detection]) -> List[Dict[str, Any]]:
    """Adapter: Convert a detection list to plain dictionaries."""
    return [d.to_dict() for d in detections]

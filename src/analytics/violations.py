"""
Violation assessment over one frame's relevant detections.

Pure mapping from detections to violation records; persistence and
notification belong to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from models.detection import Detection

SEVERITY_HIGH = "high"
SEVERITY_MEDIUM = "medium"

HIGH_SEVERITY_CLASSES = frozenset({"cell phone", "laptop", "book"})
PERSON = "person"
MULTIPLE_PEOPLE = "Multiple People Detected"


@dataclass(frozen=True)
class Violation:
    """
    A proctoring violation derived from detections.

    Attributes:
        type: Short label, e.g. "cell phone detected".
        severity: "high" or "medium".
        description: Human-readable summary.
        detections: The detections that triggered it.
        frame_id: Originating frame, if known.
        timestamp: Frame submission timestamp, if known.
    """
    type: str
    severity: str
    description: str
    detections: List[Detection]
    frame_id: Optional[str] = None
    timestamp: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity,
            "description": self.description,
            "detections": [d.to_dict() for d in self.detections],
            "frame_id": self.frame_id,
            "timestamp": self.timestamp,
        }


def severity_for(class_name: str) -> str:
    return SEVERITY_HIGH if class_name in HIGH_SEVERITY_CLASSES else SEVERITY_MEDIUM


def assess_violations(
    detections: List[Detection],
    frame_id: Optional[str] = None,
    timestamp: Optional[float] = None,
) -> List[Violation]:
    """
    Turn one frame's detections into violations.

    A single person is the examinee and is not reported. Two or more people
    produce one high-severity violation. Every other detection produces its
    own violation, high severity for phones, laptops and books.
    """
    violations: List[Violation] = []

    people = [d for d in detections if d.class_name == PERSON]
    if len(people) > 1:
        violations.append(
            Violation(
                type=MULTIPLE_PEOPLE,
                severity=SEVERITY_HIGH,
                description=f"AI detected {len(people)} people in frame",
                detections=people,
                frame_id=frame_id,
                timestamp=timestamp,
            )
        )

    for det in detections:
        if det.class_name == PERSON:
            continue
        violations.append(
            Violation(
                type=f"{det.class_name} detected",
                severity=severity_for(det.class_name),
                description=f"AI detected: {det.class_name} (confidence: {det.confidence * 100:.1f}%)",
                detections=[det],
                frame_id=frame_id,
                timestamp=timestamp,
            )
        )

    return violations


def highest_severity(violations: List[Violation]) -> Optional[str]:
    """Return "high", "medium", or None when there are no violations."""
    if not violations:
        return None
    if any(v.severity == SEVERITY_HIGH for v in violations):
        return SEVERITY_HIGH
    return SEVERITY_MEDIUM

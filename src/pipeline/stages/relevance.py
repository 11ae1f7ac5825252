"""
Relevance stage: keep only classes that matter for exam proctoring.
"""

from __future__ import annotations

from typing import FrozenSet, List

from models.detection import Detection

RELEVANT_CLASSES: FrozenSet[str] = frozenset({
    "person",       # presence / extra people
    "cell phone",
    "laptop",
    "book",
    "remote",
    "tv",
    "keyboard",
    "mouse",
    "bottle",
    "cup",
    "chair",
    "backpack",
    "handbag",
})


def filter_relevant(detections: List[Detection]) -> List[Detection]:
    """Drop detections outside the allow-list, preserving order."""
    return [d for d in detections if d.class_name in RELEVANT_CLASSES]

"""
Pipeline stages for the detection pipeline.

Each stage handles one step of per-frame processing:
- preprocess: RGBA frame to planar tensor
- decode: raw head output to candidate detections
- suppress: non-maximum suppression
- relevance: proctoring allow-list
"""

from .decode import decode
from .preprocess import preprocess
from .relevance import RELEVANT_CLASSES, filter_relevant
from .suppress import iou, suppress

__all__ = [
    "RELEVANT_CLASSES",
    "decode",
    "filter_relevant",
    "iou",
    "preprocess",
    "suppress",
]

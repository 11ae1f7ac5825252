"""
Suppress stage: greedy non-maximum suppression.
"""

from __future__ import annotations

from typing import List

from models.detection import BoundingBox, Detection


def iou(a: BoundingBox, b: BoundingBox) -> float:
    """
    Calculate Intersection over Union (IoU) between two center-format boxes.

    Returns:
        IoU value between 0 and 1; 0 when the boxes do not overlap.
    """
    ax1, ay1, ax2, ay2 = a.as_xyxy()
    bx1, by1, bx2, by2 = b.as_xyxy()

    x1_i = max(ax1, bx1)
    y1_i = max(ay1, by1)
    x2_i = min(ax2, bx2)
    y2_i = min(ay2, by2)

    if x2_i <= x1_i or y2_i <= y1_i:
        return 0.0

    intersection = (x2_i - x1_i) * (y2_i - y1_i)
    union = a.area + b.area - intersection
    if union <= 0:
        return 0.0

    return intersection / union


def suppress(detections: List[Detection], nms_threshold: float) -> List[Detection]:
    """
    Keep the highest-confidence detection of each overlapping group.

    Detections are visited by confidence, descending; ties keep their input
    order. A detection is dropped when its IoU with any kept one is
    >= nms_threshold.
    """
    ordered = sorted(detections, key=lambda d: d.confidence, reverse=True)

    kept: List[Detection] = []
    for det in ordered:
        if all(iou(det.bbox, k.bbox) < nms_threshold for k in kept):
            kept.append(det)
    return kept

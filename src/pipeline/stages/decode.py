"""
Decode stage: raw head output -> candidate detections.

Each row is [cx, cy, w, h, score_0 .. score_{C-1}]. A row becomes a
detection when its best class score is strictly above the confidence
threshold. Equal best scores resolve to the lowest class index.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from core.exceptions import PostprocessingError
from models.classes import COCO_CLASS_NAMES, class_name_for
from models.detection import BoundingBox, Detection
from models.model import BOX_VALUES, RawOutput


def decode(
    raw: RawOutput,
    confidence_threshold: float,
    class_names: Sequence[str] = COCO_CLASS_NAMES,
) -> List[Detection]:
    """
    Decode candidate rows above the confidence threshold.

    Raises:
        PostprocessingError: If the output is not a (N, 4 + C) matrix with C >= 1.
    """
    data = raw.data
    if data.ndim != 2 or data.shape[1] <= BOX_VALUES:
        raise PostprocessingError(f"Malformed raw output shape {data.shape}")

    box_count = data.shape[0]
    if box_count == 0:
        return []

    scores = data[:, BOX_VALUES:]
    # argmax returns the first index among equal maxima.
    class_ids = np.argmax(scores, axis=1)
    confidences = scores[np.arange(box_count), class_ids]
    keep = np.flatnonzero(confidences > confidence_threshold)

    names = tuple(class_names)
    detections: List[Detection] = []
    for i in keep:
        cx, cy, w, h = data[i, :BOX_VALUES]
        class_id = int(class_ids[i])
        detections.append(
            Detection(
                class_id=class_id,
                class_name=class_name_for(class_id, names),
                confidence=float(confidences[i]),
                bbox=BoundingBox(cx=float(cx), cy=float(cy), width=float(w), height=float(h)),
            )
        )
    return detections

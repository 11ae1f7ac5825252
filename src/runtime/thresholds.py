"""
Threshold store shared by the decode and suppress stages.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Optional

from models.config import ThresholdConfig, clamp_threshold


class ThresholdStore:
    """
    Holds the active confidence/NMS thresholds.

    Updates swap in a new immutable ThresholdConfig under a lock, so a reader
    that took a snapshot at the start of a frame never sees a half-applied
    update.
    """

    def __init__(self, initial: Optional[ThresholdConfig] = None):
        self._lock = threading.Lock()
        self._current = initial or ThresholdConfig()

    def get_thresholds(self) -> ThresholdConfig:
        with self._lock:
            return self._current

    def update_thresholds(
        self,
        confidence: Optional[float] = None,
        nms: Optional[float] = None,
    ) -> ThresholdConfig:
        """
        Clamp and apply the provided values; omitted values are unchanged.

        Raises:
            ValueError: If a provided value is NaN or not numeric.
        """
        changes = {}
        if confidence is not None:
            changes["confidence"] = clamp_threshold(confidence)
        if nms is not None:
            changes["nms"] = clamp_threshold(nms)

        with self._lock:
            if changes:
                self._current = replace(self._current, **changes)
            current = self._current

        if changes:
            logging.info(f"Thresholds updated: confidence={current.confidence}, nms={current.nms}")
        return current

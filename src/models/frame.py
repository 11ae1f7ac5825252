"""
Frame model for submitted camera frames.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional, Tuple

import cv2
import numpy as np

CHANNELS = 4


@dataclass(frozen=True)
class Frame:
    """
    A raw camera frame awaiting detection.

    Attributes:
        data: Interleaved RGBA pixel buffer, 8 bits per channel.
        width: Frame width in pixels.
        height: Frame height in pixels.
        frame_id: Caller-assigned identifier, echoed on the result event.
        timestamp: Unix timestamp when the frame was submitted.
    """
    data: bytes = field(repr=False)
    width: int
    height: int
    frame_id: str
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def from_rgba(
        cls,
        image: np.ndarray,
        frame_id: str,
        timestamp: Optional[float] = None,
    ) -> "Frame":
        """Create a Frame from an (H, W, 4) uint8 RGBA array."""
        h, w = image.shape[:2]
        return cls(
            data=np.ascontiguousarray(image, dtype=np.uint8).tobytes(),
            width=w,
            height=h,
            frame_id=frame_id,
            timestamp=timestamp if timestamp is not None else time.time(),
        )

    @classmethod
    def from_bgr(
        cls,
        image: np.ndarray,
        frame_id: str,
        timestamp: Optional[float] = None,
    ) -> "Frame":
        """Adapter: Create a Frame from an OpenCV BGR image."""
        rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
        return cls.from_rgba(rgba, frame_id=frame_id, timestamp=timestamp)

    @property
    def expected_length(self) -> int:
        """Number of bytes a well-formed buffer of this size holds."""
        return self.width * self.height * CHANNELS

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)

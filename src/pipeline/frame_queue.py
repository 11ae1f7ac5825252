"""
Bounded FIFO of frames awaiting processing.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Deque, List, Optional

from models.config import OVERFLOW_DROP_OLDEST, OVERFLOW_POLICIES, OVERFLOW_REJECT_NEWEST
from models.frame import Frame


class FrameQueue:
    """
    Thread-safe FIFO with a fixed capacity.

    When full, ``drop_oldest`` evicts the head to make room for the new frame,
    while ``reject_newest`` refuses the new frame. put() returns whichever
    frame was discarded so the caller can report it.
    """

    def __init__(self, max_size: int = 32, overflow_policy: str = OVERFLOW_DROP_OLDEST):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if overflow_policy not in OVERFLOW_POLICIES:
            raise ValueError(f"overflow_policy must be one of: {', '.join(OVERFLOW_POLICIES)}")
        self.max_size = max_size
        self.overflow_policy = overflow_policy
        self._frames: Deque[Frame] = deque()
        self._cond = threading.Condition()

    def put(self, frame: Frame) -> Optional[Frame]:
        """Append a frame without blocking. Returns the discarded frame, if any."""
        with self._cond:
            dropped: Optional[Frame] = None
            if len(self._frames) >= self.max_size:
                if self.overflow_policy == OVERFLOW_REJECT_NEWEST:
                    return frame
                dropped = self._frames.popleft()
            self._frames.append(frame)
            self._cond.notify()
            return dropped

    def get(self, timeout: Optional[float] = None) -> Optional[Frame]:
        """
        Remove and return the oldest frame.

        Returns None if no frame arrived within ``timeout`` seconds.
        """
        with self._cond:
            if timeout is None:
                while not self._frames:
                    self._cond.wait()
            else:
                deadline = time.monotonic() + timeout
                while not self._frames:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return None
                    self._cond.wait(remaining)
            return self._frames.popleft()

    def clear(self) -> List[Frame]:
        """Remove and return all queued frames, oldest first."""
        with self._cond:
            frames = list(self._frames)
            self._frames.clear()
            return frames

    def __len__(self) -> int:
        with self._cond:
            return len(self._frames)

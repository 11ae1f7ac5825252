"""
Stand-in inference backend (no model required).

Ignores the tensor content. With a fixed probability it returns no candidate
rows; otherwise it returns one synthetic row for a proctoring-relevant class,
encoded exactly like a real detection head so decode/NMS behave the same.
"""

from __future__ import annotations

import random
import time
from typing import Callable, Optional, Sequence

import numpy as np

from core.exceptions import InferenceError
from models.config import StubConfig
from models.model import BOX_VALUES, ModelDescriptor, RawOutput

STUB_CLASSES: Sequence[str] = ("person", "cell phone", "laptop", "book", "remote", "tv")

CONFIDENCE_RANGE = (0.5, 0.9)
BOX_SIZE_RANGE = (50.0, 150.0)


class StubBackend:
    def __init__(
        self,
        descriptor: ModelDescriptor,
        cfg: Optional[StubConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.cfg = cfg or StubConfig()
        self.descriptor = descriptor
        self._rng = random.Random(self.cfg.seed)
        self._sleep = sleep

        missing = [c for c in STUB_CLASSES if c not in descriptor.class_names]
        if missing:
            raise InferenceError(f"Stub classes missing from class table: {missing}")

    def run_inference(self, tensor: np.ndarray) -> RawOutput:
        if self.cfg.latency > 0:
            self._sleep(self.cfg.latency)

        class_count = self.descriptor.class_count
        if self._rng.random() < self.cfg.empty_probability:
            return RawOutput.empty(class_count)

        class_name = self._rng.choice(STUB_CLASSES)
        class_id = self.descriptor.class_names.index(class_name)
        confidence = self._rng.uniform(*CONFIDENCE_RANGE)

        # Keep the whole box inside the input square.
        size = float(self.descriptor.input_size)
        w = min(self._rng.uniform(*BOX_SIZE_RANGE), size)
        h = min(self._rng.uniform(*BOX_SIZE_RANGE), size)
        cx = self._rng.uniform(w / 2, size - w / 2)
        cy = self._rng.uniform(h / 2, size - h / 2)

        row = np.zeros((1, BOX_VALUES + class_count), dtype=np.float32)
        row[0, :BOX_VALUES] = (cx, cy, w, h)
        row[0, BOX_VALUES + class_id] = confidence
        return RawOutput(data=row)

    def close(self) -> None:
        pass

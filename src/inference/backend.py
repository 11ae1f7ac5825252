"""
Inference backend interface.

A backend turns a preprocessed (3, S, S) float tensor into a RawOutput in
row layout. The backend is picked once when the pipeline starts.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np

from models.model import ModelDescriptor, RawOutput


class InferenceBackend(Protocol):
    descriptor: ModelDescriptor

    def run_inference(self, tensor: np.ndarray) -> RawOutput:
        ...

    def close(self) -> None:
        ...

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from inference.backend import InferenceBackend
from models.model import ModelDescriptor

from .thresholds import ThresholdStore


@dataclass
class PipelineContext:
    """Pipeline-owned state that outlives a single frame; avoids global singletons."""

    thresholds: ThresholdStore = field(default_factory=ThresholdStore)
    backend: Optional[InferenceBackend] = None
    load_error: Optional[str] = None

    @property
    def descriptor(self) -> Optional[ModelDescriptor]:
        return self.backend.descriptor if self.backend is not None else None

    @property
    def is_loaded(self) -> bool:
        return self.backend is not None

    def release(self) -> None:
        """Close the backend and drop the model."""
        if self.backend is not None:
            self.backend.close()
            self.backend = None

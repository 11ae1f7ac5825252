"""
ONNX Runtime inference backend (model-backed path).

Loads a YOLOv8-style detection model and returns its raw head output,
normalized to row layout. Any load or run failure surfaces as InferenceError.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import numpy as np

from core.exceptions import InferenceError, PostprocessingError
from models.config import ModelConfig
from models.model import ModelDescriptor, RawOutput


class OnnxBackend:
    def __init__(self, cfg: ModelConfig):
        self.cfg = cfg
        if not cfg.path:
            raise InferenceError("model.path is not configured")

        try:
            import onnxruntime as ort  # type: ignore
        except ImportError as e:  # pragma: no cover
            raise InferenceError(
                "onnxruntime is not installed. Install with `pip install onnxruntime` "
                "or enable model.allow_stub_fallback."
            ) from e

        try:
            self._session: Optional[Any] = ort.InferenceSession(cfg.path, providers=list(cfg.providers))
            inputs = self._session.get_inputs()
        except Exception as e:
            raise InferenceError(f"Failed to load model {cfg.path}: {e}") from e

        if cfg.input_name:
            self._input_name = cfg.input_name
        elif inputs:
            self._input_name = inputs[0].name
        else:
            raise InferenceError(f"Model {cfg.path} declares no inputs")
        self.descriptor = ModelDescriptor(
            name=cfg.name,
            version=cfg.version,
            input_size=cfg.input_size,
            output_shape=tuple(cfg.output_shape),
            is_stub=False,
        )
        logging.info(
            f"ONNX model loaded: {cfg.path} input={self._input_name} "
            f"providers={self._providers()}"
        )

    def _providers(self) -> List[str]:
        if self._session is None or not hasattr(self._session, "get_providers"):
            return []
        return list(self._session.get_providers())

    def run_inference(self, tensor: np.ndarray) -> RawOutput:
        if self._session is None:
            raise InferenceError("Inference session is closed")

        try:
            batch = np.asarray(tensor, dtype=np.float32).reshape(self.descriptor.input_shape)
        except ValueError as e:
            raise InferenceError(f"Tensor does not fit input shape {self.descriptor.input_shape}: {e}") from e

        try:
            outputs = self._session.run(None, {self._input_name: batch})
        except Exception as e:
            raise InferenceError(f"Inference failed: {e}") from e

        if not outputs:
            raise PostprocessingError("Model returned no outputs")
        try:
            return RawOutput.from_model_output(outputs[0], self.descriptor.class_count)
        except ValueError as e:
            raise PostprocessingError(f"Unexpected model output: {e}") from e

    def close(self) -> None:
        # onnxruntime releases native resources when the session is collected.
        self._session = None

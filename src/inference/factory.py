"""
Backend selection.
"""

from __future__ import annotations

from typing import Callable, Optional

from models.config import ModelConfig, StubConfig
from models.model import ModelDescriptor

from .backend import InferenceBackend
from .onnx_backend import OnnxBackend
from .stub_backend import StubBackend


def stub_descriptor(cfg: ModelConfig) -> ModelDescriptor:
    """Descriptor advertised while the stand-in backend is serving."""
    return ModelDescriptor(
        name=f"{cfg.name}-stub",
        version=cfg.version,
        input_size=cfg.input_size,
        output_shape=tuple(cfg.output_shape),
        is_stub=True,
    )


def create_stub_backend(
    model_cfg: ModelConfig,
    stub_cfg: Optional[StubConfig] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> StubBackend:
    if sleep is None:
        return StubBackend(stub_descriptor(model_cfg), stub_cfg)
    return StubBackend(stub_descriptor(model_cfg), stub_cfg, sleep=sleep)


def create_model_backend(model_cfg: ModelConfig) -> InferenceBackend:
    """
    Create the model-backed backend.

    Raises:
        InferenceError: If the model cannot be loaded.
    """
    return OnnxBackend(model_cfg)

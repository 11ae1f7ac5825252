"""
Inference backends.

- StubBackend: synthetic detections when no model is available
- OnnxBackend: YOLOv8 ONNX model through onnxruntime
"""

from .backend import InferenceBackend
from .factory import create_model_backend, create_stub_backend, stub_descriptor
from .onnx_backend import OnnxBackend
from .stub_backend import StubBackend

__all__ = [
    "InferenceBackend",
    "OnnxBackend",
    "StubBackend",
    "create_model_backend",
    "create_stub_backend",
    "stub_descriptor",
]

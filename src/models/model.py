"""
Model descriptor and raw model output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

import numpy as np

from .classes import COCO_CLASS_NAMES

BOX_VALUES = 4


@dataclass(frozen=True)
class ModelDescriptor:
    """
    Immutable description of the loaded detection model.

    Attributes:
        name: Model name (e.g. "yolov8n").
        version: Model version string.
        input_size: Square input edge in pixels.
        output_shape: Declared output shape, e.g. (1, 84, 8400).
        class_names: Class table indexed by class id.
        is_stub: True when the stand-in backend is serving inference.
    """
    name: str = "yolov8n"
    version: str = "2.0.0"
    input_size: int = 640
    output_shape: Tuple[int, ...] = (1, 84, 8400)
    class_names: Tuple[str, ...] = field(default=COCO_CLASS_NAMES, repr=False)
    is_stub: bool = False

    @property
    def input_shape(self) -> Tuple[int, int, int, int]:
        """Return the NCHW input shape."""
        return (1, 3, self.input_size, self.input_size)

    @property
    def class_count(self) -> int:
        return len(self.class_names)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "input_size": self.input_size,
            "input_shape": list(self.input_shape),
            "output_shape": list(self.output_shape),
            "class_count": self.class_count,
            "is_stub": self.is_stub,
        }


@dataclass(frozen=True)
class RawOutput:
    """
    Raw detection head output laid out as rows.

    ``data`` has shape (box_count, 4 + class_count): the first four values of
    a row are box geometry, the rest are per-class scores.
    """
    data: np.ndarray = field(repr=False)

    @property
    def box_count(self) -> int:
        return int(self.data.shape[0])

    @property
    def class_count(self) -> int:
        return int(self.data.shape[1]) - BOX_VALUES

    @classmethod
    def empty(cls, class_count: int) -> "RawOutput":
        return cls(data=np.zeros((0, BOX_VALUES + class_count), dtype=np.float32))

    @classmethod
    def from_flat(cls, flat: np.ndarray, box_count: int, class_count: int) -> "RawOutput":
        """
        Adapter: Wrap a flat float buffer of known shape.

        Raises:
            ValueError: If the buffer length does not match the shape.
        """
        flat = np.asarray(flat, dtype=np.float32).ravel()
        expected = box_count * (BOX_VALUES + class_count)
        if flat.size != expected:
            raise ValueError(
                f"buffer holds {flat.size} values, expected {expected} "
                f"for [{box_count}, {BOX_VALUES + class_count}]"
            )
        return cls(data=flat.reshape(box_count, BOX_VALUES + class_count))

    @classmethod
    def from_model_output(cls, output: np.ndarray, class_count: int) -> "RawOutput":
        """
        Adapter: Normalize a detection head tensor into row layout.

        Accepts (N, 4+C), (1, N, 4+C) or the YOLOv8 channel-first (1, 4+C, N).

        Raises:
            ValueError: If no axis matches 4 + class_count.
        """
        arr = np.asarray(output, dtype=np.float32)
        if arr.ndim == 3:
            if arr.shape[0] != 1:
                raise ValueError(f"batched output not supported: shape {arr.shape}")
            arr = arr[0]
        if arr.ndim != 2:
            raise ValueError(f"expected a 2-D or 3-D output tensor, got shape {arr.shape}")

        row_width = BOX_VALUES + class_count
        if arr.shape[1] == row_width:
            return cls(data=arr)
        if arr.shape[0] == row_width:
            return cls(data=np.ascontiguousarray(arr.T))
        raise ValueError(f"output shape {arr.shape} does not match row width {row_width}")

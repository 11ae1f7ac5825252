"""
Preprocess stage: RGBA frame -> planar float tensor.

The frame is stretch-resized to the model's square input (no letterbox),
the alpha channel is dropped, and values are scaled to [0, 1]. The result
has shape (3, S, S) in channel, row, column order.
"""

from __future__ import annotations

import cv2
import numpy as np

from core.exceptions import PreprocessingError
from models.frame import CHANNELS, Frame


def frame_pixels(frame: Frame) -> np.ndarray:
    """
    Validate the frame buffer and view it as an (H, W, 4) uint8 array.

    Raises:
        PreprocessingError: If the dimensions or buffer length are invalid.
    """
    if frame.width <= 0 or frame.height <= 0:
        raise PreprocessingError(
            f"Invalid frame size {frame.width}x{frame.height}", frame.frame_id
        )

    actual = len(frame.data)
    expected = frame.expected_length
    if actual < expected:
        raise PreprocessingError(
            f"Pixel buffer too short: {actual} bytes, expected {expected} "
            f"for {frame.width}x{frame.height} RGBA",
            frame.frame_id,
        )
    if actual > expected:
        raise PreprocessingError(
            f"Pixel buffer too long: {actual} bytes, expected {expected} "
            f"for {frame.width}x{frame.height} RGBA",
            frame.frame_id,
        )

    return np.frombuffer(frame.data, dtype=np.uint8).reshape(frame.height, frame.width, CHANNELS)


def preprocess(frame: Frame, input_size: int) -> np.ndarray:
    """
    Convert a frame into a model-ready tensor.

    Args:
        frame: Submitted RGBA frame.
        input_size: Square model input edge in pixels.

    Returns:
        float32 array of shape (3, input_size, input_size).

    Raises:
        PreprocessingError: If the frame cannot be converted.
    """
    pixels = frame_pixels(frame)
    rgb = np.ascontiguousarray(pixels[:, :, :3])

    if (frame.width, frame.height) != (input_size, input_size):
        try:
            rgb = cv2.resize(rgb, (input_size, input_size), interpolation=cv2.INTER_LINEAR)
        except cv2.error as e:
            raise PreprocessingError(f"Resize failed: {e}", frame.frame_id) from e

    tensor = rgb.astype(np.float32) / 255.0
    return np.ascontiguousarray(tensor.transpose(2, 0, 1))

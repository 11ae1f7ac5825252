"""
Tests for frame preprocessing into planar tensors.
"""

import numpy as np
import pytest

from core.exceptions import PreprocessingError
from models.frame import Frame
from pipeline.stages.preprocess import preprocess


def frame_from_pixels(pixels, frame_id="f"):
    return Frame.from_rgba(np.asarray(pixels, dtype=np.uint8), frame_id=frame_id)


class TestPreprocess:
    def test_output_shape_and_dtype(self, make_frame):
        tensor = preprocess(make_frame(width=40, height=30), 32)
        assert tensor.shape == (3, 32, 32)
        assert tensor.dtype == np.float32

    def test_planar_channel_order(self):
        pixels = [
            [[255, 0, 0, 255], [0, 255, 0, 255]],
            [[0, 0, 255, 255], [51, 102, 153, 255]],
        ]
        tensor = preprocess(frame_from_pixels(pixels), 2)

        np.testing.assert_allclose(tensor[0], [[1.0, 0.0], [0.0, 0.2]], atol=1e-6)
        np.testing.assert_allclose(tensor[1], [[0.0, 1.0], [0.0, 0.4]], atol=1e-6)
        np.testing.assert_allclose(tensor[2], [[0.0, 0.0], [1.0, 0.6]], atol=1e-6)

    def test_alpha_dropped(self, make_frame):
        opaque = preprocess(make_frame(color=(10, 20, 30, 255)), 8)
        transparent = preprocess(make_frame(color=(10, 20, 30, 0)), 8)
        np.testing.assert_array_equal(opaque, transparent)

    def test_values_normalized(self):
        rng = np.random.default_rng(0)
        pixels = rng.integers(0, 256, size=(24, 48, 4), dtype=np.uint8)
        tensor = preprocess(frame_from_pixels(pixels), 16)
        assert tensor.min() >= 0.0
        assert tensor.max() <= 1.0

    def test_stretch_resize_keeps_solid_color(self, make_frame):
        tensor = preprocess(make_frame(width=40, height=10, color=(255, 51, 0, 255)), 16)
        np.testing.assert_allclose(tensor[0], 1.0, atol=1e-6)
        np.testing.assert_allclose(tensor[1], 0.2, atol=1e-6)
        np.testing.assert_allclose(tensor[2], 0.0, atol=1e-6)

    def test_deterministic(self):
        rng = np.random.default_rng(1)
        pixels = rng.integers(0, 256, size=(30, 20, 4), dtype=np.uint8)
        first = preprocess(frame_from_pixels(pixels), 16)
        second = preprocess(frame_from_pixels(pixels.copy()), 16)
        np.testing.assert_array_equal(first, second)

    def test_undersized_buffer(self):
        frame = Frame(data=bytes(16 * 16 * 4 - 1), width=16, height=16, frame_id="short")
        with pytest.raises(PreprocessingError) as exc_info:
            preprocess(frame, 8)
        assert exc_info.value.frame_id == "short"
        assert "too short" in exc_info.value.message

    def test_oversized_buffer(self):
        frame = Frame(data=bytes(16 * 16 * 4 + 4), width=16, height=16, frame_id="long")
        with pytest.raises(PreprocessingError):
            preprocess(frame, 8)

    def test_invalid_dimensions(self):
        frame = Frame(data=b"", width=0, height=16, frame_id="empty")
        with pytest.raises(PreprocessingError):
            preprocess(frame, 8)


class TestFrame:
    def test_from_rgba(self):
        image = np.zeros((3, 5, 4), dtype=np.uint8)
        frame = Frame.from_rgba(image, frame_id="x", timestamp=12.5)
        assert frame.size == (5, 3)
        assert frame.expected_length == 60
        assert len(frame.data) == 60
        assert frame.timestamp == 12.5

    def test_from_bgr_swaps_channels(self):
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        image[:, :] = (255, 0, 0)  # blue in BGR
        frame = Frame.from_bgr(image, frame_id="bgr")
        pixels = np.frombuffer(frame.data, dtype=np.uint8).reshape(2, 2, 4)
        assert tuple(pixels[0, 0]) == (0, 0, 255, 255)

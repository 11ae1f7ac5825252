"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.frame import Frame  # noqa: E402


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
model:
  name: "yolov8n"
  input_size: 640
  allow_stub_fallback: true

thresholds:
  confidence: 0.5
  nms: 0.4

pipeline:
  queue_size: 8
  overflow_policy: "drop_oldest"

stub:
  latency: 0.0
  empty_probability: 0.3

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "model": {
            "name": "yolov8n",
            "version": "2.0.0",
            "input_size": 640,
            "output_shape": [1, 84, 8400],
            "allow_stub_fallback": True,
        },
        "thresholds": {"confidence": 0.5, "nms": 0.4},
        "pipeline": {
            "queue_size": 32,
            "overflow_policy": "drop_oldest",
            "poll_interval": 0.1,
            "inference_timeout": 5.0,
        },
        "stub": {"latency": 0.05, "empty_probability": 0.3},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def make_frame():
    """Factory for RGBA frames filled with a solid color."""
    def _make(frame_id="1", width=16, height=16, color=(10, 20, 30, 255)):
        image = np.empty((height, width, 4), dtype=np.uint8)
        image[:, :] = color
        return Frame.from_rgba(image, frame_id=frame_id)
    return _make

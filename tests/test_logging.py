"""
Tests for logging setup and CLI event reporting.
"""

import logging

import pytest

from main import report_event
from models.detection import BoundingBox, Detection
from models.events import DetectionResults, PipelineErrorEvent
from ops.logging import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_creates_log_file(self, tmp_path, restore_root_logger):
        log_path = tmp_path / "logs" / "pipeline.log"

        setup_logging(str(log_path), "DEBUG")
        logging.info("pipeline up")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert restore_root_logger.level == logging.DEBUG
        assert "pipeline up" in log_path.read_text()

    def test_stream_only_without_path(self, restore_root_logger):
        setup_logging(None, "WARNING")

        assert restore_root_logger.level == logging.WARNING
        assert not any(isinstance(h, logging.FileHandler) for h in restore_root_logger.handlers)


class TestReportEvent:
    def test_logs_violations(self, caplog):
        phone = Detection(class_id=67, class_name="cell phone", confidence=0.9,
                          bbox=BoundingBox(cx=10, cy=10, width=4, height=8))

        with caplog.at_level(logging.INFO):
            report_event(DetectionResults(frame_id="3", timestamp=0.0, detections=[phone]))

        assert "Frame 3: 1 detections" in caplog.text
        assert "Violation [high] frame=3" in caplog.text

    def test_logs_errors(self, caplog):
        with caplog.at_level(logging.INFO):
            report_event(PipelineErrorEvent(message="Model not loaded", kind="model_not_loaded", frame_id="9"))

        assert any(r.levelno == logging.ERROR and "model_not_loaded" in r.getMessage() for r in caplog.records)

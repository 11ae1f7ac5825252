"""
Command-line runner for the proctoring detection pipeline.

Feeds frames from image files or a camera into the pipeline engine and
logs detections and the violations they imply.

Usage:
    python src/main.py --config config/config.yaml --image desk.jpg
    python src/main.py --camera 0 --max-frames 100

Arguments:
    --config: Path to configuration file
    --image: Image file(s) to process
    --camera: Camera index to read from
    --max-frames: Stop after this many camera frames
"""

import argparse
import logging
import os
import queue
import sys
import time
from typing import Any, Dict, Optional, Tuple

import cv2
import yaml

from analytics.violations import assess_violations, highest_severity
from models.config import OVERFLOW_POLICIES
from models.events import DetectionResults, PipelineErrorEvent
from models.frame import Frame
from ops.logging import setup_logging
from pipeline.engine import PipelineEngine, create_engine_from_config

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['model', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Model
    model = config.get('model') or {}
    if 'path' in model and model['path'] is not None and not isinstance(model['path'], str):
        return False, "model.path must be a string"
    input_size = model.get('input_size', 640)
    if not isinstance(input_size, int) or isinstance(input_size, bool) or input_size <= 0:
        return False, "model.input_size must be a positive integer"
    for key in ('name', 'version'):
        if key in model and not isinstance(model[key], str):
            return False, f"model.{key} must be a string"
    if 'allow_stub_fallback' in model and not isinstance(model['allow_stub_fallback'], bool):
        return False, "model.allow_stub_fallback must be true or false"
    if 'output_shape' in model:
        shape = model['output_shape']
        if not isinstance(shape, list) or not all(isinstance(x, int) and x > 0 for x in shape):
            return False, "model.output_shape must be a list of positive integers"

    # Thresholds (out-of-range values are clamped, but must be numbers)
    thresholds = config.get('thresholds') or {}
    for key in ('confidence', 'nms'):
        if key in thresholds and not _is_number(thresholds[key]):
            return False, f"thresholds.{key} must be a number"

    # Pipeline
    pipeline = config.get('pipeline') or {}
    if 'queue_size' in pipeline:
        qs = pipeline['queue_size']
        if not isinstance(qs, int) or isinstance(qs, bool) or qs <= 0:
            return False, "pipeline.queue_size must be a positive integer"
    if 'overflow_policy' in pipeline and pipeline['overflow_policy'] not in OVERFLOW_POLICIES:
        return False, f"pipeline.overflow_policy must be one of: {', '.join(OVERFLOW_POLICIES)}"
    for key in ('poll_interval', 'inference_timeout', 'stats_log_interval'):
        if key in pipeline:
            value = pipeline[key]
            if not _is_number(value) or value <= 0:
                return False, f"pipeline.{key} must be a positive number"

    # Stub backend
    stub = config.get('stub') or {}
    if 'latency' in stub and (not _is_number(stub['latency']) or stub['latency'] < 0):
        return False, "stub.latency must be a non-negative number"
    if 'empty_probability' in stub:
        p = stub['empty_probability']
        if not _is_number(p) or not (0 <= p <= 1):
            return False, "stub.empty_probability must be between 0 and 1"
    if stub.get('seed') is not None and not isinstance(stub['seed'], int):
        return False, "stub.seed must be an integer"

    # Logging
    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"
    if not isinstance(config['log_path'], str):
        return False, "log_path must be a string"

    return True, None


def report_event(event: Any) -> None:
    """Log one pipeline event, with violations for detection results."""
    if isinstance(event, DetectionResults):
        names = [f"{d.class_name}:{d.confidence:.2f}" for d in event.detections]
        logging.info(f"Frame {event.frame_id}: {len(event.detections)} detections {names}")
        violations = assess_violations(event.detections, event.frame_id, event.timestamp)
        for v in violations:
            logging.warning(f"Violation [{v.severity}] frame={event.frame_id}: {v.description}")
        if violations:
            logging.info(f"Frame {event.frame_id} severity: {highest_severity(violations)}")
    elif isinstance(event, PipelineErrorEvent):
        logging.error(f"Pipeline error ({event.kind}) frame={event.frame_id}: {event.message}")
    else:
        logging.info(f"Event: {event.to_dict()}")


def _drain_events(engine: PipelineEngine, timeout: float = 0.0) -> int:
    """Report queued events; returns how many terminal frame events were seen."""
    completed = 0
    while True:
        try:
            event = engine.events.get(timeout=timeout)
        except queue.Empty:
            return completed
        report_event(event)
        if isinstance(event, DetectionResults) or (
            isinstance(event, PipelineErrorEvent) and event.frame_id is not None
        ):
            completed += 1


def run_images(engine: PipelineEngine, paths) -> None:
    submitted = 0
    for path in paths:
        image = cv2.imread(path, cv2.IMREAD_COLOR)
        if image is None:
            logging.error(f"Could not read image: {path}")
            continue
        engine.submit_frame(Frame.from_bgr(image, frame_id=os.path.basename(path)))
        submitted += 1

    completed = 0
    while completed < submitted:
        done = _drain_events(engine, timeout=engine.config.pipeline.inference_timeout + 1.0)
        if done == 0:
            logging.error("Timed out waiting for pipeline results")
            break
        completed += done


def run_camera(engine: PipelineEngine, camera_index: int, max_frames: Optional[int]) -> None:
    cap = cv2.VideoCapture(camera_index)
    if not cap.isOpened():
        logging.error(f"Could not open camera {camera_index}")
        return

    frame_count = 0
    consecutive_failures = 0
    max_failures = 10
    try:
        while max_frames is None or frame_count < max_frames:
            ret, image = cap.read()
            if not ret:
                consecutive_failures += 1
                if consecutive_failures >= max_failures:
                    logging.error(f"Too many consecutive frame read failures ({consecutive_failures}), exiting")
                    break
                time.sleep(0.5)
                continue
            consecutive_failures = 0
            frame_count += 1
            engine.submit_frame(Frame.from_bgr(image, frame_id=str(frame_count)))
            _drain_events(engine)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    finally:
        cap.release()


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Proctoring object detection pipeline')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--image', type=str, nargs='*', default=[],
                        help='Image file(s) to process')
    parser.add_argument('--camera', type=int, default=None,
                        help='Camera index to read frames from')
    parser.add_argument('--max-frames', type=int, default=None,
                        help='Stop after this many camera frames')
    args = parser.parse_args()

    config = load_config(args.config)

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    setup_logging(config['log_path'], config['log_level'])
    logging.info("Starting proctoring detection pipeline")

    engine = create_engine_from_config(config)
    engine.start()
    try:
        engine.wait_until_ready()
        _drain_events(engine)
        if args.image:
            run_images(engine, args.image)
        elif args.camera is not None:
            run_camera(engine, args.camera, args.max_frames)
        else:
            logging.info(f"No input given, model info: {engine.get_model_info().to_dict()}")
    finally:
        engine.stop(drain=True, timeout=10.0)
        _drain_events(engine)


if __name__ == "__main__":
    main()

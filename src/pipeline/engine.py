"""
Pipeline engine for the proctoring detection system.

The engine owns a dedicated worker thread. Callers talk to it only through
messages: frames go into a bounded FrameQueue, control requests go onto a
control queue, and results come back as events on ``events`` (and to any
registered callbacks). Frames are processed strictly one at a time, so
completion order equals submission order.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from core.exceptions import (
    InferenceError,
    ModelNotLoadedError,
    PipelineError,
    QueueOverflowError,
)
from inference.backend import InferenceBackend
from inference.factory import create_model_backend, create_stub_backend
from models.config import Config
from models.events import (
    DetectionResults,
    ModelError,
    ModelInfo,
    ModelLoaded,
    PipelineErrorEvent,
    ThresholdsUpdated,
)
from models.frame import Frame
from runtime.context import PipelineContext
from runtime.thresholds import ThresholdStore

from .detector import DetectionPipeline
from .frame_queue import FrameQueue

Event = Union[DetectionResults, ModelError, ModelInfo, ModelLoaded, PipelineErrorEvent, ThresholdsUpdated]

_UPDATE_THRESHOLDS = "updateThresholds"


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frames_submitted: int = 0
    frames_processed: int = 0
    frames_failed: int = 0
    frames_dropped: int = 0
    detection_count: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def increment(self, **counts: int) -> None:
        """Add to counters; submit_frame and the worker both count."""
        with self._lock:
            for name, n in counts.items():
                setattr(self, name, getattr(self, name) + n)


class PipelineEngine:
    """
    Worker-thread scheduler for the detection pipeline.

    This engine:
    - Loads the model once on the worker thread (stub fallback if allowed)
    - Drains the frame queue one frame at a time
    - Applies threshold updates only between frames
    - Emits exactly one terminal event (results or error) per submitted frame

    Example:
        engine = PipelineEngine(Config())
        engine.start()
        engine.submit_frame(frame)
        event = engine.events.get(timeout=1.0)
        engine.stop()
    """

    def __init__(self, config: Config, backend: Optional[InferenceBackend] = None):
        self.config = config
        self.ctx = PipelineContext(thresholds=ThresholdStore(config.thresholds))
        self.frames = FrameQueue(config.pipeline.max_size, config.pipeline.overflow_policy)
        self.events: "queue.Queue[Event]" = queue.Queue()
        self.stats = PipelineStats()
        self._pipeline = DetectionPipeline(self.ctx, config.pipeline.inference_timeout)
        self._preset_backend = backend
        self._preset_released = False
        self._control: "queue.Queue[Tuple[str, Dict[str, Any]]]" = queue.Queue()
        self._callbacks: List[Callable[[Event], None]] = []
        self._model_ready = threading.Event()
        self._stop_requested = threading.Event()
        self._drain_on_stop = False
        self._thread: Optional[threading.Thread] = None

    # -- lifecycle ---------------------------------------------------------

    def add_callback(self, callback: Callable[[Event], None]) -> None:
        """
        Add a callback to be called with every emitted event.

        Callbacks run on the worker thread (or the submitting thread for
        queue overflow and fail-fast errors).
        """
        self._callbacks.append(callback)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """
        Start the worker thread; the model loads on that thread.

        An engine built with a preset backend cannot be restarted after
        stop(), since stopping closes that backend.
        """
        if self.is_running:
            raise RuntimeError("Pipeline engine is already running")
        if self._preset_released:
            raise RuntimeError("Preset backend was closed on stop; create a new engine to restart")
        self._stop_requested.clear()
        self._model_ready.clear()
        self._thread = threading.Thread(target=self._run, name="detection-pipeline", daemon=True)
        self._thread.start()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until model loading finished (successfully or not)."""
        return self._model_ready.wait(timeout)

    def stop(self, drain: bool = False, timeout: Optional[float] = None) -> None:
        """
        Stop the worker thread.

        Args:
            drain: Process frames still queued before stopping.
            timeout: Max seconds to wait for the worker to exit.
        """
        self._drain_on_stop = drain
        self._stop_requested.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logging.warning("Pipeline worker did not stop within timeout")
            else:
                self._thread = None

    def __enter__(self) -> "PipelineEngine":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # -- inbound messages --------------------------------------------------

    def submit_frame(self, frame: Frame) -> None:
        """Enqueue a frame for processing. Never blocks."""
        self.stats.increment(frames_submitted=1)

        if self._model_ready.is_set() and not self.ctx.is_loaded:
            self.stats.increment(frames_failed=1)
            self._emit_error(ModelNotLoadedError(frame.frame_id), frame)
            return

        dropped = self.frames.put(frame)
        if dropped is not None:
            self.stats.increment(frames_dropped=1)
            policy = self.frames.overflow_policy
            logging.warning(f"Frame queue full, dropped frame {dropped.frame_id} ({policy})")
            self._emit_error(QueueOverflowError(dropped.frame_id, policy), dropped)

    def update_thresholds(self, confidence: Optional[float] = None, nms: Optional[float] = None) -> None:
        """Request a threshold change; applied by the worker between frames."""
        self._control.put((_UPDATE_THRESHOLDS, {"confidence": confidence, "nms": nms}))

    def get_model_info(self) -> ModelInfo:
        """Return a snapshot of the model descriptor and thresholds, and emit it."""
        info = ModelInfo(
            descriptor=self.ctx.descriptor,
            is_loaded=self.ctx.is_loaded,
            thresholds=self.ctx.thresholds.get_thresholds(),
        )
        self._emit(info)
        return info

    # -- worker ------------------------------------------------------------

    def _run(self) -> None:
        try:
            self._load_model()
            logging.info("Pipeline started")
            poll_interval = self.config.pipeline.poll_interval

            while not self._should_exit():
                self._drain_control()
                frame = self.frames.get(timeout=poll_interval)
                if frame is not None:
                    self._process_frame(frame)
                self._handle_periodic_tasks()
        except Exception as e:
            logging.exception(f"Pipeline error: {e}")
            self._emit(PipelineErrorEvent(message=str(e), kind="fatal"))
        finally:
            self._cleanup()

    def _should_exit(self) -> bool:
        if not self._stop_requested.is_set():
            return False
        return not (self._drain_on_stop and len(self.frames) > 0)

    def _load_model(self) -> None:
        if self._preset_backend is not None:
            self.ctx.backend = self._preset_backend
            self._emit(ModelLoaded(self._preset_backend.descriptor))
            self._model_ready.set()
            return

        model_cfg = self.config.model
        backend: Optional[InferenceBackend] = None
        try:
            if model_cfg.path:
                try:
                    backend = create_model_backend(model_cfg)
                except InferenceError as e:
                    logging.error(f"Failed to load model: {e}")
                    self.ctx.load_error = e.message
                    self._emit(ModelError(e.message))
                    if not model_cfg.allow_stub_fallback:
                        return
                    logging.warning("Continuing with stub backend (degraded mode)")
            else:
                logging.info("No model path configured, using stub backend")

            if backend is None:
                backend = create_stub_backend(model_cfg, self.config.stub)

            self.ctx.backend = backend
            logging.info(f"Model ready: {backend.descriptor.name} (stub={backend.descriptor.is_stub})")
            self._emit(ModelLoaded(backend.descriptor))
        except InferenceError as e:
            logging.error(f"Failed to create stub backend: {e}")
            self.ctx.load_error = e.message
            self._emit(ModelError(e.message))
        finally:
            self._model_ready.set()
            if not self.ctx.is_loaded:
                self._fail_queued(lambda f: ModelNotLoadedError(f.frame_id))

    def _drain_control(self) -> None:
        while True:
            try:
                kind, payload = self._control.get_nowait()
            except queue.Empty:
                return
            if kind == _UPDATE_THRESHOLDS:
                try:
                    current = self.ctx.thresholds.update_thresholds(**payload)
                except (TypeError, ValueError) as e:
                    logging.warning(f"Rejected threshold update {payload}: {e}")
                    self._emit(PipelineErrorEvent(message=f"Invalid thresholds: {e}", kind="invalid_thresholds"))
                    continue
                self._emit(ThresholdsUpdated(current))

    def _process_frame(self, frame: Frame) -> None:
        try:
            detections = self._pipeline.process(frame)
        except PipelineError as e:
            self.stats.increment(frames_failed=1)
            logging.warning(f"Frame {frame.frame_id} failed: {e.message}")
            self._emit_error(e, frame)
            return
        except Exception as e:
            self.stats.increment(frames_failed=1)
            logging.exception(f"Unexpected error processing frame {frame.frame_id}")
            self._emit_error(PipelineError(str(e), frame.frame_id), frame)
            return

        self.stats.increment(frames_processed=1, detection_count=len(detections))
        self._emit(DetectionResults(frame_id=frame.frame_id, timestamp=frame.timestamp, detections=detections))

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.pipeline.stats_log_interval:
            logging.info(
                f"Pipeline stats: submitted={self.stats.frames_submitted}, "
                f"processed={self.stats.frames_processed}, failed={self.stats.frames_failed}, "
                f"dropped={self.stats.frames_dropped}, detections={self.stats.detection_count}, "
                f"queued={len(self.frames)}"
            )
            self.stats.last_stats_log_time = now

    def _fail_queued(self, make_error: Callable[[Frame], PipelineError]) -> None:
        for frame in self.frames.clear():
            self.stats.increment(frames_failed=1)
            self._emit_error(make_error(frame), frame)

    def _cleanup(self) -> None:
        self._fail_queued(lambda f: PipelineError("Pipeline stopped", f.frame_id))
        self._pipeline.close()
        self._preset_released = self._preset_backend is not None
        try:
            self.ctx.release()
        except Exception as e:
            logging.warning(f"Error releasing backend: {e}")
        logging.info("Pipeline stopped")

    # -- outbound events ---------------------------------------------------

    def _emit_error(self, error: PipelineError, frame: Frame) -> None:
        self._emit(
            PipelineErrorEvent(
                message=error.message,
                kind=error.kind,
                frame_id=frame.frame_id,
                timestamp=frame.timestamp,
            )
        )

    def _emit(self, event: Event) -> None:
        self.events.put(event)
        for callback in self._callbacks:
            try:
                callback(event)
            except Exception as e:
                logging.warning(f"Callback error: {e}")


def create_engine_from_config(
    config: Dict[str, Any],
    backend: Optional[InferenceBackend] = None,
) -> PipelineEngine:
    """
    Factory function to create a PipelineEngine from a raw config dict.

    Args:
        config: Full application config dict (as returned by load_config).
        backend: Optional preloaded backend; skips model loading.
    """
    return PipelineEngine(Config.from_dict(config), backend=backend)

"""
In-process detection pipeline.

Runs one frame through preprocess -> inference -> decode -> suppress ->
relevance. The worker engine drives frames through this same object, so
the threaded path and direct calls share one implementation.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Any, Callable, List, Optional, Type

import numpy as np

from core.exceptions import (
    InferenceError,
    ModelNotLoadedError,
    PipelineError,
    PostprocessingError,
    PreprocessingError,
)
from inference.backend import InferenceBackend
from models.detection import Detection
from models.frame import Frame
from models.model import RawOutput
from runtime.context import PipelineContext

from .stages import decode, filter_relevant, preprocess, suppress


class DetectionPipeline:
    """
    Per-frame detection pipeline.

    Thresholds are read once per frame, before decode, so an update that
    lands mid-frame only affects the next frame.

    With an inference timeout, backend calls run on one executor thread.
    A call that overran its timeout keeps that thread; until it returns,
    later frames fail immediately instead of starting a second call.

    Example:
        ctx = PipelineContext(backend=create_stub_backend(ModelConfig()))
        detections = DetectionPipeline(ctx).process(frame)
    """

    def __init__(self, ctx: PipelineContext, inference_timeout: Optional[float] = None):
        self.ctx = ctx
        self.inference_timeout = inference_timeout
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: Optional[Future] = None

    def process(self, frame: Frame) -> List[Detection]:
        """
        Run all stages for one frame.

        Raises:
            PipelineError: A stage-specific subclass tagged with frame.frame_id.
        """
        backend = self.ctx.backend
        if backend is None:
            raise ModelNotLoadedError(frame.frame_id)

        thresholds = self.ctx.thresholds.get_thresholds()
        descriptor = backend.descriptor

        tensor = self._stage(PreprocessingError, "Preprocessing", frame, preprocess, frame, descriptor.input_size)
        raw = self._stage(InferenceError, "Inference", frame, self._infer, backend, tensor)
        candidates = self._stage(
            PostprocessingError, "Post-processing", frame,
            decode, raw, thresholds.confidence, descriptor.class_names,
        )
        kept = self._stage(PostprocessingError, "Post-processing", frame, suppress, candidates, thresholds.nms)
        relevant = filter_relevant(kept)

        logging.debug(
            f"Frame {frame.frame_id}: candidates={len(candidates)} kept={len(kept)} relevant={len(relevant)}"
        )
        return relevant

    def _stage(
        self,
        error_cls: Type[PipelineError],
        label: str,
        frame: Frame,
        fn: Callable[..., Any],
        *args: Any,
    ) -> Any:
        try:
            return fn(*args)
        except PipelineError as e:
            if e.frame_id is None:
                e.frame_id = frame.frame_id
            raise
        except Exception as e:
            raise error_cls(f"{label} failed: {e}", frame.frame_id) from e

    def _infer(self, backend: InferenceBackend, tensor: np.ndarray) -> RawOutput:
        if self.inference_timeout is None:
            return backend.run_inference(tensor)

        if self._pending is not None:
            if not self._pending.done():
                raise InferenceError("Inference backend still busy after timeout")
            # Result of the overrun call belongs to a frame that already failed.
            self._pending = None

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="inference")
        future = self._executor.submit(backend.run_inference, tensor)
        try:
            return future.result(timeout=self.inference_timeout)
        except FutureTimeout:
            self._pending = future
            raise InferenceError(f"Inference timed out after {self.inference_timeout}s")

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        self._pending = None

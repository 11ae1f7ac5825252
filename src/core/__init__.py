from .exceptions import (
    InferenceError,
    ModelNotLoadedError,
    PipelineError,
    PostprocessingError,
    PreprocessingError,
    QueueOverflowError,
)

__all__ = [
    "InferenceError",
    "ModelNotLoadedError",
    "PipelineError",
    "PostprocessingError",
    "PreprocessingError",
    "QueueOverflowError",
]

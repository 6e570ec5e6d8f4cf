from .artifacts import (
    UNKNOWN_SPEAKER,
    ChunkPlan,
    ChunkSpan,
    JobStatus,
    TimedFragment,
    Transcript,
    TranscriptionJob,
    normalize_speaker,
)
from .errors import (
    ChunkTranscriptionError,
    ComponentError,
    ConfigError,
    ConversionError,
    DurationQueryError,
    InputValidationError,
    ParseError,
    PipelineError,
    PollError,
    PollTimeoutError,
    ProviderError,
    RemoteError,
    RemoteJobError,
    SplitError,
    SubmitError,
    TranscriptionError,
    UploadError,
)

__all__ = [
    "UNKNOWN_SPEAKER",
    "ChunkPlan",
    "ChunkSpan",
    "JobStatus",
    "TimedFragment",
    "Transcript",
    "TranscriptionJob",
    "normalize_speaker",
    "PipelineError",
    "ConfigError",
    "ComponentError",
    "InputValidationError",
    "ConversionError",
    "DurationQueryError",
    "SplitError",
    "TranscriptionError",
    "ProviderError",
    "UploadError",
    "SubmitError",
    "RemoteError",
    "RemoteJobError",
    "ParseError",
    "PollError",
    "PollTimeoutError",
    "ChunkTranscriptionError",
]

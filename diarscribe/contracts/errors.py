from __future__ import annotations


class PipelineError(Exception):
    """Raised by the pipeline entrypoint for user-facing failures."""


class ConfigError(PipelineError):
    """Raised when credentials, the env file, or runtime options are invalid."""


class ComponentError(Exception):
    """Base exception for component-level failures."""


class InputValidationError(ComponentError):
    """Raised when an input path or config is invalid."""


class ConversionError(ComponentError):
    """Raised when ffmpeg/ffprobe exits non-zero."""


class DurationQueryError(ComponentError):
    """Raised when ffprobe output is not a usable duration."""


class SplitError(ComponentError):
    """Raised when a chunk cannot be extracted from the source audio."""

    def __init__(self, message: str, *, chunk_index: int | None = None) -> None:
        super().__init__(message)
        self.chunk_index = chunk_index


class TranscriptionError(ComponentError):
    """Raised when transcription provider calls fail."""


class ProviderError(TranscriptionError):
    """Raised for provider/API failures; keeps the HTTP status and body when known."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UploadError(ProviderError):
    """Raised when audio bytes cannot be delivered to the provider."""


class SubmitError(ProviderError):
    """Raised when a transcription job cannot be created."""


class RemoteError(ProviderError):
    """Raised when the provider answers with a non-success HTTP status."""


class RemoteJobError(ProviderError):
    """Raised when an asynchronous job finishes with status 'error'."""


class ParseError(ProviderError):
    """Raised when a provider returns an unexpected response shape."""


class PollError(ProviderError):
    """Raised when a polled job reports a status we do not understand."""


class PollTimeoutError(PollError):
    """Raised when a job does not reach a terminal status in time."""


class ChunkTranscriptionError(TranscriptionError):
    """Raised when one chunk of a split run fails; the provider error is the cause."""

    def __init__(self, message: str, *, chunk_index: int) -> None:
        super().__init__(message)
        self.chunk_index = chunk_index

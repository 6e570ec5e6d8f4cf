from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import openai

from diarscribe.adapters.transcription import TranscriptionBackend
from diarscribe.config import DEFAULT_MODEL
from diarscribe.contracts.artifacts import TimedFragment, Transcript, normalize_speaker
from diarscribe.contracts.errors import ParseError, RemoteError, UploadError

logger = logging.getLogger(__name__)


class _OpenAITranscriptionsAPI(Protocol):
    def create(self, **kwargs: Any) -> Any: ...


class _OpenAIAudioAPI(Protocol):
    transcriptions: _OpenAITranscriptionsAPI


class OpenAIClientLike(Protocol):
    audio: _OpenAIAudioAPI


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    if hasattr(obj, name):
        return getattr(obj, name)
    model_dump = getattr(obj, "model_dump", None)
    if callable(model_dump):
        dumped = model_dump()
        if isinstance(dumped, dict):
            return dumped.get(name, default)
    return default


def _seconds(value: Any, *, name: str, index: int) -> float:
    if value is None or isinstance(value, bool):
        raise ParseError(f"OpenAI diarized segment {index} has no numeric '{name}'")
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"OpenAI diarized segment {index} has invalid '{name}': {value!r}") from exc
    return max(0.0, seconds)


def _normalize_segments(raw_segments: Any) -> list[TimedFragment]:
    if raw_segments in (None, ""):
        return []
    if not isinstance(raw_segments, list):
        raise ParseError("OpenAI transcription 'segments' must be a list when provided")

    fragments: list[TimedFragment] = []
    for idx, raw in enumerate(raw_segments):
        start = _seconds(_field(raw, "start"), name="start", index=idx)
        end = max(start, _seconds(_field(raw, "end"), name="end", index=idx))
        text = _field(raw, "text")
        fragments.append(
            TimedFragment(
                speaker=normalize_speaker(_field(raw, "speaker")),
                start=start,
                end=end,
                text="" if text is None else str(text),
            )
        )
    return fragments


def _decode_raw_response(response: Any) -> Any:
    if isinstance(response, bytes):
        response = response.decode("utf-8", errors="replace")
    if not isinstance(response, str):
        return response
    try:
        return json.loads(response)
    except json.JSONDecodeError as exc:
        raise ParseError(f"OpenAI transcription response is not JSON: {exc}") from exc


def parse_diarized_response(response: Any) -> Transcript:
    """Normalize a ``diarized_json`` response (SDK model, dict or raw JSON) into a Transcript."""
    response = _decode_raw_response(response)
    if response is None or isinstance(response, (list, int, float, bool)):
        raise ParseError(f"OpenAI transcription response has unexpected type {type(response).__name__}")

    raw_text = _field(response, "text")
    raw_segments = _field(response, "segments")
    if raw_text is None and raw_segments is None:
        raise ParseError("OpenAI transcription response missing both 'text' and 'segments'")

    fragments = _normalize_segments(raw_segments)
    text = "" if raw_text is None else str(raw_text).strip()
    if not text and fragments:
        text = " ".join(frag.text.strip() for frag in fragments if frag.text.strip())
    return Transcript(text=text, fragments=tuple(fragments))


class OpenAITranscriptionAdapter(TranscriptionBackend):
    """Synchronous multipart backend: one request per audio file, diarized JSON back."""

    def __init__(
        self,
        client: OpenAIClientLike,
        *,
        model: str = DEFAULT_MODEL,
        response_format: str = "diarized_json",
        chunking_strategy: str = "auto",
    ) -> None:
        if not model:
            raise ValueError("model is required")
        self._client = client
        self._model = model
        self._response_format = response_format
        self._chunking_strategy = chunking_strategy

    def transcribe(self, audio_path: Path) -> Transcript:
        request_kwargs: dict[str, Any] = {
            "model": self._model,
            "response_format": self._response_format,
            "chunking_strategy": self._chunking_strategy,
        }
        logger.debug("POST audio/transcriptions model=%s file=%s", self._model, audio_path)
        try:
            with Path(audio_path).open("rb") as fh:
                response = self._client.audio.transcriptions.create(file=fh, **request_kwargs)
        except openai.APIStatusError as exc:
            body = exc.response.text
            raise RemoteError(
                f"API request failed with status {exc.status_code}: {body}",
                status_code=exc.status_code,
                body=body,
            ) from exc
        except openai.APIConnectionError as exc:
            raise UploadError(f"failed to send request: {exc}") from exc
        except (ValueError, openai.APIResponseValidationError) as exc:
            raise ParseError(f"OpenAI transcription response is malformed: {exc}") from exc
        except OSError as exc:
            raise UploadError(f"failed to read audio file {audio_path}: {exc}") from exc

        transcript = parse_diarized_response(response)
        logger.debug("OpenAI returned %d segments for %s", len(transcript.fragments), audio_path)
        return transcript


def build_openai_client(api_key: str, *, timeout_s: float = 300.0) -> openai.OpenAI:
    return openai.OpenAI(api_key=api_key, timeout=timeout_s, max_retries=0)


__all__ = [
    "OpenAIClientLike",
    "OpenAITranscriptionAdapter",
    "build_openai_client",
    "parse_diarized_response",
]

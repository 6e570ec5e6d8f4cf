from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

from diarscribe.adapters.ffmpeg import FfmpegAdapter
from diarscribe.adapters.transcription import TranscriptionBackend
from diarscribe.components.chunking import plan_chunks
from diarscribe.config import DEFAULT_CHUNK_SECONDS, DEFAULT_MAX_SINGLE_CALL_S
from diarscribe.contracts.artifacts import ChunkPlan, ChunkSpan, TimedFragment, Transcript
from diarscribe.contracts.errors import (
    ChunkTranscriptionError,
    DurationQueryError,
    InputValidationError,
    SplitError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _MergedChunks:
    """Accumulated chunk results with fragment times already moved onto the source timeline."""

    fragments: tuple[TimedFragment, ...] = ()
    text_parts: tuple[str, ...] = ()
    chunk_count: int = 0

    def add(self, transcript: Transcript, offset_s: float) -> "_MergedChunks":
        shifted = tuple(fragment.shifted(offset_s) for fragment in transcript.fragments)
        text_parts = self.text_parts + ((transcript.text,) if transcript.text else ())
        return _MergedChunks(
            fragments=self.fragments + shifted,
            text_parts=text_parts,
            chunk_count=self.chunk_count + 1,
        )

    def to_transcript(self) -> Transcript:
        return Transcript(
            text=" ".join(self.text_parts).strip(),
            fragments=self.fragments,
            chunk_count=self.chunk_count,
        )


def _validate_audio(audio_path: Path) -> None:
    if not audio_path.exists():
        raise InputValidationError(f"audio not found: {audio_path}")
    if not audio_path.is_file():
        raise InputValidationError(f"audio is not a file: {audio_path}")


def _transcribe_span(
    audio_path: Path,
    span: ChunkSpan,
    plan: ChunkPlan,
    chunks_dir: Path,
    *,
    backend: TranscriptionBackend,
    ffmpeg: FfmpegAdapter,
) -> Transcript:
    chunk_path = chunks_dir / f"chunk_{span.index:04d}{audio_path.suffix or '.mp3'}"
    try:
        try:
            ffmpeg.extract_chunk(audio_path, chunk_path, span.offset_s, span.duration_s)
        except Exception as exc:
            raise SplitError(f"failed to extract chunk {span.index}: {exc}", chunk_index=span.index) from exc

        logger.info("Transcribing chunk %d/%d...", span.index + 1, plan.count)
        try:
            return backend.transcribe(chunk_path)
        except Exception as exc:
            raise ChunkTranscriptionError(
                f"failed to transcribe chunk {span.index}: {exc}",
                chunk_index=span.index,
            ) from exc
    finally:
        chunk_path.unlink(missing_ok=True)


def transcribe_audio(
    audio_path: Path,
    *,
    backend: TranscriptionBackend,
    ffmpeg: FfmpegAdapter,
    max_single_call_s: float = DEFAULT_MAX_SINGLE_CALL_S,
    chunk_seconds: int = DEFAULT_CHUNK_SECONDS,
    work_dir: Path | None = None,
) -> Transcript:
    """
    Transcribe one audio file, splitting it when it is longer than max_single_call_s.
    Chunks are extracted and transcribed one at a time, in order; the first failure
    aborts the run and every chunk file is removed on the way out.
    """
    audio_path = Path(audio_path)
    _validate_audio(audio_path)
    if max_single_call_s <= 0:
        raise InputValidationError("max_single_call_s must be > 0")

    duration_s = ffmpeg.probe_duration(audio_path)
    if duration_s <= 0:
        raise DurationQueryError(f"audio has no measurable duration: {audio_path}")

    if duration_s <= max_single_call_s:
        logger.info("Transcribing %.0f seconds of audio in a single call...", duration_s)
        return backend.transcribe(audio_path)

    plan = plan_chunks(duration_s, chunk_seconds)
    logger.info("Audio is %.0f seconds, splitting into %d chunks...", duration_s, plan.count)

    merged = _MergedChunks()
    with tempfile.TemporaryDirectory(prefix="diarscribe-chunks-", dir=work_dir) as tmp:
        chunks_dir = Path(tmp)
        for span in plan.spans:
            # ffmpeg windows are cut at millisecond precision
            if round(span.duration_s, 3) <= 0:
                logger.debug("Skipping empty trailing chunk %d", span.index)
                continue
            transcript = _transcribe_span(audio_path, span, plan, chunks_dir, backend=backend, ffmpeg=ffmpeg)
            merged = merged.add(transcript, span.offset_s)

    return merged.to_transcript()


__all__ = ["transcribe_audio"]

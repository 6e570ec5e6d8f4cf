from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

from diarscribe.adapters.ffmpeg import FfmpegAdapter
from diarscribe.adapters.transcription import TranscriptionBackend
from diarscribe.components.render import render_transcript
from diarscribe.components.transcription import transcribe_audio
from diarscribe.config import DEFAULT_CHUNK_SECONDS, DEFAULT_MAX_SINGLE_CALL_S
from diarscribe.contracts.artifacts import Transcript
from diarscribe.contracts.errors import InputValidationError, PipelineError
from diarscribe.pipeline.io import transcript_output_path, write_text_file
from diarscribe.utils.time import Timer

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    backend: TranscriptionBackend
    ffmpeg: FfmpegAdapter
    max_single_call_s: float = DEFAULT_MAX_SINGLE_CALL_S
    chunk_seconds: int = DEFAULT_CHUNK_SECONDS
    output_path: Path | None = None
    work_dir: Path | None = None


@dataclass(frozen=True, slots=True)
class PipelineResult:
    output_path: Path
    transcript: Transcript


def _fail_step(step: str, exc: Exception) -> NoReturn:
    logger.debug("step '%s' failed: %s: %s", step, type(exc).__name__, exc)
    if isinstance(exc, PipelineError):
        raise exc
    raise PipelineError(f"pipeline failed at step '{step}': {exc}") from exc


def _complete_step(step: str, timer: Timer) -> None:
    logger.info("Step '%s' finished in %.1fs", step, timer.elapsed_s())


def run(input_path: Path, config: PipelineConfig) -> PipelineResult:
    """
    Convert media to MP3, transcribe it (chunked when long), render and write the text file.
    Nothing is written unless every step succeeds.
    """
    input_path = Path(input_path)
    output_path = config.output_path or transcript_output_path(input_path)

    # 1. validate
    timer = Timer.start()
    try:
        if not input_path.exists():
            raise InputValidationError(f"video file does not exist: {input_path}")
        if not input_path.is_file():
            raise InputValidationError(f"input is not a file: {input_path}")
        if output_path.resolve() == input_path.resolve():
            raise InputValidationError(f"output path would overwrite the input: {output_path}")
    except Exception as exc:
        _fail_step("validate", exc)
    _complete_step("validate", timer)

    with tempfile.TemporaryDirectory(prefix="diarscribe-", dir=config.work_dir) as tmp:
        audio_path = Path(tmp) / f"{input_path.stem}.mp3"

        # 2. convert
        logger.info("Converting %s to MP3...", input_path.name)
        timer = Timer.start()
        try:
            config.ffmpeg.extract_audio(input_path, audio_path)
        except Exception as exc:
            _fail_step("convert", exc)
        _complete_step("convert", timer)

        # 3. transcribe
        timer = Timer.start()
        try:
            transcript = transcribe_audio(
                audio_path,
                backend=config.backend,
                ffmpeg=config.ffmpeg,
                max_single_call_s=config.max_single_call_s,
                chunk_seconds=config.chunk_seconds,
                work_dir=Path(tmp),
            )
        except Exception as exc:
            _fail_step("transcribe", exc)
        _complete_step("transcribe", timer)

    # 4. render
    try:
        rendered = render_transcript(transcript)
    except Exception as exc:
        _fail_step("render", exc)

    # 5. write output
    try:
        write_text_file(output_path, rendered)
    except Exception as exc:
        _fail_step("write_output", exc)
    logger.info(
        "Wrote %d fragments from %d chunk(s) to %s",
        len(transcript.fragments),
        transcript.chunk_count,
        output_path,
    )

    return PipelineResult(output_path=output_path, transcript=transcript)


__all__ = [
    "PipelineConfig",
    "PipelineResult",
    "run",
]

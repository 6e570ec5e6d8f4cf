from __future__ import annotations

import logging
import math
import subprocess
from os import PathLike
from pathlib import Path
from typing import Callable, Protocol, Sequence

from diarscribe.contracts.errors import ConversionError, DurationQueryError


type StrPath = str | PathLike[str]
type CommandRunner = Callable[[Sequence[str]], subprocess.CompletedProcess[str]]

logger = logging.getLogger(__name__)


def _path_str(value: StrPath) -> str:
    return str(Path(value))


def _seconds_str(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.3f}"


def build_ffmpeg_extract_audio_cmd(input_path: StrPath, output_path: StrPath) -> list[str]:
    """Build a deterministic ffmpeg command that drops video and encodes VBR MP3."""
    return [
        "ffmpeg",
        "-y",
        "-i",
        _path_str(input_path),
        "-vn",
        "-acodec",
        "libmp3lame",
        "-q:a",
        "2",
        _path_str(output_path),
    ]


def build_ffprobe_duration_cmd(input_path: StrPath) -> list[str]:
    return [
        "ffprobe",
        "-v",
        "error",
        "-show_entries",
        "format=duration",
        "-of",
        "default=noprint_wrappers=1:nokey=1",
        _path_str(input_path),
    ]


def build_ffmpeg_chunk_cmd(
    input_audio: StrPath,
    output_path: StrPath,
    offset_s: int,
    duration_s: float,
) -> list[str]:
    """Build an ffmpeg command that copies one [offset, offset + duration) window."""
    if offset_s < 0:
        raise ValueError("offset_s must be >= 0")
    if duration_s <= 0:
        raise ValueError("duration_s must be > 0")

    return [
        "ffmpeg",
        "-y",
        "-ss",
        str(offset_s),
        "-t",
        _seconds_str(duration_s),
        "-i",
        _path_str(input_audio),
        "-acodec",
        "copy",
        _path_str(output_path),
    ]


def parse_duration_output(output: str) -> float:
    text = output.strip()
    try:
        duration = float(text)
    except ValueError as exc:
        raise DurationQueryError(f"failed to parse duration from ffprobe output: {text!r}") from exc
    if not math.isfinite(duration) or duration <= 0:
        raise DurationQueryError(f"ffprobe reported an unusable duration: {text!r}")
    return duration


class FfmpegAdapter(Protocol):
    def probe_duration(self, input_audio: StrPath) -> float:
        """Return the media duration in seconds."""

    def extract_audio(self, input_path: StrPath, output_path: StrPath) -> None:
        """Write the audio track of input_path to output_path as MP3."""

    def extract_chunk(self, input_audio: StrPath, output_path: StrPath, offset_s: int, duration_s: float) -> None:
        """Write one time window of input_audio to output_path."""


def _run_command(cmd: Sequence[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(list(cmd), capture_output=True, text=True, check=False)


class SubprocessFfmpeg:
    """FfmpegAdapter backed by the ffmpeg/ffprobe binaries on PATH."""

    def __init__(self, *, runner: CommandRunner = _run_command) -> None:
        self._run = runner

    def probe_duration(self, input_audio: StrPath) -> float:
        completed = self._run_or_raise(build_ffprobe_duration_cmd(input_audio), "ffprobe failed")
        duration = parse_duration_output(completed.stdout)
        logger.debug("ffprobe duration for %s: %.3fs", input_audio, duration)
        return duration

    def extract_audio(self, input_path: StrPath, output_path: StrPath) -> None:
        self._run_or_raise(build_ffmpeg_extract_audio_cmd(input_path, output_path), "ffmpeg conversion failed")
        if not Path(output_path).is_file():
            raise ConversionError(f"ffmpeg did not produce audio: {output_path}")

    def extract_chunk(self, input_audio: StrPath, output_path: StrPath, offset_s: int, duration_s: float) -> None:
        cmd = build_ffmpeg_chunk_cmd(input_audio, output_path, offset_s, duration_s)
        self._run_or_raise(cmd, "ffmpeg chunk extraction failed")

    def _run_or_raise(self, cmd: Sequence[str], fallback_message: str) -> subprocess.CompletedProcess[str]:
        try:
            completed = self._run(cmd)
        except OSError as exc:
            raise ConversionError(f"{fallback_message}: could not run {cmd[0]}: {exc}") from exc
        if completed.returncode == 0:
            return completed
        message = completed.stderr.strip() or completed.stdout.strip() or fallback_message
        raise ConversionError(f"{fallback_message} (exit {completed.returncode}): {message}")


__all__ = [
    "FfmpegAdapter",
    "SubprocessFfmpeg",
    "build_ffmpeg_chunk_cmd",
    "build_ffmpeg_extract_audio_cmd",
    "build_ffprobe_duration_cmd",
    "parse_duration_output",
]

from __future__ import annotations

from .assemblyai_transcription import AssemblyAITranscriptionAdapter
from .ffmpeg import (
    FfmpegAdapter,
    SubprocessFfmpeg,
    build_ffmpeg_chunk_cmd,
    build_ffmpeg_extract_audio_cmd,
    build_ffprobe_duration_cmd,
)
from .openai_transcription import OpenAIClientLike, OpenAITranscriptionAdapter
from .transcription import TranscriptionBackend

__all__ = [
    "FfmpegAdapter",
    "SubprocessFfmpeg",
    "build_ffmpeg_extract_audio_cmd",
    "build_ffprobe_duration_cmd",
    "build_ffmpeg_chunk_cmd",
    "TranscriptionBackend",
    "OpenAIClientLike",
    "OpenAITranscriptionAdapter",
    "AssemblyAITranscriptionAdapter",
]

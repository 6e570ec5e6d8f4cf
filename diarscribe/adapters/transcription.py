from __future__ import annotations

from pathlib import Path
from typing import Protocol

from diarscribe.contracts.artifacts import Transcript


class TranscriptionBackend(Protocol):
    """Provider adapter boundary: one audio file in, one diarized transcript out."""

    def transcribe(self, audio_path: Path) -> Transcript:
        """Return speaker-labeled fragments with times relative to the file start."""


__all__ = ["TranscriptionBackend"]

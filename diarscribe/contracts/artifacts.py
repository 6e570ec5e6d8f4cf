from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

UNKNOWN_SPEAKER = "Unknown"

JobStatus = Literal["queued", "processing", "completed", "error"]
JOB_STATUSES: frozenset[str] = frozenset({"queued", "processing", "completed", "error"})


def normalize_speaker(value: object) -> str:
    if value is None:
        return UNKNOWN_SPEAKER
    speaker = str(value).strip()
    return speaker or UNKNOWN_SPEAKER


@dataclass(frozen=True, slots=True)
class TimedFragment:
    speaker: str
    start: float
    end: float
    text: str

    def shifted(self, offset_s: float) -> "TimedFragment":
        return TimedFragment(
            speaker=self.speaker,
            start=self.start + offset_s,
            end=self.end + offset_s,
            text=self.text,
        )


@dataclass(frozen=True, slots=True)
class ChunkSpan:
    index: int
    offset_s: int
    duration_s: float

    @property
    def end_s(self) -> float:
        return self.offset_s + self.duration_s


@dataclass(frozen=True, slots=True)
class ChunkPlan:
    total_duration_s: float
    chunk_seconds: int
    spans: tuple[ChunkSpan, ...]

    @property
    def count(self) -> int:
        return len(self.spans)


@dataclass(frozen=True, slots=True)
class Transcript:
    text: str
    fragments: tuple[TimedFragment, ...] = ()
    chunk_count: int = 1


@dataclass(frozen=True, slots=True)
class TranscriptionJob:
    id: str
    status: JobStatus
    result: Transcript | None = None
    error_message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in ("completed", "error")

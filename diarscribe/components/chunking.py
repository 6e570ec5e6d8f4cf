from __future__ import annotations

import math

from diarscribe.contracts.artifacts import ChunkPlan, ChunkSpan
from diarscribe.contracts.errors import DurationQueryError, InputValidationError


def _validate_chunk_seconds(chunk_seconds: int) -> None:
    if chunk_seconds <= 0:
        raise InputValidationError("chunk_seconds must be > 0")


def _validate_total_duration(total_duration_s: float) -> None:
    if not math.isfinite(total_duration_s) or total_duration_s <= 0:
        raise DurationQueryError(f"cannot plan chunks for duration {total_duration_s!r}")


def plan_chunks(total_duration_s: float, chunk_seconds: int) -> ChunkPlan:
    """
    Split [0, total_duration_s] into contiguous fixed-length windows.
    The last window holds the remainder and is empty when the total is an exact multiple.
    """
    _validate_chunk_seconds(chunk_seconds)
    _validate_total_duration(total_duration_s)

    count = math.floor(total_duration_s / chunk_seconds) + 1
    spans: list[ChunkSpan] = []
    for index in range(count):
        offset_s = index * chunk_seconds
        if index < count - 1:
            duration_s = float(chunk_seconds)
        else:
            duration_s = max(0.0, total_duration_s - offset_s)
        spans.append(ChunkSpan(index=index, offset_s=offset_s, duration_s=duration_s))

    return ChunkPlan(
        total_duration_s=total_duration_s,
        chunk_seconds=chunk_seconds,
        spans=tuple(spans),
    )


__all__ = ["plan_chunks"]

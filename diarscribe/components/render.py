from __future__ import annotations

import math

from diarscribe.contracts.artifacts import Transcript, normalize_speaker


def format_timestamp(seconds: float) -> str:
    """Format seconds as zero-padded HH:MM:SS, truncating any fraction."""
    total = max(0, math.floor(seconds)) if math.isfinite(seconds) else 0
    hours = total // 3600
    minutes = (total // 60) % 60
    secs = total % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def render_transcript(transcript: Transcript) -> str:
    """
    Render fragments grouped by contiguous speaker runs.
    Each run opens with a "[start - end] speaker:" header; later fragments of the
    same run are prefixed with their own time range. Runs are separated by one blank line.
    """
    if not transcript.fragments:
        return transcript.text + "\n"

    lines: list[str] = []
    current_speaker: str | None = None
    for fragment in transcript.fragments:
        time_range = f"[{format_timestamp(fragment.start)} - {format_timestamp(fragment.end)}]"
        speaker = normalize_speaker(fragment.speaker)

        if speaker != current_speaker:
            if current_speaker is not None:
                lines.append("\n")
            lines.append(f"{time_range} {speaker}:\n")
            current_speaker = speaker
        else:
            lines.append(f"{time_range} ")

        lines.append(fragment.text.strip())
        lines.append("\n")

    return "".join(lines)


__all__ = ["format_timestamp", "render_transcript"]

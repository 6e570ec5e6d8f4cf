from __future__ import annotations

import pytest

from diarscribe.components.render import format_timestamp, render_transcript
from diarscribe.contracts.artifacts import TimedFragment, Transcript


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, "00:00:00"),
        (3661.9, "01:01:01"),
        (59.999, "00:00:59"),
        (86399.5, "23:59:59"),
        (90000, "25:00:00"),
        (-3.0, "00:00:00"),
    ],
)
def test_format_timestamp_truncates(seconds: float, expected: str) -> None:
    assert format_timestamp(seconds) == expected


def test_single_speaker_renders_one_header_and_no_blank_lines() -> None:
    transcript = Transcript(
        text="hello there general",
        fragments=(
            TimedFragment(speaker="A", start=0.0, end=1.5, text=" hello "),
            TimedFragment(speaker="A", start=1.5, end=3.2, text="there"),
            TimedFragment(speaker="A", start=3.2, end=61.0, text="general"),
        ),
    )

    assert render_transcript(transcript) == (
        "[00:00:00 - 00:00:01] A:\n"
        "hello\n"
        "[00:00:01 - 00:00:03] there\n"
        "[00:00:03 - 00:01:01] general\n"
    )


def test_speaker_change_inserts_exactly_one_blank_line() -> None:
    transcript = Transcript(
        text="",
        fragments=(
            TimedFragment(speaker="A", start=0.0, end=2.0, text="Hi."),
            TimedFragment(speaker="B", start=2.0, end=4.0, text="Hello."),
            TimedFragment(speaker="B", start=4.0, end=5.0, text="How are you?"),
        ),
    )

    assert render_transcript(transcript) == (
        "[00:00:00 - 00:00:02] A:\n"
        "Hi.\n"
        "\n"
        "[00:00:02 - 00:00:04] B:\n"
        "Hello.\n"
        "[00:00:04 - 00:00:05] How are you?\n"
    )


def test_returning_speaker_gets_a_new_header() -> None:
    transcript = Transcript(
        text="",
        fragments=(
            TimedFragment(speaker="A", start=0.0, end=1.0, text="one"),
            TimedFragment(speaker="B", start=1.0, end=2.0, text="two"),
            TimedFragment(speaker="A", start=2.0, end=3.0, text="three"),
        ),
    )

    rendered = render_transcript(transcript)

    assert rendered.count(" A:\n") == 2
    assert rendered.count("\n\n") == 2


def test_blank_speaker_renders_as_unknown() -> None:
    transcript = Transcript(text="", fragments=(TimedFragment(speaker="", start=0.0, end=1.0, text="hm"),))

    assert render_transcript(transcript) == "[00:00:00 - 00:00:01] Unknown:\nhm\n"


def test_empty_fragments_fall_back_to_plain_text_verbatim() -> None:
    transcript = Transcript(text="  plain words, untouched ", fragments=())

    assert render_transcript(transcript) == "  plain words, untouched \n"

"""Utility package for workflow helpers."""

from __future__ import annotations

from .time import Deadline, Timer, now_monotonic_s

__all__ = [
    "Deadline",
    "Timer",
    "now_monotonic_s",
]

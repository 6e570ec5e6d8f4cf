from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

type Clock = Callable[[], float]


def now_monotonic_s() -> float:
    return time.monotonic()


@dataclass(slots=True)
class Timer:
    start_s: float
    clock: Clock = now_monotonic_s

    @classmethod
    def start(cls, clock: Clock = now_monotonic_s) -> "Timer":
        return cls(start_s=clock(), clock=clock)

    def elapsed_s(self) -> float:
        return max(0.0, self.clock() - self.start_s)


@dataclass(slots=True)
class Deadline:
    """A point on a monotonic clock; ``timeout_s=None`` never expires."""

    timer: Timer
    timeout_s: float | None

    @classmethod
    def after(cls, timeout_s: float | None, clock: Clock = now_monotonic_s) -> "Deadline":
        return cls(timer=Timer.start(clock), timeout_s=timeout_s)

    def remaining_s(self) -> float | None:
        if self.timeout_s is None:
            return None
        return self.timeout_s - self.timer.elapsed_s()

    def expired(self) -> bool:
        remaining = self.remaining_s()
        return remaining is not None and remaining <= 0

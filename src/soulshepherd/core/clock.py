from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

# A clock returns the current wall-clock time in epoch milliseconds.
Clock = Callable[[], float]

MS_PER_MINUTE = 60_000


def system_clock() -> int:
    return int(time.time() * 1000)


@dataclass
class ManualClock:
    """Clock that only moves when told to. Used for deterministic tests."""

    now_ms: float = 0

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, *, ms: float = 0, seconds: float = 0, minutes: float = 0) -> None:
        self.now_ms += ms + seconds * 1000 + minutes * MS_PER_MINUTE

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional


@dataclass
class RNG:
    """
    Injectable uniform random source around random.Random.

    Reward rolls draw from an instance of this class instead of the global
    ``random`` module so tests can seed it, or replace it with any object
    exposing ``random() -> float``.
    """

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def random(self) -> float:
        """Return the next random float in the range [0.0, 1.0)."""
        return self._rng.random()

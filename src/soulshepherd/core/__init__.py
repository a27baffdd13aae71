from .clock import Clock, ManualClock, system_clock
from .rng import RNG

__all__ = ["Clock", "ManualClock", "RNG", "system_clock"]

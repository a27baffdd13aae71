from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from soulshepherd.config import FormulaTable, load_formulas
from soulshepherd.core.clock import MS_PER_MINUTE, Clock, system_clock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdleCollection:
    souls_collected: int
    embers_earned: int
    new_collection_time: float


class IdleCollector:
    """Passive content-soul income accrued between collections.

    One soul per collection interval, scaled by (1 + soulflow * bonus), and
    each soul converts into a fixed number of soul embers.
    """

    def __init__(self, formulas: Optional[FormulaTable] = None, clock: Clock = system_clock) -> None:
        self.formulas = formulas or load_formulas()
        self.clock = clock

    def calculate_idle_rate(self, soulflow: float) -> float:
        f = self.formulas
        return f.idle_collection_base_rate * (1 + soulflow * f.idle_collection_soulflow_bonus)

    def time_since_last_collection(self, last_collection_time: float) -> float:
        return self.clock() - last_collection_time

    def collect_idle_souls(self, last_collection_time: float, soulflow: float) -> IdleCollection:
        now = self.clock()
        elapsed_minutes = max(0.0, (now - last_collection_time) / MS_PER_MINUTE)
        intervals = elapsed_minutes / self.formulas.idle_collection_interval_minutes
        souls = math.floor(intervals * self.calculate_idle_rate(soulflow))
        embers = souls * self.formulas.content_soul_to_embers
        logger.info("Collected %d idle souls (%d embers) over %.1f minutes", souls, embers, elapsed_minutes)
        return IdleCollection(souls_collected=souls, embers_earned=embers, new_collection_time=now)

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Optional, Protocol

from soulshepherd.config import FormulaTable, load_formulas
from soulshepherd.core.clock import MS_PER_MINUTE, Clock, system_clock
from soulshepherd.core.rng import RNG

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def random(self) -> float: ...


@dataclass(frozen=True)
class SessionResult:
    """Rewards earned by one finished focus session.

    idle_time and active_time are in seconds. active_time is the raw
    elapsed-minus-idle figure and can be negative; only the credited
    duration behind the rewards is clamped.
    """

    soul_insight: float
    soul_embers: float
    boss_damage: float
    was_critical: bool
    was_compromised: bool
    idle_time: float
    active_time: float


def round_half_up(value: float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


class RewardCalculator:
    """Turns a finished session plus player stats into a SessionResult.

    Soul insight scales with spirit and soul embers with soulflow. A critical
    roll (chance = harmony) and the compromise penalty both multiply those two
    rewards. Boss damage is a separate channel computed from spirit and the
    credited duration only.
    """

    def __init__(
        self,
        formulas: Optional[FormulaTable] = None,
        rng: Optional[RandomSource] = None,
        clock: Clock = system_clock,
    ) -> None:
        self.formulas = formulas or load_formulas()
        self.rng = rng or RNG()
        self.clock = clock

    def calculate_rewards(self, session: Mapping[str, Any], stats: Mapping[str, float]) -> SessionResult:
        f = self.formulas
        elapsed_minutes = (self.clock() - session["start_time"]) / MS_PER_MINUTE
        active_minutes = elapsed_minutes - session["idle_time"] / 60

        # Credit never exceeds the planned duration and never goes below zero.
        effective = max(0.0, min(session["duration"], active_minutes))

        insight = effective * f.soul_insight_base_multiplier * (1 + stats["spirit"] * f.soul_insight_spirit_bonus)
        embers = effective * f.soul_embers_base_multiplier * (1 + stats["soulflow"] * f.soul_embers_soulflow_bonus)

        was_critical = self.check_critical(stats["harmony"])
        if was_critical:
            insight *= f.critical_hit_multiplier
            embers *= f.critical_hit_multiplier
            logger.info("Critical hit! Rewards multiplied by %sx", f.critical_hit_multiplier)

        was_compromised = bool(session["is_compromised"])
        if was_compromised:
            insight = self.apply_compromise_penalty(insight)
            embers = self.apply_compromise_penalty(embers)
            logger.info("Session compromised; rewards multiplied by %sx", f.compromise_penalty_multiplier)

        boss_damage = stats["spirit"] * effective * f.boss_damage_multiplier

        result = SessionResult(
            soul_insight=round_half_up(insight),
            soul_embers=round_half_up(embers),
            boss_damage=round_half_up(boss_damage),
            was_critical=was_critical,
            was_compromised=was_compromised,
            idle_time=session["idle_time"],
            active_time=active_minutes * 60,
        )
        logger.debug(
            "Rewards calculated: %s insight, %s embers, %s boss damage (effective %.2f min)",
            result.soul_insight,
            result.soul_embers,
            result.boss_damage,
            effective,
        )
        return result

    def check_critical(self, critical_chance: float) -> bool:
        return self.rng.random() < critical_chance

    def apply_compromise_penalty(self, value: float) -> float:
        return value * self.formulas.compromise_penalty_multiplier

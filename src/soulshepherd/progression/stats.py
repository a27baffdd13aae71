"""Spending soul embers and skill points on player stats.

spirit and soulflow grow by whole points; harmony is a critical-hit chance
stored as a fraction and grows by ``harmony_step`` up to 1.0. Upgrade costs
grow geometrically with the current value (harmony counted in percent).
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, Mapping, Tuple

from soulshepherd.config import FormulaTable
from soulshepherd.errors import InsufficientEmbers, NoSkillPointsAvailable, StatAtMaximum, UnknownStat

logger = logging.getLogger(__name__)

STAT_NAMES = ("spirit", "harmony", "soulflow")
MAX_HARMONY = 1.0


def _check_stat(stat: str) -> None:
    if stat not in STAT_NAMES:
        raise UnknownStat(f"Unknown stat: {stat!r}; expected one of {', '.join(STAT_NAMES)}")


def stat_upgrade_cost(stats: Mapping[str, float], stat: str, formulas: FormulaTable) -> int:
    _check_stat(stat)
    value = stats[stat] * 100 if stat == "harmony" else stats[stat]
    return math.floor(formulas.stat_upgrade_base_cost * formulas.stat_upgrade_cost_multiplier ** value)


def _raised(stats: Mapping[str, float], stat: str, formulas: FormulaTable) -> Dict[str, float]:
    updated = dict(stats)
    if stat == "harmony":
        if stats["harmony"] >= MAX_HARMONY:
            raise StatAtMaximum("Harmony is already at 100%")
        updated["harmony"] = min(MAX_HARMONY, stats["harmony"] + formulas.harmony_step)
    else:
        updated[stat] = stats[stat] + 1
    return updated


def upgrade_stat(player: Mapping[str, Any], stat: str, formulas: FormulaTable) -> Tuple[Dict[str, Any], int]:
    """Buy one step of a stat with soul embers.

    Returns the updated player record and the cost paid.
    """
    cost = stat_upgrade_cost(player["stats"], stat, formulas)
    if player["soul_embers"] < cost:
        raise InsufficientEmbers(f"Insufficient soul embers. Need {cost}, have {player['soul_embers']}")
    stats = _raised(player["stats"], stat, formulas)
    logger.info("Stat upgraded: %s -> %s for %d embers", stat, stats[stat], cost)
    return {**player, "stats": stats, "soul_embers": player["soul_embers"] - cost}, cost


def allocate_skill_point(player: Mapping[str, Any], stat: str, formulas: FormulaTable) -> Dict[str, Any]:
    _check_stat(stat)
    if player["skill_points"] <= 0:
        raise NoSkillPointsAvailable(f"No skill points available. Current: {player['skill_points']}")
    stats = _raised(player["stats"], stat, formulas)
    logger.info("Skill point allocated: %s -> %s", stat, stats[stat])
    return {**player, "stats": stats, "skill_points": player["skill_points"] - 1}

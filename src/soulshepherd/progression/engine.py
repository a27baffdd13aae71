from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from soulshepherd.config import Boss, BossCatalog, FormulaTable, load_boss_catalog, load_formulas

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BossResult:
    remaining_resolve: float
    was_defeated: bool
    next_boss: Optional[Boss] = None


@dataclass(frozen=True)
class LevelResult:
    new_level: int
    leveled_up: bool
    skill_points_granted: int


class ProgressionEngine:
    """Boss combat, boss unlocking and experience-driven leveling.

    All methods are pure: they read slices of the root state (plain dicts)
    and return result records or new dicts without mutating their inputs.

    - Level thresholds follow floor(base * level ** exponent).
    - A defeated boss only advances once the player meets the next boss's
      unlock level; until then the index and resolve stay where they are.
    """

    def __init__(self, catalog: Optional[BossCatalog] = None, formulas: Optional[FormulaTable] = None) -> None:
        self.catalog = catalog or load_boss_catalog()
        self.formulas = formulas or load_formulas()

    # Bosses

    def damage_boss(self, damage: float, progression: Mapping[str, Any], player_level: int) -> BossResult:
        """Apply damage to the current boss's resolve.

        Never advances the boss; a defeat only reports the next boss (if any)
        so the caller can decide whether to unlock it.
        """
        remaining = max(0, progression["current_boss_resolve"] - damage)
        was_defeated = remaining == 0
        next_boss: Optional[Boss] = None

        if was_defeated:
            next_boss = self.catalog.get(progression["current_boss_index"] + 1)
            if next_boss is None:
                logger.info("All bosses defeated; campaign complete")
            elif player_level < next_boss.unlock_level:
                logger.info(
                    "Next boss %r requires level %d, player is level %d",
                    next_boss.name,
                    next_boss.unlock_level,
                    player_level,
                )

        return BossResult(remaining_resolve=remaining, was_defeated=was_defeated, next_boss=next_boss)

    def get_current_boss(self, progression: Mapping[str, Any]) -> Boss:
        return self.catalog[self.catalog.clamp_index(progression["current_boss_index"])]

    def unlock_next_boss(self, progression: Dict[str, Any], player_level: int) -> Dict[str, Any]:
        """Advance to the next boss if one exists and the player level allows it.

        Returns the input object itself when no advance happens; callers detect
        an advance by comparing current_boss_index before and after.
        """
        current_index = progression["current_boss_index"]
        next_boss = self.catalog.get(current_index + 1)

        if next_boss is None:
            logger.debug("Cannot unlock next boss: already at final boss")
            return progression
        if player_level < next_boss.unlock_level:
            logger.debug(
                "Cannot unlock boss %r: requires level %d, player is level %d",
                next_boss.name,
                next_boss.unlock_level,
                player_level,
            )
            return progression

        defeated = list(progression.get("defeated_bosses", []))
        if current_index not in defeated:
            defeated.append(current_index)

        logger.info("Unlocking next boss %r (id=%d)", next_boss.name, next_boss.id)
        return {
            **progression,
            "current_boss_index": current_index + 1,
            "current_boss_resolve": next_boss.initial_resolve,
            "defeated_bosses": defeated,
        }

    # Experience and levels

    def calculate_level_threshold(self, level: int) -> int:
        f = self.formulas
        return math.floor(f.level_threshold_base * math.pow(level, f.level_threshold_exponent))

    def add_experience(self, amount: float, player: Mapping[str, Any]) -> LevelResult:
        """Add soul insight and resolve every level-up it pays for.

        The loop terminates because each iteration raises the level and the
        threshold strictly increases with level.
        """
        if amount < 0:
            raise ValueError("Experience amount cannot be negative")
        total = player["soul_insight"] + amount
        # levels start at 1
        start_level = max(1, player["level"])
        level = start_level
        granted = 0
        threshold = self.calculate_level_threshold(level)

        while total >= threshold:
            level += 1
            granted += self.formulas.skill_points_per_level
            logger.debug("Level up: L%d (threshold %d, total %.2f)", level, threshold, total)
            threshold = self.calculate_level_threshold(level)

        leveled_up = level > start_level
        if leveled_up:
            logger.info("Player leveled up to %d, %d skill point(s) granted", level, granted)
        return LevelResult(new_level=level, leveled_up=leveled_up, skill_points_granted=granted)

    def grant_skill_points(self, current: int, amount: int) -> int:
        return current + amount

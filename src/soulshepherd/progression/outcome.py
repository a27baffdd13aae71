"""Folding engine results back into root-state sections.

Each function returns a partial root state suitable for
StateStore.update_state(); the input state is never mutated.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Mapping, Optional

from soulshepherd.rewards import SessionResult
from .engine import ProgressionEngine
from .idle import IdleCollection

logger = logging.getLogger(__name__)


def unlock_if_ready(progression: Dict[str, Any], player_level: int, engine: ProgressionEngine) -> Dict[str, Any]:
    """Advance past a boss sitting at zero resolve once the level allows it.

    Safe to call after any level change; a no-op while the boss still has
    resolve left or the next boss is locked.
    """
    if progression["current_boss_resolve"] > 0:
        return progression
    advanced = engine.unlock_next_boss(progression, player_level)
    if advanced["current_boss_index"] != progression["current_boss_index"]:
        logger.info("Boss unlocked: %s", engine.get_current_boss(advanced).name)
    return advanced


def _parse_date(value: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning("Ignoring unparseable last session date %r", value)
        return None


def update_streak(statistics: Mapping[str, Any], today: date) -> Dict[str, Any]:
    last = _parse_date(statistics["last_session_date"])
    current = statistics["current_streak"]
    if last is None:
        current = 1
    else:
        gap = (today - last).days
        if gap == 1:
            current += 1
        elif gap > 1:
            current = 1
    return {
        **statistics,
        "current_streak": current,
        "longest_streak": max(statistics["longest_streak"], current),
        "last_session_date": today.isoformat(),
    }


def apply_session_result(
    state: Mapping[str, Any],
    result: SessionResult,
    engine: ProgressionEngine,
    *,
    today: date,
    now: float,
) -> Dict[str, Any]:
    """Credit a finished session: experience, embers, boss damage, statistics.

    Also clears the session and starts a break of the configured length.
    """
    player = state["player"]
    progression = state["progression"]
    session = state["session"] or {}

    level_result = engine.add_experience(result.soul_insight, player)
    new_level = level_result.new_level
    updated_player = {
        **player,
        "level": new_level,
        "soul_insight": player["soul_insight"] + result.soul_insight,
        "soul_insight_to_next_level": engine.calculate_level_threshold(new_level),
        "soul_embers": player["soul_embers"] + result.soul_embers,
        "skill_points": engine.grant_skill_points(player["skill_points"], level_result.skill_points_granted),
    }

    already_down = progression["current_boss_resolve"] == 0
    boss_result = engine.damage_boss(result.boss_damage, progression, new_level)
    updated_progression = unlock_if_ready(
        {**progression, "current_boss_resolve": boss_result.remaining_resolve}, new_level, engine
    )
    newly_defeated = boss_result.was_defeated and not already_down

    statistics = state["statistics"]
    updated_statistics = update_streak(statistics, today)
    updated_statistics.update(
        total_sessions=statistics["total_sessions"] + 1,
        total_focus_time=statistics["total_focus_time"] + session.get("duration", 0),
        total_soul_insight_earned=statistics["total_soul_insight_earned"] + result.soul_insight,
        total_soul_embers_earned=statistics["total_soul_embers_earned"] + result.soul_embers,
        bosses_defeated=statistics["bosses_defeated"] + (1 if newly_defeated else 0),
    )

    return {
        "player": updated_player,
        "progression": updated_progression,
        "statistics": updated_statistics,
        "session": None,
        "break": {
            "start_time": now,
            "duration": state["settings"]["default_break_duration"],
            "is_active": True,
        },
    }


def apply_idle_collection(state: Mapping[str, Any], collection: IdleCollection) -> Dict[str, Any]:
    player = state["player"]
    progression = state["progression"]
    statistics = state["statistics"]
    idle_state = progression["idle_state"]
    return {
        "player": {**player, "soul_embers": player["soul_embers"] + collection.embers_earned},
        "progression": {
            **progression,
            "idle_state": {
                "last_collection_time": collection.new_collection_time,
                "accumulated_souls": idle_state["accumulated_souls"] + collection.souls_collected,
            },
        },
        "statistics": {
            **statistics,
            "total_idle_souls_collected": statistics["total_idle_souls_collected"] + collection.souls_collected,
            "total_soul_embers_earned": statistics["total_soul_embers_earned"] + collection.embers_earned,
        },
    }

"""Root state layout, defaults and validate-and-repair.

The root state is a plain JSON-compatible dict:

    version, player, session, break, progression, tasks, settings, statistics

session and break are None when nothing is running. tasks.goals is kept
as opaque data and round-trips verbatim.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from soulshepherd.config import BossCatalog, load_boss_catalog
from soulshepherd.core.clock import Clock, system_clock
from .fields import Field, Record, constant, is_bool, is_int, is_list, is_number, is_str

logger = logging.getLogger(__name__)

CURRENT_STATE_VERSION = 1

SECTIONS = ("version", "player", "session", "break", "progression", "tasks", "settings", "statistics")


def _num(name: str, default: float) -> Field:
    return Field(name, is_number, constant(default))


def _int(name: str, default: int) -> Field:
    return Field(name, is_int, constant(default))


def _bool(name: str, default: bool) -> Field:
    return Field(name, is_bool, constant(default))


def _str(name: str, default: str) -> Field:
    return Field(name, is_str, constant(default))


def _list(name: str, default: list) -> Field:
    return Field(name, is_list, constant(default))


def _level(name: str) -> Field:
    return Field(name, lambda v: is_int(v) and v >= 1, constant(1))


def _boss_position(catalog: BossCatalog):
    def finalize(repaired: Dict[str, Any], raw: Mapping[str, Any]) -> Dict[str, Any]:
        index = raw.get("current_boss_index")
        index = catalog.clamp_index(int(index)) if is_number(index) else 0
        resolve = raw.get("current_boss_resolve")
        if is_number(resolve):
            resolve = max(0, resolve)
        else:
            resolve = catalog[index].initial_resolve
        repaired["current_boss_index"] = index
        repaired["current_boss_resolve"] = resolve
        return repaired

    return finalize


def build_root_schema(catalog: BossCatalog, clock: Clock = system_clock) -> Record:
    """Assemble the record tree describing the root state.

    Timestamps default to the clock's current time; the boss position is
    clamped to the catalog and the resolve defaults to the boss at that index.
    """
    def timestamp(name: str) -> Field:
        return Field(name, is_number, clock)

    player = Record(
        "player",
        (
            _level("level"),
            _num("soul_insight", 0),
            _num("soul_insight_to_next_level", 100),
            _num("soul_embers", 0),
            Record("stats", (_num("spirit", 1), _num("harmony", 0.05), _num("soulflow", 1))),
            _int("skill_points", 0),
            Record(
                "cosmetics",
                (
                    _list("owned_themes", ["default"]),
                    _list("owned_sprites", ["default"]),
                    _str("active_theme", "default"),
                    _str("active_sprite", "default"),
                ),
            ),
        ),
    )
    session = Record(
        "session",
        (
            timestamp("start_time"),
            _num("duration", 25),
            _str("task_id", ""),
            _bool("auto_complete_task", False),
            _bool("is_active", False),
            _bool("is_paused", False),
            _bool("is_compromised", False),
            _num("idle_time", 0),
            _num("active_time", 0),
        ),
        nullable=True,
    )
    break_ = Record(
        "break",
        (timestamp("start_time"), _num("duration", 5), _bool("is_active", False)),
        nullable=True,
    )
    progression = Record(
        "progression",
        (
            _list("defeated_bosses", []),
            Record("idle_state", (timestamp("last_collection_time"), _num("accumulated_souls", 0))),
        ),
        finalize=_boss_position(catalog),
    )
    tasks = Record("tasks", (_list("goals", []), _int("next_id", 1)))
    settings = Record(
        "settings",
        (
            _num("default_session_duration", 25),
            _num("default_break_duration", 5),
            _bool("auto_start_next_session", False),
            _bool("auto_complete_task", False),
            _num("idle_threshold", 120),
            _bool("strict_mode", False),
            _list("discouraged_sites", []),
            _list("blocked_sites", []),
            _bool("animations_enabled", True),
            _bool("notifications_enabled", True),
            _num("sound_volume", 0.5),
            _bool("show_session_timer", True),
        ),
    )
    statistics = Record(
        "statistics",
        (
            _int("total_sessions", 0),
            _num("total_focus_time", 0),
            _int("current_streak", 0),
            _int("longest_streak", 0),
            _str("last_session_date", ""),
            _int("bosses_defeated", 0),
            _num("total_soul_insight_earned", 0),
            _num("total_soul_embers_earned", 0),
            _num("total_idle_souls_collected", 0),
        ),
    )
    return Record(
        "root",
        (_int("version", CURRENT_STATE_VERSION), player, session, break_, progression, tasks, settings, statistics),
    )


class StateSchema:
    """Bound root schema: creates default states and repairs raw ones."""

    def __init__(self, catalog: Optional[BossCatalog] = None, clock: Clock = system_clock) -> None:
        self.catalog = catalog or load_boss_catalog()
        self.root = build_root_schema(self.catalog, clock)

    def create_default_state(self) -> Dict[str, Any]:
        return self.root.build({})

    def validate_and_repair(self, raw: Any) -> Dict[str, Any]:
        """Return a fully populated, type-correct root state for any input.

        Idempotent: repairing an already repaired state returns an equal state.
        """
        if not isinstance(raw, dict):
            logger.warning("Stored state is not a mapping (%s); using defaults", type(raw).__name__)
            return self.create_default_state()

        repaired = self.root.build(raw)
        damaged = [name for name in SECTIONS if repaired[name] != raw.get(name)]
        if damaged:
            logger.warning("Repaired corrupted state sections: %s", ", ".join(damaged))
        return repaired


def validate_and_repair(raw: Any, catalog: Optional[BossCatalog] = None, clock: Clock = system_clock) -> Dict[str, Any]:
    return StateSchema(catalog, clock).validate_and_repair(raw)


def create_default_state(catalog: Optional[BossCatalog] = None, clock: Clock = system_clock) -> Dict[str, Any]:
    return StateSchema(catalog, clock).create_default_state()

from .engine import BossResult, LevelResult, ProgressionEngine
from .idle import IdleCollection, IdleCollector
from .outcome import apply_idle_collection, apply_session_result, unlock_if_ready, update_streak
from .stats import STAT_NAMES, allocate_skill_point, stat_upgrade_cost, upgrade_stat

__all__ = [
    "BossResult",
    "IdleCollection",
    "IdleCollector",
    "LevelResult",
    "ProgressionEngine",
    "STAT_NAMES",
    "allocate_skill_point",
    "apply_idle_collection",
    "apply_session_result",
    "stat_upgrade_cost",
    "unlock_if_ready",
    "update_streak",
    "upgrade_stat",
]

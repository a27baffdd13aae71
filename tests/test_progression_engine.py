import math

import pytest

from soulshepherd.config import FormulaTable
from soulshepherd.progression import ProgressionEngine


def progression(index=0, resolve=100, defeated=None):
    return {
        "current_boss_index": index,
        "current_boss_resolve": resolve,
        "defeated_bosses": list(defeated or []),
        "idle_state": {"last_collection_time": 0, "accumulated_souls": 0},
    }


def player(level=1, soul_insight=0):
    return {"level": level, "soul_insight": soul_insight, "skill_points": 0}


@pytest.mark.parametrize("level, expected", [(1, 100), (2, 282), (3, 519), (4, 800), (5, 1118), (10, 3162)])
def test_level_threshold_reference_values(engine, level, expected):
    assert engine.calculate_level_threshold(level) == expected


def test_level_threshold_strictly_increasing_and_floored(engine):
    thresholds = [engine.calculate_level_threshold(level) for level in range(1, 101)]
    assert all(b > a for a, b in zip(thresholds, thresholds[1:]))
    for level, t in enumerate(thresholds, start=1):
        assert t == math.floor(100 * level ** 1.5)


def test_damage_reduces_resolve_exactly(engine):
    result = engine.damage_boss(30, progression(resolve=100), player_level=1)
    assert result.remaining_resolve == 70
    assert result.was_defeated is False
    assert result.next_boss is None


def test_damage_never_goes_below_zero_and_reports_next_boss(engine, catalog):
    state = progression(resolve=100)
    result = engine.damage_boss(150, state, player_level=1)
    assert result.remaining_resolve == 0
    assert result.was_defeated is True
    assert result.next_boss == catalog[1]
    # informational only: nothing advanced
    assert state["current_boss_index"] == 0
    assert state["current_boss_resolve"] == 100


def test_exact_damage_defeats(engine):
    assert engine.damage_boss(100, progression(resolve=100), 1).was_defeated is True


def test_defeating_final_boss_completes_campaign(engine):
    result = engine.damage_boss(5000, progression(index=9, resolve=2500), player_level=40)
    assert result.was_defeated is True
    assert result.next_boss is None


@pytest.mark.parametrize("index, expected", [(0, 0), (4, 4), (-5, 0), (99, 9)])
def test_get_current_boss_clamps(engine, catalog, index, expected):
    assert engine.get_current_boss(progression(index=index)) == catalog[expected]


def test_unlock_blocked_by_level_returns_input_unchanged(engine):
    state = progression(index=0, resolve=0)
    # The Unfinished Scholar requires level 3
    assert engine.unlock_next_boss(state, player_level=2) is state
    assert state["current_boss_index"] == 0


def test_unlock_advances_exactly_one(engine, catalog):
    state = progression(index=0, resolve=0)
    advanced = engine.unlock_next_boss(state, player_level=3)
    assert advanced["current_boss_index"] == 1
    assert advanced["current_boss_resolve"] == catalog[1].initial_resolve == 200
    assert advanced["defeated_bosses"] == [0]
    # input untouched
    assert state["current_boss_index"] == 0
    assert state["defeated_bosses"] == []


def test_unlock_does_not_duplicate_defeated_index(engine):
    advanced = engine.unlock_next_boss(progression(index=0, resolve=0, defeated=[0]), player_level=3)
    assert advanced["defeated_bosses"] == [0]


def test_unlock_beyond_final_boss_is_noop(engine):
    state = progression(index=9, resolve=0)
    assert engine.unlock_next_boss(state, player_level=99) is state


def test_add_experience_without_level_up(engine):
    result = engine.add_experience(50, player())
    assert result.new_level == 1
    assert result.leveled_up is False
    assert result.skill_points_granted == 0


def test_adding_exact_threshold_levels_once(engine):
    result = engine.add_experience(100, player())
    assert result.new_level == 2
    assert result.leveled_up is True
    assert result.skill_points_granted == 1


def test_multiple_level_ups_in_one_call(engine):
    # 600 total crosses 100 (L1), 282 (L2) and 519 (L3) but not 800 (L4)
    result = engine.add_experience(600, player())
    assert result.new_level == 4
    assert result.skill_points_granted == 3


def test_existing_experience_counts_towards_threshold(engine):
    result = engine.add_experience(10, player(level=2, soul_insight=275))
    assert result.new_level == 3
    assert result.skill_points_granted == 1


def test_zero_experience_never_lowers_level(engine):
    result = engine.add_experience(0, player(level=7, soul_insight=0))
    assert result.new_level == 7
    assert result.leveled_up is False


def test_negative_experience_rejected(engine):
    with pytest.raises(ValueError):
        engine.add_experience(-1, player())


def test_skill_points_per_level_comes_from_formulas(catalog):
    engine = ProgressionEngine(catalog, FormulaTable(skill_points_per_level=2))
    assert engine.add_experience(600, player()).skill_points_granted == 6


def test_grant_skill_points_is_plain_addition(engine):
    assert engine.grant_skill_points(0, 1) == 1
    assert engine.grant_skill_points(5, 3) == 8
    assert engine.grant_skill_points(2, 0) == 2


def test_add_experience_treats_levels_below_one_as_one(engine):
    result = engine.add_experience(150, player(level=-2))
    assert result.new_level == 2
    assert result.skill_points_granted == 1

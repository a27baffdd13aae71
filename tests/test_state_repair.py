import copy
import logging

import pytest

from soulshepherd.state import CURRENT_STATE_VERSION, SECTIONS, StateSchema, create_default_state, validate_and_repair


def test_default_state_shape(schema, clock):
    state = schema.create_default_state()
    assert tuple(state) == SECTIONS
    assert state["version"] == CURRENT_STATE_VERSION
    assert state["player"]["level"] == 1
    assert state["player"]["soul_insight_to_next_level"] == 100
    assert state["player"]["stats"] == {"spirit": 1, "harmony": 0.05, "soulflow": 1}
    assert state["player"]["cosmetics"]["owned_themes"] == ["default"]
    assert state["session"] is None
    assert state["break"] is None
    assert state["progression"]["current_boss_index"] == 0
    assert state["progression"]["current_boss_resolve"] == 100
    assert state["progression"]["defeated_bosses"] == []
    assert state["progression"]["idle_state"]["last_collection_time"] == clock()
    assert state["tasks"] == {"goals": [], "next_id": 1}
    assert state["settings"]["default_session_duration"] == 25
    assert state["settings"]["default_break_duration"] == 5
    assert state["statistics"]["total_sessions"] == 0
    assert state["statistics"]["last_session_date"] == ""


def test_default_states_do_not_share_mutable_values(schema):
    a = schema.create_default_state()
    b = schema.create_default_state()
    a["player"]["cosmetics"]["owned_themes"].append("ember")
    a["progression"]["defeated_bosses"].append(0)
    assert b["player"]["cosmetics"]["owned_themes"] == ["default"]
    assert b["progression"]["defeated_bosses"] == []


@pytest.mark.parametrize("raw", [None, "garbage", 42, [], 3.5, True])
def test_non_mapping_input_yields_default(schema, raw):
    assert schema.validate_and_repair(raw) == schema.create_default_state()


def test_empty_mapping_yields_default(schema):
    assert schema.validate_and_repair({}) == schema.create_default_state()


def test_valid_fields_survive_and_invalid_ones_default(schema):
    raw = schema.create_default_state()
    raw["player"]["level"] = "5"
    raw["player"]["soul_embers"] = 42
    raw["player"]["stats"]["spirit"] = None
    raw["settings"]["strict_mode"] = "yes"
    raw["settings"]["sound_volume"] = 0.8
    repaired = schema.validate_and_repair(raw)
    assert repaired["player"]["level"] == 1
    assert repaired["player"]["soul_embers"] == 42
    assert repaired["player"]["stats"]["spirit"] == 1
    assert repaired["player"]["stats"]["harmony"] == 0.05
    assert repaired["settings"]["strict_mode"] is False
    assert repaired["settings"]["sound_volume"] == 0.8


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), True, "12"])
def test_numbers_must_be_finite_non_bool(schema, bad):
    raw = schema.create_default_state()
    raw["player"]["soul_insight"] = bad
    raw["statistics"]["total_sessions"] = bad
    repaired = schema.validate_and_repair(raw)
    assert repaired["player"]["soul_insight"] == 0
    assert repaired["statistics"]["total_sessions"] == 0


@pytest.mark.parametrize(
    "index, resolve, expected_index, expected_resolve",
    [
        (99, None, 9, 2500),
        (-3, None, 0, 100),
        (2.7, 40, 2, 40),
        (3, -5, 3, 0),
        (4, "full", 4, 700),
        ("two", 10, 0, 10),
    ],
)
def test_boss_position_clamped_to_catalog(schema, index, resolve, expected_index, expected_resolve):
    raw = schema.create_default_state()
    raw["progression"]["current_boss_index"] = index
    if resolve is None:
        del raw["progression"]["current_boss_resolve"]
    else:
        raw["progression"]["current_boss_resolve"] = resolve
    repaired = schema.validate_and_repair(raw)
    assert repaired["progression"]["current_boss_index"] == expected_index
    assert repaired["progression"]["current_boss_resolve"] == expected_resolve


def test_missing_boss_resolve_uses_boss_at_index(schema, catalog):
    raw = {"progression": {"current_boss_index": 5}}
    repaired = schema.validate_and_repair(raw)
    assert repaired["progression"]["current_boss_resolve"] == catalog[5].initial_resolve


def test_session_and_break_nullable(schema, clock):
    raw = schema.create_default_state()
    raw["session"] = "oops"
    raw["break"] = {}
    repaired = schema.validate_and_repair(raw)
    assert repaired["session"] is None
    assert repaired["break"] == {"start_time": clock(), "duration": 5, "is_active": False}


def test_active_session_kept(schema):
    session = {
        "start_time": 1_699_999_000_000,
        "duration": 50,
        "task_id": "7",
        "auto_complete_task": True,
        "is_active": True,
        "is_paused": False,
        "is_compromised": True,
        "idle_time": 12,
        "active_time": 300,
    }
    raw = schema.create_default_state()
    raw["session"] = session
    assert schema.validate_and_repair(raw)["session"] == session


def test_task_goals_round_trip_opaquely(schema):
    goals = [
        {"id": "g1", "name": "Thesis", "tasks": [{"id": "t1", "subtasks": [], "done": False}]},
        "not even a dict",
        {"anything": {"nested": [1, 2, 3]}},
    ]
    raw = schema.create_default_state()
    raw["tasks"] = {"goals": goals, "next_id": 9}
    repaired = schema.validate_and_repair(raw)
    assert repaired["tasks"]["goals"] == goals
    assert repaired["tasks"]["next_id"] == 9


def test_unknown_keys_are_dropped(schema):
    raw = schema.create_default_state()
    raw["legacy"] = {"coins": 3}
    raw["player"]["mana"] = 10
    repaired = schema.validate_and_repair(raw)
    assert "legacy" not in repaired
    assert "mana" not in repaired["player"]


def test_input_is_not_mutated(schema):
    raw = {"player": {"level": "bad"}, "progression": {"current_boss_index": 99}}
    snapshot = copy.deepcopy(raw)
    schema.validate_and_repair(raw)
    assert raw == snapshot


IDEMPOTENCE_INPUTS = [
    None,
    {},
    {"player": {"level": 3, "soul_embers": "x", "stats": []}},
    {"progression": {"current_boss_index": 42.9, "current_boss_resolve": -1, "defeated_bosses": "0,1"}},
    {"session": {"duration": "long"}, "break": 7, "tasks": {"goals": [1, {"a": None}]}},
    {"settings": {"idle_threshold": float("nan")}, "statistics": {"current_streak": True}},
    {"version": "1", "player": None, "statistics": {"last_session_date": 20240101}},
]


@pytest.mark.parametrize("raw", IDEMPOTENCE_INPUTS)
def test_repair_is_idempotent(schema, raw):
    once = schema.validate_and_repair(raw)
    assert schema.validate_and_repair(once) == once


def test_repairing_a_valid_state_is_identity(schema):
    state = schema.create_default_state()
    state["player"]["level"] = 12
    state["progression"]["current_boss_index"] = 4
    state["progression"]["current_boss_resolve"] = 123.45
    assert schema.validate_and_repair(state) == state


def test_damaged_sections_are_logged(schema, caplog):
    raw = schema.create_default_state()
    raw["player"]["level"] = "high"
    with caplog.at_level(logging.WARNING, logger="soulshepherd.state.schema"):
        schema.validate_and_repair(raw)
    assert "player" in caplog.text


def test_module_level_helpers(catalog, clock):
    default = create_default_state(catalog, clock)
    assert validate_and_repair(None, catalog, clock) == default
    assert StateSchema(catalog, clock).create_default_state() == default


@pytest.mark.parametrize("level", [-2, 0])
def test_level_below_one_is_repaired(schema, engine, level):
    repaired = schema.validate_and_repair({"player": {"level": level}})
    assert repaired["player"]["level"] == 1
    assert engine.add_experience(10, repaired["player"]).new_level == 1

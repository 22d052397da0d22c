"""Tests for configuration loading."""

import json

import pytest

from dutyroster.config import BreakSettings, SchedulerConfig, config_from_dict, load_config
from dutyroster.domain.models import TimeSlot


def test_defaults():
    cfg = SchedulerConfig()
    assert cfg.placement_mode == "shared"
    assert cfg.breaks.duration == 60
    assert cfg.breaks.times["morning"] == (840, 900)
    assert cfg.breaks.times["afternoon"] == (990, 1050)
    assert (cfg.shift_times["early"].start, cfg.shift_times["early"].end) == (480, 1020)
    assert cfg.time_rows()[0].row_number == 3
    assert len(cfg.time_rows()) == 24


def test_one_slot_per_row_when_none_configured():
    cfg = SchedulerConfig(day_start=600, day_end=690)
    slots = cfg.resolved_slots()
    assert [(s.start_min, s.end_min, s.row_number) for s in slots] == [(600, 630, 3), (630, 660, 4), (660, 690, 5)]


def test_invalid_values_raise():
    with pytest.raises(ValueError):
        SchedulerConfig(placement_mode="cp_sat")
    with pytest.raises(ValueError):
        SchedulerConfig(default_post_interval=0)
    with pytest.raises(ValueError):
        SchedulerConfig(post_intervals={"P1": 0})
    with pytest.raises(ValueError):
        BreakSettings(duration=0)
    with pytest.raises(ValueError, match="overlap"):
        SchedulerConfig(slots=[TimeSlot("a", 600, 690), TimeSlot("b", 660, 750)])


def test_config_from_dict():
    cfg = config_from_dict(
        {
            "placement_mode": "per_post",
            "day": {"start": "9:00", "end": "12:00", "first_row": 1},
            "slots": ["9:00", "10:30"],
            "rotation": {"default_interval": 2, "intervals": {"P1": 4}},
            "breaks": {"duration": 45, "times": {"morning": ["10:00", "11:00"]}, "exclusion_rows": {"3": [2, 4]}},
            "shift_times": {"morning": ["9:00", "12:00"]},
        }
    )
    assert cfg.placement_mode == "per_post"
    assert (cfg.day_start, cfg.day_end, cfg.first_row_number) == (540, 720, 1)
    assert [(s.start_min, s.end_min) for s in cfg.slots] == [(540, 630), (630, 720)]
    assert cfg.post_intervals == {"P1": 4}
    assert cfg.default_post_interval == 2
    assert cfg.breaks.duration == 45
    assert cfg.breaks.times == {"morning": (600, 660)}
    assert cfg.breaks.exclusion_rows == {3: [2, 4]}
    assert cfg.shift_times["morning"].start == 540
    assert "afternoon" in cfg.shift_times


def test_partial_break_settings_keep_defaults_and_validate():
    cfg = config_from_dict({"breaks": {"buffer_units": 2}})
    assert cfg.breaks.buffer_units == 2
    assert cfg.breaks.duration == 60
    assert cfg.breaks.times["morning"] == (840, 900)
    with pytest.raises(ValueError):
        config_from_dict({"breaks": {"duration": 0}})
    with pytest.raises(ValueError):
        config_from_dict({"breaks": {"buffer_units": -1}})


def test_slot_mappings_resolve_rows():
    cfg = config_from_dict({"slots": [{"id": "a", "start": "10:15", "end": "11:00"}, {"start": "11:00", "end": "12:00", "row": 9}]})
    assert [s.row_number for s in cfg.resolved_slots()] == [4, 9]


def test_load_yaml_accepts_unquoted_times(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("day:\n  start: 10:00\n  end: 14:00\nplacement_mode: per_post\n", encoding="utf-8")
    cfg = load_config(path)
    assert (cfg.day_start, cfg.day_end) == (600, 840)
    assert cfg.placement_mode == "per_post"


def test_load_json(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"day": {"row_minutes": 15}}), encoding="utf-8")
    assert load_config(path).row_minutes == 15


def test_load_rejects_unknown_suffix(tmp_path):
    path = tmp_path / "cfg.toml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)

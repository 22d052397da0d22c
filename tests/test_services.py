"""Tests for service layer (scoring, timeplan)."""

import pytest

from dutyroster.domain.models import BiasCounter, TimeRow, TimeSlot
from dutyroster.services.constraints import Candidate
from dutyroster.services.scoring import least_biased, pick, priority_group, select_candidate, sort_by_skill
from dutyroster.services.timeplan import (
    build_time_rows,
    min_to_time_str,
    normalize_to_half_width,
    parse_shift_range,
    parse_time_to_min,
    parse_windows,
    resolve_slot_rows,
    rotation_boundaries,
    rotation_unit,
    slot_unit,
    slots_from_boundaries,
    validate_slots,
)


def test_parse_time_to_min():
    assert parse_time_to_min("9:30") == 570
    assert parse_time_to_min("10:00") == 600
    assert parse_time_to_min("１４：３０") == 870
    with pytest.raises(ValueError):
        parse_time_to_min("25:00")
    with pytest.raises(ValueError):
        parse_time_to_min("")


def test_min_to_time_str():
    assert min_to_time_str(570) == "9:30"
    assert min_to_time_str(1320) == "22:00"


def test_parse_shift_range_normalises_dashes():
    assert normalize_to_half_width("９:３０ー１６:００") == "9:30-16:00"
    assert parse_shift_range("9:30〜16:00") == (570, 960)
    with pytest.raises(ValueError):
        parse_shift_range("16:00-9:30")


def test_parse_windows():
    assert parse_windows("") == []
    assert parse_windows("12:00-14:00,16:00-18:00") == [(720, 840), (960, 1080)]


def test_build_time_rows():
    rows = build_time_rows(600, 720, 30, first_row_number=3)
    assert rows == [TimeRow(3, 600), TimeRow(4, 630), TimeRow(5, 660), TimeRow(6, 690)]


def test_slots_from_boundaries_reuses_first_width():
    slots = slots_from_boundaries([600, 690, 780])
    assert [(s.start_min, s.end_min) for s in slots] == [(600, 690), (690, 780), (780, 870)]
    single = slots_from_boundaries([600])
    assert (single[0].start_min, single[0].end_min) == (600, 690)


def test_validate_slots_requires_ascending_starts():
    with pytest.raises(ValueError):
        validate_slots([TimeSlot("a", 690, 780), TimeSlot("b", 600, 690)])


def test_validate_slots_rejects_overlap():
    validate_slots([TimeSlot("a", 600, 690), TimeSlot("b", 690, 780)])
    with pytest.raises(ValueError, match="overlap"):
        validate_slots([TimeSlot("a", 600, 690), TimeSlot("b", 660, 750)])


def test_resolve_slot_rows():
    rows = build_time_rows(600, 720, 30, first_row_number=3)
    resolved = resolve_slot_rows([TimeSlot("a", 615, 660), TimeSlot("b", 700, 760), TimeSlot("c", 600, 630, 9)], rows)
    assert [s.row_number for s in resolved] == [4, 6, 9]


def test_rotation_boundaries_and_units():
    assert rotation_boundaries(600, 780, 3, 30) == [600, 690, 780]
    assert rotation_unit(700, 600, 3, 30) == (690, 780)
    with pytest.raises(ValueError):
        rotation_boundaries(600, 780, 0, 30)


def test_slot_unit_falls_back_to_row():
    slots = [TimeSlot("a", 600, 690)]
    assert slot_unit(slots, 630) == (600, 690)
    assert slot_unit(slots, 700, 30) == (700, 730)


def test_sort_by_skill_directions():
    cands = [Candidate("C", 2), Candidate("A", 3), Candidate("B", 2)]
    assert [c.name for c in sort_by_skill(cands, "ASC")] == ["B", "C", "A"]
    assert [c.name for c in sort_by_skill(cands, "DESC")] == ["A", "B", "C"]


def test_priority_group_takes_leading_run():
    ordered = [Candidate("B", 2), Candidate("C", 2), Candidate("A", 3)]
    assert priority_group(ordered) == ordered[:2]
    assert priority_group([]) == []


def test_least_biased_keeps_minimum_run():
    bias = BiasCounter()
    bias.increment("A", "P1")
    group = [Candidate("A", 2), Candidate("B", 2), Candidate("C", 2)]
    assert [c.name for c in least_biased(group, "P1", bias)] == ["B", "C"]
    # bias on another post does not count
    assert [c.name for c in least_biased(group, "P2", bias)] == ["A", "B", "C"]


def test_pick_clamps_index():
    group = [Candidate("A", 1), Candidate("B", 1)]
    assert pick(group, lambda: 0.0).name == "A"
    assert pick(group, lambda: 0.99).name == "B"
    assert pick(group, lambda: 1.0).name == "B"


def test_select_candidate_empty_is_none():
    assert select_candidate([], "P1", "ASC", BiasCounter(), lambda: 0.0) is None


def test_select_candidate_two_equal_workers_zero_rng():
    cands = [Candidate("Baba", 2), Candidate("Aoki", 2)]
    chosen = select_candidate(cands, "P1", "ASC", BiasCounter(), lambda: 0.0)
    assert chosen.name == "Aoki"

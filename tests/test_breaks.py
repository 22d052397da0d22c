"""Tests for break splitting and break-adjacent blocking."""

from dutyroster.domain.models import BreakAssignment, ExclusionSet, SkillMatrix, TimeRow, TimeSlot
from dutyroster.services.breaks import (
    assign_breaks,
    build_break_buffer_periods,
    build_break_excluded_rows,
    grid_buffer_periods,
    is_in_buffer,
    is_on_break,
    rotation_buffer_periods,
    split_group,
)
from dutyroster.services.exclusions import add_tournament


def test_is_on_break_half_open():
    assignments = [BreakAssignment(840, ["田中"])]
    assert is_on_break(assignments, "田中", 840, 60)
    assert is_on_break(assignments, "田中", 899, 60)
    assert not is_on_break(assignments, "田中", 900, 60)
    assert not is_on_break(assignments, "佐藤", 840, 60)


def test_split_alternates_by_rank(make_worker):
    workers = [make_worker(n) for n in ("A", "B", "C", "D")]
    skills = SkillMatrix({"A": {"P1": 1}, "B": {"P1": 4}, "C": {"P1": 3}, "D": {"P1": 4}})
    first, second = split_group(workers, skills, ExclusionSet(), 990, 1050)
    # ranked: B(4), D(4), C(3), A(1)
    assert first == ["B", "C"]
    assert second == ["D", "A"]


def test_tournament_forces_other_half(make_worker):
    workers = [make_worker(n) for n in ("A", "B", "C", "X")]
    skills = SkillMatrix({n: {"P1": 2} for n in ("A", "B", "C", "X")})
    excl = ExclusionSet()
    add_tournament(excl, "X", 990, 1050)
    add_tournament(excl, "C", 900, 1200)

    first, second = split_group(workers, skills, excl, 990, 1050)

    # X is blocked at the first break and C at both: C is dropped
    assert "C" not in first + second
    assert second[0] == "X"
    assert first == ["A"]
    assert second == ["X", "B"]


def test_assign_breaks_per_category(make_worker):
    workers = [
        make_worker("M1", 570, 1080, "morning"),
        make_worker("M2", 570, 1080, "morning"),
        make_worker("A1", 780, 1320, "afternoon"),
        make_worker("E1", 480, 1020, "early"),
        make_worker("Gone", 780, 1320, "afternoon"),
    ]
    skills = SkillMatrix({})
    excl = ExclusionSet(all_day={"Gone"})
    result = assign_breaks(workers, skills, {"morning": (840, 900), "afternoon": (990, 1050)}, excl)

    assert [ba.break_at_min for ba in result] == [840, 900, 990, 1050]
    assert result[0].names == ["M1"]
    assert result[1].names == ["M2"]
    assert result[2].names == ["A1"]
    assert result[3].names == []


def test_break_excluded_rows():
    rows = [TimeRow(3 + i, 600 + 30 * i) for i in range(24)]
    assignments = [BreakAssignment(840, ["A"]), BreakAssignment(1000, ["B"])]
    # 14:00 is row 11
    blocked = build_break_excluded_rows(assignments, rows, {11: [10, 13]})
    assert blocked == {"A": {10, 13}}


def test_grid_buffer_uses_whole_slots():
    slots = [TimeSlot(f"s{i}", 600 + 90 * i, 690 + 90 * i) for i in range(5)]
    # break 14:00-15:00 overlaps slot s2 [780,870) and s3 [870,960)
    periods = grid_buffer_periods([BreakAssignment(840, ["A"])], 60, slots, 1)
    assert periods == {"A": [(690, 780), (960, 1050)]}
    assert is_in_buffer(periods, "A", 700)
    assert not is_in_buffer(periods, "A", 780)


def test_grid_buffer_disabled_by_default():
    slots = [TimeSlot("s0", 600, 690)]
    assert grid_buffer_periods([BreakAssignment(600, ["A"])], 60, slots, 0) == {}


def test_rotation_buffer_is_one_row_each_side():
    periods = rotation_buffer_periods([BreakAssignment(840, ["A"])], 60, 30)
    assert periods == {"A": [(810, 840), (900, 930)]}
    assert build_break_buffer_periods([BreakAssignment(840, ["A"])], 60, "per_post", row_minutes=30) == periods

"""Tests for the per-post rotation scheduler."""

from dutyroster.domain.models import BreakAssignment, DutyPreset, ExclusionSet, SkillMatrix, TimeWindow
from dutyroster.engine.base import ScheduleContext
from dutyroster.engine.per_post import PerPostScheduler
from dutyroster.services.constraints import Availability
from dutyroster.services.exclusions import add_time_range
from dutyroster.services.timeplan import build_time_rows


def _context(presets, workers, skills, end=780, start=600, **kwargs):
    return ScheduleContext(
        presets,
        workers,
        skills,
        time_rows=build_time_rows(start, end, 30, first_row_number=3 + (start - 600) // 30),
        **kwargs,
    )


def test_occupant_carries_between_boundaries(make_worker, zero_rng):
    workers = [make_worker("Aoki"), make_worker("Baba")]
    skills = SkillMatrix({"Aoki": {"P1": 2}, "Baba": {"P1": 2}})

    placements = PerPostScheduler().make_schedule(_context([DutyPreset("P1")], workers, skills), zero_rng)

    assert [(p.time_min, p.row_number, p.worker_name, p.source) for p in placements] == [
        (600, 3, "Aoki", "auto"),
        (630, 4, "Aoki", "carry"),
        (660, 5, "Aoki", "carry"),
        (690, 6, "Baba", "auto"),
        (720, 7, "Baba", "carry"),
        (750, 8, "Baba", "carry"),
    ]


def test_post_interval_override(make_worker, zero_rng):
    workers = [make_worker("Aoki"), make_worker("Baba")]
    skills = SkillMatrix({"Aoki": {"P1": 2}, "Baba": {"P1": 2}})
    context = _context([DutyPreset("P1")], workers, skills, end=720, post_intervals={"P1": 2})

    placements = PerPostScheduler().make_schedule(context, zero_rng)

    assert [p.worker_name for p in placements] == ["Aoki", "Aoki", "Baba", "Baba"]


def test_rotation_must_be_covered(make_worker, zero_rng):
    # Aoki leaves at 10:30 but the rotation runs until 11:30
    workers = [make_worker("Aoki", 600, 630), make_worker("Baba")]
    skills = SkillMatrix({"Aoki": {"P1": 2}, "Baba": {"P1": 2}})

    placements = PerPostScheduler().make_schedule(_context([DutyPreset("P1")], workers, skills, end=690), zero_rng)

    assert {p.worker_name for p in placements} == {"Baba"}


def test_carry_stops_at_shift_end(make_worker, zero_rng):
    workers = [make_worker("Aoki", 600, 660)]
    skills = SkillMatrix({"Aoki": {"P1": 2}})

    placements = PerPostScheduler().make_schedule(_context([DutyPreset("P1")], workers, skills, end=690), zero_rng)

    assert [p.time_min for p in placements] == [600, 630]


def test_carries_are_placed_before_boundary_searches(make_worker, zero_rng):
    workers = [make_worker("Aoki"), make_worker("Baba"), make_worker("Chiba")]
    skills = SkillMatrix({n: {"P1": 2, "P2": 2} for n in ("Aoki", "Baba", "Chiba")})
    presets = [DutyPreset("P1", order=1), DutyPreset("P2", order=2)]
    context = _context(presets, workers, skills, end=690, post_intervals={"P1": 3, "P2": 2})

    placements = PerPostScheduler().make_schedule(context, zero_rng)
    at_660 = {p.post_name: p for p in placements if p.time_min == 660}

    assert at_660["P1"].worker_name == "Aoki"
    assert at_660["P1"].source == "carry"
    # Baba is the previous P2 occupant and Aoki is already carried on P1
    assert at_660["P2"].worker_name == "Chiba"
    assert at_660["P2"].source == "auto"


def test_inactive_post_has_no_placements(make_worker, zero_rng):
    workers = [make_worker("Aoki")]
    skills = SkillMatrix({"Aoki": {"P1": 2}})
    presets = [DutyPreset("P1", active_windows=[TimeWindow(690, 780)])]

    placements = PerPostScheduler().make_schedule(_context(presets, workers, skills), zero_rng)

    assert [p.time_min for p in placements] == [690, 720, 750]


def test_bias_counts_fresh_selections_only(make_worker, zero_rng):
    workers = [make_worker("Aoki"), make_worker("Baba"), make_worker("Chiba")]
    skills = SkillMatrix({n: {"P1": 2} for n in ("Aoki", "Baba", "Chiba")})

    placements = PerPostScheduler().make_schedule(
        _context([DutyPreset("P1")], workers, skills, end=960), zero_rng
    )
    fresh = [p.worker_name for p in placements if p.source == "auto"]

    # 12 rows, 4 rotations: each worker once before anyone repeats
    assert fresh == ["Aoki", "Baba", "Chiba", "Aoki"]


def test_carry_skips_rows_on_break(make_worker, zero_rng):
    workers = [make_worker("Aoki"), make_worker("Baba")]
    skills = SkillMatrix({"Aoki": {"P1": 2}, "Baba": {"P1": 2}})
    avail = Availability(break_assignments=[BreakAssignment(840, ["Aoki"])], break_duration=60)
    context = _context([DutyPreset("P1")], workers, skills, start=780, end=960, availability=avail)

    placements = PerPostScheduler().make_schedule(context, zero_rng)

    assert [(p.time_min, p.worker_name, p.source) for p in placements] == [
        (780, "Aoki", "auto"),
        (810, "Aoki", "carry"),
        (870, "Baba", "auto"),
        (900, "Baba", "carry"),
        (930, "Baba", "carry"),
    ]


def test_carry_skips_excluded_rows(make_worker, zero_rng):
    excl = ExclusionSet()
    add_time_range(excl, "Aoki", 630, 660)
    context = _context(
        [DutyPreset("P1")], [make_worker("Aoki")], SkillMatrix({"Aoki": {"P1": 2}}),
        end=690, availability=Availability(exclusions=excl),
    )

    placements = PerPostScheduler().make_schedule(context, zero_rng)

    assert [(p.time_min, p.source) for p in placements] == [(600, "auto"), (660, "carry")]

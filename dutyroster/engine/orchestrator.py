"""Orchestrator - wires breaks, placement, row expansion and checks into one day build."""

from __future__ import annotations

import random
from typing import Collection, List, Optional, Sequence, Tuple

from dutyroster.config import SchedulerConfig
from dutyroster.domain.models import (
    BreakAssignment,
    DaySchedule,
    DutyPreset,
    ExclusionSet,
    Placement,
    RepairResult,
    SkillMatrix,
    TimeRow,
    TimeSlot,
    Worker,
)
from dutyroster.services.breaks import assign_breaks, build_break_buffer_periods, build_break_excluded_rows
from dutyroster.services.constraints import Availability
from dutyroster.services.exclusions import validate_exclusions
from dutyroster.services.scoring import RandomFn
from dutyroster.services.timeplan import min_to_time_str, rows_in_range
from dutyroster.validator import find_carry_violations, validate_placements

from .base import ScheduleContext, get_scheduler
from .repair import UnitLocator, repair_schedule, rotation_locator, slot_locator


def expand_to_rows(
    placements: Sequence[Placement],
    slots: Sequence[TimeSlot],
    time_rows: Sequence[TimeRow],
) -> List[Placement]:
    """
    Repeat each slot placement on every template row inside its slot.

    A placement whose slot holds no template row is kept as it is.
    """
    slot_by_start = {slot.start_min: slot for slot in slots}
    expanded = []
    for p in placements:
        slot = slot_by_start.get(p.time_min)
        rows = rows_in_range(time_rows, slot.start_min, slot.end_min) if slot else []
        if not rows:
            expanded.append(p)
            continue
        for row in rows:
            expanded.append(Placement(row.time_min, row.row_number, p.post_name, p.worker_name, p.source))
    return expanded


class Orchestrator:
    """
    Orchestrator builds and repairs one day's schedule.

    It assigns breaks, derives the break-adjacent blocking for the configured
    placement mode, runs the matching scheduler, and expands shared-grid
    placements onto the template rows so both modes publish one placement
    per row and post.
    """

    def __init__(self, cfg: SchedulerConfig | None = None, rng: RandomFn = random.random):
        self.cfg = cfg or SchedulerConfig()
        self.rng = rng

    def prepare(
        self,
        workers: Sequence[Worker],
        skills: SkillMatrix,
        exclusions: ExclusionSet,
        break_assignments: Optional[Sequence[BreakAssignment]] = None,
    ) -> Tuple[List[BreakAssignment], Availability, List[TimeSlot], List[TimeRow]]:
        """
        Compute breaks, availability, slots and template rows for the day.

        Args:
            break_assignments: Reuse these instead of assigning breaks afresh

        Returns:
            (break assignments, availability, resolved slots, template rows)
        """
        cfg = self.cfg
        validate_exclusions(exclusions)
        if break_assignments is None:
            break_assignments = assign_breaks(workers, skills, cfg.breaks.times, exclusions)
        break_assignments = list(break_assignments)

        time_rows = cfg.time_rows()
        slots = cfg.resolved_slots()
        availability = Availability(
            exclusions=exclusions,
            break_assignments=break_assignments,
            break_duration=cfg.breaks.duration,
            break_excluded_rows=build_break_excluded_rows(
                break_assignments, time_rows, cfg.breaks.exclusion_rows
            ),
            buffer_periods=build_break_buffer_periods(
                break_assignments,
                cfg.breaks.duration,
                cfg.placement_mode,
                slots=slots,
                buffer_units=cfg.breaks.buffer_units,
                row_minutes=cfg.row_minutes,
            ),
        )
        return break_assignments, availability, slots, time_rows

    def build_schedule(
        self,
        presets: Sequence[DutyPreset],
        workers: Sequence[Worker],
        skills: SkillMatrix,
        exclusions: ExclusionSet,
    ) -> DaySchedule:
        """
        Build the complete schedule for one day.

        Returns:
            DaySchedule with one placement per template row and filled post
        """
        cfg = self.cfg
        scheduler = get_scheduler(cfg.placement_mode)
        print(f"[INFO] Orchestrator: {len(workers)} workers, {len(presets)} posts, mode={scheduler.get_mode_name()}")

        break_assignments, availability, slots, time_rows = self.prepare(workers, skills, exclusions)
        for ba in break_assignments:
            print(f"[DEBUG] Break {min_to_time_str(ba.break_at_min)} -> {', '.join(ba.names) or '-'}")

        context = ScheduleContext(
            presets=presets,
            workers=workers,
            skills=skills,
            availability=availability,
            slots=slots,
            time_rows=time_rows,
            post_intervals=cfg.post_intervals,
            default_post_interval=cfg.default_post_interval,
            row_minutes=cfg.row_minutes,
        )

        try:
            placements = scheduler.make_schedule(context, self.rng)
        except ValueError as e:
            print(f"[ERROR] {scheduler.get_mode_name()} scheduler failed: {e}")
            raise

        if scheduler.mode == "shared":
            placements = expand_to_rows(placements, slots, time_rows)

        print("\n[INFO] Validating schedule...")
        validate_placements(placements)
        for problem in find_carry_violations(placements, presets, skills):
            print(f"[WARN] {problem}")

        print(f"[OK] Orchestrator: Generated {len(placements)} placements")
        return DaySchedule(placements=placements, break_assignments=break_assignments)

    def locator(self, slots: Sequence[TimeSlot], time_rows: Sequence[TimeRow]) -> UnitLocator:
        cfg = self.cfg
        if cfg.placement_mode == "per_post":
            first_min = time_rows[0].time_min if time_rows else cfg.day_start
            return rotation_locator(first_min, cfg.post_intervals, cfg.default_post_interval, cfg.row_minutes)
        return slot_locator(slots, cfg.row_minutes)

    def repair_schedule(
        self,
        placements: Sequence[Placement],
        absent_names: Collection[str],
        presets: Sequence[DutyPreset],
        workers: Sequence[Worker],
        skills: SkillMatrix,
        exclusions: ExclusionSet,
        break_assignments: Optional[Sequence[BreakAssignment]] = None,
    ) -> RepairResult:
        """
        Refill the rows left by absent workers.

        Breaks are reassigned from the full attendance list unless the
        published ones are passed in, so surviving workers keep their breaks.
        """
        print(f"[INFO] Repair: absent = {', '.join(sorted(absent_names)) or '-'}")
        _, availability, slots, time_rows = self.prepare(workers, skills, exclusions, break_assignments)

        result = repair_schedule(
            placements,
            absent_names,
            presets,
            workers,
            skills,
            availability,
            locator=self.locator(slots, time_rows),
            row_minutes=self.cfg.row_minutes,
            rng=self.rng,
        )

        print(f"[OK] Repair: filled {len(result.filled)} rows")
        if result.unfilled:
            print(f"[WARN] Repair: {len(result.unfilled)} rows left empty")
        return result


def build_day_schedule(
    presets: Sequence[DutyPreset],
    workers: Sequence[Worker],
    skills: SkillMatrix,
    exclusions: ExclusionSet | None = None,
    cfg: SchedulerConfig | None = None,
    rng: RandomFn = random.random,
) -> DaySchedule:
    """
    Convenience function to build a day schedule using the orchestrator.

    Args:
        presets: Post presets
        workers: The day's attendance list
        skills: Skill matrix
        exclusions: Optional exclusions (none by default)
        cfg: SchedulerConfig (defaults when omitted)
        rng: Random source returning floats in ``[0, 1)``

    Returns:
        DaySchedule
    """
    orchestrator = Orchestrator(cfg, rng)
    return orchestrator.build_schedule(presets, workers, skills, exclusions or ExclusionSet())

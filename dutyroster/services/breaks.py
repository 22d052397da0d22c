"""Break assignment: split each shift category into two break halves.

Also precomputes the break-adjacent blocking used by the placement
constraints (blocked template rows and buffer periods).
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence, Set, Tuple

from dutyroster.domain.models import (
    BreakAssignment,
    ExclusionSet,
    SkillMatrix,
    TimeRow,
    TimeSlot,
    Worker,
)
from dutyroster.services.exclusions import is_all_day, is_tournament

BufferPeriods = Dict[str, List[Tuple[int, int]]]


def assign_breaks(
    workers: Sequence[Worker],
    skills: SkillMatrix,
    break_times: Mapping[str, Tuple[int, int]],
    exclusions: ExclusionSet,
) -> List[BreakAssignment]:
    """
    Build break assignments for every configured shift category.

    Args:
        workers: The day's attendance list
        skills: Skill matrix, used to rank workers
        break_times: shift_type -> (first_half_min, second_half_min)
        exclusions: Exclusions for the day

    Returns:
        Two BreakAssignment entries per category (first half, second half),
        in the order the categories are configured
    """
    result: List[BreakAssignment] = []
    for shift_type, (first_min, second_min) in break_times.items():
        eligible = filter_eligible(workers, shift_type, exclusions)
        first, second = split_group(eligible, skills, exclusions, first_min, second_min)
        result.append(BreakAssignment(break_at_min=first_min, names=first))
        result.append(BreakAssignment(break_at_min=second_min, names=second))
    return result


def filter_eligible(
    workers: Sequence[Worker],
    shift_type: str,
    exclusions: ExclusionSet,
) -> List[Worker]:
    return [
        w for w in workers
        if w.shift_type == shift_type and not is_all_day(exclusions, w.name)
    ]


def split_group(
    workers: Sequence[Worker],
    skills: SkillMatrix,
    exclusions: ExclusionSet,
    first_min: int,
    second_min: int,
) -> Tuple[List[str], List[str]]:
    """
    Split workers into first and second break halves.

    A worker in a tournament at one break minute is forced into the other
    half; a worker in a tournament at both is dropped. Everyone else is
    ranked by (max skill desc, name asc) and alternated between halves.

    Returns:
        (first_half_names, second_half_names); each is the forced workers in
        name order followed by the alternated workers in rank order
    """
    first_only: List[str] = []
    second_only: List[str] = []
    both: List[Worker] = []

    for worker in workers:
        can_first = not is_tournament(exclusions, worker.name, first_min)
        can_second = not is_tournament(exclusions, worker.name, second_min)
        if can_first and can_second:
            both.append(worker)
        elif can_first:
            first_only.append(worker.name)
        elif can_second:
            second_only.append(worker.name)

    ranked = sorted(both, key=lambda w: (-skills.max_level(w.name), w.name))
    alternate_first = [w.name for w in ranked[0::2]]
    alternate_second = [w.name for w in ranked[1::2]]

    return sorted(first_only) + alternate_first, sorted(second_only) + alternate_second


def is_on_break(
    assignments: Sequence[BreakAssignment],
    name: str,
    minute: int,
    duration: int,
) -> bool:
    """True when ``minute`` falls in ``[break_at, break_at + duration)`` of one of the worker's breaks."""
    for ba in assignments:
        if name in ba.names and ba.break_at_min <= minute < ba.break_at_min + duration:
            return True
    return False


def build_break_excluded_rows(
    assignments: Sequence[BreakAssignment],
    time_rows: Sequence[TimeRow],
    exclusion_map: Mapping[int, Sequence[int]],
) -> Dict[str, Set[int]]:
    """
    Expand the configured break row -> blocked rows mapping to each worker.

    Break minutes with no matching template row are skipped.
    """
    row_by_time = {row.time_min: row.row_number for row in time_rows}
    result: Dict[str, Set[int]] = {}
    for ba in assignments:
        break_row = row_by_time.get(ba.break_at_min)
        if break_row is None:
            continue
        blocked = exclusion_map.get(break_row, ())
        for name in ba.names:
            result.setdefault(name, set()).update(blocked)
    return result


def grid_buffer_periods(
    assignments: Sequence[BreakAssignment],
    duration: int,
    slots: Sequence[TimeSlot],
    buffer_units: int,
) -> BufferPeriods:
    """
    Buffer ranges of ``buffer_units`` whole slots on each side of a break.

    Slot indices rather than minutes define the width, so uneven slots give
    uneven buffers.
    """
    periods: BufferPeriods = {}
    if buffer_units <= 0:
        return periods
    for ba in assignments:
        break_end = ba.break_at_min + duration
        overlapping = [
            idx for idx, slot in enumerate(slots)
            if slot.start_min < break_end and ba.break_at_min < slot.end_min
        ]
        if not overlapping:
            continue
        first, last = overlapping[0], overlapping[-1]
        ranges = []
        before = slots[max(0, first - buffer_units):first]
        if before:
            ranges.append((before[0].start_min, before[-1].end_min))
        after = slots[last + 1:last + 1 + buffer_units]
        if after:
            ranges.append((after[0].start_min, after[-1].end_min))
        for name in ba.names:
            periods.setdefault(name, []).extend(ranges)
    return periods


def rotation_buffer_periods(
    assignments: Sequence[BreakAssignment],
    duration: int,
    row_minutes: int,
) -> BufferPeriods:
    """One row width of clock minutes immediately before and after every break."""
    periods: BufferPeriods = {}
    for ba in assignments:
        break_end = ba.break_at_min + duration
        ranges = [
            (ba.break_at_min - row_minutes, ba.break_at_min),
            (break_end, break_end + row_minutes),
        ]
        for name in ba.names:
            periods.setdefault(name, []).extend(ranges)
    return periods


def is_in_buffer(periods: BufferPeriods, name: str, minute: int) -> bool:
    return any(start <= minute < end for start, end in periods.get(name, ()))


def build_break_buffer_periods(
    assignments: Sequence[BreakAssignment],
    duration: int,
    mode: str,
    slots: Sequence[TimeSlot] = (),
    buffer_units: int = 0,
    row_minutes: int = 30,
) -> BufferPeriods:
    """Buffer ranges for the placement mode: whole slots for "shared", one row for "per_post"."""
    if mode == "per_post":
        return rotation_buffer_periods(assignments, duration, row_minutes)
    return grid_buffer_periods(assignments, duration, slots, buffer_units)

"""Hard constraint predicates for placing a worker on a post."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Collection, Dict, List, Optional, Sequence, Set

from dutyroster.domain.models import (
    BreakAssignment,
    DutyPreset,
    ExclusionSet,
    SkillMatrix,
    Worker,
)
from dutyroster.services.breaks import BufferPeriods, is_in_buffer, is_on_break
from dutyroster.services.exclusions import is_excluded


@dataclass(frozen=True)
class Candidate:
    name: str
    level: int


@dataclass
class Availability:
    """Everything that can take an on-shift worker off the floor at a given minute."""

    exclusions: ExclusionSet = field(default_factory=ExclusionSet)
    break_assignments: Sequence[BreakAssignment] = ()
    break_duration: int = 60
    break_excluded_rows: Dict[str, Set[int]] = field(default_factory=dict)
    buffer_periods: BufferPeriods = field(default_factory=dict)


def is_within_active_window(preset: DutyPreset, minute: int) -> bool:
    """An empty window list means the post exists all day."""
    return preset.is_active_at(minute)


def covers_rotation(worker: Worker, next_boundary_min: int, row_minutes: int) -> bool:
    """The shift must last until at least one row before the next rotation boundary."""
    return worker.shift_end_min >= next_boundary_min - row_minutes


def is_available(
    worker: Worker,
    minute: int,
    row_number: Optional[int],
    availability: Availability,
) -> bool:
    """On shift, not excluded, not on break and clear of break-adjacent blocking."""
    name = worker.name

    # on shift
    if not worker.is_on_shift(minute):
        return False

    # excluded
    if is_excluded(availability.exclusions, name, minute):
        return False

    # on break
    if is_on_break(availability.break_assignments, name, minute, availability.break_duration):
        return False

    # blocked row next to a break
    if row_number is not None and row_number in availability.break_excluded_rows.get(name, ()):
        return False

    # break buffer
    if is_in_buffer(availability.buffer_periods, name, minute):
        return False

    return True


def qualified_level(worker: Worker, preset: DutyPreset, skills: SkillMatrix) -> int:
    """The worker's level for the post, or 0 when not qualified."""
    level = skills.level(worker.name, preset.post_name)
    if level == 0:
        return 0
    if level < preset.required_level:
        return 0
    return level


def collect_candidates(
    workers: Sequence[Worker],
    preset: DutyPreset,
    minute: int,
    row_number: Optional[int],
    skills: SkillMatrix,
    availability: Availability,
    placed: Collection[str],
    previous: Optional[str] = None,
    next_boundary_min: Optional[int] = None,
    row_minutes: int = 30,
) -> List[Candidate]:
    """
    Workers who pass every hard constraint for ``preset`` at ``minute``.

    Args:
        workers: The day's attendance list
        preset: Post being filled
        minute: Start minute of the time unit
        row_number: Template row of the time unit
        skills: Skill matrix
        availability: Breaks, exclusions and break-adjacent blocking
        placed: Names already placed in this time unit
        previous: The post's previous occupant, never picked again
        next_boundary_min: Next rotation boundary; the shift must cover the rotation when given
        row_minutes: Template row width

    Returns:
        Candidates in worker order with their skill level for the post
    """
    candidates = []
    for worker in workers:
        # already placed this unit
        if worker.name in placed:
            continue
        # held the post last unit
        if previous is not None and worker.name == previous:
            continue
        if not is_available(worker, minute, row_number, availability):
            continue
        # would leave mid-rotation
        if next_boundary_min is not None and not covers_rotation(worker, next_boundary_min, row_minutes):
            continue
        level = qualified_level(worker, preset, skills)
        if level == 0:
            continue
        candidates.append(Candidate(name=worker.name, level=level))
    return candidates

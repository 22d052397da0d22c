"""Gap repair: refill a published schedule after workers call in absent."""

from __future__ import annotations

import random
from collections import defaultdict
from typing import Callable, Collection, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from dutyroster.domain.models import (
    SOURCE_AUTO,
    BiasCounter,
    DutyPreset,
    GapRow,
    Placement,
    RepairGroup,
    RepairResult,
    SkillMatrix,
    TimeSlot,
    Worker,
)
from dutyroster.services.constraints import Availability, Candidate, is_available, qualified_level
from dutyroster.services.scoring import RandomFn, select_candidate
from dutyroster.services.timeplan import rotation_unit, slot_unit

UnitLocator = Callable[[str, int], Tuple[int, int]]

# Posts missing from the presets sort after every configured post
UNKNOWN_ORDER = 999


def slot_locator(slots: Sequence[TimeSlot], row_minutes: int = 30) -> UnitLocator:
    """Repair units follow the shared-grid slots."""
    slots = list(slots)

    def locate(post_name: str, time_min: int) -> Tuple[int, int]:
        return slot_unit(slots, time_min, row_minutes)

    return locate


def rotation_locator(
    first_min: int,
    post_intervals: Mapping[str, int],
    default_interval: int = 3,
    row_minutes: int = 30,
) -> UnitLocator:
    """Repair units follow each post's own rotation boundaries."""

    def locate(post_name: str, time_min: int) -> Tuple[int, int]:
        interval = int(post_intervals.get(post_name, default_interval))
        return rotation_unit(time_min, first_min, interval, row_minutes)

    return locate


def row_locator(row_minutes: int = 30) -> UnitLocator:
    """Every gap row is its own unit (no slot or rotation configuration available)."""

    def locate(post_name: str, time_min: int) -> Tuple[int, int]:
        return time_min, time_min + row_minutes

    return locate


def identify_gaps(
    placements: Iterable[Placement],
    absent_names: Collection[str],
) -> Tuple[List[Placement], List[GapRow]]:
    """
    Split placements by whether their worker is absent.

    Returns:
        (remaining placements, gap rows left by absent workers)
    """
    absent = set(absent_names)
    remaining: List[Placement] = []
    gaps: List[GapRow] = []
    for p in placements:
        if p.worker_name in absent:
            gaps.append(GapRow(p.time_min, p.row_number, p.post_name))
        else:
            remaining.append(p)
    return remaining, gaps


def group_gaps(
    gaps: Iterable[GapRow],
    locator: UnitLocator,
    post_order: Optional[Mapping[str, int]] = None,
) -> List[RepairGroup]:
    """
    Merge gap rows sharing (post, rotation unit) into repair groups.

    Rows are sorted by time inside a group; groups are sorted by their first
    row's time, then by the post's preset order.
    """
    post_order = post_order or {}
    groups: Dict[Tuple[str, int], RepairGroup] = {}
    for gap in gaps:
        unit_start, unit_end = locator(gap.post_name, gap.time_min)
        key = (gap.post_name, unit_start)
        if key not in groups:
            groups[key] = RepairGroup(gap.post_name, unit_start, unit_end)
        groups[key].rows.append(gap)

    for group in groups.values():
        group.rows.sort(key=lambda r: r.time_min)

    return sorted(
        groups.values(),
        key=lambda g: (g.time_min, post_order.get(g.post_name, UNKNOWN_ORDER)),
    )


class GapFiller:
    """
    Fill repair groups one at a time against the surviving schedule.

    The placement map, bias counter and post/time map are seeded from the
    remaining placements and updated after every fill, so later groups see
    earlier repairs.
    """

    def __init__(
        self,
        remaining: Sequence[Placement],
        presets: Sequence[DutyPreset],
        workers: Sequence[Worker],
        skills: SkillMatrix,
        availability: Availability,
        absent_names: Collection[str] = (),
        row_minutes: int = 30,
    ):
        self.presets = {p.post_name: p for p in presets}
        self.workers = list(workers)
        self.skills = skills
        self.availability = availability
        self.absent = set(absent_names)
        self.row_minutes = row_minutes

        self.placement_map: Dict[int, Set[str]] = defaultdict(set)
        self.post_time_staff: Dict[str, Dict[int, str]] = defaultdict(dict)
        self.bias = BiasCounter().seed_from(remaining)
        for p in remaining:
            self.placement_map[p.time_min].add(p.worker_name)
            self.post_time_staff[p.post_name][p.time_min] = p.worker_name

    def candidates_for(self, group: RepairGroup, preset: DutyPreset) -> List[Candidate]:
        """Workers passing every hard constraint on every row of the group."""
        adjacent = self.adjacent_occupants(group)
        candidates = []
        for worker in self.workers:
            name = worker.name
            if name in self.absent or name in adjacent:
                continue
            if not all(self._row_ok(worker, row) for row in group.rows):
                continue
            level = qualified_level(worker, preset, self.skills)
            if level == 0:
                continue
            candidates.append(Candidate(name=name, level=level))
        return candidates

    def adjacent_occupants(self, group: RepairGroup) -> Set[str]:
        """The post's occupants just before and just after the group; neither may take it over."""
        by_time = self.post_time_staff.get(group.post_name, {})
        before = by_time.get(group.rows[0].time_min - self.row_minutes)
        after = by_time.get(group.rows[-1].time_min + self.row_minutes)
        return {name for name in (before, after) if name is not None}

    def fill(self, group: RepairGroup, rng: RandomFn) -> Optional[List[Placement]]:
        """Placements for every row of the group, or None when nobody qualifies."""
        preset = self.presets.get(group.post_name)
        if preset is None:
            return None

        chosen = select_candidate(
            self.candidates_for(group, preset),
            group.post_name,
            preset.sort_direction,
            self.bias,
            rng,
        )
        if chosen is None:
            return None

        filled = []
        for row in group.rows:
            filled.append(Placement(row.time_min, row.row_number, group.post_name, chosen.name, SOURCE_AUTO))
            self.placement_map[row.time_min].add(chosen.name)
            self.post_time_staff[group.post_name][row.time_min] = chosen.name
        self.bias.increment(chosen.name, group.post_name, by=len(group.rows))
        return filled

    def _row_ok(self, worker: Worker, row: GapRow) -> bool:
        # busy on another post at this row
        if worker.name in self.placement_map.get(row.time_min, ()):
            return False
        return is_available(worker, row.time_min, row.row_number, self.availability)


def fill_gaps(
    groups: Sequence[RepairGroup],
    remaining: Sequence[Placement],
    presets: Sequence[DutyPreset],
    workers: Sequence[Worker],
    skills: SkillMatrix,
    availability: Availability,
    absent_names: Collection[str] = (),
    row_minutes: int = 30,
    rng: RandomFn = random.random,
) -> RepairResult:
    """
    Fill repair groups in order.

    Returns:
        RepairResult; every row of a group that could not be filled (or whose
        post has no preset) is listed in ``unfilled``
    """
    filler = GapFiller(remaining, presets, workers, skills, availability, absent_names, row_minutes)
    result = RepairResult(remaining=list(remaining))
    for group in groups:
        placements = filler.fill(group, rng)
        if placements is None:
            result.unfilled.extend(group.rows)
        else:
            result.filled.extend(placements)
    return result


def repair_schedule(
    placements: Sequence[Placement],
    absent_names: Collection[str],
    presets: Sequence[DutyPreset],
    workers: Sequence[Worker],
    skills: SkillMatrix,
    availability: Availability,
    locator: Optional[UnitLocator] = None,
    row_minutes: int = 30,
    rng: RandomFn = random.random,
) -> RepairResult:
    """
    Remove absent workers from a schedule and refill the holes.

    Args:
        placements: The published placements, one per template row and post
        absent_names: Workers who are now absent
        presets: Post presets used for the published run
        workers: The day's attendance list (absent workers may be included)
        skills: Skill matrix
        availability: Breaks, exclusions and break-adjacent blocking
        locator: Maps (post, minute) to its rotation unit; defaults to one row
        row_minutes: Template row width
        rng: Random source returning floats in ``[0, 1)``

    Returns:
        RepairResult with filled rows, unfilled rows and the surviving placements
    """
    remaining, gaps = identify_gaps(placements, absent_names)
    groups = group_gaps(
        gaps,
        locator or row_locator(row_minutes),
        post_order={p.post_name: p.order for p in presets},
    )
    return fill_gaps(groups, remaining, presets, workers, skills, availability, absent_names, row_minutes, rng)

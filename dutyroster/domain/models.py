"""Typed records shared by every scheduling component.

All times are integer minutes since midnight (10:00 -> 600). Every range is
half-open: ``[start, end)``.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

SORT_ASC = "ASC"
SORT_DESC = "DESC"

SOURCE_AUTO = "auto"
SOURCE_CARRY = "carry"

MIN_REQUIRED_LEVEL = 1
MAX_SKILL_LEVEL = 4


def _check_range(label: str, start_min: int, end_min: int) -> None:
    if not isinstance(start_min, int) or not isinstance(end_min, int):
        raise TypeError(f"{label}: start/end must be integer minutes, got {start_min!r}/{end_min!r}")
    if start_min >= end_min:
        raise ValueError(f"{label}: start ({start_min}) must be before end ({end_min})")


@dataclass(frozen=True)
class TimeWindow:
    """Half-open minute range during which a post exists."""

    start_min: int
    end_min: int

    def __post_init__(self) -> None:
        _check_range("TimeWindow", self.start_min, self.end_min)

    def contains(self, minute: int) -> bool:
        return self.start_min <= minute < self.end_min


@dataclass(frozen=True)
class TimeSlot:
    """One period on the shared grid."""

    slot_id: str
    start_min: int
    end_min: int
    row_number: Optional[int] = None

    def __post_init__(self) -> None:
        _check_range(f"TimeSlot {self.slot_id}", self.start_min, self.end_min)


@dataclass(frozen=True)
class TimeRow:
    """A fixed-width row of the day template."""

    row_number: int
    time_min: int


@dataclass(frozen=True)
class DutyPreset:
    """Assignment policy of one duty post."""

    post_name: str
    enabled: bool = True
    required_level: int = 1
    order: int = 1
    sort_direction: str = SORT_ASC
    concurrent_post: Optional[str] = None
    active_windows: Tuple[TimeWindow, ...] = ()

    def __post_init__(self) -> None:
        if not self.post_name or not self.post_name.strip():
            raise ValueError("DutyPreset: post_name is empty")
        if not isinstance(self.required_level, int) or not (
            MIN_REQUIRED_LEVEL <= self.required_level <= MAX_SKILL_LEVEL
        ):
            raise ValueError(
                f"DutyPreset {self.post_name}: required_level must be 1-4, got {self.required_level!r}"
            )
        if not isinstance(self.order, int) or self.order < 1:
            raise ValueError(f"DutyPreset {self.post_name}: order must be >= 1, got {self.order!r}")
        if self.sort_direction not in (SORT_ASC, SORT_DESC):
            raise ValueError(
                f"DutyPreset {self.post_name}: sort_direction must be ASC or DESC, got {self.sort_direction!r}"
            )
        # Accept any iterable of windows but store an immutable tuple
        object.__setattr__(self, "active_windows", tuple(self.active_windows))

    def is_active_at(self, minute: int) -> bool:
        if not self.active_windows:
            return True
        return any(w.contains(minute) for w in self.active_windows)


def sort_presets(presets: Iterable[DutyPreset]) -> List[DutyPreset]:
    """Evaluation order: ``order`` ascending, then post name."""
    return sorted(presets, key=lambda p: (p.order, p.post_name))


@dataclass(frozen=True)
class Worker:
    """One day's attendance record."""

    name: str
    shift_type: str
    shift_start_min: int
    shift_end_min: int
    employment: str = ""

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Worker: name is empty")
        _check_range(f"Worker {self.name}", self.shift_start_min, self.shift_end_min)

    def is_on_shift(self, minute: int) -> bool:
        return self.shift_start_min <= minute < self.shift_end_min


class SkillMatrix:
    """worker name -> post name -> level 0-4 (0 = cannot work the post)."""

    def __init__(self, levels: Optional[Mapping[str, Mapping[str, int]]] = None):
        self._levels: Dict[str, Dict[str, int]] = {}
        for name, posts in (levels or {}).items():
            if not isinstance(name, str) or not name.strip():
                raise ValueError(f"SkillMatrix: invalid worker name {name!r}")
            row: Dict[str, int] = {}
            for post, level in posts.items():
                if not isinstance(post, str) or not post.strip():
                    raise ValueError(f"SkillMatrix: invalid post name {post!r} for {name}")
                if isinstance(level, bool) or not isinstance(level, int):
                    raise TypeError(f"SkillMatrix: level for {name}/{post} is not an integer: {level!r}")
                if not 0 <= level <= MAX_SKILL_LEVEL:
                    raise ValueError(f"SkillMatrix: level for {name}/{post} out of range 0-4: {level}")
                row[post] = level
            self._levels[name] = row

    def level(self, name: str, post: str) -> int:
        return self._levels.get(name, {}).get(post, 0)

    def max_level(self, name: str) -> int:
        return max(self._levels.get(name, {}).values(), default=0)

    def names(self) -> List[str]:
        return list(self._levels)

    def posts_for(self, name: str) -> Dict[str, int]:
        return dict(self._levels.get(name, {}))

    def __contains__(self, name: object) -> bool:
        return name in self._levels

    def __repr__(self) -> str:
        return f"<SkillMatrix(workers={len(self._levels)})>"


@dataclass(frozen=True)
class ExclusionRange:
    name: str
    start_min: int
    end_min: int

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("ExclusionRange: name is empty")
        _check_range(f"ExclusionRange {self.name}", self.start_min, self.end_min)

    def covers(self, name: str, minute: int) -> bool:
        return self.name == name and self.start_min <= minute < self.end_min


@dataclass
class ExclusionSet:
    """All-day, time-range and tournament exclusions for one day."""

    all_day: Set[str] = field(default_factory=set)
    time_ranges: List[ExclusionRange] = field(default_factory=list)
    tournaments: List[ExclusionRange] = field(default_factory=list)


@dataclass(frozen=True)
class ExclusionResult:
    excluded: bool
    reason: str = ""


@dataclass
class BreakAssignment:
    """Everyone in ``names`` is off during ``[break_at_min, break_at_min + duration)``."""

    break_at_min: int
    names: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Placement:
    time_min: int
    row_number: Optional[int]
    post_name: str
    worker_name: str
    source: str = SOURCE_AUTO

    def __post_init__(self) -> None:
        if self.source not in (SOURCE_AUTO, SOURCE_CARRY):
            raise ValueError(f"Placement: unknown source {self.source!r}")


class BiasCounter:
    """How many times each worker has been given each post in this run."""

    def __init__(self):
        self._counts: Dict[str, Dict[str, int]] = defaultdict(dict)

    def count(self, name: str, post: str) -> int:
        return self._counts.get(name, {}).get(post, 0)

    def increment(self, name: str, post: str, by: int = 1) -> None:
        row = self._counts[name]
        row[post] = row.get(post, 0) + by

    def seed_from(self, placements: Iterable[Placement]) -> "BiasCounter":
        for p in placements:
            self.increment(p.worker_name, p.post_name)
        return self

    def as_dict(self) -> Dict[str, Dict[str, int]]:
        return {name: dict(posts) for name, posts in self._counts.items()}


@dataclass(frozen=True)
class GapRow:
    """A template row left empty by an absent worker."""

    time_min: int
    row_number: Optional[int]
    post_name: str


@dataclass
class RepairGroup:
    """Gap rows of one post inside one rotation unit, filled by a single worker."""

    post_name: str
    unit_start: int
    unit_end: int
    rows: List[GapRow] = field(default_factory=list)

    @property
    def time_min(self) -> int:
        return self.rows[0].time_min

    @property
    def row_number(self) -> Optional[int]:
        return self.rows[0].row_number


@dataclass
class RepairResult:
    filled: List[Placement] = field(default_factory=list)
    unfilled: List[GapRow] = field(default_factory=list)
    remaining: List[Placement] = field(default_factory=list)


@dataclass
class DaySchedule:
    placements: List[Placement] = field(default_factory=list)
    break_assignments: List[BreakAssignment] = field(default_factory=list)

"""Domain records for duty rostering."""

from .models import (
    BiasCounter,
    BreakAssignment,
    DaySchedule,
    DutyPreset,
    ExclusionRange,
    ExclusionResult,
    ExclusionSet,
    GapRow,
    Placement,
    RepairGroup,
    RepairResult,
    SkillMatrix,
    TimeRow,
    TimeSlot,
    TimeWindow,
    Worker,
    sort_presets,
)

__all__ = [
    "BiasCounter",
    "BreakAssignment",
    "DaySchedule",
    "DutyPreset",
    "ExclusionRange",
    "ExclusionResult",
    "ExclusionSet",
    "GapRow",
    "Placement",
    "RepairGroup",
    "RepairResult",
    "SkillMatrix",
    "TimeRow",
    "TimeSlot",
    "TimeWindow",
    "Worker",
    "sort_presets",
]

"""Configuration loading and validation (YAML or JSON)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

import yaml

from dutyroster.domain.models import TimeRow, TimeSlot
from dutyroster.services.timeplan import (
    build_time_rows,
    parse_time_to_min,
    resolve_slot_rows,
    slots_from_boundaries,
    validate_slots,
)

PLACEMENT_MODES = ("shared", "per_post")

SHIFT_EARLY = "early"
SHIFT_MORNING = "morning"
SHIFT_AFTERNOON = "afternoon"
SHIFT_STAGGERED = "staggered"


@dataclass
class ShiftTime:
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"Shift start ({self.start}) must be before end ({self.end})")


def _default_shift_times() -> Dict[str, ShiftTime]:
    return {
        SHIFT_EARLY: ShiftTime(8 * 60, 17 * 60),
        SHIFT_MORNING: ShiftTime(9 * 60 + 30, 18 * 60),
        SHIFT_AFTERNOON: ShiftTime(13 * 60, 22 * 60),
    }


def _default_break_times() -> Dict[str, Tuple[int, int]]:
    return {
        SHIFT_MORNING: (14 * 60, 15 * 60),
        SHIFT_AFTERNOON: (16 * 60 + 30, 17 * 60 + 30),
    }


@dataclass
class BreakSettings:
    duration: int = 60
    times: Dict[str, Tuple[int, int]] = field(default_factory=_default_break_times)
    # break template row -> rows blocked for the people on that break
    exclusion_rows: Dict[int, List[int]] = field(default_factory=dict)
    # whole slots blocked on each side of a break (shared-grid mode)
    buffer_units: int = 0

    def __post_init__(self) -> None:
        if self.duration <= 0:
            raise ValueError(f"Break duration must be positive, got {self.duration}")
        if self.buffer_units < 0:
            raise ValueError(f"Break buffer_units must be >= 0, got {self.buffer_units}")


@dataclass
class SchedulerConfig:
    placement_mode: str = "shared"
    day_start: int = 10 * 60
    day_end: int = 22 * 60
    row_minutes: int = 30
    first_row_number: int = 3
    slots: List[TimeSlot] = field(default_factory=list)
    post_intervals: Dict[str, int] = field(default_factory=dict)
    default_post_interval: int = 3
    breaks: BreakSettings = field(default_factory=BreakSettings)
    shift_times: Dict[str, ShiftTime] = field(default_factory=_default_shift_times)

    def __post_init__(self) -> None:
        if self.placement_mode not in PLACEMENT_MODES:
            raise ValueError(
                f"placement_mode must be one of {PLACEMENT_MODES}, got {self.placement_mode!r}"
            )
        if self.row_minutes <= 0:
            raise ValueError(f"row_minutes must be positive, got {self.row_minutes}")
        if self.day_start >= self.day_end:
            raise ValueError(f"day_start ({self.day_start}) must be before day_end ({self.day_end})")
        if self.default_post_interval < 1:
            raise ValueError(f"default_post_interval must be >= 1, got {self.default_post_interval}")
        for post, interval in self.post_intervals.items():
            if int(interval) < 1:
                raise ValueError(f"Rotation interval for {post} must be >= 1, got {interval}")
        validate_slots(self.slots)

    def time_rows(self) -> List[TimeRow]:
        return build_time_rows(self.day_start, self.day_end, self.row_minutes, self.first_row_number)

    def resolved_slots(self) -> List[TimeSlot]:
        """Configured slots with row numbers filled in; one slot per row when none are configured."""
        rows = self.time_rows()
        if not self.slots:
            return [
                TimeSlot(f"slot_{idx + 1}", row.time_min, row.time_min + self.row_minutes, row.row_number)
                for idx, row in enumerate(rows)
            ]
        return resolve_slot_rows(self.slots, rows)


def _minutes(value: Any) -> int:
    # YAML 1.1 reads unquoted 10:00 as the sexagesimal int 600, which is already minutes
    if isinstance(value, bool):
        raise ValueError(f"Invalid time value: {value!r}")
    if isinstance(value, int):
        return value
    return parse_time_to_min(str(value))


def _parse_slots(raw: List[Any]) -> List[TimeSlot]:
    if not raw:
        return []
    if all(not isinstance(item, Mapping) for item in raw):
        return slots_from_boundaries([_minutes(item) for item in raw])
    slots = []
    for idx, item in enumerate(raw):
        if not isinstance(item, Mapping):
            raise ValueError(f"Slot {idx + 1}: mixing boundary times and slot mappings is not supported")
        row = item.get("row")
        slots.append(
            TimeSlot(
                slot_id=str(item.get("id", f"slot_{idx + 1}")),
                start_min=_minutes(item["start"]),
                end_min=_minutes(item["end"]),
                row_number=int(row) if row is not None else None,
            )
        )
    return slots


def _parse_breaks(raw: Mapping[str, Any]) -> BreakSettings:
    kwargs: Dict[str, Any] = {}
    if "duration" in raw:
        kwargs["duration"] = int(raw["duration"])
    if "buffer_units" in raw:
        kwargs["buffer_units"] = int(raw["buffer_units"])
    if "times" in raw:
        times = {}
        for shift_type, pair in raw["times"].items():
            if len(pair) != 2:
                raise ValueError(f"Break times for {shift_type} need exactly two entries, got {pair!r}")
            times[str(shift_type)] = (_minutes(pair[0]), _minutes(pair[1]))
        kwargs["times"] = times
    if "exclusion_rows" in raw:
        kwargs["exclusion_rows"] = {
            int(row): [int(r) for r in blocked] for row, blocked in raw["exclusion_rows"].items()
        }
    return BreakSettings(**kwargs)


def config_from_dict(data: Mapping[str, Any]) -> SchedulerConfig:
    """Build a SchedulerConfig from a parsed YAML/JSON mapping."""
    day = data.get("day", {}) or {}
    rotation = data.get("rotation", {}) or {}

    kwargs: Dict[str, Any] = {}
    if "placement_mode" in data:
        kwargs["placement_mode"] = str(data["placement_mode"])
    if "start" in day:
        kwargs["day_start"] = _minutes(day["start"])
    if "end" in day:
        kwargs["day_end"] = _minutes(day["end"])
    if "row_minutes" in day:
        kwargs["row_minutes"] = int(day["row_minutes"])
    if "first_row" in day:
        kwargs["first_row_number"] = int(day["first_row"])
    if data.get("slots"):
        kwargs["slots"] = _parse_slots(list(data["slots"]))
    if "default_interval" in rotation:
        kwargs["default_post_interval"] = int(rotation["default_interval"])
    if rotation.get("intervals"):
        kwargs["post_intervals"] = {str(k): int(v) for k, v in rotation["intervals"].items()}
    if data.get("breaks"):
        kwargs["breaks"] = _parse_breaks(data["breaks"])
    if data.get("shift_times"):
        shift_times = _default_shift_times()
        for name, pair in data["shift_times"].items():
            shift_times[str(name)] = ShiftTime(_minutes(pair[0]), _minutes(pair[1]))
        kwargs["shift_times"] = shift_times

    return SchedulerConfig(**kwargs)


def load_config(path: str | Path) -> SchedulerConfig:
    """
    Load configuration from a YAML or JSON file.

    Raises:
        ValueError: On an unsupported suffix or invalid settings
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text)
    else:
        raise ValueError(f"Unsupported config format: {path.name} (use .yaml, .yml or .json)")
    if not isinstance(data, Mapping):
        raise ValueError(f"Config root must be a mapping: {path}")
    return config_from_dict(data)

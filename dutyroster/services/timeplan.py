"""Time parsing, template rows and rotation boundaries.

Internal time representation is integer minutes since midnight
(``"9:30"`` -> 570).
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from dutyroster.domain.models import TimeRow, TimeSlot

_DASHES = re.compile("[ｰ−ー－–—〜～]")
_FULL_WIDTH_DIGITS = str.maketrans("０１２３４５６７８９：", "0123456789:")


def normalize_to_half_width(text: str) -> str:
    """Fold full-width digits, colons and dash look-alikes to ASCII."""
    return _DASHES.sub("-", text).translate(_FULL_WIDTH_DIGITS)


def parse_time_to_min(value: str) -> int:
    """
    Parse ``"H:MM"`` or ``"HH:MM"`` into minutes.

    Raises:
        ValueError: If the string is empty or not a valid clock time
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Empty time value: {value!r}")
    parts = normalize_to_half_width(value.strip()).split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid time format: {value!r}")
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid time value: {value!r}") from None
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Invalid time value: {value!r}")
    return hours * 60 + minutes


def min_to_time_str(minute: int) -> str:
    """Format minutes as ``"H:MM"`` (hour not zero-padded)."""
    if not isinstance(minute, int) or minute < 0:
        raise ValueError(f"Invalid minute value: {minute!r}")
    return f"{minute // 60}:{minute % 60:02d}"


def parse_shift_range(value: str) -> Tuple[int, int]:
    """
    Parse a staggered shift or window string ``"9:30-16:00"``.

    Returns:
        (start_min, end_min) with start strictly before end

    Raises:
        ValueError: On malformed input or an empty range
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Empty range value: {value!r}")
    parts = normalize_to_half_width(value.strip()).split("-")
    if len(parts) != 2:
        raise ValueError(f"Invalid range format: {value!r}")
    start_min = parse_time_to_min(parts[0])
    end_min = parse_time_to_min(parts[1])
    if start_min >= end_min:
        raise ValueError(f"Range start is not before end: {value!r}")
    return start_min, end_min


def parse_windows(value: Optional[str]) -> List[Tuple[int, int]]:
    """Parse ``"12:00-14:00,16:00-18:00"``; blank means no windows (always active)."""
    if value is None:
        return []
    text = str(value).strip()
    if not text:
        return []
    return [parse_shift_range(part) for part in text.split(",") if part.strip()]


def build_time_rows(
    day_start_min: int,
    day_end_min: int,
    row_minutes: int = 30,
    first_row_number: int = 1,
) -> List[TimeRow]:
    """Fixed-width template rows covering ``[day_start_min, day_end_min)``."""
    if row_minutes <= 0:
        raise ValueError(f"row_minutes must be positive, got {row_minutes}")
    if day_start_min >= day_end_min:
        raise ValueError(f"Day start ({day_start_min}) must be before day end ({day_end_min})")
    rows = []
    for idx, minute in enumerate(range(day_start_min, day_end_min, row_minutes)):
        rows.append(TimeRow(row_number=first_row_number + idx, time_min=minute))
    return rows


def validate_slots(slots: Sequence[TimeSlot]) -> None:
    """Raise ValueError unless slots are in ascending order and do not overlap."""
    for prev, cur in zip(slots, slots[1:]):
        if cur.start_min <= prev.start_min:
            raise ValueError(
                f"Slot start times are not ascending: {prev.slot_id}({prev.start_min}) "
                f">= {cur.slot_id}({cur.start_min})"
            )
        if cur.start_min < prev.end_min:
            raise ValueError(
                f"Slots overlap: {cur.slot_id} starts at {cur.start_min} "
                f"before {prev.slot_id} ends at {prev.end_min}"
            )


def slots_from_boundaries(boundaries: Sequence[int], default_width: int = 90) -> List[TimeSlot]:
    """
    Build slots from start times only; each slot ends where the next begins.

    The last slot reuses the first interval (or ``default_width`` when there
    is a single boundary).
    """
    if not boundaries:
        return []
    width = boundaries[1] - boundaries[0] if len(boundaries) >= 2 else default_width
    slots = []
    for idx, start in enumerate(boundaries):
        end = boundaries[idx + 1] if idx + 1 < len(boundaries) else start + width
        slots.append(TimeSlot(slot_id=f"slot_{idx + 1}", start_min=start, end_min=end))
    validate_slots(slots)
    return slots


def resolve_slot_rows(slots: Iterable[TimeSlot], rows: Sequence[TimeRow]) -> List[TimeSlot]:
    """Fill missing ``row_number`` with the first template row at or after the slot start."""
    resolved = []
    for slot in slots:
        if slot.row_number is not None or not rows:
            resolved.append(slot)
            continue
        row_number = rows[-1].row_number
        for row in rows:
            if row.time_min >= slot.start_min:
                row_number = row.row_number
                break
        resolved.append(TimeSlot(slot.slot_id, slot.start_min, slot.end_min, row_number))
    return resolved


def rows_in_range(rows: Sequence[TimeRow], start_min: int, end_min: int) -> List[TimeRow]:
    return [row for row in rows if start_min <= row.time_min < end_min]


def rotation_boundaries(
    first_min: int,
    last_min: int,
    interval_rows: int,
    row_minutes: int = 30,
) -> List[int]:
    """Boundary minutes ``first_min, first_min + step, ...`` up to and including ``last_min``."""
    if interval_rows < 1:
        raise ValueError(f"Rotation interval must be at least one row, got {interval_rows}")
    step = interval_rows * row_minutes
    return list(range(first_min, last_min + 1, step))


def rotation_unit(
    time_min: int,
    first_min: int,
    interval_rows: int,
    row_minutes: int = 30,
) -> Tuple[int, int]:
    """The ``[start, end)`` rotation unit of a per-post cycle that contains ``time_min``."""
    step = interval_rows * row_minutes
    start = first_min + ((time_min - first_min) // step) * step
    return start, start + step


def slot_unit(slots: Sequence[TimeSlot], time_min: int, row_minutes: int = 30) -> Tuple[int, int]:
    """The ``[start, end)`` of the shared-grid slot containing ``time_min``; a bare row otherwise."""
    for slot in slots:
        if slot.start_min <= time_min < slot.end_min:
            return slot.start_min, slot.end_min
    return time_min, time_min + row_minutes

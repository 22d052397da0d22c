"""Exclusion lookups: all-day, tournament and time-range.

Priority when a name matches several kinds: all-day > tournament > time-range.
All ranges are half-open ``[start, end)``.
"""

from __future__ import annotations

from typing import Iterable, Set

from dutyroster.domain.models import ExclusionRange, ExclusionResult, ExclusionSet

REASON_ALL_DAY = "all_day"
REASON_TOURNAMENT = "tournament"
REASON_TIME_RANGE = "time_range"

NOT_EXCLUDED = ExclusionResult(excluded=False, reason="")


def build_all_day_set(names: Iterable[object]) -> Set[str]:
    """Strip names and skip blanks."""
    result = set()
    for raw in names:
        name = str(raw).strip()
        if name:
            result.add(name)
    return result


def add_time_range(excl: ExclusionSet, name: str, start_min: int, end_min: int) -> ExclusionSet:
    excl.time_ranges.append(ExclusionRange(name, start_min, end_min))
    return excl


def add_tournament(excl: ExclusionSet, name: str, start_min: int, end_min: int) -> ExclusionSet:
    excl.tournaments.append(ExclusionRange(name, start_min, end_min))
    return excl


def is_excluded_detail(excl: ExclusionSet, name: str, minute: int) -> ExclusionResult:
    """
    Check whether ``name`` is excluded at ``minute`` and report why.

    Args:
        excl: Exclusions for the day
        name: Worker name
        minute: Minute to test

    Returns:
        ExclusionResult with the first matching reason in priority order
    """
    if name in excl.all_day:
        return ExclusionResult(excluded=True, reason=REASON_ALL_DAY)
    if any(t.covers(name, minute) for t in excl.tournaments):
        return ExclusionResult(excluded=True, reason=REASON_TOURNAMENT)
    if any(r.covers(name, minute) for r in excl.time_ranges):
        return ExclusionResult(excluded=True, reason=REASON_TIME_RANGE)
    return NOT_EXCLUDED


def is_excluded(excl: ExclusionSet, name: str, minute: int) -> bool:
    return is_excluded_detail(excl, name, minute).excluded


def is_tournament(excl: ExclusionSet, name: str, minute: int) -> bool:
    return any(t.covers(name, minute) for t in excl.tournaments)


def is_all_day(excl: ExclusionSet, name: str) -> bool:
    return name in excl.all_day


def validate_exclusions(excl: ExclusionSet) -> None:
    """
    Re-check an exclusion set built outside the helpers above.

    Raises:
        TypeError: If a field has the wrong container type
        ValueError: If an entry has an empty name or an empty range
    """
    if not isinstance(excl, ExclusionSet):
        raise TypeError(f"Expected ExclusionSet, got {type(excl).__name__}")
    if not isinstance(excl.all_day, (set, frozenset)):
        raise TypeError("ExclusionSet.all_day must be a set of names")
    for field_name in ("time_ranges", "tournaments"):
        entries = getattr(excl, field_name)
        if not isinstance(entries, list):
            raise TypeError(f"ExclusionSet.{field_name} must be a list")
        for idx, entry in enumerate(entries):
            if not isinstance(entry, ExclusionRange):
                raise TypeError(f"ExclusionSet.{field_name}[{idx}] is not an ExclusionRange")
            ExclusionRange(entry.name, entry.start_min, entry.end_min)
    for name in excl.all_day:
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"ExclusionSet.all_day contains an invalid name: {name!r}")

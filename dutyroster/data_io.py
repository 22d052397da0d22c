"""CSV adapters for attendance, skills, presets, exclusions and placements."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from dutyroster.config import SHIFT_AFTERNOON, SHIFT_EARLY, SHIFT_MORNING, SHIFT_STAGGERED, ShiftTime
from dutyroster.domain.models import (
    SORT_ASC,
    SORT_DESC,
    BreakAssignment,
    DutyPreset,
    ExclusionSet,
    Placement,
    SkillMatrix,
    TimeWindow,
    Worker,
)
from dutyroster.services.exclusions import add_time_range, add_tournament, build_all_day_set
from dutyroster.services.timeplan import (
    min_to_time_str,
    normalize_to_half_width,
    parse_shift_range,
    parse_time_to_min,
    parse_windows,
)

# Roster labels as they appear in source sheets
SHIFT_LABELS = {
    "早朝": SHIFT_EARLY,
    "午前": SHIFT_MORNING,
    "午後": SHIFT_AFTERNOON,
    SHIFT_EARLY: SHIFT_EARLY,
    SHIFT_MORNING: SHIFT_MORNING,
    SHIFT_AFTERNOON: SHIFT_AFTERNOON,
}

ENABLED_VALUES = {"true", "t", "1", "yes", "y", "○", "有効"}
NO_CONCURRENT_VALUES = {"", "なし", "-", "none", "nan"}

PLACEMENT_COLUMNS = ["time", "row_number", "post_name", "worker_name", "source"]


def _cell(value: object) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def resolve_shift(raw: str, shift_times: Mapping[str, ShiftTime]) -> Tuple[str, int, int]:
    """
    Resolve a roster shift cell to (shift_type, start_min, end_min).

    Raises:
        ValueError: If the label is unknown and not a ``H:MM-H:MM`` range
    """
    label = SHIFT_LABELS.get(raw.strip())
    if label is not None:
        if label not in shift_times:
            raise ValueError(f"No shift time configured for {label!r}")
        st = shift_times[label]
        return label, st.start, st.end

    normalized = normalize_to_half_width(raw)
    if "-" in normalized and ":" in normalized:
        start, end = parse_shift_range(normalized)
        return SHIFT_STAGGERED, start, end

    raise ValueError(f"Unknown shift type: {raw!r}")


def read_workers(path: str | Path, shift_times: Mapping[str, ShiftTime]) -> List[Worker]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.lower().str.strip()

    workers = []
    for _, row in df.iterrows():
        name = _cell(row.get("name"))
        shift_raw = _cell(row.get("shift"))
        if not name or not shift_raw:
            continue
        shift_type, start, end = resolve_shift(shift_raw, shift_times)
        workers.append(
            Worker(
                name=name,
                shift_type=shift_type,
                shift_start_min=start,
                shift_end_min=end,
                employment=_cell(row.get("employment")),
            )
        )
    return workers


def read_skills(path: str | Path) -> Tuple[SkillMatrix, Dict[str, str]]:
    """
    Read the skill table: ``name, employment, <post>...``.

    Non-numeric cells read as 0 and values are clamped to 0-4.

    Returns:
        (skill matrix, name -> employment category)
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.strip()
    lower = {c.lower(): c for c in df.columns}
    name_col = lower.get("name", df.columns[0])
    employment_col = lower.get("employment")
    post_cols = [c for c in df.columns if c not in (name_col, employment_col) and c]

    levels: Dict[str, Dict[str, int]] = {}
    employment: Dict[str, str] = {}
    for _, row in df.iterrows():
        name = _cell(row[name_col])
        if not name:
            continue
        if employment_col is not None:
            employment[name] = _cell(row[employment_col])
        numeric = pd.to_numeric(row[post_cols], errors="coerce").fillna(0)
        levels[name] = {post: int(min(max(int(lv), 0), 4)) for post, lv in numeric.items()}
    return SkillMatrix(levels), employment


def merge_employment(workers: Sequence[Worker], employment: Mapping[str, str]) -> List[Worker]:
    """Attach employment categories from the skill table to attendance records."""
    merged = []
    for w in workers:
        if w.name in employment:
            w = Worker(w.name, w.shift_type, w.shift_start_min, w.shift_end_min, employment[w.name])
        merged.append(w)
    return merged


def read_presets(path: str | Path) -> List[DutyPreset]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.lower().str.strip()

    presets = []
    for _, row in df.iterrows():
        post_name = _cell(row.get("post_name"))
        if not post_name:
            continue
        try:
            required_level = int(_cell(row.get("required_level")))
            order = int(_cell(row.get("order")))
        except ValueError:
            raise ValueError(f"Preset {post_name}: required_level and order must be integers") from None
        direction = _cell(row.get("sort_direction")).upper()
        concurrent = _cell(row.get("concurrent_post"))
        presets.append(
            DutyPreset(
                post_name=post_name,
                enabled=_cell(row.get("enabled")).lower() in ENABLED_VALUES,
                required_level=required_level,
                order=order,
                sort_direction=SORT_DESC if direction in (SORT_DESC, "降順") else SORT_ASC,
                concurrent_post=None if concurrent.lower() in NO_CONCURRENT_VALUES else concurrent,
                active_windows=tuple(
                    TimeWindow(s, e) for s, e in parse_windows(_cell(row.get("active_windows")))
                ),
            )
        )
    return presets


def read_exclusions(path: Optional[str | Path]) -> ExclusionSet:
    """Read ``kind, name, start, end`` rows; kind is all_day, time_range or tournament."""
    excl = ExclusionSet()
    if path is None:
        return excl
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.lower().str.strip()

    all_day = []
    for _, row in df.iterrows():
        kind = _cell(row.get("kind")).lower()
        name = _cell(row.get("name"))
        if kind == "all_day":
            all_day.append(name)
        elif kind == "time_range":
            add_time_range(excl, name, parse_time_to_min(_cell(row.get("start"))), parse_time_to_min(_cell(row.get("end"))))
        elif kind == "tournament":
            add_tournament(excl, name, parse_time_to_min(_cell(row.get("start"))), parse_time_to_min(_cell(row.get("end"))))
        else:
            raise ValueError(f"Unknown exclusion kind {kind!r} for {name!r}")
    excl.all_day = build_all_day_set(all_day)
    return excl


def placements_to_frame(placements: Sequence[Placement]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "time": min_to_time_str(p.time_min),
                "time_min": p.time_min,
                "row_number": p.row_number,
                "post_name": p.post_name,
                "worker_name": p.worker_name,
                "source": p.source,
            }
            for p in placements
        ],
        columns=["time", "time_min", "row_number", "post_name", "worker_name", "source"],
    )


def write_placements(path: str | Path, placements: Sequence[Placement]) -> None:
    placements_to_frame(placements)[PLACEMENT_COLUMNS].to_csv(path, index=False)


def read_placements(path: str | Path) -> List[Placement]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.lower().str.strip()

    placements = []
    for _, row in df.iterrows():
        worker = _cell(row.get("worker_name"))
        if not worker:
            continue
        row_number = _cell(row.get("row_number"))
        placements.append(
            Placement(
                time_min=parse_time_to_min(_cell(row.get("time"))),
                row_number=int(float(row_number)) if row_number else None,
                post_name=_cell(row.get("post_name")),
                worker_name=worker,
                source=_cell(row.get("source")) or "auto",
            )
        )
    return placements


def write_breaks(path: str | Path, assignments: Sequence[BreakAssignment]) -> None:
    df = pd.DataFrame(
        [{"break_at": min_to_time_str(ba.break_at_min), "names": ",".join(ba.names)} for ba in assignments],
        columns=["break_at", "names"],
    )
    df.to_csv(path, index=False)


def read_breaks(path: str | Path) -> List[BreakAssignment]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = df.columns.str.lower().str.strip()
    assignments = []
    for _, row in df.iterrows():
        names = [n.strip() for n in _cell(row.get("names")).split(",") if n.strip()]
        assignments.append(BreakAssignment(parse_time_to_min(_cell(row.get("break_at"))), names))
    return assignments

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from dutyroster.data_io import placements_to_frame
from dutyroster.domain.models import SOURCE_CARRY, DutyPreset, Placement, SkillMatrix
from dutyroster.services.timeplan import min_to_time_str


def validate_placements(placements: Sequence[Placement]) -> None:
    """
    Check the structural invariants of a generated schedule.

    Raises:
        ValueError: On two placements for one (time, post), or a worker placed
            on more than one post at a time outside a concurrent carry pair
    """
    seen: Dict[Tuple[int, str], str] = {}
    fresh: Dict[Tuple[int, str], List[str]] = defaultdict(list)
    for p in placements:
        key = (p.time_min, p.post_name)
        if key in seen:
            raise ValueError(
                f"Duplicate placement for {p.post_name} at {min_to_time_str(p.time_min)}: "
                f"{seen[key]} and {p.worker_name}"
            )
        seen[key] = p.worker_name
        if p.source != SOURCE_CARRY:
            fresh[(p.time_min, p.worker_name)].append(p.post_name)

    for (time_min, name), posts in fresh.items():
        if len(posts) > 1:
            raise ValueError(
                f"{name} is double-booked at {min_to_time_str(time_min)}: {', '.join(posts)}"
            )


def find_carry_violations(
    placements: Sequence[Placement],
    presets: Sequence[DutyPreset],
    skills: SkillMatrix,
) -> List[str]:
    """
    Audit carry placements against the target post's own rules.

    Carries are written without a candidate search, so a carried worker can
    end up on a disabled or inactive post, or below its skill floor.
    """
    by_post = {p.post_name: p for p in presets}
    problems = []
    for p in placements:
        if p.source != SOURCE_CARRY:
            continue
        when = min_to_time_str(p.time_min)
        preset = by_post.get(p.post_name)
        if preset is None:
            problems.append(f"{when} {p.post_name}: carried {p.worker_name} into a post with no preset")
            continue
        if not preset.enabled:
            problems.append(f"{when} {p.post_name}: carried {p.worker_name} into a disabled post")
        if not preset.is_active_at(p.time_min):
            problems.append(f"{when} {p.post_name}: carried {p.worker_name} outside the active window")
        level = skills.level(p.worker_name, p.post_name)
        if level < preset.required_level:
            problems.append(
                f"{when} {p.post_name}: carried {p.worker_name} at level {level} "
                f"(required {preset.required_level})"
            )
    return problems


def summarize_placements(placements: Sequence[Placement]) -> str:
    """Per-worker rows held by post, plus totals."""
    if not placements:
        return "No placements"
    df = placements_to_frame(placements)
    table = pd.pivot_table(
        df,
        index="worker_name",
        columns="post_name",
        values="time_min",
        aggfunc="count",
        fill_value=0,
    )
    table["total"] = table.sum(axis=1)
    return table.sort_values(["total"], ascending=False).to_string()

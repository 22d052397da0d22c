"""Per-person timeline: what each worker is doing at every template row."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Sequence

import pandas as pd

from dutyroster.domain.models import BreakAssignment, ExclusionSet, Placement, TimeRow, Worker
from dutyroster.services.breaks import is_on_break
from dutyroster.services.exclusions import is_tournament
from dutyroster.services.timeplan import min_to_time_str

LABEL_TOURNAMENT = "tournament"
LABEL_BREAK = "break"
LABEL_IDLE = "idle"


def build_person_matrix(
    workers: Sequence[Worker],
    placements: Sequence[Placement],
    break_assignments: Sequence[BreakAssignment],
    break_duration: int,
    exclusions: ExclusionSet,
    time_rows: Sequence[TimeRow],
    row_minutes: int = 30,
) -> pd.DataFrame:
    """
    Build a worker x time matrix of activity labels.

    Each cell is, in priority order: ``tournament``, ``break``, the posts the
    worker holds joined with ``/``, ``idle`` when on shift with at least one
    row left, or an empty string.

    Returns:
        DataFrame indexed by worker name with one ``H:MM`` column per row
    """
    posts_at: Dict[tuple, List[str]] = defaultdict(list)
    for p in placements:
        posts = posts_at[(p.worker_name, p.time_min)]
        if p.post_name not in posts:
            posts.append(p.post_name)

    columns = [min_to_time_str(row.time_min) for row in time_rows]
    data = {}
    for worker in workers:
        cells = []
        for row in time_rows:
            t = row.time_min
            if is_tournament(exclusions, worker.name, t):
                cells.append(LABEL_TOURNAMENT)
            elif is_on_break(break_assignments, worker.name, t, break_duration):
                cells.append(LABEL_BREAK)
            elif (worker.name, t) in posts_at:
                cells.append("/".join(posts_at[(worker.name, t)]))
            elif worker.shift_start_min <= t <= worker.shift_end_min - row_minutes:
                cells.append(LABEL_IDLE)
            else:
                cells.append("")
        data[worker.name] = cells

    return pd.DataFrame.from_dict(data, orient="index", columns=columns)

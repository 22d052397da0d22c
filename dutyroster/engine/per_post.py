"""Per-post rotation placement: each post cycles on its own boundaries."""

from __future__ import annotations

import random
from typing import Dict, List, Optional, Set

from dutyroster.domain.models import SOURCE_AUTO, SOURCE_CARRY, Placement, sort_presets
from dutyroster.services.breaks import is_on_break
from dutyroster.services.constraints import collect_candidates, is_within_active_window
from dutyroster.services.exclusions import is_excluded
from dutyroster.services.scoring import RandomFn, select_candidate
from dutyroster.services.timeplan import rotation_boundaries

from .base import BaseScheduler, ScheduleContext
from .state import PlacementState


class PerPostScheduler(BaseScheduler):
    """
    Rotate each post independently over fixed-width template rows.

    A post's boundaries run from the first template row to the last in steps
    of its interval (in rows). At a boundary the post gets a fresh candidate
    search that skips the previous rotation's occupant and anyone whose
    shift ends before the rotation is covered. Between boundaries the
    occupant is carried forward while still on shift. Rows the occupant
    spends on break or excluded are left empty.

    Within a row, carries are laid down before boundary searches so the
    double-booking check sees every worker already committed to that row.
    """

    mode = "per_post"

    def make_schedule(
        self,
        context: ScheduleContext,
        rng: RandomFn = random.random,
    ) -> List[Placement]:
        rows = list(context.time_rows)
        if not rows:
            return []

        presets = [p for p in sort_presets(context.presets) if p.enabled]
        workers = {w.name: w for w in context.workers}
        avail = context.availability
        first_min, last_min = rows[0].time_min, rows[-1].time_min

        boundaries: Dict[str, Set[int]] = {
            p.post_name: set(
                rotation_boundaries(first_min, last_min, context.interval_for(p.post_name), context.row_minutes)
            )
            for p in presets
        }
        occupant: Dict[str, Optional[str]] = {}
        previous_occupant: Dict[str, Optional[str]] = {}
        state = PlacementState()

        for row in rows:
            state.begin_unit()
            due = []

            for preset in presets:
                post = preset.post_name
                if row.time_min in boundaries[post]:
                    previous_occupant[post] = occupant.get(post)
                    occupant[post] = None
                    due.append(preset)
                    continue

                name = occupant.get(post)
                if name is None or name in state.placed:
                    continue
                if not workers[name].is_on_shift(row.time_min):
                    continue
                if not is_within_active_window(preset, row.time_min):
                    continue
                if is_excluded(avail.exclusions, name, row.time_min):
                    continue
                if is_on_break(avail.break_assignments, name, row.time_min, avail.break_duration):
                    continue
                state.place(row.time_min, row.row_number, post, name, SOURCE_CARRY, count_bias=False)

            for preset in due:
                post = preset.post_name
                # post not active
                if not is_within_active_window(preset, row.time_min):
                    continue

                step = context.interval_for(post) * context.row_minutes
                candidates = collect_candidates(
                    context.workers,
                    preset,
                    row.time_min,
                    row.row_number,
                    context.skills,
                    context.availability,
                    placed=state.placed,
                    previous=previous_occupant.get(post),
                    next_boundary_min=row.time_min + step,
                    row_minutes=context.row_minutes,
                )
                chosen = select_candidate(
                    candidates, post, preset.sort_direction, state.bias, rng
                )
                if chosen is None:
                    continue

                state.place(row.time_min, row.row_number, post, chosen.name, SOURCE_AUTO)
                occupant[post] = chosen.name

            state.end_unit()

        return state.placements

"""Shared-grid placement: every post is filled slot by slot on one common grid."""

from __future__ import annotations

import random
from typing import Dict, List

from dutyroster.domain.models import SOURCE_AUTO, SOURCE_CARRY, Placement, sort_presets
from dutyroster.services.constraints import collect_candidates, is_within_active_window
from dutyroster.services.scoring import RandomFn, select_candidate

from .base import BaseScheduler, ScheduleContext
from .state import PlacementState


class SharedGridScheduler(BaseScheduler):
    """
    Fill each (slot, post) pair in slot order, then preset order.

    A post with ``concurrent_post`` reserves its worker for that post. If the
    concurrent post comes later in the same slot it takes the reservation
    without a candidate search; if it came earlier (or was skipped as
    inactive) its placement is overwritten with the carry once the slot is
    done. The overwrite does not re-check the target post's own constraints.
    """

    mode = "shared"

    def make_schedule(
        self,
        context: ScheduleContext,
        rng: RandomFn = random.random,
    ) -> List[Placement]:
        presets = [p for p in sort_presets(context.presets) if p.enabled]
        state = PlacementState()

        for slot in context.slots:
            state.begin_unit()
            reserved: Dict[str, str] = {}

            for preset in presets:
                # post not active
                if not is_within_active_window(preset, slot.start_min):
                    continue

                post = preset.post_name

                if post in reserved:
                    state.place(slot.start_min, slot.row_number, post, reserved.pop(post), SOURCE_CARRY)
                    continue

                candidates = collect_candidates(
                    context.workers,
                    preset,
                    slot.start_min,
                    slot.row_number,
                    context.skills,
                    context.availability,
                    placed=state.placed,
                    previous=state.previous.get(post),
                )
                chosen = select_candidate(
                    candidates, post, preset.sort_direction, state.bias, rng
                )
                # no candidate leaves the post empty for this slot
                if chosen is None:
                    continue

                state.place(slot.start_min, slot.row_number, post, chosen.name, SOURCE_AUTO)
                if preset.concurrent_post:
                    reserved[preset.concurrent_post] = chosen.name

            # Reservations nobody consumed: the target was processed earlier or skipped
            for target, name in reserved.items():
                state.carry_over(slot.start_min, slot.row_number, target, name)

            state.end_unit()

        return state.placements

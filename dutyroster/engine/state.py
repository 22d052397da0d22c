"""Per-run accumulators owned by a scheduler and discarded after the run."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Set

from dutyroster.domain.models import SOURCE_CARRY, BiasCounter, Placement


class PlacementState:
    """
    Running placement bookkeeping.

    - ``placements``: output so far
    - ``bias``: per-worker, per-post assignment counts (fairness tie-break)
    - ``previous``: post -> worker of the previous time unit
    - ``current`` / ``placed``: post -> worker and worker names of the unit in progress
    """

    def __init__(self, bias: Optional[BiasCounter] = None):
        self.placements: List[Placement] = []
        self.bias = bias or BiasCounter()
        self.previous: Dict[str, str] = {}
        self.current: Dict[str, str] = {}
        self.placed: Set[str] = set()
        self._unit_index: Dict[str, int] = {}

    def begin_unit(self) -> None:
        self.current = {}
        self.placed = set()
        self._unit_index = {}

    def end_unit(self) -> None:
        self.previous = self.current

    def place(
        self,
        time_min: int,
        row_number: Optional[int],
        post_name: str,
        worker_name: str,
        source: str,
        count_bias: bool = True,
    ) -> Placement:
        placement = Placement(time_min, row_number, post_name, worker_name, source)
        self._unit_index[post_name] = len(self.placements)
        self.placements.append(placement)
        self._mark(post_name, worker_name, count_bias)
        return placement

    def carry_over(
        self,
        time_min: int,
        row_number: Optional[int],
        post_name: str,
        worker_name: str,
    ) -> Placement:
        """Overwrite the unit's placement for ``post_name`` with a carry, or add one."""
        idx = self._unit_index.get(post_name)
        if idx is None:
            return self.place(time_min, row_number, post_name, worker_name, SOURCE_CARRY)
        placement = replace(self.placements[idx], worker_name=worker_name, source=SOURCE_CARRY)
        self.placements[idx] = placement
        self._mark(post_name, worker_name, True)
        return placement

    def _mark(self, post_name: str, worker_name: str, count_bias: bool) -> None:
        self.current[post_name] = worker_name
        self.placed.add(worker_name)
        if count_bias:
            self.bias.increment(worker_name, post_name)

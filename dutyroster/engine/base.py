"""Base scheduler interface that both placement modes implement."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

from dutyroster.domain.models import DutyPreset, Placement, SkillMatrix, TimeRow, TimeSlot, Worker
from dutyroster.services.constraints import Availability
from dutyroster.services.scoring import RandomFn
from dutyroster.services.timeplan import validate_slots


@dataclass
class ScheduleContext:
    """All inputs of one placement run."""

    presets: Sequence[DutyPreset]
    workers: Sequence[Worker]
    skills: SkillMatrix
    availability: Availability = field(default_factory=Availability)
    slots: Sequence[TimeSlot] = ()
    time_rows: Sequence[TimeRow] = ()
    post_intervals: Mapping[str, int] = field(default_factory=dict)
    default_post_interval: int = 3
    row_minutes: int = 30

    def __post_init__(self) -> None:
        validate_slots(list(self.slots))

    def interval_for(self, post_name: str) -> int:
        return int(self.post_intervals.get(post_name, self.default_post_interval))


class BaseScheduler(ABC):
    """
    Abstract base class for placement modes.

    Each scheduler turns a ScheduleContext into Placement records. Running
    state lives in a fresh PlacementState per call, so one scheduler
    instance can be reused for independent days.
    """

    mode: str | None = None  # Override in subclasses ("shared", "per_post")

    @abstractmethod
    def make_schedule(
        self,
        context: ScheduleContext,
        rng: RandomFn = random.random,
    ) -> List[Placement]:
        """
        Generate placements for one day.

        Args:
            context: Presets, workers, skills, availability and the time grid
            rng: Random source returning floats in ``[0, 1)``

        Returns:
            Placement list; units with no eligible worker are simply absent
        """

    def get_mode_name(self) -> str:
        return self.mode or "UNKNOWN"


def get_scheduler(mode: str) -> BaseScheduler:
    """
    Map a placement mode name to a scheduler instance.

    Raises:
        ValueError: If the mode is unknown
    """
    from .per_post import PerPostScheduler
    from .shared_grid import SharedGridScheduler

    schedulers: Dict[str, type] = {
        SharedGridScheduler.mode: SharedGridScheduler,
        PerPostScheduler.mode: PerPostScheduler,
    }
    try:
        return schedulers[mode]()
    except KeyError:
        raise ValueError(f"Unknown placement mode {mode!r}; expected one of {sorted(schedulers)}") from None

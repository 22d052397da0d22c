"""Placement engine: shared-grid and per-post schedulers plus gap repair."""

from .base import BaseScheduler, ScheduleContext, get_scheduler
from .orchestrator import Orchestrator, build_day_schedule
from .per_post import PerPostScheduler
from .repair import repair_schedule
from .shared_grid import SharedGridScheduler

__all__ = [
    "BaseScheduler",
    "ScheduleContext",
    "get_scheduler",
    "SharedGridScheduler",
    "PerPostScheduler",
    "repair_schedule",
    "Orchestrator",
    "build_day_schedule",
]

"""Services for scheduling logic."""

from .breaks import assign_breaks, build_break_buffer_periods, build_break_excluded_rows, is_on_break
from .constraints import Availability, Candidate, collect_candidates, is_within_active_window
from .exclusions import is_all_day, is_excluded, is_excluded_detail, is_tournament
from .scoring import select_candidate
from .timeline import build_person_matrix

__all__ = [
    "assign_breaks",
    "build_break_buffer_periods",
    "build_break_excluded_rows",
    "is_on_break",
    "Availability",
    "Candidate",
    "collect_candidates",
    "is_within_active_window",
    "is_all_day",
    "is_excluded",
    "is_excluded_detail",
    "is_tournament",
    "select_candidate",
    "build_person_matrix",
]

"""Candidate selection: skill priority, then fairness bias, then a random pick."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from dutyroster.domain.models import SORT_DESC, BiasCounter
from dutyroster.services.constraints import Candidate

RandomFn = Callable[[], float]


def sort_by_skill(candidates: Sequence[Candidate], sort_direction: str) -> List[Candidate]:
    """Order by level (ASC or DESC) with name as the tie key."""
    if sort_direction == SORT_DESC:
        return sorted(candidates, key=lambda c: (-c.level, c.name))
    return sorted(candidates, key=lambda c: (c.level, c.name))


def priority_group(ordered: Sequence[Candidate]) -> List[Candidate]:
    """Leading run of candidates sharing the first candidate's level."""
    if not ordered:
        return []
    top = ordered[0].level
    group = []
    for cand in ordered:
        if cand.level != top:
            break
        group.append(cand)
    return group


def least_biased(group: Sequence[Candidate], post_name: str, bias: BiasCounter) -> List[Candidate]:
    """Candidates of ``group`` sharing the minimum bias count for ``post_name``."""
    if not group:
        return []
    ordered = sorted(group, key=lambda c: (bias.count(c.name, post_name), c.name))
    lowest = bias.count(ordered[0].name, post_name)
    return [c for c in ordered if bias.count(c.name, post_name) == lowest]


def pick(group: Sequence[Candidate], rng: RandomFn) -> Candidate:
    idx = int(rng() * len(group))
    # rng() == 1.0 would index past the end
    return group[min(max(idx, 0), len(group) - 1)]


def select_candidate(
    candidates: Sequence[Candidate],
    post_name: str,
    sort_direction: str,
    bias: BiasCounter,
    rng: RandomFn,
) -> Optional[Candidate]:
    """
    Choose one worker for a post.

    Args:
        candidates: Workers that passed every hard constraint
        post_name: Post being filled
        sort_direction: ``ASC`` prefers the lowest qualifying level, ``DESC`` the highest
        bias: Running per-post assignment counts
        rng: Random source returning floats in ``[0, 1)``

    Returns:
        The chosen candidate, or None when there are no candidates (the
        unit stays unfilled)
    """
    group = priority_group(sort_by_skill(candidates, sort_direction))
    if not group:
        return None
    return pick(least_biased(group, post_name, bias), rng)

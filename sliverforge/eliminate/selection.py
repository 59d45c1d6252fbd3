"""Merge target selection.

Each :class:`~sliverforge.core.types.MergePolicy` is a scoring key plus a
strict comparison. Neighbours are scanned in discovery order and the running
best is replaced only on a strict improvement, so for every policy the
earliest neighbour holding the extreme value wins a tie.
"""

from __future__ import annotations

import operator
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..core.types import MergePolicy, coerce_enum
from .record import RecordArena

Neighbor = Tuple[int, float]
_Rule = Tuple[Callable[[Neighbor, RecordArena], float], Callable[[float, float], bool]]


def _neighbor_area(neighbor: Neighbor, arena: RecordArena) -> float:
    return arena[neighbor[0]].area()


def _boundary_length(neighbor: Neighbor, arena: RecordArena) -> float:
    return neighbor[1]


_POLICY_RULES: Dict[MergePolicy, _Rule] = {
    MergePolicy.LARGEST_AREA: (_neighbor_area, operator.gt),
    MergePolicy.SMALLEST_AREA: (_neighbor_area, operator.lt),
    MergePolicy.LONGEST_BOUNDARY: (_boundary_length, operator.gt),
}


def select_merge_target(
    neighbors: List[Neighbor],
    arena: RecordArena,
    policy: Union[MergePolicy, str] = MergePolicy.LARGEST_AREA,
    exclude: Optional[Callable[[int], bool]] = None,
) -> Optional[int]:
    """Pick the single neighbour a feature should be merged into.

    Args:
        neighbors: ``(arena index, shared boundary length)`` pairs in
            discovery order
        arena: All loaded records (used for neighbour areas)
        policy: Merge policy (enum or string value)
        exclude: Optional predicate; neighbours for which it returns True
            are not considered

    Returns:
        Arena index of the chosen neighbour, or None if no neighbour is
        eligible.

    Examples:
        >>> # Two neighbours with equal area: the first one found wins
        >>> select_merge_target([(0, 1.0), (2, 1.0)], arena, MergePolicy.LARGEST_AREA)
        0
    """
    key, better = _POLICY_RULES[coerce_enum(policy, MergePolicy)]

    best: Optional[int] = None
    best_score = 0.0
    for neighbor in neighbors:
        if exclude is not None and exclude(neighbor[0]):
            continue
        score = key(neighbor, arena)
        if best is None or better(score, best_score):
            best = neighbor[0]
            best_score = score
    return best


__all__ = ['select_merge_target']

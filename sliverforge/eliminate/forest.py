"""Merge forest: which record each eliminated record is folded into."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

from .record import RecordArena


class MergeForest:
    """Parent links from eliminated records to their merge targets.

    Only records in ``eliminated`` may receive a parent; a target can be any
    other record. Edges that would close a cycle are refused, so the
    structure stays a forest whatever order edges are added in.

    Args:
        arena: All loaded records; children lists live on the records
        eliminated: Arena indices of the records marked for elimination
    """

    def __init__(self, arena: RecordArena, eliminated: Iterable[int]):
        self.arena = arena
        self.eliminated: Set[int] = set(eliminated)
        self.parent: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self.parent)

    def parent_of(self, index: int) -> Optional[int]:
        return self.parent.get(index)

    def terminal_of(self, index: int) -> int:
        """Follow parent links from ``index`` to the end of its chain."""
        while index in self.parent:
            index = self.parent[index]
        return index

    def would_create_cycle(self, child: int, target: int) -> bool:
        """True if linking ``child`` to ``target`` would close a cycle."""
        return child == target or self.terminal_of(target) == child

    def add_edge(self, child: int, target: int) -> None:
        """Record that ``child`` is merged into ``target``.

        Raises:
            ValueError: If ``child`` is not eliminated, already has a
                target, or the edge would create a cycle
        """
        if child not in self.eliminated:
            raise ValueError(f"Record {child} is not marked for elimination")
        if child in self.parent:
            raise ValueError(f"Record {child} already merges into {self.parent[child]}")
        if self.would_create_cycle(child, target):
            raise ValueError(f"Merging record {child} into {target} would create a cycle")
        self.parent[child] = target
        self.arena[target].children.append(child)

    def all_merged_into(self, index: int) -> List[int]:
        """Every record transitively merged into ``index``.

        Depth-first, in the order the edges were added: each child is
        followed by everything merged into that child. No record is
        returned twice.
        """
        result: List[int] = []
        visited = {index}
        stack = list(reversed(self.arena[index].children))
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            result.append(current)
            stack.extend(reversed(self.arena[current].children))
        return result

    def unreachable(self, survivors: Iterable[int]) -> List[int]:
        """Eliminated records with a target whose chain reaches no survivor."""
        survivors = set(survivors)
        return sorted(
            child for child in self.parent
            if self.terminal_of(child) not in survivors
        )


__all__ = ['MergeForest']

"""Thief movement policy.

The thief always takes an adjacent exit when one is free. Otherwise it
prefers neighbours that are not next to any police unit, then ranks the
remaining candidates according to the level's difficulty tier:

  * **EASY** – uniform random choice.
  * **MEDIUM** – maximise the distance to the nearest police unit.
  * **HARD** – head for the nearest exit (routing around police), while
    keeping away from police.
  * **EXPERT** – as HARD, plus a large bonus for keeping any exit
    reachable and a bonus for the size of the reachable area.

Candidates are ranked in ascending node id and ties go to the lowest id,
so every tier except EASY is deterministic. The order in which a level
lists its edges has no effect on which neighbour wins a tie.
"""

from __future__ import annotations

import random
from enum import IntEnum
from typing import AbstractSet, Callable, Dict, Iterable, List, Optional, Sequence

from cornerthief.core.graph import UNREACHABLE, Graph

# Stand-in for an exit distance that is unreachable around the police.
# Known approximation: on graphs with real paths near 50 hops it can misrank.
UNREACHABLE_EXIT_DISTANCE = 50


class Tier(IntEnum):
    EASY = 1
    MEDIUM = 2
    HARD = 3
    EXPERT = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()


def legal_thief_moves(graph: Graph, thief: int, police: Iterable[int]) -> List[int]:
    """Neighbours of the thief that no police unit occupies, in node order."""
    occupied = set(police)
    return sorted(n for n in graph.neighbors(thief) if n not in occupied)


def select_move(
    graph: Graph,
    thief: int,
    police: Sequence[int],
    exits: Iterable[int],
    tier: Tier,
    rng: Optional[random.Random] = None,
) -> Optional[int]:
    """Pick the thief's next node, or ``None`` when it has no legal move."""
    valid = legal_thief_moves(graph, thief, police)
    if not valid:
        return None

    exit_set = frozenset(exits)
    for node in valid:
        if node in exit_set:
            return node

    watched = set()
    for unit in police:
        watched |= graph.neighbors(unit)
    safe = [node for node in valid if node not in watched]
    moves = safe or valid

    tier = Tier(tier)
    if tier is Tier.EASY:
        return (rng or random.Random()).choice(moves)
    return _STRATEGIES[tier](graph, moves, frozenset(police), exit_set)


def _nearest_police(graph: Graph, node: int, police: AbstractSet[int]) -> int:
    # Police do not block each other here; an unreachable unit is simply ignored.
    distances = [
        d for d in (graph.shortest_distance(node, unit) for unit in police) if d is not UNREACHABLE
    ]
    return min(distances) if distances else UNREACHABLE_EXIT_DISTANCE


def _nearest_exit(graph: Graph, node: int, police: AbstractSet[int], exits: AbstractSet[int]) -> Optional[int]:
    distances = [
        d
        for d in (graph.shortest_distance(node, exit_node, police) for exit_node in exits)
        if d is not UNREACHABLE
    ]
    return min(distances) if distances else UNREACHABLE


def _best(moves: Sequence[int], score: Callable[[int], int]) -> int:
    best, best_score = moves[0], score(moves[0])
    for node in moves[1:]:
        value = score(node)
        if value > best_score:
            best, best_score = node, value
    return best


def _medium(graph: Graph, moves: Sequence[int], police: AbstractSet[int], exits: AbstractSet[int]) -> int:
    return _best(moves, lambda node: _nearest_police(graph, node, police))


def _hard(graph: Graph, moves: Sequence[int], police: AbstractSet[int], exits: AbstractSet[int]) -> int:
    def score(node: int) -> int:
        exit_distance = _nearest_exit(graph, node, police, exits)
        if exit_distance is UNREACHABLE:
            exit_distance = UNREACHABLE_EXIT_DISTANCE
        return -3 * exit_distance + _nearest_police(graph, node, police)

    return _best(moves, score)


def _expert(graph: Graph, moves: Sequence[int], police: AbstractSet[int], exits: AbstractSet[int]) -> int:
    def score(node: int) -> int:
        exit_distance = _nearest_exit(graph, node, police, exits)
        exit_reachable = exit_distance is not UNREACHABLE
        if not exit_reachable:
            exit_distance = UNREACHABLE_EXIT_DISTANCE
        reachable = graph.reachable_count(node, police)
        return (
            (100 if exit_reachable else 0)
            + 2 * reachable
            - 3 * exit_distance
            + _nearest_police(graph, node, police)
        )

    return _best(moves, score)


_STRATEGIES: Dict[Tier, Callable[..., int]] = {
    Tier.MEDIUM: _medium,
    Tier.HARD: _hard,
    Tier.EXPERT: _expert,
}

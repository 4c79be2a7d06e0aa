"""Undirected pursuit graph with blocked-set distance and reachability queries."""

from __future__ import annotations

from typing import AbstractSet, FrozenSet, Iterable, Optional, Tuple

import networkx as nx

# Returned by ``Graph.shortest_distance`` when no path exists.
UNREACHABLE = None


class Graph:
    """Fixed node range ``[0, node_count)`` plus symmetric adjacency.

    Built once per level and never mutated afterwards.
    """

    def __init__(self, node_count: int, edges: Iterable[Tuple[int, int]]) -> None:
        self._graph = nx.Graph()
        self._graph.add_nodes_from(range(node_count))
        for a, b in edges:
            if a == b:
                raise ValueError(f"Self-loop on node {a}")
            if not (0 <= a < node_count and 0 <= b < node_count):
                raise ValueError(f"Edge ({a}, {b}) references a node outside [0, {node_count})")
            self._graph.add_edge(a, b)
        self._neighbors = {
            node: frozenset(self._graph.neighbors(node)) for node in self._graph.nodes
        }
        nx.freeze(self._graph)

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, node: object) -> bool:
        return node in self._neighbors

    def edges(self) -> list[Tuple[int, int]]:
        return [(a, b) for a, b in self._graph.edges]

    def neighbors(self, node: int) -> FrozenSet[int]:
        return self._neighbors.get(node, frozenset())

    def shortest_distance(
        self, source: int, target: int, blocked: AbstractSet[int] = frozenset()
    ) -> Optional[int]:
        """Number of edges on the shortest path avoiding ``blocked`` nodes.

        ``source`` and ``target`` are never treated as blocked themselves.
        Returns ``UNREACHABLE`` (``None``) when no such path exists.
        """
        if source == target:
            return 0
        if source not in self or target not in self:
            return UNREACHABLE
        view = self._passable_view(blocked, keep=(source, target))
        try:
            return nx.shortest_path_length(view, source, target)
        except nx.NetworkXNoPath:
            return UNREACHABLE

    def reachable_count(self, source: int, blocked: AbstractSet[int] = frozenset()) -> int:
        """Size of the component reachable from ``source`` without entering ``blocked``."""
        if source not in self:
            return 0
        view = self._passable_view(blocked, keep=(source,))
        return len(nx.node_connected_component(view, source))

    def _passable_view(self, blocked: AbstractSet[int], keep: Tuple[int, ...]) -> nx.Graph:
        if not blocked:
            return self._graph
        return nx.subgraph_view(
            self._graph, filter_node=lambda node: node in keep or node not in blocked
        )

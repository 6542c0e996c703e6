"""Breadth-first search with predecessor tracking."""

from __future__ import annotations

from collections import deque
from typing import Dict, Hashable, List, Mapping, Optional, Sequence, Tuple

from qccpfr.errors import TraversalFailure

#: Neighbor list entry: (neighbor vertex, id of the edge leading to it).
Adjacent = Tuple[Hashable, Hashable]

#: Predecessor entry: (vertex the edge came from, edge id). None for the start.
Pred = Optional[Tuple[Hashable, Hashable]]


def bfs_predecessors(
    adjacency: Mapping[Hashable, Sequence[Adjacent]],
    start: Hashable,
    target: Optional[Hashable] = None,
    max_steps: Optional[int] = None,
    excluded_edges: Optional[set] = None,
) -> Tuple[Dict[Hashable, int], Dict[Hashable, Pred]]:
    """
    Breadth-first search recording, for every reached vertex, how it was reached.

    Args:
        adjacency: Vertex -> list of (neighbor, edge id). Undirected graphs
            list every edge under both endpoints.
        start: Vertex to start from.
        target: Stop as soon as this vertex is discovered. If it is never
            discovered, TraversalFailure is raised.
        max_steps: Upper bound on the number of vertices expanded.
        excluded_edges: Edge ids that must not be traversed.

    Returns:
        A tuple of (dist, pred):
          - dist: hop count from ``start`` to every discovered vertex.
          - pred: discovered vertex -> (previous vertex, edge id); the start
            maps to None.

    Raises:
        TraversalFailure: If ``target`` is given and not reached, or if more
            than ``max_steps`` vertices would be expanded.
    """
    excluded = excluded_edges or set()
    dist: Dict[Hashable, int] = {start: 0}
    pred: Dict[Hashable, Pred] = {start: None}
    if target is not None and target == start:
        return dist, pred

    queue = deque([start])
    steps = 0
    while queue:
        if max_steps is not None and steps >= max_steps:
            raise TraversalFailure(
                f"BFS from {start!r} exceeded {max_steps} steps"
                + (f" looking for {target!r}" if target is not None else "")
            )
        node = queue.popleft()
        steps += 1
        for neighbor, edge in adjacency.get(node, ()):
            if edge in excluded or neighbor in dist:
                continue
            dist[neighbor] = dist[node] + 1
            pred[neighbor] = (node, edge)
            if neighbor == target:
                return dist, pred
            queue.append(neighbor)

    if target is not None:
        raise TraversalFailure(
            f"BFS from {start!r} exhausted {len(dist)} vertices without reaching {target!r}"
        )
    return dist, pred


def walk_back(pred: Mapping[Hashable, Pred], end: Hashable) -> List[Hashable]:
    """Edge ids on the BFS-tree path from ``end`` back to the search start.

    The first element is the edge entering ``end``; the last leaves the start.
    """
    edges: List[Hashable] = []
    step = pred[end]
    while step is not None:
        node, edge = step
        edges.append(edge)
        step = pred[node]
    return edges

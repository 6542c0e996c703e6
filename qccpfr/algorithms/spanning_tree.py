"""Spanning trees of uniformly weighted undirected graphs."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from qccpfr.algorithms.bfs import bfs_predecessors
from qccpfr.errors import TraversalFailure


def adjacency_lists(
    edges: Sequence[Tuple[int, int]],
) -> Dict[int, List[Tuple[int, int]]]:
    """Vertex -> [(neighbor, edge position)], listing every edge at both ends."""
    adj: Dict[int, List[Tuple[int, int]]] = {}
    for pos, (u, v) in enumerate(edges):
        adj.setdefault(u, []).append((v, pos))
        adj.setdefault(v, []).append((u, pos))
    return adj


def bfs_spanning_tree(
    vertices: Sequence[int], edges: Sequence[Tuple[int, int]]
) -> List[int]:
    """
    Breadth-first spanning tree rooted at the smallest vertex.

    All edges weigh the same, so any spanning tree is minimal; BFS order only
    decides which one is returned.

    Args:
        vertices: Vertices of a connected graph.
        edges: Undirected ``(u, v)`` pairs between those vertices.

    Returns:
        Sorted positions in ``edges`` of the ``len(vertices) - 1`` tree edges.

    Raises:
        TraversalFailure: If the edges do not connect all vertices.
    """
    if not vertices:
        return []
    root = min(vertices)
    _, pred = bfs_predecessors(adjacency_lists(edges), root)
    missing = set(vertices) - set(pred)
    if missing:
        raise TraversalFailure(
            f"Edges do not connect {len(missing)} of {len(vertices)} vertices "
            f"(e.g. vertex {min(missing)})"
        )
    return sorted(step[1] for step in pred.values() if step is not None)

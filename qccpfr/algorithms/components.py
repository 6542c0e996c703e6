"""Connected-components labelling over an undirected edge relation."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

import numpy as np
import scipy.sparse as sp


def connected_components(
    num_vertices: int, edges: Iterable[Tuple[int, int]]
) -> List[List[int]]:
    """Partition ``range(num_vertices)`` into connected components.

    Union-find with path halving and union by size.

    Args:
        num_vertices: Number of vertices; vertices are ``0..num_vertices-1``.
        edges: Undirected ``(u, v)`` pairs. Self-pairs are ignored.

    Returns:
        Components as sorted vertex lists, ordered by their smallest vertex.
        Isolated vertices form singleton components.
    """
    parent = list(range(num_vertices))
    size = [1] * num_vertices

    def find(x: int) -> int:
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    for u, v in edges:
        ru, rv = find(u), find(v)
        if ru == rv:
            continue
        if size[ru] < size[rv]:
            ru, rv = rv, ru
        parent[rv] = ru
        size[ru] += size[rv]

    groups: Dict[int, List[int]] = {}
    for vertex in range(num_vertices):
        groups.setdefault(find(vertex), []).append(vertex)
    # vertices were appended in increasing order, so each group is sorted
    return sorted(groups.values(), key=lambda group: group[0])


def components_from_adjacency(adjacency: sp.spmatrix) -> List[List[int]]:
    """Connected components of a symmetric vertex-vertex adjacency matrix.

    Only the nonzero pattern matters; the diagonal is ignored.
    """
    n_rows, n_cols = adjacency.shape
    if n_rows != n_cols:
        raise ValueError(f"Adjacency matrix must be square, got {adjacency.shape}")
    upper = sp.triu(adjacency, k=1).tocoo()
    mask = upper.data != 0
    pairs = zip(upper.row[mask].tolist(), upper.col[mask].tolist())
    return connected_components(n_rows, pairs)


def component_labels(num_vertices: int, components: List[List[int]]) -> np.ndarray:
    """Inverse of a partition: ``labels[v]`` is the index of v's component."""
    labels = np.full(num_vertices, -1, dtype=np.int64)
    for idx, group in enumerate(components):
        labels[group] = idx
    return labels

"""Bipartite tail/head graph H of a directed graph and its components.

H has ``2n`` vertices: vertex ``i`` is the tail copy of node ``i`` and vertex
``n + i`` its head copy. Column ``k`` of the incidence becomes the H edge
joining ``tails[k]`` and ``n + heads[k]``, so ``[U; V]`` is H's incidence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
import scipy.sparse as sp

from qccpfr.algorithms.components import components_from_adjacency
from qccpfr.errors import TraversalFailure
from qccpfr.graph.incidence import Incidence
from qccpfr.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Component:
    """One connected component of H.

    Attributes:
        vertices: Sorted H vertex ids.
        edges: Column positions in the reduced incidence, sorted.
    """

    vertices: Tuple[int, ...]
    edges: Tuple[int, ...]

    @property
    def is_tree(self) -> bool:
        return len(self.edges) == len(self.vertices) - 1

    @property
    def cycle_rank(self) -> int:
        """Dimension of the component's cycle space."""
        return len(self.edges) - len(self.vertices) + 1


@dataclass(frozen=True, eq=False)
class BipartiteGraph:
    """H together with its vertex adjacency and component partition."""

    incidence: Incidence
    stacked: sp.csc_matrix
    adjacency: sp.csr_matrix
    components: Tuple[Component, ...]

    @property
    def num_vertices(self) -> int:
        return 2 * self.incidence.num_nodes

    @property
    def num_edges(self) -> int:
        return self.incidence.num_arcs

    def endpoints(self, edge: int) -> Tuple[int, int]:
        """H vertices ``(tail copy, head copy)`` joined by column ``edge``."""
        n = self.incidence.num_nodes
        return int(self.incidence.tails[edge]), n + int(self.incidence.heads[edge])

    def vertex_label(self, vertex: int) -> Tuple[str, int]:
        """``("tail", i)`` or ``("head", i)`` for an H vertex."""
        n = self.incidence.num_nodes
        if vertex < n:
            return "tail", vertex
        return "head", vertex - n

    def cycle_space_dimension(self) -> int:
        return sum(c.cycle_rank for c in self.components)


class BipartiteGraphBuilder:
    """Builds H from a (filtered) incidence and partitions it into components."""

    def build(self, incidence: Incidence) -> BipartiteGraph:
        """
        Build H and its components.

        Components are ordered by their smallest vertex. Each edge is assigned
        to the component whose rows of ``[U; V]`` contain both of its nonzeros.

        Raises:
            TraversalFailure: If the edges are not partitioned by the
                components (internal invariant violation).
        """
        stacked = incidence.stacked()
        gram = (stacked.astype(np.int64) @ stacked.T.astype(np.int64)).tocsr()
        adjacency = (gram - sp.diags(gram.diagonal())).tocsr()
        adjacency.eliminate_zeros()

        groups = components_from_adjacency(adjacency)
        components: List[Component] = []
        assigned = 0
        for group in groups:
            rows = stacked[group, :]
            column_sums = np.asarray(rows.sum(axis=0)).ravel()
            edges = np.flatnonzero(column_sums > 0)
            if np.any(column_sums[edges] != 2):
                raise TraversalFailure(
                    f"Edge {int(edges[column_sums[edges] != 2][0])} straddles two components"
                )
            assigned += edges.size
            components.append(
                Component(
                    vertices=tuple(group),
                    edges=tuple(int(e) for e in edges),
                )
            )
        if assigned != incidence.num_arcs:
            raise TraversalFailure(
                f"Components cover {assigned} edges, expected {incidence.num_arcs}"
            )

        graph = BipartiteGraph(
            incidence=incidence,
            stacked=stacked,
            adjacency=adjacency,
            components=tuple(components),
        )
        logger.info(
            f"Bipartite graph: {graph.num_vertices} vertices, {graph.num_edges} edges, "
            f"{len(components)} components, cycle space dimension "
            f"{graph.cycle_space_dimension()}"
        )
        return graph

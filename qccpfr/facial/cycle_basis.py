"""Fundamental cycle bases of the components of H.

For a component with a spanning tree ``T``, every non-tree edge ``e = (p, q)``
closes exactly one cycle in ``T + e``. The cycle is recovered by a BFS from
``q`` over tree edges until ``p`` is found, then walking the predecessors
back. Signs alternate along the cycle, starting with ``+1`` on ``e``, which
puts the vector in the kernel of ``[U; V]`` since H is bipartite.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

import numpy as np

from qccpfr.algorithms.bfs import bfs_predecessors, walk_back
from qccpfr.algorithms.spanning_tree import bfs_spanning_tree
from qccpfr.config import DEFAULT_CONFIG, FacialReductionConfig
from qccpfr.errors import TraversalFailure
from qccpfr.facial.bipartite import BipartiteGraph, Component
from qccpfr.logging import get_logger

logger = get_logger(__name__)


class ComponentCycleBasisExtractor:
    """Computes signed fundamental cycle vectors per component of H."""

    def __init__(self, config: Optional[FacialReductionConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def extract(self, graph: BipartiteGraph, component: Component) -> List[np.ndarray]:
        """Cycle vectors of one component, indexed by original arc id.

        Args:
            graph: The bipartite graph the component belongs to.
            component: Component to process.

        Returns:
            One int8 vector of length ``original_num_arcs`` per non-tree edge,
            in edge order. Empty for tree components.

        Raises:
            TraversalFailure: If the component's edges do not connect its
                vertices or a fundamental cycle cannot be closed.
        """
        if component.is_tree:
            return []
        if component.cycle_rank < 0:
            raise TraversalFailure(
                f"Component with {len(component.vertices)} vertices has only "
                f"{len(component.edges)} edges and cannot be connected"
            )

        incidence = graph.incidence
        local_edges = [graph.endpoints(e) for e in component.edges]
        tree = set(bfs_spanning_tree(component.vertices, local_edges))

        tree_adj: Dict[int, List[Tuple[int, int]]] = {}
        for pos in sorted(tree):
            u, v = local_edges[pos]
            tree_adj.setdefault(u, []).append((v, pos))
            tree_adj.setdefault(v, []).append((u, pos))

        vectors: List[np.ndarray] = []
        for pos, (p, q) in enumerate(local_edges):
            if pos in tree:
                continue
            _, pred = bfs_predecessors(
                tree_adj, q, target=p, max_steps=len(component.vertices)
            )
            path = walk_back(pred, p)

            w = np.zeros(incidence.original_num_arcs, dtype=np.int8)
            w[incidence.arc_ids[component.edges[pos]]] = 1
            for k, tree_pos in enumerate(path, start=1):
                w[incidence.arc_ids[component.edges[tree_pos]]] = (-1) ** k
            vectors.append(w)

        logger.debug(
            f"Component at vertex {component.vertices[0]}: {len(component.vertices)} "
            f"vertices, {len(component.edges)} edges, {len(vectors)} cycle vectors"
        )
        return vectors

    def extract_all(self, graph: BipartiteGraph) -> List[np.ndarray]:
        """Cycle vectors of every component, grouped in component order."""
        pending = [c for c in graph.components if not c.is_tree]
        workers = self.config.workers_for(len(pending))
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                per_component = list(
                    pool.map(lambda comp: self.extract(graph, comp), pending)
                )
        else:
            per_component = [self.extract(graph, comp) for comp in pending]

        vectors = [w for group in per_component for w in group]
        logger.info(
            f"Extracted {len(vectors)} cycle vectors from {len(pending)} "
            f"non-tree components ({len(graph.components)} components total)"
        )
        return vectors

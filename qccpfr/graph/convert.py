"""Conversion between incidence structures and NetworkX graphs.

The pipeline itself never depends on NetworkX; these helpers exist for
inspection, plotting and cross-checking results against NetworkX algorithms.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Hashable, List, Optional, Sequence, Tuple

import networkx as nx

from qccpfr.graph.incidence import Incidence

if TYPE_CHECKING:
    from qccpfr.facial.bipartite import BipartiteGraph


def to_networkx(incidence: Incidence) -> nx.DiGraph:
    """Directed graph of an incidence; edges carry their original ``arc_id``."""
    graph = nx.DiGraph()
    graph.add_nodes_from(range(incidence.num_nodes))
    for arc_id, u, v in incidence.arcs():
        graph.add_edge(u, v, arc_id=arc_id)
    return graph


def incidence_from_networkx(
    graph: nx.DiGraph, nodelist: Optional[Sequence[Hashable]] = None
) -> Tuple[Incidence, List[Hashable]]:
    """Incidence of a NetworkX digraph.

    Args:
        graph: Directed graph without self-loops.
        nodelist: Node order defining the matrix rows; defaults to
            ``list(graph.nodes)``.

    Returns:
        A tuple of (incidence, nodes): arcs follow ``graph.edges`` order, and
        ``nodes[i]`` is the graph node behind row ``i``.

    Raises:
        MalformedIncidence: If the graph has a self-loop.
        ValueError: If ``graph`` is undirected or ``nodelist`` misses a node.
    """
    if not graph.is_directed():
        raise ValueError("incidence_from_networkx requires a directed graph")
    nodes = list(graph.nodes) if nodelist is None else list(nodelist)
    index = {node: i for i, node in enumerate(nodes)}
    missing = [node for node in graph.nodes if node not in index]
    if missing:
        raise ValueError(f"nodelist is missing {len(missing)} node(s), e.g. {missing[0]!r}")
    arcs = [(index[u], index[v]) for u, v in graph.edges()]
    return Incidence.from_arcs(len(nodes), arcs), nodes


def bipartite_to_networkx(graph: "BipartiteGraph") -> nx.MultiGraph:
    """Undirected tail/head graph H.

    Nodes are H vertex ids with attributes ``side`` ("tail"/"head"),
    ``node`` (the original node) and ``bipartite`` (0 for tails, 1 for heads).
    Edges are keyed and attributed by original ``arc_id``.
    """
    h = nx.MultiGraph()
    for vertex in range(graph.num_vertices):
        side, node = graph.vertex_label(vertex)
        h.add_node(vertex, side=side, node=node, bipartite=0 if side == "tail" else 1)
    for edge in range(graph.num_edges):
        u, v = graph.endpoints(edge)
        arc_id = graph.incidence.arc_ids[edge]
        h.add_edge(u, v, key=arc_id, arc_id=arc_id)
    return h

"""Property checks for cover vectors, cycle vectors and whole results.

These are independent of how a result was produced and are used both by the
pipeline (``FacialReductionConfig.validate_result``) and by tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

import numpy as np

from qccpfr.algorithms.components import connected_components
from qccpfr.errors import VerificationError
from qccpfr.graph.incidence import Incidence

if TYPE_CHECKING:
    from qccpfr.facial.bipartite import Component
    from qccpfr.facial.transform import TransformationResult


def _reduced(incidence: Incidence, vec: np.ndarray, what: str) -> np.ndarray:
    vec = np.asarray(vec)
    if vec.shape != (incidence.original_num_arcs,):
        raise VerificationError(
            f"{what} has shape {vec.shape}, expected ({incidence.original_num_arcs},)"
        )
    outside = np.ones(vec.size, dtype=bool)
    outside[list(incidence.arc_ids)] = False
    if np.any(vec[outside] != 0):
        bad = int(np.flatnonzero(outside & (vec != 0))[0])
        raise VerificationError(f"{what} is nonzero on removed arc {bad}")
    return vec[list(incidence.arc_ids)].astype(np.int64)


def check_cover(incidence: Incidence, x: np.ndarray) -> None:
    """Assert ``x`` is a 0/1 cycle cover of ``incidence`` (original indexing)."""
    xr = _reduced(incidence, x, "Cover vector")
    if not np.all((xr == 0) | (xr == 1)):
        raise VerificationError("Cover vector is not 0/1")
    out_flow = incidence.tail_indicator() @ xr
    in_flow = incidence.head_indicator() @ xr
    if not np.all(out_flow == 1):
        node = int(np.flatnonzero(out_flow != 1)[0])
        raise VerificationError(f"Node {node} has {int(out_flow[node])} selected outgoing arcs")
    if not np.all(in_flow == 1):
        node = int(np.flatnonzero(in_flow != 1)[0])
        raise VerificationError(f"Node {node} has {int(in_flow[node])} selected incoming arcs")


def check_cycle_vector(incidence: Incidence, w: np.ndarray) -> None:
    """Assert ``w`` is a signed simple cycle of H in the kernel of ``[U; V]``."""
    wr = _reduced(incidence, w, "Cycle vector")
    support = np.flatnonzero(wr)
    if support.size == 0:
        raise VerificationError("Cycle vector is zero")
    if not np.all(np.abs(wr[support]) == 1):
        raise VerificationError("Cycle vector entries must be -1, 0 or +1")
    if np.count_nonzero(wr > 0) != np.count_nonzero(wr < 0):
        raise VerificationError("Cycle vector has unequal numbers of +1 and -1 entries")
    if np.any(incidence.stacked() @ wr != 0):
        raise VerificationError("Cycle vector is not in the kernel of [U; V]")

    n = incidence.num_nodes
    edges = [(int(incidence.tails[k]), n + int(incidence.heads[k])) for k in support]
    degree = np.zeros(2 * n, dtype=np.int64)
    for u, v in edges:
        degree[u] += 1
        degree[v] += 1
    touched = np.flatnonzero(degree)
    if np.any(degree[touched] != 2):
        raise VerificationError("Cycle vector support has a vertex of degree other than 2")
    groups = [g for g in connected_components(2 * n, edges) if degree[g[0]] > 0]
    if len(groups) != 1:
        raise VerificationError(
            f"Cycle vector support splits into {len(groups)} cycles"
        )


def expected_basis_rank(components: Iterable["Component"]) -> int:
    """Cycle-space dimension of H: edges - vertices + components, summed."""
    return sum(c.cycle_rank for c in components)


def check_result(result: "TransformationResult") -> None:
    """Assert every structural property of a transformation result.

    Checks the shape and marker row of W, that column 0 is the cover, that
    every other column is a valid cycle vector, that rows of removed arcs are
    zero, and that the basis columns have full cycle-space rank. The rank is
    computed on a dense copy.
    """
    matrix = result.matrix
    reduced = result.reduced
    m = reduced.original_num_arcs
    if matrix.shape[0] != m + 1:
        raise VerificationError(f"W has {matrix.shape[0]} rows, expected {m + 1}")

    dense = matrix.toarray().astype(np.int64)
    marker = dense[0]
    if marker.size == 0 or marker[0] != 1 or np.any(marker[1:] != 0):
        raise VerificationError("Row 0 of W must be 1 in the cover column and 0 elsewhere")
    if not np.array_equal(dense[1:, 0], np.asarray(result.cover, dtype=np.int64)):
        raise VerificationError("Column 0 of W does not match the cover vector")

    check_cover(reduced, dense[1:, 0])
    for j in range(1, dense.shape[1]):
        check_cycle_vector(reduced, dense[1:, j])

    for arc in result.removed_arcs:
        if np.any(dense[arc + 1] != 0):
            raise VerificationError(f"Removed arc {arc} has a nonzero row in W")

    expected = expected_basis_rank(result.components)
    basis = dense[1:, 1:]
    rank = int(np.linalg.matrix_rank(basis)) if basis.size else 0
    if rank != expected or basis.shape[1] != expected:
        raise VerificationError(
            f"Basis has {basis.shape[1]} columns of rank {rank}, "
            f"expected {expected} independent columns"
        )

"""Validated node-arc incidence matrix of a directed graph.

Column ``k`` of the matrix describes one arc: ``-1`` at the row of its tail,
``+1`` at the row of its head, zero elsewhere. Every instance remembers the
original index of each of its columns (``arc_ids``) and the arc count of the
graph it was cut from (``original_num_arcs``), so results computed on a
filtered incidence can always be written back to the original arc numbering.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional, Sequence, Tuple

import numpy as np
import scipy.sparse as sp

from qccpfr.errors import MalformedIncidence


@dataclass(frozen=True, eq=False)
class Incidence:
    """Node-arc incidence matrix plus the reduced-to-original arc mapping.

    Attributes:
        matrix: ``n x m`` sparse matrix (CSC, int8).
        tails: Row of the ``-1`` entry for every column.
        heads: Row of the ``+1`` entry for every column.
        arc_ids: Original arc index of every column.
        original_num_arcs: Number of arcs before any filtering.
    """

    matrix: sp.csc_matrix
    tails: np.ndarray
    heads: np.ndarray
    arc_ids: Tuple[int, ...]
    original_num_arcs: int

    @classmethod
    def from_matrix(
        cls,
        matrix: Any,
        num_nodes: Optional[int] = None,
        num_arcs: Optional[int] = None,
    ) -> "Incidence":
        """Validate an incidence matrix and wrap it.

        Args:
            matrix: Dense array-like or scipy sparse matrix, nodes by arcs.
            num_nodes: Declared node count; checked against the row count.
            num_arcs: Declared arc count; checked against the column count.

        Returns:
            Incidence with ``arc_ids == (0, ..., m - 1)``.

        Raises:
            MalformedIncidence: On a shape mismatch, an entry outside
                {-1, 0, 1}, or a column without exactly one -1 and one +1.
        """
        if sp.issparse(matrix):
            mat = sp.csc_matrix(matrix)
        else:
            dense = np.asarray(matrix)
            if dense.ndim != 2:
                raise MalformedIncidence(
                    f"Incidence matrix must be 2-dimensional, got shape {dense.shape}"
                )
            mat = sp.csc_matrix(dense)

        n, m = mat.shape
        if num_nodes is not None and num_nodes != n:
            raise MalformedIncidence(
                f"Declared {num_nodes} nodes but incidence matrix has {n} rows"
            )
        if num_arcs is not None and num_arcs != m:
            raise MalformedIncidence(
                f"Declared {num_arcs} arcs but incidence matrix has {m} columns"
            )

        mat.sum_duplicates()
        mat.eliminate_zeros()
        if mat.nnz and not np.all(np.isin(mat.data, (-1, 1))):
            raise MalformedIncidence(
                "Incidence matrix entries must be -1, 0 or +1"
            )

        positive = np.asarray((mat > 0).sum(axis=0)).ravel()
        negative = np.asarray((mat < 0).sum(axis=0)).ravel()
        bad = np.flatnonzero((positive != 1) | (negative != 1))
        if bad.size:
            raise MalformedIncidence(
                f"Column {int(bad[0])} must hold exactly one -1 and one +1 "
                f"(found {int(negative[bad[0]])} and {int(positive[bad[0]])}); "
                f"{bad.size} malformed column(s) in total"
            )

        coo = mat.tocoo()
        tails = np.empty(m, dtype=np.int64)
        heads = np.empty(m, dtype=np.int64)
        tails[coo.col[coo.data < 0]] = coo.row[coo.data < 0]
        heads[coo.col[coo.data > 0]] = coo.row[coo.data > 0]
        return cls._build(n, tails, heads, tuple(range(m)), m)

    @classmethod
    def from_adjacency(cls, adjacency: Any) -> "Incidence":
        """Build the incidence of a 0/1 adjacency matrix.

        Diagonal entries mean "not an arc" and are ignored. Arcs are numbered
        row-major: all arcs leaving node 0 by increasing head, then node 1, ...

        Raises:
            MalformedIncidence: If the matrix is not square or an off-diagonal
                entry is neither 0 nor 1.
        """
        adj = adjacency.toarray() if sp.issparse(adjacency) else np.asarray(adjacency)
        if adj.ndim != 2 or adj.shape[0] != adj.shape[1]:
            raise MalformedIncidence(
                f"Adjacency matrix must be square, got shape {adj.shape}"
            )
        n = adj.shape[0]
        off_diagonal = ~np.eye(n, dtype=bool)
        values = adj[off_diagonal]
        if not np.all((values == 0) | (values == 1)):
            raise MalformedIncidence("Adjacency entries off the diagonal must be 0 or 1")

        mask = (adj == 1) & off_diagonal
        tails, heads = np.nonzero(mask)
        m = tails.size
        return cls._build(
            n, tails.astype(np.int64), heads.astype(np.int64), tuple(range(m)), m
        )

    @classmethod
    def from_arcs(cls, num_nodes: int, arcs: Iterable[Tuple[int, int]]) -> "Incidence":
        """Build the incidence from ``(tail, head)`` pairs, keeping their order.

        Raises:
            MalformedIncidence: On a self-loop or a node outside ``range(num_nodes)``.
        """
        pairs = list(arcs)
        for idx, (u, v) in enumerate(pairs):
            if u == v:
                raise MalformedIncidence(f"Arc {idx} is a self-loop at node {u}")
            if not (0 <= u < num_nodes and 0 <= v < num_nodes):
                raise MalformedIncidence(
                    f"Arc {idx} ({u} -> {v}) references a node outside 0..{num_nodes - 1}"
                )
        tails = np.array([u for u, _ in pairs], dtype=np.int64)
        heads = np.array([v for _, v in pairs], dtype=np.int64)
        return cls._build(num_nodes, tails, heads, tuple(range(len(pairs))), len(pairs))

    @classmethod
    def _build(
        cls,
        num_nodes: int,
        tails: np.ndarray,
        heads: np.ndarray,
        arc_ids: Tuple[int, ...],
        original_num_arcs: int,
    ) -> "Incidence":
        m = tails.size
        cols = np.arange(m)
        matrix = sp.csc_matrix(
            (
                np.concatenate([-np.ones(m, dtype=np.int8), np.ones(m, dtype=np.int8)]),
                (np.concatenate([tails, heads]), np.concatenate([cols, cols])),
            ),
            shape=(num_nodes, m),
            dtype=np.int8,
        )
        return cls(
            matrix=matrix,
            tails=tails,
            heads=heads,
            arc_ids=tuple(int(a) for a in arc_ids),
            original_num_arcs=int(original_num_arcs),
        )

    @property
    def num_nodes(self) -> int:
        return self.matrix.shape[0]

    @property
    def num_arcs(self) -> int:
        return self.matrix.shape[1]

    def arcs(self) -> Iterator[Tuple[int, int, int]]:
        """Yield ``(original_arc_id, tail, head)`` for every column."""
        for arc_id, u, v in zip(self.arc_ids, self.tails, self.heads):
            yield arc_id, int(u), int(v)

    def tail_indicator(self) -> sp.csc_matrix:
        """U: ``U[i, k] = 1`` iff column ``k`` leaves node ``i``."""
        return self._indicator(self.tails)

    def head_indicator(self) -> sp.csc_matrix:
        """V: ``V[i, k] = 1`` iff column ``k`` enters node ``i``."""
        return self._indicator(self.heads)

    def stacked(self) -> sp.csc_matrix:
        """``[U; V]``, the incidence matrix of the bipartite tail/head graph."""
        return sp.vstack([self.tail_indicator(), self.head_indicator()]).tocsc()

    def _indicator(self, rows: np.ndarray) -> sp.csc_matrix:
        m = rows.size
        return sp.csc_matrix(
            (np.ones(m, dtype=np.int8), (rows, np.arange(m))),
            shape=(self.num_nodes, m),
            dtype=np.int8,
        )

    def restrict(self, keep: Sequence[int]) -> "Incidence":
        """Return the incidence of the given column positions only.

        Args:
            keep: Column positions (not original arc ids) to retain, in order.
        """
        positions = np.asarray(list(keep), dtype=np.int64)
        return self._build(
            self.num_nodes,
            self.tails[positions],
            self.heads[positions],
            tuple(self.arc_ids[p] for p in positions),
            self.original_num_arcs,
        )

    def scatter(self, values: np.ndarray, dtype: Any = np.int8) -> np.ndarray:
        """Place a per-column vector at the original arc positions.

        Arcs that are not columns of this incidence get zero.
        """
        values = np.asarray(values)
        if values.shape != (self.num_arcs,):
            raise ValueError(
                f"Expected a vector of length {self.num_arcs}, got shape {values.shape}"
            )
        out = np.zeros(self.original_num_arcs, dtype=dtype)
        out[list(self.arc_ids)] = values
        return out

    def __repr__(self) -> str:
        return (
            f"Incidence(num_nodes={self.num_nodes}, num_arcs={self.num_arcs}, "
            f"original_num_arcs={self.original_num_arcs})"
        )

"""Column-by-column construction of the transformation matrix W."""

from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np
import scipy.sparse as sp


class MatrixAssembler:
    """Collects the cover vector and cycle vectors, then builds W once.

    Row 0 of W is a marker: 1 in the cover column, 0 in basis columns. Rows
    ``1..m`` hold the vectors. The cover column is always first; basis
    columns follow in the order they were added.
    """

    def __init__(self, num_arcs: int) -> None:
        self.num_arcs = num_arcs
        self._cover: Optional[np.ndarray] = None
        self._basis: List[np.ndarray] = []
        self._matrix: Optional[sp.csc_matrix] = None

    @property
    def num_columns(self) -> int:
        return (1 if self._cover is not None else 0) + len(self._basis)

    def set_cover(self, x: np.ndarray) -> "MatrixAssembler":
        self._check_open()
        self._cover = self._checked(x, "cover vector")
        return self

    def add_basis(self, w: np.ndarray) -> "MatrixAssembler":
        self._check_open()
        self._basis.append(self._checked(w, "cycle vector"))
        return self

    def extend(self, vectors: Iterable[np.ndarray]) -> "MatrixAssembler":
        for w in vectors:
            self.add_basis(w)
        return self

    def build(self) -> sp.csc_matrix:
        """Finalise W as a ``(m + 1) x (1 + k)`` sparse matrix.

        Later calls return copies of the same matrix.

        Raises:
            ValueError: If no cover vector was set.
        """
        if self._matrix is None:
            if self._cover is None:
                raise ValueError("Cannot build a transformation matrix without a cover vector")
            rows, cols, data = [np.array([0])], [np.array([0])], [np.array([1])]
            for j, vec in enumerate([self._cover] + self._basis):
                nz = np.flatnonzero(vec)
                rows.append(nz + 1)
                cols.append(np.full(nz.size, j))
                data.append(vec[nz])
            self._matrix = sp.csc_matrix(
                (np.concatenate(data), (np.concatenate(rows), np.concatenate(cols))),
                shape=(self.num_arcs + 1, self.num_columns),
                dtype=np.int8,
            )
        return self._matrix.copy()

    def _check_open(self) -> None:
        if self._matrix is not None:
            raise RuntimeError("MatrixAssembler is finalised; create a new one")

    def _checked(self, vec: np.ndarray, what: str) -> np.ndarray:
        arr = np.asarray(vec)
        if arr.shape != (self.num_arcs,):
            raise ValueError(
                f"Expected {what} of length {self.num_arcs}, got shape {arr.shape}"
            )
        return arr.astype(np.int8, copy=True)

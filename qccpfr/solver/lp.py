"""Linear-program oracle used by the arc filter and the cover solver.

The pipeline only needs one capability: minimise ``c @ x`` subject to
``A_eq @ x == b_eq`` and ``x >= 0``. Anything implementing
`LinearProgramOracle` can be injected; `ScipyLinprogOracle` is the default.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Optional, Protocol, Tuple

import numpy as np
import scipy.sparse as sp
from scipy.optimize import linprog

from qccpfr.errors import ArcLPAmbiguous
from qccpfr.logging import get_logger

if TYPE_CHECKING:
    from qccpfr.config import FacialReductionConfig
    from qccpfr.graph.incidence import Incidence

logger = get_logger(__name__)


class LPStatus(IntEnum):
    """Outcome of an LP call. Values follow ``scipy.optimize.linprog`` codes."""

    OPTIMAL = 0
    TIME_LIMIT = 1  # time or iteration limit reached
    INFEASIBLE = 2
    UNBOUNDED = 3
    ERROR = 4


@dataclass(frozen=True)
class LPResult:
    """Result of one LP call.

    Attributes:
        status: Solver outcome.
        value: Optimal objective value, None unless optimal.
        x: Optimal point, None unless optimal.
        message: Solver message for diagnostics.
    """

    status: LPStatus
    value: Optional[float] = None
    x: Optional[np.ndarray] = None
    message: str = ""

    @property
    def is_optimal(self) -> bool:
        return self.status == LPStatus.OPTIMAL


class LinearProgramOracle(Protocol):
    """Protocol for LP solvers used by the pipeline.

    Implementations minimise ``c @ x`` subject to ``a_eq @ x == b_eq`` and
    ``x >= 0``, and must be safe to call from several threads at once.
    """

    def solve(self, c: np.ndarray, a_eq: Any, b_eq: np.ndarray) -> LPResult:
        """Solve one LP and report status, value and point."""
        ...


class ScipyLinprogOracle:
    """LP oracle backed by `scipy.optimize.linprog`."""

    def __init__(self, method: str = "highs-ds", time_limit: Optional[float] = None):
        self.method = method
        self.time_limit = time_limit

    @classmethod
    def from_config(cls, config: "FacialReductionConfig") -> "ScipyLinprogOracle":
        return cls(method=config.lp_method, time_limit=config.lp_time_limit)

    def solve(self, c: np.ndarray, a_eq: Any, b_eq: np.ndarray) -> LPResult:
        c = np.asarray(c, dtype=float)
        b_eq = np.asarray(b_eq, dtype=float)

        if c.size == 0:
            # linprog rejects problems without variables
            if np.allclose(b_eq, 0.0):
                return LPResult(LPStatus.OPTIMAL, 0.0, np.zeros(0), "no variables")
            return LPResult(LPStatus.INFEASIBLE, message="no variables, nonzero rhs")

        options = {}
        if self.time_limit is not None and self.method.startswith("highs"):
            options["time_limit"] = self.time_limit

        res = linprog(
            c,
            A_eq=a_eq,
            b_eq=b_eq,
            bounds=(0, None),
            method=self.method,
            options=options or None,
        )
        try:
            status = LPStatus(res.status)
        except ValueError:
            status = LPStatus.ERROR
        logger.debug(f"linprog({self.method}) status={status.name}: {res.message}")
        if status != LPStatus.OPTIMAL:
            return LPResult(status, message=str(res.message))
        return LPResult(status, float(res.fun), np.asarray(res.x), str(res.message))

    def __repr__(self) -> str:
        return f"ScipyLinprogOracle(method={self.method!r}, time_limit={self.time_limit!r})"


def cycle_cover_constraints(incidence: "Incidence") -> Tuple[sp.csc_matrix, np.ndarray]:
    """Equality system ``[U; V] x = 1`` of the cycle-cover polytope."""
    a_eq = incidence.stacked().astype(float)
    b_eq = np.ones(a_eq.shape[0])
    return a_eq, b_eq


def snap_binary(values: Any, tolerance: float, context: str = "LP value") -> np.ndarray:
    """Round LP values to 0/1, refusing anything not within ``tolerance``.

    Raises:
        ArcLPAmbiguous: If some value is farther than ``tolerance`` from both
            0 and 1.
    """
    arr = np.atleast_1d(np.asarray(values, dtype=float))
    rounded = np.rint(arr)
    bad = np.flatnonzero(
        (np.abs(arr - rounded) > tolerance) | ((rounded != 0) & (rounded != 1))
    )
    if bad.size:
        idx = int(bad[0])
        raise ArcLPAmbiguous(
            f"{context} {float(arr[idx])} at position {idx} is not within "
            f"{tolerance} of 0 or 1 ({bad.size} such value(s))"
        )
    return rounded.astype(np.int8)

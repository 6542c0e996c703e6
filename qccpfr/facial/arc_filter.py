"""Removal of arcs that no cycle cover can use.

For every arc ``e`` the filter solves ``max x_e`` over the cycle-cover
polytope ``{x >= 0 : U x = 1, V x = 1}``. The polytope is integral, so the
optimum is 0 (no cover uses ``e``) or 1. All checks read the same input
incidence; none depends on another's outcome.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np

from qccpfr.config import DEFAULT_CONFIG, FacialReductionConfig
from qccpfr.errors import LPSolverError, LPTimeout
from qccpfr.graph.incidence import Incidence
from qccpfr.logging import get_logger
from qccpfr.solver.lp import (
    LinearProgramOracle,
    LPStatus,
    cycle_cover_constraints,
    snap_binary,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ArcFilterResult:
    """Outcome of the arc feasibility filter.

    Attributes:
        reduced: Incidence restricted to the arcs some cover can use.
        removed_arcs: Original ids of the pruned arcs, sorted.
        values: Original arc id -> optimal LP value of ``max x_e``.
    """

    reduced: Incidence
    removed_arcs: Tuple[int, ...]
    values: Dict[int, float] = field(default_factory=dict)


class ArcFeasibilityFilter:
    """Prunes arcs that take value 0 in every cycle cover."""

    def __init__(
        self,
        oracle: LinearProgramOracle,
        config: Optional[FacialReductionConfig] = None,
    ) -> None:
        self.oracle = oracle
        self.config = config or DEFAULT_CONFIG

    def arc_value(self, incidence: Incidence, position: int, a_eq: Any, b_eq: np.ndarray) -> float:
        """Optimal value of ``max x_e`` for the column at ``position``.

        An infeasible LP counts as 0.

        Raises:
            LPTimeout: If the oracle hit its time limit.
            LPSolverError: On any other non-optimal status.
        """
        c = np.zeros(incidence.num_arcs)
        c[position] = -1.0
        result = self.oracle.solve(c, a_eq, b_eq)
        arc_id = incidence.arc_ids[position]

        if result.status == LPStatus.INFEASIBLE:
            logger.debug(f"Arc {arc_id}: feasibility LP infeasible, treating value as 0")
            return 0.0
        if result.status == LPStatus.TIME_LIMIT:
            raise LPTimeout(
                f"Feasibility LP for arc {arc_id} hit the time limit: {result.message}"
            )
        if not result.is_optimal:
            raise LPSolverError(
                f"Feasibility LP for arc {arc_id} ended with status "
                f"{result.status.name}: {result.message}"
            )
        return -float(result.value)

    def run(self, incidence: Incidence) -> ArcFilterResult:
        """Check every arc of ``incidence`` and drop the unusable ones.

        Raises:
            ArcLPAmbiguous: If an LP value is not within tolerance of 0 or 1.
            LPTimeout: If an LP call hit the time limit.
            LPSolverError: If an LP call failed otherwise.
        """
        m = incidence.num_arcs
        a_eq, b_eq = cycle_cover_constraints(incidence)
        start_time = time.time()

        workers = self.config.workers_for(m)
        if workers > 1:
            logger.debug(f"Checking {m} arcs with {workers} worker threads")
            with ThreadPoolExecutor(max_workers=workers) as pool:
                values = list(
                    pool.map(
                        lambda pos: self.arc_value(incidence, pos, a_eq, b_eq),
                        range(m),
                    )
                )
        else:
            values = [self.arc_value(incidence, pos, a_eq, b_eq) for pos in range(m)]

        decisions = snap_binary(
            values, self.config.tolerance, context="Arc feasibility LP value"
        )

        keep = [pos for pos in range(m) if decisions[pos] == 1]
        removed = tuple(
            sorted(incidence.arc_ids[pos] for pos in range(m) if decisions[pos] == 0)
        )
        for arc_id in removed:
            logger.debug(f"Arc {arc_id} lies on no cycle cover, removing it")

        logger.info(
            f"Arc filter kept {len(keep)} of {m} arcs, removed {len(removed)} "
            f"in {time.time() - start_time:.3f} seconds"
        )
        return ArcFilterResult(
            reduced=incidence.restrict(keep),
            removed_arcs=removed,
            values={incidence.arc_ids[pos]: values[pos] for pos in range(m)},
        )

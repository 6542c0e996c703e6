"""One feasible cycle cover of the filtered graph."""

from __future__ import annotations

from typing import Optional

import numpy as np

from qccpfr.config import DEFAULT_CONFIG, FacialReductionConfig
from qccpfr.errors import InstanceInfeasible, LPSolverError, LPTimeout
from qccpfr.graph.incidence import Incidence
from qccpfr.logging import get_logger
from qccpfr.solver.lp import (
    LinearProgramOracle,
    LPStatus,
    cycle_cover_constraints,
    snap_binary,
)

logger = get_logger(__name__)


class FeasibleCoverSolver:
    """Finds a 0/1 vector x with ``U x = V x = 1`` by linear programming.

    The objective ``sum(x)`` is constant on the polytope; it only makes the
    returned vertex deterministic for a given solver.
    """

    def __init__(
        self,
        oracle: LinearProgramOracle,
        config: Optional[FacialReductionConfig] = None,
    ) -> None:
        self.oracle = oracle
        self.config = config or DEFAULT_CONFIG

    def solve(self, incidence: Incidence, instance_name: Optional[str] = None) -> np.ndarray:
        """Return a cycle-cover indicator indexed by original arc id.

        Raises:
            InstanceInfeasible: If no cycle cover exists.
            ArcLPAmbiguous: If the LP returned a fractional point.
            LPTimeout: If the oracle hit its time limit.
            LPSolverError: On any other solver failure.
        """
        name = instance_name or "<unnamed>"
        a_eq, b_eq = cycle_cover_constraints(incidence)
        result = self.oracle.solve(np.ones(incidence.num_arcs), a_eq, b_eq)

        if result.status == LPStatus.INFEASIBLE:
            raise InstanceInfeasible(
                f"Instance {name} has no cycle cover: {incidence.num_nodes} nodes, "
                f"{incidence.num_arcs} usable arcs ({result.message})"
            )
        if result.status == LPStatus.TIME_LIMIT:
            raise LPTimeout(f"Cover LP for instance {name} hit the time limit")
        if not result.is_optimal:
            raise LPSolverError(
                f"Cover LP for instance {name} ended with status "
                f"{result.status.name}: {result.message}"
            )

        x = snap_binary(result.x, self.config.tolerance, context="Cover LP value")
        out_flow = incidence.tail_indicator() @ x.astype(np.int64)
        in_flow = incidence.head_indicator() @ x.astype(np.int64)
        if not (np.all(out_flow == 1) and np.all(in_flow == 1)):
            raise LPSolverError(
                f"Cover LP for instance {name} returned a point that is not a cycle cover"
            )

        logger.info(f"Found a cycle cover of instance {name} using {int(x.sum())} arcs")
        return incidence.scatter(x)

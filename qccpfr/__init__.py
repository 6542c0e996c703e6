"""qccpfr: facial-reduction transformation matrices for the QCCP.

Given the arc-node incidence matrix of a directed graph, computes the sparse
matrix W whose first column is a feasible cycle cover and whose remaining
columns span the cycle space of the bipartite tail/head graph. W is the
input of the facial-reduction step of SDP relaxations of the Quadratic Cycle
Cover Problem.

Primary API:
    compute_transformation_matrix() - Run the full pipeline on an incidence
    transformation_matrix_from_adjacency() - Same, from a 0/1 adjacency matrix
    Incidence - Validated incidence matrix with original arc numbering
    FacialReductionConfig - Tolerance, LP and parallelism settings

Example:
    import numpy as np
    from qccpfr import transformation_matrix_from_adjacency

    adjacency = np.ones((3, 3)) - np.eye(3)
    result = transformation_matrix_from_adjacency(adjacency)
    W = result.matrix  # scipy.sparse.csc_matrix, shape (7, 2)
"""

from __future__ import annotations

from qccpfr import logging
from qccpfr._version import __version__
from qccpfr.config import DEFAULT_CONFIG, FacialReductionConfig
from qccpfr.errors import (
    ArcLPAmbiguous,
    FacialReductionError,
    InstanceInfeasible,
    LPSolverError,
    LPTimeout,
    MalformedIncidence,
    TraversalFailure,
    VerificationError,
)
from qccpfr.facial.arc_filter import ArcFeasibilityFilter, ArcFilterResult
from qccpfr.facial.assembler import MatrixAssembler
from qccpfr.facial.bipartite import (
    BipartiteGraph,
    BipartiteGraphBuilder,
    Component,
)
from qccpfr.facial.cover import FeasibleCoverSolver
from qccpfr.facial.cycle_basis import ComponentCycleBasisExtractor
from qccpfr.facial.transform import (
    TransformationResult,
    compute_transformation_matrix,
    transformation_matrix_from_adjacency,
)
from qccpfr.facial.verify import check_result
from qccpfr.graph.incidence import Incidence
from qccpfr.solver.lp import (
    LinearProgramOracle,
    LPResult,
    LPStatus,
    ScipyLinprogOracle,
)

__all__ = [
    # Version
    "__version__",
    # Pipeline (primary API)
    "compute_transformation_matrix",
    "transformation_matrix_from_adjacency",
    "TransformationResult",
    "check_result",
    # Model
    "Incidence",
    "BipartiteGraph",
    "Component",
    # Stages
    "ArcFeasibilityFilter",
    "ArcFilterResult",
    "BipartiteGraphBuilder",
    "ComponentCycleBasisExtractor",
    "FeasibleCoverSolver",
    "MatrixAssembler",
    # LP oracle
    "LinearProgramOracle",
    "LPResult",
    "LPStatus",
    "ScipyLinprogOracle",
    # Configuration
    "FacialReductionConfig",
    "DEFAULT_CONFIG",
    # Errors
    "FacialReductionError",
    "MalformedIncidence",
    "InstanceInfeasible",
    "ArcLPAmbiguous",
    "TraversalFailure",
    "LPTimeout",
    "LPSolverError",
    "VerificationError",
    # Utilities
    "logging",
]

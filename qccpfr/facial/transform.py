"""Transformation matrix for facial reduction of the QCCP SDP relaxation.

Pipeline: validate the incidence, prune arcs no cycle cover uses, build the
bipartite tail/head graph H, extract a fundamental cycle basis per component
of H, solve for one cycle cover, and assemble

    W = [[1, 0, ..., 0],
         [x, w_1, ..., w_k]]

with rows aligned to the original arc numbering.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

import numpy as np
import scipy.sparse as sp

from qccpfr.config import DEFAULT_CONFIG, FacialReductionConfig
from qccpfr.facial.arc_filter import ArcFeasibilityFilter
from qccpfr.facial.assembler import MatrixAssembler
from qccpfr.facial.bipartite import BipartiteGraphBuilder, Component
from qccpfr.facial.cover import FeasibleCoverSolver
from qccpfr.facial.cycle_basis import ComponentCycleBasisExtractor
from qccpfr.facial.verify import check_result
from qccpfr.graph.incidence import Incidence
from qccpfr.logging import get_logger
from qccpfr.solver.lp import LinearProgramOracle, ScipyLinprogOracle

logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class TransformationResult:
    """Output of `compute_transformation_matrix`.

    Attributes:
        matrix: W, shape ``(original_num_arcs + 1, 1 + k)``.
        cover: Cycle-cover indicator, indexed by original arc id.
        removed_arcs: Original ids of arcs pruned by the feasibility filter.
        reduced: Incidence after filtering.
        components: Connected components of H.
        instance_name: Name used in log and error messages.
    """

    matrix: sp.csc_matrix
    cover: np.ndarray
    removed_arcs: Tuple[int, ...]
    reduced: Incidence
    components: Tuple[Component, ...]
    instance_name: Optional[str] = None

    @property
    def num_basis_columns(self) -> int:
        return self.matrix.shape[1] - 1


def compute_transformation_matrix(
    incidence: Union[Incidence, Any],
    oracle: Optional[LinearProgramOracle] = None,
    config: Optional[FacialReductionConfig] = None,
    instance_name: Optional[str] = None,
) -> TransformationResult:
    """Compute the facial-reduction transformation matrix of an instance.

    Args:
        incidence: An `Incidence`, or a nodes-by-arcs matrix accepted by
            `Incidence.from_matrix`.
        oracle: LP solver; defaults to `ScipyLinprogOracle` built from ``config``.
        config: Pipeline configuration; defaults to `DEFAULT_CONFIG`.
        instance_name: Name used in log and error messages.

    Returns:
        TransformationResult holding W and the intermediate structures.

    Raises:
        MalformedIncidence: If the input is not a valid incidence matrix.
        InstanceInfeasible: If the graph has no cycle cover.
        ArcLPAmbiguous: If an LP value is not within tolerance of 0 or 1.
        LPTimeout: If an LP call hit the configured time limit.
        TraversalFailure: If a component traversal breaks an internal invariant.
    """
    config = config or DEFAULT_CONFIG
    if not isinstance(incidence, Incidence):
        incidence = Incidence.from_matrix(incidence)
    if oracle is None:
        oracle = ScipyLinprogOracle.from_config(config)
    name = instance_name or "<unnamed>"

    logger.info(
        f"Computing transformation matrix for instance {name}: "
        f"{incidence.num_nodes} nodes, {incidence.num_arcs} arcs"
    )
    start_time = time.time()

    filtered = ArcFeasibilityFilter(oracle, config).run(incidence)
    reduced = filtered.reduced
    cover_solver = FeasibleCoverSolver(oracle, config)
    extractor = ComponentCycleBasisExtractor(config)

    if config.parallelism > 1:
        # cover and extraction only share read access to the reduced incidence
        with ThreadPoolExecutor(max_workers=1) as pool:
            cover_future = pool.submit(cover_solver.solve, reduced, instance_name)
            graph = BipartiteGraphBuilder().build(reduced)
            vectors = extractor.extract_all(graph)
            cover = cover_future.result()
    else:
        cover = cover_solver.solve(reduced, instance_name)
        graph = BipartiteGraphBuilder().build(reduced)
        vectors = extractor.extract_all(graph)

    matrix = (
        MatrixAssembler(incidence.original_num_arcs)
        .set_cover(cover)
        .extend(vectors)
        .build()
    )
    result = TransformationResult(
        matrix=matrix,
        cover=cover,
        removed_arcs=filtered.removed_arcs,
        reduced=reduced,
        components=graph.components,
        instance_name=instance_name,
    )

    if config.validate_result:
        check_result(result)
        logger.debug(f"Result for instance {name} passed verification")

    logger.info(
        f"Transformation matrix for instance {name}: shape {matrix.shape}, "
        f"{result.num_basis_columns} basis columns, built in "
        f"{time.time() - start_time:.3f} seconds"
    )
    return result


def transformation_matrix_from_adjacency(
    adjacency: Any,
    oracle: Optional[LinearProgramOracle] = None,
    config: Optional[FacialReductionConfig] = None,
    instance_name: Optional[str] = None,
) -> TransformationResult:
    """Same as `compute_transformation_matrix`, starting from an adjacency matrix.

    Arcs are numbered as in `Incidence.from_adjacency`.
    """
    return compute_transformation_matrix(
        Incidence.from_adjacency(adjacency),
        oracle=oracle,
        config=config,
        instance_name=instance_name,
    )

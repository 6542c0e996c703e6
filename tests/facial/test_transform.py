import random

import numpy as np
import pytest
import scipy.sparse as sp

from qccpfr.config import FacialReductionConfig
from qccpfr.errors import InstanceInfeasible, MalformedIncidence
from qccpfr.facial.transform import (
    compute_transformation_matrix,
    transformation_matrix_from_adjacency,
)
from qccpfr.facial.verify import check_result, expected_basis_rank
from qccpfr.graph.incidence import Incidence
from qccpfr.solver.lp import ScipyLinprogOracle

VALIDATE = FacialReductionConfig(validate_result=True)


def random_instance(n: int, p: float, seed: int) -> Incidence:
    """Random digraph that contains the Hamiltonian cycle 0 -> 1 -> ... -> 0."""
    rng = random.Random(seed)
    adjacency = np.zeros((n, n), dtype=int)
    for u in range(n):
        adjacency[u, (u + 1) % n] = 1
        for v in range(n):
            if u != v and rng.random() < p:
                adjacency[u, v] = 1
    return Incidence.from_adjacency(adjacency)


def test_directed_triangle(triangle, brute_force_oracle):
    result = compute_transformation_matrix(triangle, oracle=brute_force_oracle, config=VALIDATE)

    # the only cycle cover is the triangle itself; H is three disjoint edges,
    # so there is no cycle space and W is the cover column alone
    assert result.removed_arcs == ()
    assert len(result.components) == 3
    assert result.num_basis_columns == 0
    assert result.matrix.toarray().tolist() == [[1], [1], [1], [1]]


def test_two_disjoint_digons(two_digons, brute_force_oracle):
    result = compute_transformation_matrix(two_digons, oracle=brute_force_oracle, config=VALIDATE)

    assert result.removed_arcs == ()
    assert len(result.components) == 4
    assert result.matrix.shape == (5, 1)
    assert list(result.cover) == [1, 1, 1, 1]


def test_dangling_arc_is_removed(triangle_with_chord, brute_force_oracle):
    result = compute_transformation_matrix(
        triangle_with_chord, oracle=brute_force_oracle, config=VALIDATE
    )

    assert result.removed_arcs == (3,)
    assert result.reduced.arc_ids == (0, 1, 2)
    assert result.matrix.shape == (5, 1)
    dense = result.matrix.toarray()
    assert np.all(dense[4] == 0)
    assert list(result.cover) == [1, 1, 1, 0]


def test_complete3(complete3, brute_force_oracle):
    result = compute_transformation_matrix(complete3, oracle=brute_force_oracle, config=VALIDATE)

    dense = result.matrix.toarray()
    assert result.matrix.shape == (7, 2)
    assert dense[0].tolist() == [1, 0]
    assert dense[1:, 1].tolist() == [-1, 1, 1, -1, -1, 1]


def test_two_components_each_contribute_a_vector(two_complete3, brute_force_oracle):
    result = compute_transformation_matrix(
        two_complete3, oracle=brute_force_oracle, config=VALIDATE
    )

    assert len(result.components) == 2
    assert result.matrix.shape == (13, 3)


def test_complete4_rank(complete4, brute_force_oracle):
    result = compute_transformation_matrix(complete4, oracle=brute_force_oracle)

    assert result.matrix.shape == (13, 6)
    assert expected_basis_rank(result.components) == 5
    check_result(result)


def test_infeasible_instance_aborts(no_cover, brute_force_oracle):
    with pytest.raises(InstanceInfeasible, match="no-cover"):
        compute_transformation_matrix(
            no_cover, oracle=brute_force_oracle, instance_name="no-cover"
        )


def test_raw_matrix_input(triangle, brute_force_oracle):
    dense = compute_transformation_matrix(triangle.matrix.toarray(), oracle=brute_force_oracle)
    sparse = compute_transformation_matrix(sp.csr_matrix(triangle.matrix), oracle=brute_force_oracle)
    assert dense.matrix.shape == sparse.matrix.shape == (4, 1)


def test_malformed_input_rejected_before_solving(brute_force_oracle):
    with pytest.raises(MalformedIncidence):
        compute_transformation_matrix(np.array([[1, -1], [1, 1]]), oracle=brute_force_oracle)
    assert brute_force_oracle.calls == 0


def test_from_adjacency(brute_force_oracle):
    result = transformation_matrix_from_adjacency(
        np.ones((3, 3)) - np.eye(3), oracle=brute_force_oracle, instance_name="K3"
    )
    assert result.instance_name == "K3"
    assert result.matrix.shape == (7, 2)


def test_parallel_matches_serial(complete4, brute_force_oracle):
    serial = compute_transformation_matrix(complete4, oracle=brute_force_oracle)
    parallel = compute_transformation_matrix(
        complete4,
        oracle=brute_force_oracle,
        config=FacialReductionConfig(parallelism=4, validate_result=True),
    )
    assert (serial.matrix != parallel.matrix).nnz == 0


def test_rerun_is_deterministic(two_complete3, brute_force_oracle):
    first = compute_transformation_matrix(two_complete3, oracle=brute_force_oracle)
    second = compute_transformation_matrix(two_complete3, oracle=brute_force_oracle)
    assert (first.matrix != second.matrix).nnz == 0


def test_scipy_oracle_end_to_end(complete4):
    result = compute_transformation_matrix(
        complete4, oracle=ScipyLinprogOracle(), config=VALIDATE
    )
    assert result.matrix.shape == (13, 6)


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_random_instances_with_default_oracle(seed):
    incidence = random_instance(8, 0.3, seed)
    result = compute_transformation_matrix(incidence, config=VALIDATE)

    # rows follow the original arc numbering even after pruning
    assert result.matrix.shape[0] == incidence.num_arcs + 1
    assert result.num_basis_columns == expected_basis_rank(result.components)
    for arc in result.removed_arcs:
        assert result.matrix[arc + 1].nnz == 0


def test_brute_force_and_scipy_agree_on_column_space(brute_force_oracle):
    # at most 12 arcs, so enumeration stays at 4096 points per LP
    incidence = random_instance(4, 0.5, seed=11)
    exact = compute_transformation_matrix(incidence, oracle=brute_force_oracle)
    numeric = compute_transformation_matrix(incidence, oracle=ScipyLinprogOracle())

    assert exact.removed_arcs == numeric.removed_arcs
    a = exact.matrix.toarray()[1:, 1:]
    b = numeric.matrix.toarray()[1:, 1:]
    # identical basis columns; covers may differ but both are checked
    assert np.array_equal(a, b)
    check_result(exact)
    check_result(numeric)

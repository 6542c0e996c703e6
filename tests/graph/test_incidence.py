import numpy as np
import pytest
import scipy.sparse as sp

from qccpfr.errors import MalformedIncidence
from qccpfr.graph.incidence import Incidence


def test_from_matrix_dense():
    # arcs: 0->1, 1->2, 2->0
    matrix = np.array(
        [
            [-1, 0, 1],
            [1, -1, 0],
            [0, 1, -1],
        ]
    )
    inc = Incidence.from_matrix(matrix, num_nodes=3, num_arcs=3)

    assert inc.num_nodes == 3
    assert inc.num_arcs == 3
    assert inc.arc_ids == (0, 1, 2)
    assert inc.original_num_arcs == 3
    assert list(inc.tails) == [0, 1, 2]
    assert list(inc.heads) == [1, 2, 0]
    assert np.array_equal(inc.matrix.toarray(), matrix)


def test_from_matrix_sparse_input():
    matrix = sp.csr_matrix(np.array([[-1, 1], [1, -1]]))
    inc = Incidence.from_matrix(matrix)
    assert list(inc.arcs()) == [(0, 0, 1), (1, 1, 0)]


def test_from_matrix_declared_shape_mismatch():
    matrix = np.array([[-1, 1], [1, -1]])
    with pytest.raises(MalformedIncidence, match="Declared 3 nodes"):
        Incidence.from_matrix(matrix, num_nodes=3)
    with pytest.raises(MalformedIncidence, match="Declared 1 arcs"):
        Incidence.from_matrix(matrix, num_arcs=1)


def test_from_matrix_rejects_bad_columns():
    # column 1 has two +1 entries
    matrix = np.array([[-1, 1], [1, 1], [0, 0]])
    with pytest.raises(MalformedIncidence, match="Column 1"):
        Incidence.from_matrix(matrix)

    # column 0 has no -1
    with pytest.raises(MalformedIncidence, match="Column 0"):
        Incidence.from_matrix(np.array([[0], [1]]))


def test_from_matrix_rejects_bad_entries():
    with pytest.raises(MalformedIncidence, match="-1, 0 or \\+1"):
        Incidence.from_matrix(np.array([[-2], [2]]))
    with pytest.raises(MalformedIncidence, match="2-dimensional"):
        Incidence.from_matrix(np.array([-1, 1]))


def test_malformed_incidence_is_value_error():
    with pytest.raises(ValueError):
        Incidence.from_matrix(np.array([[1], [1]]))


def test_from_adjacency_row_major_and_diagonal_ignored():
    adjacency = np.array(
        [
            [7, 1, 1],  # diagonal value is a sentinel, not an arc
            [1, 0, 0],
            [0, 1, -3],
        ]
    )
    inc = Incidence.from_adjacency(adjacency)
    assert list(inc.arcs()) == [(0, 0, 1), (1, 0, 2), (2, 1, 0), (3, 2, 1)]


def test_from_adjacency_validation():
    with pytest.raises(MalformedIncidence, match="square"):
        Incidence.from_adjacency(np.ones((2, 3)))
    with pytest.raises(MalformedIncidence, match="0 or 1"):
        Incidence.from_adjacency(np.array([[0, 2], [1, 0]]))


def test_from_arcs_validation():
    with pytest.raises(MalformedIncidence, match="self-loop"):
        Incidence.from_arcs(2, [(0, 1), (1, 1)])
    with pytest.raises(MalformedIncidence, match="outside"):
        Incidence.from_arcs(2, [(0, 2)])


def test_indicators_and_stack(triangle):
    u = triangle.tail_indicator().toarray()
    v = triangle.head_indicator().toarray()
    assert np.array_equal(u, np.eye(3, dtype=int))
    assert np.array_equal(v, np.array([[0, 0, 1], [1, 0, 0], [0, 1, 0]]))
    assert np.array_equal(v - u, triangle.matrix.toarray())

    stacked = triangle.stacked()
    assert stacked.shape == (6, 3)
    assert np.array_equal(stacked.toarray(), np.vstack([u, v]))


def test_restrict_keeps_original_ids(triangle_with_chord):
    reduced = triangle_with_chord.restrict([1, 3])
    assert reduced.num_arcs == 2
    assert reduced.arc_ids == (1, 3)
    assert reduced.original_num_arcs == 4
    assert list(reduced.arcs()) == [(1, 1, 2), (3, 0, 2)]

    again = reduced.restrict([1])
    assert again.arc_ids == (3,)
    assert again.original_num_arcs == 4


def test_scatter(triangle_with_chord):
    reduced = triangle_with_chord.restrict([0, 2])
    out = reduced.scatter(np.array([5, -1]))
    assert list(out) == [5, 0, -1, 0]

    with pytest.raises(ValueError, match="length 2"):
        reduced.scatter(np.array([1, 2, 3]))


def test_empty_incidence():
    inc = Incidence.from_matrix(np.zeros((2, 0)))
    assert inc.num_nodes == 2
    assert inc.num_arcs == 0
    assert inc.stacked().shape == (4, 0)
    assert "num_nodes=2" in repr(inc)

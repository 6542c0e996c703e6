import pytest

from qccpfr.algorithms.bfs import bfs_predecessors, walk_back
from qccpfr.errors import TraversalFailure


def line_graph():
    # A -e0- B -e1- C -e2- D
    return {
        "A": [("B", "e0")],
        "B": [("A", "e0"), ("C", "e1")],
        "C": [("B", "e1"), ("D", "e2")],
        "D": [("C", "e2")],
    }


def test_bfs_full_traversal():
    dist, pred = bfs_predecessors(line_graph(), "A")
    assert dist == {"A": 0, "B": 1, "C": 2, "D": 3}
    assert pred == {"A": None, "B": ("A", "e0"), "C": ("B", "e1"), "D": ("C", "e2")}


def test_bfs_stops_at_target():
    dist, pred = bfs_predecessors(line_graph(), "A", target="C")
    assert "D" not in dist
    assert walk_back(pred, "C") == ["e1", "e0"]


def test_bfs_target_is_start():
    dist, pred = bfs_predecessors(line_graph(), "B", target="B")
    assert dist == {"B": 0}
    assert walk_back(pred, "B") == []


def test_bfs_prefers_first_listed_edge():
    # two parallel edges between 0 and 1
    adjacency = {0: [(1, "a"), (1, "b")], 1: [(0, "a"), (0, "b")]}
    _, pred = bfs_predecessors(adjacency, 0)
    assert pred[1] == (0, "a")


def test_bfs_excluded_edges():
    adjacency = {0: [(1, "a"), (1, "b")], 1: [(0, "a"), (0, "b")]}
    _, pred = bfs_predecessors(adjacency, 0, target=1, excluded_edges={"a"})
    assert walk_back(pred, 1) == ["b"]


def test_bfs_unreachable_target_raises():
    adjacency = {0: [(1, "a")], 1: [(0, "a")], 2: []}
    with pytest.raises(TraversalFailure, match="without reaching 2"):
        bfs_predecessors(adjacency, 0, target=2)


def test_bfs_step_limit():
    with pytest.raises(TraversalFailure, match="exceeded 1 steps"):
        bfs_predecessors(line_graph(), "A", target="D", max_steps=1)

    # enough steps to find D
    _, pred = bfs_predecessors(line_graph(), "A", target="D", max_steps=3)
    assert walk_back(pred, "D") == ["e2", "e1", "e0"]

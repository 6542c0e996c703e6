"""Shared fixtures: small QCCP instances and in-memory LP oracles.

Instances are small enough for `BruteForceOracle`, which enumerates every 0/1
point of the constraint system. The cycle-cover polytope is integral, so this
gives the exact LP optimum without a numerical solver.
"""

from __future__ import annotations

import itertools
from typing import List

import numpy as np
import pytest

from qccpfr.graph.incidence import Incidence
from qccpfr.solver.lp import LPResult, LPStatus


class BruteForceOracle:
    """Exact LP oracle for tiny 0/1 polytopes."""

    def __init__(self) -> None:
        self.calls = 0

    def solve(self, c, a_eq, b_eq) -> LPResult:
        self.calls += 1
        c = np.asarray(c, dtype=float)
        a = a_eq.toarray() if hasattr(a_eq, "toarray") else np.asarray(a_eq)
        m = c.size
        points = np.array(
            list(itertools.product((0.0, 1.0), repeat=m)), dtype=float
        ).reshape(2**m, m)
        feasible = points[np.all(points @ a.T == np.asarray(b_eq), axis=1)]
        if feasible.shape[0] == 0:
            return LPResult(LPStatus.INFEASIBLE, message="no feasible 0/1 point")
        values = feasible @ c
        best = int(np.argmin(values))
        return LPResult(LPStatus.OPTIMAL, float(values[best]), feasible[best], "enumerated")


class ScriptedOracle:
    """Returns a fixed sequence of results, repeating the last one."""

    def __init__(self, results: List[LPResult]) -> None:
        self.results = list(results)
        self.calls = 0

    def solve(self, c, a_eq, b_eq) -> LPResult:
        result = self.results[min(self.calls, len(self.results) - 1)]
        self.calls += 1
        return result


@pytest.fixture
def brute_force_oracle():
    return BruteForceOracle()


@pytest.fixture
def scripted_oracle():
    return ScriptedOracle


@pytest.fixture
def triangle():
    #  0 ──► 1 ──► 2
    #  ▲           │
    #  └───────────┘
    return Incidence.from_arcs(3, [(0, 1), (1, 2), (2, 0)])


@pytest.fixture
def two_digons():
    #  0 ◄──► 1     2 ◄──► 3
    return Incidence.from_arcs(4, [(0, 1), (1, 0), (2, 3), (3, 2)])


@pytest.fixture
def complete3():
    # Arcs, row-major: 0:(0,1) 1:(0,2) 2:(1,0) 3:(1,2) 4:(2,0) 5:(2,1)
    return Incidence.from_adjacency(np.ones((3, 3)) - np.eye(3))


@pytest.fixture
def complete4():
    return Incidence.from_adjacency(np.ones((4, 4)) - np.eye(4))


@pytest.fixture
def two_complete3():
    # Two disjoint complete digraphs on {0, 1, 2} and {3, 4, 5}
    block = np.ones((3, 3)) - np.eye(3)
    adjacency = np.zeros((6, 6))
    adjacency[:3, :3] = block
    adjacency[3:, 3:] = block
    return Incidence.from_adjacency(adjacency)


@pytest.fixture
def triangle_with_chord():
    # Triangle 0 -> 1 -> 2 -> 0 plus chord 0 -> 2 (arc 3). Using the chord
    # leaves node 1 without an incoming arc, so no cycle cover uses it.
    return Incidence.from_arcs(3, [(0, 1), (1, 2), (2, 0), (0, 2)])


@pytest.fixture
def no_cover():
    # Node 0 has no incoming arc
    return Incidence.from_arcs(3, [(0, 1), (1, 2), (2, 1)])

"""Exceptions raised while computing a transformation matrix.

Every error is fatal for the computation that raised it. Exceptions also
derive from the closest builtin so callers catching ``ValueError`` or
``RuntimeError`` keep working.
"""

from __future__ import annotations


class FacialReductionError(Exception):
    """Base class for qccpfr errors."""


class MalformedIncidence(FacialReductionError, ValueError):
    """Input incidence or adjacency matrix does not describe a simple digraph."""


class InstanceInfeasible(FacialReductionError, RuntimeError):
    """No cycle cover exists for the instance."""


class ArcLPAmbiguous(FacialReductionError, RuntimeError):
    """An LP value was not within tolerance of 0 or 1."""


class TraversalFailure(FacialReductionError, AssertionError):
    """Breadth-first search inside a component could not close a cycle.

    This signals a broken component partition, not bad user input.
    """


class LPTimeout(FacialReductionError, RuntimeError):
    """The LP oracle hit its time limit."""


class LPSolverError(FacialReductionError, RuntimeError):
    """The LP oracle ended with a status other than optimal or infeasible."""


class VerificationError(FacialReductionError, AssertionError):
    """A computed result failed one of the property checks."""

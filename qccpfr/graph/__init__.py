"""Graph primitives and helpers.

This package provides the validated incidence matrix type `Incidence` and
helpers for NetworkX conversion (`convert`).
"""

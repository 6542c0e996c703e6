"""Transformation-matrix construction for QCCP facial reduction.

Stages, in pipeline order:
    arc_filter  - drop arcs no cycle cover uses
    bipartite   - tail/head graph H and its components
    cycle_basis - fundamental cycle vectors per component
    cover       - one feasible cycle cover
    assembler   - column-wise construction of W
    transform   - the end-to-end pipeline
    verify      - property checks for results
"""

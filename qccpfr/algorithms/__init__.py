"""Graph algorithms without third-party graph-library dependencies.

Connected-components labelling (`components`), breadth-first search with
predecessor tracking (`bfs`) and spanning trees of uniformly weighted graphs
(`spanning_tree`).
"""

"""Linear-program oracle interface and its SciPy implementation."""

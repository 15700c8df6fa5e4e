"""clean-lint: check Python code against clean-code heuristics."""

__version__ = "0.1.0"

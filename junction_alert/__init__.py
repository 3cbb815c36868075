"""Branching road-intersection detection and proximity alerts."""

__version__ = "0.1.0"

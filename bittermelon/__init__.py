"""Bitter Melon: critic review aggregation engine."""

__version__ = "0.1.0"

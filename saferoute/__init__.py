"""Flood-aware safe route planner."""

__version__ = "1.0.0"

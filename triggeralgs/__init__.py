"""Streaming trigger algorithms: primitives to activities, candidates and decisions, plus incremental DBSCAN."""

__version__ = "1.3.2"
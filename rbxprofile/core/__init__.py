"""Aggregation engine."""

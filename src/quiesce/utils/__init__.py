"""Utility functions for the quiesce engine."""

from quiesce.utils.query import QueryParams, extract_query_params

__all__ = ["QueryParams", "extract_query_params"]

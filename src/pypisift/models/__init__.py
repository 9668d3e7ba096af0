"""Data models for search requests, queries and results."""

from pypisift.models.query import BooleanQuery, QueryIntent, TermFilter, WildcardClause
from pypisift.models.result import SearchResult

__all__ = ["BooleanQuery", "QueryIntent", "SearchResult", "TermFilter", "WildcardClause"]

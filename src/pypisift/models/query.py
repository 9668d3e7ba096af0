"""Query models — Validated search intent and the index-agnostic boolean query."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# pip only sends name and summary, so the accepted keys stop there.
SEARCH_FIELDS: frozenset[str] = frozenset({"name", "summary"})

ATTRIBUTE_NAMESPACE = "attributes.pypi."
REPOSITORY_NAME = "repository_name"
WILDCARD = "*"


class QueryIntent(BaseModel):
    """A search request that passed protocol validation.

    ``terms`` maps each accepted search field to its values in the order
    they appeared in the request document, duplicates included.
    """

    model_config = ConfigDict(frozen=True)

    repository: str = Field(description="Repository the search is scoped to")
    terms: dict[str, list[str]] = Field(default_factory=dict, description="Search field -> ordered term values")

    def pairs(self) -> list[tuple[str, str]]:
        """Flatten ``terms`` into ``(field, value)`` pairs, preserving order."""
        return [(field, value) for field, values in self.terms.items() for value in values]


class WildcardClause(BaseModel):
    """A should-match wildcard clause against one indexed attribute."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(description="Fully qualified attribute path")
    pattern: str = Field(description="Wildcard pattern, lower-cased")

    def to_dsl(self) -> dict[str, Any]:
        return {"wildcard": {self.field: {"value": self.pattern}}}


class TermFilter(BaseModel):
    """A mandatory exact-match filter clause."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(description="Attribute path")
    value: str = Field(description="Exact value to match")

    def to_dsl(self) -> dict[str, Any]:
        return {"term": {self.field: self.value}}


class BooleanQuery(BaseModel):
    """Disjunction of wildcard clauses restricted by mandatory filters."""

    should: list[WildcardClause] = Field(default_factory=list, description="Should-match clauses")
    filter: list[TermFilter] = Field(default_factory=list, description="Mandatory filter clauses")
    minimum_should_match: int = Field(default=1, ge=0, description="Number of should clauses that must match")

    def to_dsl(self) -> dict[str, Any]:
        """Render as an OpenSearch / Elasticsearch ``bool`` query."""
        return {
            "bool": {
                "should": [clause.to_dsl() for clause in self.should],
                "minimum_should_match": self.minimum_should_match,
                "filter": [clause.to_dsl() for clause in self.filter],
            }
        }

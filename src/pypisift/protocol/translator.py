"""Translate a validated search intent into a boolean index query."""

from __future__ import annotations

from pypisift.models.query import (
    ATTRIBUTE_NAMESPACE,
    REPOSITORY_NAME,
    WILDCARD,
    BooleanQuery,
    QueryIntent,
    TermFilter,
    WildcardClause,
)


def translate(repository: str, intent: QueryIntent) -> BooleanQuery:
    """Build the disjunctive wildcard query for ``intent``, scoped to ``repository``."""
    should = [
        WildcardClause(field=ATTRIBUTE_NAMESPACE + field, pattern=to_pattern(value))
        for field, value in intent.pairs()
    ]
    return BooleanQuery(
        should=should,
        minimum_should_match=1,
        filter=[TermFilter(field=REPOSITORY_NAME, value=repository)],
    )


def to_pattern(value: str) -> str:
    """Lower-case a term and wrap it for substring matching.

    Terms already containing ``*`` are used as given. The leading wildcard
    forces a full term scan on most index back-ends; if search is running too
    slow, start here.
    """
    pattern = value.lower()
    if WILDCARD not in pattern:
        pattern = f"{WILDCARD}{pattern}{WILDCARD}"
    return pattern

"""Project raw index hits onto search results."""

from __future__ import annotations

from typing import Any

from pypisift.models.result import SearchResult

P_ATTRIBUTES = "attributes"
FORMAT_NAME = "pypi"


def project(hit: dict[str, Any]) -> SearchResult:
    """Map an index hit to a ``SearchResult``.

    Reads ``_source.attributes.pypi.{name,version,summary}``. Missing or
    mistyped levels yield empty strings.
    """
    source = _mapping(hit.get("_source"))
    attributes = _mapping(source.get(P_ATTRIBUTES))
    pypi = _mapping(attributes.get(FORMAT_NAME))
    return SearchResult(
        name=_string(pypi.get("name")),
        version=_string(pypi.get("version")),
        summary=_string(pypi.get("summary")),
    )


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""

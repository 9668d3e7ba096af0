"""Shared test fixtures and configuration."""

from __future__ import annotations

import xmlrpc.client
from collections.abc import AsyncIterator, Callable
from typing import Any
from xml.sax.saxutils import escape

import pytest

from pypisift.adapters.base.adapter import AdapterHealth, SearchIndex
from pypisift.adapters.base.exceptions import IndexUnavailable
from pypisift.config.settings import Settings
from pypisift.models.query import BooleanQuery
from pypisift.models.result import SearchResult


def pip_search_request(terms: dict[str, list[str]], operator: str = "or", method: str = "search") -> bytes:
    """Build a search request exactly the way pip serializes it."""
    return xmlrpc.client.dumps((terms, operator), method).encode("utf-8")


def raw_search_request(
    members: list[tuple[str, list[str]]],
    operator: str | None = "or",
    method: str | None = "search",
) -> bytes:
    """Build a search request by hand, allowing repeated keys and missing elements."""
    member_xml = "".join(
        f"<member><name>{escape(key)}</name><value><array><data>"
        + "".join(f"<value><string>{escape(value)}</string></value>" for value in values)
        + "</data></array></value></member>"
        for key, values in members
    )
    method_xml = f"<methodName>{escape(method)}</methodName>" if method is not None else ""
    operator_xml = f"<param><value><string>{escape(operator)}</string></value></param>" if operator is not None else ""
    return (
        '<?xml version="1.0"?>'
        f"<methodCall>{method_xml}<params>"
        f"<param><value><struct>{member_xml}</struct></value></param>"
        f"{operator_xml}"
        "</params></methodCall>"
    ).encode("utf-8")


def index_hit(repository: str, name: str, version: str, summary: str | None = None) -> dict[str, Any]:
    """Build an OpenSearch hit in the component metadata layout."""
    pypi: dict[str, Any] = {"name": name, "version": version}
    if summary is not None:
        pypi["summary"] = summary
    return {
        "_index": "components",
        "_id": f"{repository}:{name}:{version}",
        "_score": 1.0,
        "_source": {"repository_name": repository, "attributes": {"pypi": pypi}},
    }


class FakeIndex(SearchIndex):
    """In-memory index returning canned hits per repository."""

    def __init__(self, hits: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.hits = hits or {}
        self.queries: list[tuple[BooleanQuery, str, bool]] = []
        self.unavailable: set[str] = set()
        self.initialized = False

    @property
    def name(self) -> str:
        return "fake"

    async def initialize(self) -> None:
        self.initialized = True

    async def shutdown(self) -> None:
        self.initialized = False

    async def browse(
        self,
        query: BooleanQuery,
        repository: str,
        *,
        unrestricted: bool = False,
    ) -> AsyncIterator[dict[str, Any]]:
        self.queries.append((query, repository, unrestricted))
        if repository in self.unavailable:
            raise IndexUnavailable(f"index for {repository} is down")
        for hit in self.hits.get(repository, []):
            yield hit

    async def health_check(self) -> AdapterHealth:
        return AdapterHealth(status="healthy", message="fake index")


class FakeUpstream:
    """Stand-in for ``UpstreamClient`` returning canned results per URL."""

    def __init__(self, results: dict[str, list[SearchResult] | Exception] | None = None) -> None:
        self.results = results or {}
        self.calls: list[tuple[str, bytes]] = []

    async def initialize(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    async def search(self, remote_url: str, body: bytes) -> list[SearchResult]:
        self.calls.append((remote_url, body))
        outcome = self.results.get(remote_url, [])
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with a hosted, a proxy and a group repository."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        repositories={
            "pypi-hosted": {"type": "hosted"},
            "pypi-internal": {"type": "hosted"},
            "pypi-proxy": {"type": "proxy", "remote_url": "https://pypi.example.org/pypi"},
            "pypi-all": {"type": "group", "members": ["pypi-hosted", "pypi-internal", "pypi-proxy"]},
        },
    )


@pytest.fixture
def fake_index() -> FakeIndex:
    return FakeIndex(
        {
            "pypi-hosted": [
                index_hit("pypi-hosted", "django", "4.2.1", "A high-level Python web framework"),
                index_hit("pypi-hosted", "django-rest", "0.1.0"),
            ],
            "pypi-internal": [
                index_hit("pypi-internal", "django", "4.2.1", "Internal rebuild"),
                index_hit("pypi-internal", "django-internal", "1.0.0", "Company helpers"),
            ],
        }
    )


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    return FakeUpstream(
        {
            "https://pypi.example.org/pypi": [
                SearchResult(name="django", version="5.0.0", summary="A high-level Python web framework"),
                SearchResult(name="django-rest", version="0.1.0", summary="duplicate of hosted"),
            ]
        }
    )


@pytest.fixture
def django_request() -> bytes:
    return pip_search_request({"name": ["django"], "summary": ["django"]})


@pytest.fixture
def make_request() -> Callable[..., bytes]:
    return pip_search_request


@pytest.fixture
def make_raw_request() -> Callable[..., bytes]:
    return raw_search_request

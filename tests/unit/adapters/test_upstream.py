"""Tests for the upstream XML-RPC client."""

from __future__ import annotations

import xmlrpc.client
from collections.abc import Callable

import httpx
import pytest

from pypisift.adapters.base.exceptions import UpstreamUnavailable
from pypisift.adapters.upstream.client import UpstreamClient
from pypisift.models.result import SearchResult
from pypisift.protocol.exceptions import MalformedDocument

REMOTE = "https://pypi.example.org/pypi"


def _xmlrpc_response(payload: object) -> bytes:
    return xmlrpc.client.dumps(payload, methodresponse=True).encode("utf-8")


async def _client(handler: Callable[[httpx.Request], httpx.Response]) -> UpstreamClient:
    client = UpstreamClient(timeout=5.0, transport=httpx.MockTransport(handler))
    await client.initialize()
    return client


class TestUpstreamClient:
    async def test_not_initialized_raises(self) -> None:
        with pytest.raises(UpstreamUnavailable, match="not initialized"):
            await UpstreamClient().search(REMOTE, b"<methodCall/>")

    async def test_forwards_body_and_parses_reply(self, django_request: bytes) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                content=_xmlrpc_response(([{"name": "django", "version": "5.0.0", "summary": "Web framework"}],)),
            )

        client = await _client(handler)
        results = await client.search(REMOTE, django_request)
        await client.shutdown()

        assert results == [SearchResult(name="django", version="5.0.0", summary="Web framework")]
        assert seen[0].method == "POST"
        assert str(seen[0].url) == REMOTE
        assert seen[0].content == django_request
        assert seen[0].headers["content-type"] == "text/xml"

    async def test_fault_reply_yields_no_results(self, django_request: bytes) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = xmlrpc.client.dumps(xmlrpc.client.Fault(-32500, "search disabled"), methodresponse=True)
            return httpx.Response(200, content=body.encode("utf-8"))

        client = await _client(handler)
        assert await client.search(REMOTE, django_request) == []

    async def test_error_status_raises(self, django_request: bytes) -> None:
        client = await _client(lambda request: httpx.Response(503))
        with pytest.raises(UpstreamUnavailable, match="failed"):
            await client.search(REMOTE, django_request)

    async def test_transport_error_raises(self, django_request: bytes) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = await _client(handler)
        with pytest.raises(UpstreamUnavailable):
            await client.search(REMOTE, django_request)

    async def test_malformed_reply_raises_upstream_unavailable(self, django_request: bytes) -> None:
        client = await _client(lambda request: httpx.Response(200, content=b"<html>gateway"))
        with pytest.raises(UpstreamUnavailable, match="unreadable reply") as exc:
            await client.search(REMOTE, django_request)
        assert isinstance(exc.value.__cause__, MalformedDocument)

    async def test_shutdown_closes_client(self) -> None:
        client = await _client(lambda request: httpx.Response(200))
        await client.shutdown()
        assert client._client is None

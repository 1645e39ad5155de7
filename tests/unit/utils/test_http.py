"""Precise unit tests for HTTPClient.

Tests focus on session management and error translation.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from aiohttp import test_utils, web

from fieldline.harvest import HttpStatusError, ResponseFormatError, TransientNetworkError
from fieldline.harvest.utils import HTTPClient


def mock_response(status=200, json_data=None, text="", json_error=None):
    response = AsyncMock()
    response.status = status
    if json_error is not None:
        response.json = AsyncMock(side_effect=json_error)
    else:
        response.json = AsyncMock(return_value=json_data)
    response.text = AsyncMock(return_value=text)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def client_with(get_side_effect=None, response=None, base_url=None):
    client = HTTPClient(base_url=base_url)
    mock_session = MagicMock()
    mock_session.closed = False
    if get_side_effect is not None:
        mock_session.get = MagicMock(side_effect=get_side_effect)
    else:
        mock_session.get = MagicMock(return_value=response)
    client._session = mock_session
    return client, mock_session


class TestHTTPClientSessionManagement:
    """Test HTTPClient session management."""

    def test_init(self):
        client = HTTPClient(timeout=10.0)
        assert client.timeout.total == 10.0
        assert client._session is None

    @pytest.mark.asyncio
    async def test_session_property_creates_session(self):
        client = HTTPClient()
        session = client.session
        assert isinstance(session, aiohttp.ClientSession)
        assert client._session is session
        await client.close()

    @pytest.mark.asyncio
    async def test_context_manager_closes_session(self):
        async with HTTPClient() as client:
            session = client.session

        assert session.closed

    @pytest.mark.asyncio
    async def test_close_idempotent(self):
        client = HTTPClient()
        await client.close()
        await client.close()


class TestHTTPClientGetJson:
    """Test get_json response handling."""

    @pytest.mark.asyncio
    async def test_returns_decoded_body(self):
        client, session = client_with(response=mock_response(json_data={"count": 3}))

        result = await client.get_json("https://host/query", params={"f": "json"})

        assert result == {"count": 3}
        session.get.assert_called_once_with(
            "https://host/query", params={"f": "json"}, headers=None
        )

    @pytest.mark.asyncio
    async def test_non_2xx_raises_status_error_with_snippet(self):
        body = "x" * 2000
        client, _ = client_with(response=mock_response(status=503, text=body))

        with pytest.raises(HttpStatusError) as excinfo:
            await client.get_json("https://host/query")

        assert excinfo.value.status_code == 503
        assert excinfo.value.url == "https://host/query"
        assert str(excinfo.value).startswith("HTTP 503: ")
        assert len(excinfo.value.body) == 500

    @pytest.mark.asyncio
    async def test_error_body_decoded_leniently(self):
        response = mock_response(status=502, text="bad gateway")
        client, _ = client_with(response=response)

        with pytest.raises(HttpStatusError):
            await client.get_json("https://host/query")

        response.text.assert_awaited_once_with(errors="replace")

    @pytest.mark.asyncio
    async def test_undecodable_error_body_keeps_status(self):
        async def handler(request):
            return web.Response(status=502, body=b"\xff\xfe bad gateway \x80")

        app = web.Application()
        app.router.add_get("/query", handler)

        async with test_utils.TestServer(app) as server, HTTPClient() as client:
            with pytest.raises(HttpStatusError) as excinfo:
                await client.get_json(str(server.make_url("/query")))

        assert excinfo.value.status_code == 502
        assert "bad gateway" in excinfo.value.body
        assert str(excinfo.value).startswith("HTTP 502: ")

    @pytest.mark.asyncio
    async def test_client_error_becomes_transient(self):
        client, _ = client_with(get_side_effect=aiohttp.ClientConnectionError("reset"))

        with pytest.raises(TransientNetworkError) as excinfo:
            await client.get_json("https://host/query")

        assert excinfo.value.url == "https://host/query"
        assert isinstance(excinfo.value.__cause__, aiohttp.ClientConnectionError)

    @pytest.mark.asyncio
    async def test_timeout_becomes_transient(self):
        client, _ = client_with(get_side_effect=asyncio.TimeoutError())

        with pytest.raises(TransientNetworkError, match="timed out"):
            await client.get_json("https://host/query")

    @pytest.mark.asyncio
    async def test_invalid_json_raises_format_error(self):
        client, _ = client_with(response=mock_response(json_error=ValueError("bad json")))

        with pytest.raises(ResponseFormatError):
            await client.get_json("https://host/query")

    @pytest.mark.asyncio
    async def test_relative_url_joined_with_base_url(self):
        client, session = client_with(
            response=mock_response(json_data=[]), base_url="https://api.example.com"
        )

        await client.get_json("/resource/abc.json")

        assert session.get.call_args.args[0] == "https://api.example.com/resource/abc.json"

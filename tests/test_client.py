from __future__ import annotations

import httpx
import pytest

from core.client import RelayClient
from core.exceptions import RelayError

URL = "https://relay.example/exec"


def _client(handler) -> RelayClient:
    return RelayClient(URL, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_call_sends_action_as_query_param():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json={"status": "success", "message": "API refrescada."})

    async with _client(handler) as client:
        data = await client.call("refresh_api")
    assert seen == {"action": "refresh_api"}
    assert data["message"] == "API refrescada."


@pytest.mark.asyncio
async def test_fetch_range_returns_values():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["range"] == "API!A1:B20"
        return httpx.Response(200, json={"status": "success", "message": "OK", "values": [["a", "b"]]})

    async with _client(handler) as client:
        assert await client.fetch_range("API!A1:B20") == [["a", "b"]]


@pytest.mark.asyncio
async def test_fetch_range_without_values_is_empty():
    async with _client(lambda r: httpx.Response(200, json={"status": "success"})) as client:
        assert await client.fetch_range("API!A1:B20") == []


@pytest.mark.asyncio
async def test_http_error_status_raises():
    async with _client(lambda r: httpx.Response(500, text="boom")) as client:
        with pytest.raises(RelayError) as exc:
            await client.call("get_api", range="API!A1:B2")
    assert str(exc.value) == "WebApp respondió 500"
    assert exc.value.status_code == 500


@pytest.mark.asyncio
async def test_application_error_raises_with_message():
    body = {"status": "error", "message": "Faltan hojas. Ejecuta setup_api primero."}
    async with _client(lambda r: httpx.Response(200, json=body)) as client:
        with pytest.raises(RelayError, match="Faltan hojas"):
            await client.call("refresh_api")


@pytest.mark.asyncio
async def test_non_json_body_raises():
    async with _client(lambda r: httpx.Response(200, text="<html>login</html>")) as client:
        with pytest.raises(RelayError, match="no JSON"):
            await client.call("setup_api")


@pytest.mark.asyncio
async def test_transport_failure_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(RelayError, match="WebApp no disponible"):
            await client.call("setup_api")


@pytest.mark.asyncio
async def test_missing_url_raises():
    async with RelayClient("") as client:
        with pytest.raises(RelayError, match="Falta WEBAPP_URL"):
            await client.call("setup_api")

"""Tests for HttpClientDriver."""

from __future__ import annotations

import json

import httpx
import pytest

from remfs.drivers.http_client.http_client import HttpClientDriver, HttpClientError
from remfs.kernel.ports.api_call import APICall

# ---------------------------------------------------------------------------
# Protocol conformance
# ---------------------------------------------------------------------------


def test_protocol_conformance() -> None:
    """HttpClientDriver satisfies the APICall protocol."""
    driver = HttpClientDriver()
    assert isinstance(driver, APICall)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _json_response(body: object, status: int = 200) -> httpx.Response:
    """Build a mock httpx.Response with JSON body."""
    return httpx.Response(
        status_code=status,
        json=body,
        request=httpx.Request("GET", "https://files.example.com"),
    )


def _text_response(text: str, status: int = 200) -> httpx.Response:
    """Build a mock httpx.Response with text body."""
    return httpx.Response(
        status_code=status,
        text=text,
        headers={"content-type": "text/plain"},
        request=httpx.Request("GET", "https://files.example.com"),
    )


class MockTransport(httpx.AsyncBaseTransport):
    """Transport that returns a pre-configured response."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.last_request = request
        return self._response


class RecordingTransport(httpx.AsyncBaseTransport):
    """Transport that records requests and returns configured responses."""

    def __init__(self, responses: list[httpx.Response] | None = None) -> None:
        self._responses = responses or [_json_response({"ok": True})]
        self._call_count = 0
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        idx = min(self._call_count, len(self._responses) - 1)
        self._call_count += 1
        return self._responses[idx]


class TimeoutTransport(httpx.AsyncBaseTransport):
    """Transport that always times out."""

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)


def _make_driver(
    transport: httpx.AsyncBaseTransport,
    **kwargs: object,
) -> HttpClientDriver:
    """Create a driver with an injected transport (no real HTTP calls)."""
    driver = HttpClientDriver(**kwargs)
    driver._transport = transport
    return driver


# ---------------------------------------------------------------------------
# GET
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_json() -> None:
    transport = MockTransport(_json_response([["a"], ["b"]]))
    driver = _make_driver(transport)

    result = await driver.aget("https://files.example.com/files/index")

    assert result["status_code"] == 200
    assert result["body"] == [["a"], ["b"]]
    assert "content-type" in result["headers"]
    await driver.aclose()


@pytest.mark.asyncio
async def test_get_text_response() -> None:
    transport = MockTransport(_text_response("hello world"))
    driver = _make_driver(transport)

    result = await driver.aget("https://files.example.com/text")

    assert result["body"] == "hello world"
    await driver.aclose()


# ---------------------------------------------------------------------------
# POST
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_post_json() -> None:
    transport = RecordingTransport([_json_response({"payload": 1}, status=201)])
    driver = _make_driver(transport, raise_for_status=False)

    result = await driver.apost(
        "https://files.example.com/files/records",
        json={"uuids": ["x"]},
    )

    assert result["status_code"] == 201
    assert result["body"] == {"payload": 1}
    assert transport.requests[0].method == "POST"
    assert json.loads(transport.requests[0].content) == {"uuids": ["x"]}
    await driver.aclose()


# ---------------------------------------------------------------------------
# Base URL and query parameters
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_base_url() -> None:
    transport = RecordingTransport()
    driver = _make_driver(transport, base_url="https://files.example.com")

    await driver.aget("/files/index")

    assert str(transport.requests[0].url) == "https://files.example.com/files/index"
    await driver.aclose()


@pytest.mark.asyncio
async def test_default_params_on_every_request() -> None:
    transport = RecordingTransport()
    driver = _make_driver(
        transport, base_url="https://files.example.com", params={"auth": "secret"}
    )

    await driver.aget("/files/index")
    await driver.apost("/files/update", json={"updates": []})

    for request in transport.requests:
        assert request.url.params["auth"] == "secret"
    await driver.aclose()


@pytest.mark.asyncio
async def test_per_request_params_merge_with_defaults() -> None:
    transport = RecordingTransport()
    driver = _make_driver(transport, params={"auth": "secret"})

    await driver.aget("https://files.example.com/search", params={"q": "test"})

    params = transport.requests[0].url.params
    assert params["auth"] == "secret"
    assert params["q"] == "test"
    await driver.aclose()


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_default_headers() -> None:
    transport = RecordingTransport()
    driver = _make_driver(transport, headers={"X-Client": "remfs"})

    await driver.aget("https://files.example.com/data")

    assert transport.requests[0].headers.get("x-client") == "remfs"
    await driver.aclose()


@pytest.mark.asyncio
async def test_per_request_headers_override() -> None:
    transport = RecordingTransport()
    driver = _make_driver(transport, headers={"X-Client": "default"})

    await driver.aget("https://files.example.com/data", headers={"X-Client": "override"})

    assert transport.requests[0].headers.get("x-client") == "override"
    await driver.aclose()


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_raise_for_status_4xx() -> None:
    transport = MockTransport(_json_response({"error": "bad credential"}, status=401))
    driver = _make_driver(transport, raise_for_status=True)

    with pytest.raises(HttpClientError) as exc_info:
        await driver.aget("https://files.example.com/files/index")

    assert exc_info.value.status_code == 401
    assert exc_info.value.body == {"error": "bad credential"}
    await driver.aclose()


@pytest.mark.asyncio
async def test_raise_for_status_5xx() -> None:
    transport = MockTransport(_json_response({"error": "server error"}, status=503))
    driver = _make_driver(transport)

    with pytest.raises(HttpClientError) as exc_info:
        await driver.apost("https://files.example.com/files/update", json={"updates": []})

    assert exc_info.value.status_code == 503
    await driver.aclose()


@pytest.mark.asyncio
async def test_no_raise_for_status() -> None:
    transport = MockTransport(_json_response({"error": "not found"}, status=404))
    driver = _make_driver(transport, raise_for_status=False)

    result = await driver.aget("https://files.example.com/missing")

    assert result["status_code"] == 404
    assert result["body"] == {"error": "not found"}
    await driver.aclose()


@pytest.mark.asyncio
async def test_timeout_propagates() -> None:
    driver = _make_driver(TimeoutTransport(), timeout=0.5)

    with pytest.raises(httpx.TimeoutException):
        await driver.aget("https://files.example.com/slow")
    await driver.aclose()


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_lazy_client_creation() -> None:
    driver = HttpClientDriver()
    assert driver._client is None

    client = driver._get_client()
    assert client is not None
    assert driver._client is client
    await driver.aclose()


@pytest.mark.asyncio
async def test_aclose_idempotent() -> None:
    driver = HttpClientDriver()
    await driver.aclose()
    assert driver._client is None


@pytest.mark.asyncio
async def test_aclose_releases_client() -> None:
    transport = RecordingTransport()
    driver = _make_driver(transport)

    await driver.aget("https://files.example.com/data")
    assert driver._client is not None

    await driver.aclose()
    assert driver._client is None

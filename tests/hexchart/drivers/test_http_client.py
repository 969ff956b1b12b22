"""Tests for HttpClientDriver."""

from __future__ import annotations

import httpx
import pytest

from hexchart.drivers.http_client import HttpClientDriver
from hexchart.kernel.exceptions import HttpClientError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _driver(handler, **kwargs: object) -> HttpClientDriver:
    """Create a driver backed by httpx.MockTransport (no real HTTP calls)."""
    return HttpClientDriver(transport=httpx.MockTransport(handler), **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@pytest.mark.asyncio()
async def test_get_json() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"title": "Thanks!"})

    driver = _driver(handler, base_url="https://api.example.com")
    result = await driver.aget("/posts/1", params={"q": "x"})
    await driver.aclose()

    assert result["status_code"] == 200
    assert result["body"] == {"title": "Thanks!"}
    assert str(requests[0].url) == "https://api.example.com/posts/1?q=x"


@pytest.mark.asyncio()
async def test_get_text_body() -> None:
    driver = _driver(lambda request: httpx.Response(200, text="plain"))

    result = await driver.aget("https://example.com/")

    assert result["body"] == "plain"


@pytest.mark.asyncio()
async def test_default_headers_are_sent() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    driver = _driver(handler, headers={"X-Client": "hexchart"})
    await driver.aget("https://example.com/")

    assert seen[0].headers["X-Client"] == "hexchart"


# ---------------------------------------------------------------------------
# Status handling
# ---------------------------------------------------------------------------


@pytest.mark.asyncio()
async def test_error_status_raises() -> None:
    driver = _driver(lambda request: httpx.Response(503, json={"detail": "down"}))

    with pytest.raises(HttpClientError) as exc_info:
        await driver.aget("https://example.com/")

    assert exc_info.value.status_code == 503
    assert exc_info.value.body == {"detail": "down"}


@pytest.mark.asyncio()
async def test_error_status_returned_when_not_raising() -> None:
    driver = _driver(lambda request: httpx.Response(404, text="nope"), raise_for_status=False)

    result = await driver.aget("https://example.com/")

    assert result["status_code"] == 404
    assert result["body"] == "nope"


@pytest.mark.asyncio()
async def test_aclose_is_safe_before_use() -> None:
    driver = HttpClientDriver()

    await driver.aclose()

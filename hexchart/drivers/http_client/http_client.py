"""Async HTTP driver for effects that report back into a running machine.

An effect such as ``startSubmission`` in :mod:`hexchart.stdlib.newsletter`
hands its request to :class:`HttpClientDriver` and sends the outcome to the
service as a follow-up event once the response arrives.
"""

from __future__ import annotations

from typing import Any

import httpx

from hexchart.kernel.exceptions import HttpClientError
from hexchart.kernel.logging import get_logger

logger = get_logger(__name__)

_JSON_MEDIA_TYPE = "application/json"


def _decode_body(response: httpx.Response) -> Any:
    if _JSON_MEDIA_TYPE not in response.headers.get("content-type", ""):
        return response.text
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpClientDriver:
    """Thin wrapper over one lazily opened :class:`httpx.AsyncClient`.

    Every call returns ``{"status_code": int, "headers": dict, "body": Any}``
    where ``body`` is decoded JSON when the server says so and text otherwise.

    Parameters
    ----------
    base_url : str
        Prefix joined to relative request URLs.
    timeout : float
        Per-request timeout in seconds.
    headers : dict[str, str] | None
        Headers sent with every request.
    raise_for_status : bool
        When True a non-2xx status raises :class:`HttpClientError` instead of
        being returned.
    transport : httpx.AsyncBaseTransport | None
        Replacement transport, ``httpx.MockTransport`` in tests.

    Examples
    --------
    ::

        http = HttpClientDriver(base_url="https://jsonplaceholder.typicode.com")
        reply = await http.aget("/posts/1")
        title = reply["body"]["title"]
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        raise_for_status: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_options: dict[str, Any] = {
            "base_url": base_url,
            "timeout": timeout,
            "headers": dict(headers or {}),
        }
        if transport is not None:
            self._client_options["transport"] = transport
        self._raise_for_status = raise_for_status
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(**self._client_options)
        return self._client

    async def request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        """Send one request and return the decoded reply."""
        logger.debug("{method} {url}", method=method, url=url)
        response = await self.client.request(method, url, **kwargs)
        reply = {
            "status_code": response.status_code,
            "headers": dict(response.headers),
            "body": _decode_body(response),
        }
        if self._raise_for_status and not response.is_success:
            raise HttpClientError(
                status_code=response.status_code,
                body=reply["body"],
                message=f"HTTP {response.status_code}: {reply['body']}",
            )
        return reply

    async def aget(
        self, url: str, params: dict[str, Any] | None = None, **kwargs: Any
    ) -> dict[str, Any]:
        return await self.request("GET", url, params=params, **kwargs)

    async def aclose(self) -> None:
        """Close the pooled client; the next call opens a fresh one."""
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

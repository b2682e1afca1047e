"""HTTP transport - Sends HttpRequest descriptors and applies the status policy.

The client talks to the network only through the Transport protocol, so a
test (or a caller with special needs) can substitute any object with async
``get``/``post`` methods. HttpxTransport is the default implementation.

Status policy (GeoReport v2 servers answer errors with 4xx/5xx bodies):
    GET   anything other than 200 is an UpstreamError
    POST  anything >= 300 is an UpstreamError
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx

from open311.errors import TransportError, UpstreamError
from open311.models import HttpRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class Transport(Protocol):
    """What the client needs from an HTTP library."""

    async def get(self, url: str, params: Mapping[str, Any]) -> tuple[int, str]:
        ...

    async def post(
        self, url: str, params: Mapping[str, Any], form: Mapping[str, Any]
    ) -> tuple[int, str]:
        ...


class HttpxTransport:
    """Transport backed by httpx.AsyncClient.

    Usage:
        async with HttpxTransport(timeout=10.0) as transport:
            status, body = await transport.get(url, {"jurisdiction_id": "dc.gov"})

    A client passed in by the caller is used as-is and left open on close().
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get(self, url: str, params: Mapping[str, Any]) -> tuple[int, str]:
        return await self._request("GET", url, params=params)

    async def post(
        self, url: str, params: Mapping[str, Any], form: Mapping[str, Any]
    ) -> tuple[int, str]:
        return await self._request("POST", url, params=params, data=form)

    async def _request(
        self,
        method: str,
        url: str,
        params: Mapping[str, Any],
        data: Mapping[str, Any] | None = None,
    ) -> tuple[int, str]:
        try:
            response = await self._client.request(
                method,
                url,
                params=dict(params) if params else None,
                data=dict(data) if data is not None else None,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"{method} {url} timed out: {e}") from e
        except httpx.ConnectError as e:
            raise TransportError(f"{method} {url} connection error: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"{method} {url} request error: {e}") from e
        return response.status_code, response.text


async def send(transport: Transport, request: HttpRequest) -> str:
    """Send *request* and return the body of a successful response.

    Raises:
        UpstreamError: If the status is not a success under the status policy.
        TransportError: If the transport could not complete the request.
    """
    logger.debug("%s %s", request.method, request.url)

    if request.method == "POST":
        status_code, body = await transport.post(request.url, request.query, request.form or {})
        failed = status_code >= 300
    else:
        status_code, body = await transport.get(request.url, request.query)
        failed = status_code != 200

    logger.debug("%s %s -> %d", request.method, request.url, status_code)
    if failed:
        logger.warning(
            "Open311 API returned %d for %s %s", status_code, request.method, request.url
        )
        raise UpstreamError(status_code, body)
    return body

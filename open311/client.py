"""Client Facade - The Open311 GeoReport v2 client.

Usage:
    async with Open311("baltimore") as baltimore:
        services = await baltimore.service_list()
        definition = await baltimore.service_definition(services[0]["service_code"])

Every operation issues at most one HTTP request. Results come back in the
JSON dialect's shape whatever the configured format (see normalizer.py).

Error contract, identical for all operations:
- Without a callback, the coroutine returns the result or raises an
  Open311Error.
- With a callback (plain function or coroutine function), the callback is
  called exactly once with ``(None, result)`` or ``(error, None)``. The
  coroutine then returns the result, or None after an error was delivered.
- InvalidArguments is a programming error and is always raised.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Mapping
from typing import Any, Callable
from urllib.parse import quote

from pydantic import ValidationError

from open311 import arguments, request_builder
from open311.cities import CityTable
from open311.config_loader import city_settings
from open311.discovery import discover
from open311.errors import InvalidArguments, MissingDiscoveryUrl, Open311Error
from open311.models import ClientConfig, DiscoveryDocument, DiscoveryOptions, ResponseFormat
from open311.normalizer import Shape, normalize
from open311.transport import HttpxTransport, Transport, send

logger = logging.getLogger(__name__)

Callback = Callable[[Open311Error | None, Any], Any]


class Open311:
    """Client for one Open311 endpoint.

    Args:
        options: A known city identifier (e.g. ``"baltimore"``), a ClientConfig,
            or a mapping of ClientConfig fields.
        transport: HTTP transport. Defaults to an HttpxTransport owned (and
            closed) by this client.
        cities: City table used to resolve a city identifier. Defaults to the
            packaged table.

    Raises:
        UnknownCity: If *options* is a city identifier not in the table.
        InvalidArguments: If *options* is not a valid configuration.
    """

    def __init__(
        self,
        options: str | ClientConfig | Mapping[str, Any],
        transport: Transport | None = None,
        cities: CityTable | None = None,
    ) -> None:
        if isinstance(options, str):
            self._config = ClientConfig.model_validate(city_settings(options, cities))
        elif isinstance(options, ClientConfig):
            self._config = options.model_copy()
        else:
            try:
                self._config = ClientConfig.model_validate(dict(options))
            except ValidationError as e:
                raise InvalidArguments(f"Invalid Open311 options: {e}") from e

        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport()

    async def __aenter__(self) -> "Open311":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            await self._transport.aclose()

    def __repr__(self) -> str:
        return (
            f"Open311(endpoint={self.endpoint!r}, format={self.format.value!r}, "
            f"jurisdiction={self.jurisdiction!r})"
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def endpoint(self) -> str | None:
        return self._config.endpoint

    @endpoint.setter
    def endpoint(self, value: str | None) -> None:
        self._config.endpoint = value

    @property
    def format(self) -> ResponseFormat:
        return self._config.format

    @format.setter
    def format(self, value: ResponseFormat | str) -> None:
        self._config.format = value

    @property
    def jurisdiction(self) -> str | None:
        return self._config.jurisdiction

    @jurisdiction.setter
    def jurisdiction(self, value: str | None) -> None:
        self._config.jurisdiction = value

    @property
    def api_key(self) -> str | None:
        return self._config.api_key

    @api_key.setter
    def api_key(self, value: str | None) -> None:
        self._config.api_key = value

    @property
    def discovery_url(self) -> str | None:
        return self._config.discovery_url

    @discovery_url.setter
    def discovery_url(self, value: str | None) -> None:
        self._config.discovery_url = value

    @property
    def name(self) -> str | None:
        return self._config.name

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def service_discovery(
        self,
        options: DiscoveryOptions | Mapping[str, Any] | Callback | None = None,
        callback: Callback | None = None,
    ) -> DiscoveryDocument | None:
        """Fetch the discovery document.

        With ``cache=True`` the selected endpoint and its preferred format
        are stored on this client. The jurisdiction is never changed.
        See http://wiki.open311.org/Service_Discovery
        """
        if callable(options) and callback is None:
            options, callback = None, options
        discovery_options = _discovery_options(options)
        return await self._complete(self._discover(discovery_options), callback)

    async def service_list(self, callback: Callback | None = None) -> list[dict[str, Any]] | None:
        """List the services (issue categories) offered by the endpoint."""
        return await self._complete(self._get("services", Shape.SERVICE_LIST), callback)

    async def service_definition(
        self, service_code: str, callback: Callback | None = None
    ) -> dict[str, Any] | None:
        """Fetch the attributes a service expects on submission."""
        path = f"services/{_segment(service_code)}"
        return await self._complete(self._get(path, Shape.SERVICE_DEFINITION), callback)

    async def submit_request(
        self, data: Mapping[str, Any], callback: Callback | None = None
    ) -> list[dict[str, Any]] | None:
        """Submit a new service request.

        ``data["attributes"]`` may hold a ``{code: value}`` map; it is sent as
        ``attribute[code]=value`` form fields. Requires an API key. Batch
        services answer with a ``token`` instead of a ``service_request_id``;
        exchange it with token().
        """
        return await self._complete(self._post("requests", data), callback)

    async def token(self, token: str, callback: Callback | None = None) -> Any:
        """Exchange a submission token for a service request id."""
        path = f"tokens/{_segment(token)}"
        return await self._complete(self._get(path, Shape.TOKEN), callback)

    async def service_requests(self, *args: Any, callback: Callback | None = None) -> Any:
        """Query service requests.

        Accepts an optional id (or list of ids), an optional filter map and an
        optional callback; see arguments.py for the supported shapes. A single
        id fetches ``requests/{id}``; anything else queries ``requests``.
        """
        resolved = arguments.resolve(*args)
        if resolved.callback is not None and callback is not None:
            raise InvalidArguments("Callback given both positionally and by keyword")
        callback = callback or resolved.callback

        if resolved.id_filter is not None:
            operation = self._get(
                f"requests/{_segment(resolved.id_filter)}",
                Shape.SERVICE_REQUEST,
                resolved.query_filters,
            )
        else:
            operation = self._get("requests", Shape.SERVICE_REQUESTS, resolved.query_filters)
        return await self._complete(operation, callback)

    service_request = service_requests

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _get(
        self, path: str, shape: Shape, query_filters: Mapping[str, Any] | None = None
    ) -> Any:
        fmt = self._config.format
        request = request_builder.build("GET", path, self._config, query_filters=query_filters)
        body = await send(self._transport, request)
        return normalize(body, fmt, shape)

    async def _post(self, path: str, data: Mapping[str, Any]) -> Any:
        fmt = self._config.format
        request = request_builder.build("POST", path, self._config, form_data=data)
        body = await send(self._transport, request)
        return normalize(body, fmt, Shape.SUBMISSION)

    async def _discover(self, options: DiscoveryOptions) -> DiscoveryDocument:
        if not self._config.discovery_url:
            raise MissingDiscoveryUrl("No discovery URL configured")
        return await discover(self._config.discovery_url, options, self._transport, self._config)

    async def _complete(self, operation: Awaitable[Any], callback: Callback | None) -> Any:
        """Await *operation* and report its outcome under the error contract."""
        if callback is None:
            return await operation

        try:
            result = await operation
        except InvalidArguments:
            raise
        except Open311Error as e:
            logger.debug("Delivering %s to callback", type(e).__name__)
            await _call(callback, e, None)
            return None

        await _call(callback, None, result)
        return result


def _discovery_options(options: Any) -> DiscoveryOptions:
    if options is None:
        return DiscoveryOptions()
    if isinstance(options, DiscoveryOptions):
        return options
    if isinstance(options, Mapping):
        try:
            return DiscoveryOptions.model_validate(dict(options))
        except ValidationError as e:
            raise InvalidArguments(f"Invalid discovery options: {e}") from e
    raise InvalidArguments(f"Invalid discovery options: {type(options).__name__}")


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


async def _call(callback: Callback, error: Open311Error | None, result: Any) -> None:
    outcome = callback(error, result)
    if inspect.isawaitable(outcome):
        await outcome

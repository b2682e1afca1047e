"""Endpoint Discovery Resolver - Finds a usable base URL from a discovery document.

A discovery document lists a jurisdiction's endpoints, each tagged with the
specification it implements, a deployment type (production/test), its URL and
the content types it serves. When asked to cache, the resolver filters the
list by specification and type, picks one by index and stores its URL and
preferred format on the client configuration.

Discovery documents never carry a jurisdiction_id; callers that need one must
configure it themselves.

Concurrency: the configuration is updated in one synchronous step after the
document has been fetched. Other operations running concurrently on the same
client see either the old or the new endpoint/format; nothing orders them.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from pydantic import ValidationError

from open311.errors import MalformedResponse, NoMatchingEndpoint
from open311.models import (
    ClientConfig,
    DiscoveryDocument,
    DiscoveryEndpoint,
    DiscoveryOptions,
    HttpRequest,
    ResponseFormat,
)
from open311.normalizer import Shape, normalize
from open311.transport import Transport, send

logger = logging.getLogger(__name__)


async def discover(
    discovery_url: str,
    options: DiscoveryOptions,
    transport: Transport,
    config: ClientConfig | None = None,
) -> DiscoveryDocument:
    """Fetch and parse a discovery document; with ``options.cache``, apply it.

    Raises:
        UpstreamError: If the discovery URL does not answer 200.
        MalformedResponse: If the document cannot be parsed.
        NoMatchingEndpoint: If caching and no endpoint matches the selection.
    """
    body = await send(transport, HttpRequest(method="GET", url=discovery_url))
    data = normalize(body, discovery_format(discovery_url), Shape.DISCOVERY)

    try:
        document = DiscoveryDocument.model_validate(data)
    except ValidationError as e:
        raise MalformedResponse(f"Invalid discovery document: {e}") from e

    if options.cache and config is not None:
        apply_endpoint(config, select_endpoint(document, options))

    return document


def discovery_format(discovery_url: str) -> ResponseFormat:
    """Infer the document format from the URL's file extension.

    The discovery document is independent of the client's own format, so
    ``config.format`` is not consulted. Only ``.xml`` selects XML.
    """
    path = urlsplit(discovery_url).path
    if path.lower().endswith(".xml"):
        return ResponseFormat.XML
    return ResponseFormat.JSON


def select_endpoint(document: DiscoveryDocument, options: DiscoveryOptions) -> DiscoveryEndpoint:
    """Pick ``options.index`` among endpoints matching specification and type exactly."""
    matches = [
        endpoint
        for endpoint in document.endpoints
        if endpoint.specification == options.specification
        and endpoint.type == options.type.value
    ]
    if not matches:
        raise NoMatchingEndpoint(
            f"No {options.type.value} endpoint for specification {options.specification!r}"
        )
    if options.index >= len(matches):
        raise NoMatchingEndpoint(
            f"Endpoint index {options.index} out of range: "
            f"{len(matches)} {options.type.value} endpoint(s) match {options.specification!r}"
        )
    return matches[options.index]


def apply_endpoint(config: ClientConfig, endpoint: DiscoveryEndpoint) -> None:
    """Store *endpoint*'s URL and preferred format on *config*."""
    config.endpoint = ensure_trailing_slash(endpoint.url)
    config.format = preferred_format(endpoint.formats)
    logger.info("Using discovered endpoint %s (%s)", config.endpoint, config.format.value)


def ensure_trailing_slash(url: str) -> str:
    """Paths are appended directly to the endpoint, so it must end with '/'."""
    if url.endswith("/"):
        return url
    return url + "/"


def preferred_format(formats: list[str]) -> ResponseFormat:
    """JSON when any advertised content type is JSON, otherwise XML."""
    if any("json" in content_type.lower() for content_type in formats):
        return ResponseFormat.JSON
    return ResponseFormat.XML

"""Client library for the Open311 GeoReport v2 API."""

from open311.client import Open311
from open311.errors import (
    InvalidArguments,
    MalformedResponse,
    MissingCredential,
    MissingDiscoveryUrl,
    MissingEndpoint,
    NoMatchingEndpoint,
    Open311Error,
    TransportError,
    UnknownCity,
    UpstreamError,
)
from open311.models import ClientConfig, DiscoveryDocument, DiscoveryOptions, ResponseFormat

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "DiscoveryDocument",
    "DiscoveryOptions",
    "InvalidArguments",
    "MalformedResponse",
    "MissingCredential",
    "MissingDiscoveryUrl",
    "MissingEndpoint",
    "NoMatchingEndpoint",
    "Open311",
    "Open311Error",
    "ResponseFormat",
    "TransportError",
    "UnknownCity",
    "UpstreamError",
]

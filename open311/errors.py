"""Exceptions raised by the Open311 client.

Every failure an operation can report derives from Open311Error so callers
can catch the whole family in one place.
"""

from __future__ import annotations


class Open311Error(Exception):
    """Base class for Open311 client errors."""


class MissingCredential(Open311Error):
    """Raised when a submission is attempted without an API key."""


class MissingDiscoveryUrl(Open311Error):
    """Raised when service discovery is requested but no discovery URL is set."""


class MissingEndpoint(Open311Error):
    """Raised when a request is built before an endpoint is known."""


class UnknownCity(Open311Error, KeyError):
    """Raised when a city identifier is not in the city table."""

    def __init__(self, city_id: str) -> None:
        super().__init__(city_id)
        self.city_id = city_id

    def __str__(self) -> str:
        return f"Unknown city: {self.city_id!r}"


class InvalidArguments(Open311Error, TypeError):
    """Raised when a call shape cannot be resolved. This is a programming error."""


class UpstreamError(Open311Error):
    """Raised when the API answers with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(
            f"There was an error connecting to the Open311 API: {status_code}"
        )
        self.status_code = status_code
        self.body = body


class MalformedResponse(Open311Error):
    """Raised when a response body cannot be parsed or lacks its document structure."""


class NoMatchingEndpoint(Open311Error):
    """Raised when discovery finds no endpoint for the requested selection."""


class TransportError(Open311Error):
    """Raised when the request could not be sent (connection error, timeout, etc.)."""

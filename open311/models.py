"""Internal data models for the Open311 client.

All models use Pydantic v2. Response payloads (services, service definitions,
service requests) are deliberately NOT modelled here: they are returned as
plain dicts and lists in the shape of the upstream JSON dialect, which is what
the normalizer produces for both wire formats.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


DEFAULT_SPECIFICATION = "http://wiki.open311.org/GeoReport_v2"


# =============================================================================
# Client Configuration
# =============================================================================


class ResponseFormat(str, Enum):
    """Wire format used for URL suffixing and response parsing."""

    JSON = "json"
    XML = "xml"


class ClientConfig(BaseModel):
    """Per-client settings, owned by exactly one Open311 instance.

    Assignment is validated so that toggling ``format`` to an unsupported
    value fails immediately instead of on the next request.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    endpoint: str | None = Field(default=None, description="Base URL, e.g. http://x/open311/v2/")
    format: ResponseFormat = Field(default=ResponseFormat.JSON, description="json or xml")
    jurisdiction: str | None = Field(default=None, description="jurisdiction_id query value")
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("api_key", "apiKey"),
        description="API key sent with submissions",
    )
    discovery_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("discovery_url", "discovery"),
        description="Service discovery document URL",
    )
    name: str | None = Field(default=None, description="Human-readable city name")

    @field_validator("jurisdiction", "api_key", mode="before")
    @classmethod
    def empty_is_unset(cls, v: Any) -> Any:
        # Only explicitly supplied, non-empty values count as set.
        if v == "":
            return None
        return v


# =============================================================================
# Request Dispatch Models
# =============================================================================


class HttpRequest(BaseModel):
    """A fully specified outbound request, produced without any I/O."""

    model_config = ConfigDict(extra="forbid")

    method: str = Field(description="GET or POST")
    url: str = Field(description="Absolute URL including the format suffix")
    query: dict[str, Any] = Field(default_factory=dict, description="Query string parameters")
    form: dict[str, Any] | None = Field(
        default=None, description="Form-encoded body (POST only)"
    )


class ResolvedArguments(BaseModel):
    """Canonical form of the overloaded service request query call."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    id_filter: str | int | None = Field(
        default=None, description="Single request id used as a path segment"
    )
    query_filters: dict[str, Any] = Field(default_factory=dict, description="Query filters")
    callback: Callable[..., Any] | None = Field(default=None, description="Completion callback")


# =============================================================================
# Service Discovery Models
# =============================================================================


class EndpointType(str, Enum):
    """Deployment type of a discovered endpoint."""

    PRODUCTION = "production"
    TEST = "test"


class DiscoveryOptions(BaseModel):
    """How to pick an endpoint from a discovery document."""

    model_config = ConfigDict(extra="forbid")

    cache: bool = Field(default=False, description="Store the chosen endpoint on the client")
    type: EndpointType = Field(default=EndpointType.PRODUCTION, description="production or test")
    specification: str = Field(default=DEFAULT_SPECIFICATION, description="Specification URL")
    index: int = Field(default=0, ge=0, description="Position among the matching endpoints")


class DiscoveryEndpoint(BaseModel):
    """One endpoint listed in a discovery document."""

    model_config = ConfigDict(extra="allow")

    specification: str
    url: str
    type: str
    formats: list[str] = Field(default_factory=list)
    changeset: str | None = None


class DiscoveryDocument(BaseModel):
    """A jurisdiction's service discovery document.

    Discovery does not carry a jurisdiction_id; that must be configured
    separately.
    """

    model_config = ConfigDict(extra="allow")

    changeset: str | None = None
    contact: str | None = None
    key_service: str | None = None
    endpoints: list[DiscoveryEndpoint] = Field(default_factory=list)


# =============================================================================
# City Table
# =============================================================================


class City(BaseModel):
    """Preset settings for a known city."""

    model_config = ConfigDict(extra="forbid")

    name: str
    endpoint: str | None = None
    discovery: str | None = None
    jurisdiction: str | None = None
    vendor: str | None = None

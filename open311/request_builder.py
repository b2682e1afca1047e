"""Request Builder - Turns a logical operation into a concrete HttpRequest.

The builder does no I/O. It only combines the operation (method, path,
optional form body and query filters) with the client configuration:

- URL = endpoint + path + "." + format
- ``jurisdiction_id`` is added to the query unless the caller supplied one
- submissions (POST) require an API key, which is added to the form body
- an ``attributes`` map in the form body is flattened into
  ``attribute[<code>]=<value>`` fields, as GeoReport v2 expects
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from open311.errors import InvalidArguments, MissingCredential, MissingEndpoint
from open311.models import ClientConfig, HttpRequest


def build(
    method: str,
    path: str,
    config: ClientConfig,
    form_data: Mapping[str, Any] | None = None,
    query_filters: Mapping[str, Any] | None = None,
) -> HttpRequest:
    """Build the request for *path* under the client's current configuration.

    Caller mappings are copied, never modified.

    Raises:
        MissingEndpoint: If no endpoint is configured.
        MissingCredential: If *method* is POST and no API key is configured.
    """
    method = method.upper()
    if method == "POST" and config.api_key is None:
        raise MissingCredential("Submitting a service request requires an API key")
    if not config.endpoint:
        raise MissingEndpoint(
            "No endpoint configured; set one or run service discovery with cache=True"
        )

    query = dict(query_filters or {})
    if config.jurisdiction is not None:
        query.setdefault("jurisdiction_id", config.jurisdiction)

    form: dict[str, Any] | None = None
    if method == "POST":
        form = flatten_attributes(form_data or {})
        form["api_key"] = config.api_key

    return HttpRequest(
        method=method,
        url=f"{config.endpoint}{path}.{config.format.value}",
        query=query,
        form=form,
    )


def flatten_attributes(data: Mapping[str, Any]) -> dict[str, Any]:
    """Expand ``{"attributes": {"code": value}}`` into ``attribute[code]`` fields.

    Raises:
        InvalidArguments: If ``attributes`` is present but not a mapping.

    Example:
        >>> flatten_attributes({"service_code": "001", "attributes": {"color": "blue"}})
        {'service_code': '001', 'attribute[color]': 'blue'}
    """
    form = {key: value for key, value in data.items() if key != "attributes"}
    attributes = data.get("attributes") or {}
    if not isinstance(attributes, Mapping):
        raise InvalidArguments(
            f"attributes must be a mapping of code to value, got {type(attributes).__name__}"
        )
    for code, value in attributes.items():
        form[f"attribute[{code}]"] = value
    return form

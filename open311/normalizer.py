"""Wire Format Normalizer - Turns JSON and XML bodies into one canonical shape.

The Open311 JSON dialect is already shaped like the canonical model, so JSON
bodies are parsed and checked, and only service definitions get their
``attributes``/``values`` filled in. The XML dialect wraps every collection in
an extra element (``<services><service>...``) and, once parsed generically,
cannot distinguish one child from a list of one. Each response shape
therefore has its own unwrap rule below; the generic parser in xml_body.py
stays shape-agnostic.

Canonical shapes:
    SERVICE_LIST        list of service dicts
    SERVICE_DEFINITION  dict; ``attributes`` is a list; each attribute's
                        ``values`` is a non-empty list or None (never [])
    SUBMISSION          non-empty list; each entry has service_request_id or token
    SERVICE_REQUESTS    list of request dicts
    SERVICE_REQUEST     the request node as-is (dict for one, list for many)
    TOKEN               same as SERVICE_REQUEST
    DISCOVERY           dict; ``endpoints`` and each endpoint's ``formats`` are lists
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from enum import Enum
from typing import Any

from open311.errors import MalformedResponse
from open311.models import ResponseFormat
from open311.xml_body import xml_to_dict


class Shape(str, Enum):
    """Which operation a response belongs to."""

    SERVICE_LIST = "service_list"
    SERVICE_DEFINITION = "service_definition"
    SUBMISSION = "submission"
    SERVICE_REQUESTS = "service_requests"
    SERVICE_REQUEST = "service_request"
    TOKEN = "token"
    DISCOVERY = "discovery"


# Open311 booleans arrive as the text "true"/"false" in XML.
_BOOLEAN_FIELDS = frozenset({"metadata", "variable", "required"})

_LIST_SHAPES = frozenset({Shape.SERVICE_LIST, Shape.SERVICE_REQUESTS})
_OBJECT_SHAPES = frozenset({Shape.SERVICE_DEFINITION, Shape.DISCOVERY})


def normalize(body: str | bytes, fmt: ResponseFormat | str, shape: Shape) -> Any:
    """Parse *body* according to *fmt* and bring it into the canonical *shape*.

    Raises:
        MalformedResponse: If the body does not parse, or the outer document
            structure expected for *shape* is missing.
    """
    if ResponseFormat(fmt) is ResponseFormat.XML:
        return _normalize_xml(body, shape)
    return _normalize_json(body, shape)


def as_list(node: Any) -> list[Any]:
    """Resolve an object-or-array tree node into a list.

    None (an empty wrapper) becomes ``[]``, a single object becomes a
    one-element list, and a list is returned unchanged.
    """
    if node is None:
        return []
    if isinstance(node, list):
        return node
    return [node]


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def _normalize_json(body: str | bytes, shape: Shape) -> Any:
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedResponse(f"Invalid JSON in {shape.value} response: {e}") from e

    if shape in _LIST_SHAPES and not isinstance(data, list):
        raise MalformedResponse(
            f"Expected a JSON array for {shape.value}, got {type(data).__name__}"
        )
    if shape in _OBJECT_SHAPES and not isinstance(data, dict):
        raise MalformedResponse(
            f"Expected a JSON object for {shape.value}, got {type(data).__name__}"
        )

    if shape is Shape.SERVICE_DEFINITION:
        data["attributes"] = as_list(data.get("attributes"))
        for attribute in data["attributes"]:
            if isinstance(attribute, dict):
                attribute["values"] = attribute.get("values") or None
    elif shape is Shape.SUBMISSION:
        data = _check_submission(as_list(data))

    return data


# ---------------------------------------------------------------------------
# XML
# ---------------------------------------------------------------------------


def _normalize_xml(body: str | bytes, shape: Shape) -> Any:
    try:
        tree = xml_to_dict(body)
    except ET.ParseError as e:
        raise MalformedResponse(f"Invalid XML in {shape.value} response: {e}") from e

    if shape is Shape.SERVICE_LIST:
        services = _unwrap(tree, "services", "service")
        return [_coerce_booleans(service) for service in as_list(services)]

    if shape is Shape.SERVICE_DEFINITION:
        return _service_definition(_document(tree, "service_definition"))

    if shape is Shape.DISCOVERY:
        return _discovery(_document(tree, "discovery"))

    requests = _unwrap(tree, "service_requests", "request")

    if shape is Shape.SUBMISSION:
        return _check_submission(as_list(requests))

    if shape is Shape.SERVICE_REQUESTS:
        return as_list(requests)

    # SERVICE_REQUEST and TOKEN: one element stays an object, many stay a list.
    if requests is None:
        return []
    return requests


def _document(tree: dict[str, Any], root: str) -> dict[str, Any]:
    """Return the root element's content, or fail if the root is wrong."""
    if root not in tree:
        found = next(iter(tree), None)
        raise MalformedResponse(f"Expected <{root}> document, got <{found}>")
    content = tree[root]
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise MalformedResponse(f"<{root}> has no child elements")
    return content


def _unwrap(tree: dict[str, Any], root: str, child: str) -> Any:
    """Return the repeated *child* node(s) under the *root* wrapper."""
    return _document(tree, root).get(child)


def _coerce_booleans(node: Any) -> Any:
    if isinstance(node, dict):
        for key in _BOOLEAN_FIELDS & node.keys():
            value = node[key]
            if isinstance(value, str) and value.lower() in ("true", "false"):
                node[key] = value.lower() == "true"
    return node


def _service_definition(definition: dict[str, Any]) -> dict[str, Any]:
    wrapper = definition.get("attributes")
    attributes = as_list(wrapper.get("attribute")) if isinstance(wrapper, dict) else []

    for attribute in attributes:
        if not isinstance(attribute, dict):
            raise MalformedResponse("<attribute> has no child elements")
        _coerce_booleans(attribute)
        values = attribute.get("values")
        choices = as_list(values.get("value")) if isinstance(values, dict) else []
        # "No choices defined" is None, never an empty list.
        attribute["values"] = choices or None

    definition["attributes"] = attributes
    return definition


def _discovery(document: dict[str, Any]) -> dict[str, Any]:
    wrapper = document.get("endpoints")
    endpoints = as_list(wrapper.get("endpoint")) if isinstance(wrapper, dict) else []

    for endpoint in endpoints:
        if not isinstance(endpoint, dict):
            raise MalformedResponse("<endpoint> has no child elements")
        formats = endpoint.get("formats")
        endpoint["formats"] = (
            as_list(formats.get("format")) if isinstance(formats, dict) else []
        )

    document["endpoints"] = endpoints
    return document


def _check_submission(entries: list[Any]) -> list[Any]:
    if not entries:
        raise MalformedResponse("Submission response contains no request")
    for entry in entries:
        if not isinstance(entry, dict) or (
            entry.get("service_request_id") is None and entry.get("token") is None
        ):
            raise MalformedResponse(
                "Submission response entry has neither service_request_id nor token"
            )
    return entries

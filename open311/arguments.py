"""Argument Resolver for the overloaded service request query.

``Open311.service_requests`` accepts several call shapes, all of which are
resolved here, in one place, into a ResolvedArguments triple:

    service_requests()                          -> (None, {}, None)
    service_requests(callback)                  -> (None, {}, callback)
    service_requests({"status": "open"}, cb)    -> (None, {"status": "open"}, cb)
    service_requests("abc", cb)                 -> ("abc", {}, cb)
    service_requests(12345, {"f": 1}, cb)       -> (12345, {"f": 1}, cb)
    service_requests(["a", "b"], cb)            -> (None, {"service_request_id": "a,b"}, cb)

A single id becomes a path segment (``requests/abc``). A sequence of ids is
a query filter on the list endpoint, never a path segment. An empty string
id counts as no id and queries the list endpoint.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from open311.errors import InvalidArguments
from open311.models import ResolvedArguments


MULTI_ID_KEY = "service_request_id"


def resolve(*args: Any) -> ResolvedArguments:
    """Resolve up to three positional arguments into (id, filters, callback).

    Raises:
        InvalidArguments: If the arguments match none of the supported shapes.
    """
    if len(args) > 3:
        raise InvalidArguments(f"Expected at most 3 arguments, got {len(args)}")
    if not args:
        return ResolvedArguments()

    first, rest = args[0], list(args[1:])

    if callable(first):
        _expect_empty(rest)
        return ResolvedArguments(callback=first)

    if isinstance(first, Mapping):
        callback = _take_callback(rest)
        _expect_empty(rest)
        return ResolvedArguments(query_filters=dict(first), callback=callback)

    if first is None or first == "" or _is_id(first):
        filters = _take_filters(rest)
        callback = _take_callback(rest)
        _expect_empty(rest)
        id_filter = None if first == "" else first
        return ResolvedArguments(id_filter=id_filter, query_filters=filters, callback=callback)

    if isinstance(first, Sequence) and not isinstance(first, (str, bytes, bytearray)):
        ids = list(first)
        if not ids or not all(_is_id(i) for i in ids):
            raise InvalidArguments(
                "A sequence of service request ids must be non-empty and contain "
                "only non-empty strings or integers"
            )
        filters = _take_filters(rest)
        filters[MULTI_ID_KEY] = ",".join(str(i) for i in ids)
        callback = _take_callback(rest)
        _expect_empty(rest)
        return ResolvedArguments(query_filters=filters, callback=callback)

    raise InvalidArguments(
        f"Cannot use {type(first).__name__} as a service request id, filter map or callback"
    )


def _is_id(value: Any) -> bool:
    # bool is an int subclass but never a request id.
    if isinstance(value, str):
        return value != ""
    return isinstance(value, int) and not isinstance(value, bool)


def _take_filters(rest: list[Any]) -> dict[str, Any]:
    """Pop a filter map off the front of *rest*, or default to {}."""
    if rest and (rest[0] is None or isinstance(rest[0], Mapping)):
        return dict(rest.pop(0) or {})
    return {}


def _take_callback(rest: list[Any]) -> Any:
    if not rest:
        return None
    candidate = rest.pop(0)
    if candidate is not None and not callable(candidate):
        raise InvalidArguments(
            f"Expected a callback, got {type(candidate).__name__}"
        )
    return candidate


def _expect_empty(rest: list[Any]) -> None:
    if rest:
        raise InvalidArguments(
            f"Unexpected extra argument of type {type(rest[0]).__name__}"
        )

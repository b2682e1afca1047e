"""Generic XML tree reader for Open311 response bodies.

GeoReport v2 XML bodies are plain element trees (``<services><service>...``)
with text leaves and almost no attributes. This module reads such a body
into nested dicts, lists and strings and knows nothing about which Open311
operation produced it. A repeated tag turns into a list but a single one does
not, so ``<services>`` holding one ``<service>`` looks different from one
holding two; normalizer.py settles that per response shape.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

TEXT_KEY = "#text"


def xml_to_dict(xml: str | bytes) -> dict[str, Any]:
    """Read an Open311 XML body into ``{root_tag: content}``.

    Tags lose their namespace, so ``{urn:x}request`` is read as ``request``.

    Raises:
        ET.ParseError: If *xml* is not well-formed.
    """
    if isinstance(xml, str):
        # Bodies start with <?xml ... encoding="utf-8"?>, which fromstring
        # only accepts on bytes.
        xml = xml.encode("utf-8")
    root = ET.fromstring(xml)
    return {_local_name(root.tag): _read_element(root)}


def _local_name(tag: str) -> str:
    return tag.rpartition("}")[2]


def _read_element(element: ET.Element) -> dict[str, Any] | str | None:
    """Content of one element.

    ``<service_code>001</service_code>`` reads as ``"001"`` and an empty
    ``<values/>`` as None. An element with children reads as a dict keyed by
    child tag, plus ``@name`` for XML attributes and ``#text`` for any text
    mixed in with the children.
    """
    node: dict[str, Any] = {
        f"@{name}": value
        for name, value in element.attrib.items()
        if not name.startswith(("xmlns", "{"))
    }

    repeated: set[str] = set()
    for child in element:
        tag = _local_name(child.tag)
        value = _read_element(child)
        if tag in repeated:
            node[tag].append(value)
        elif tag in node:
            node[tag] = [node[tag], value]
            repeated.add(tag)
        else:
            node[tag] = value

    text = (element.text or "").strip()
    if not node:
        return text or None
    if text:
        node[TEXT_KEY] = text
    return node

"""Pytest configuration and fixtures for open311 tests.

This file provides:
- RecordingTransport: a fake Transport that replays canned responses and
  records every call
- Sample response bodies in both wire formats, describing the same data
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import pytest

from open311.models import ClientConfig


class RecordingTransport:
    """Transport double. Responses are consumed in order; calls are recorded.

    Each call is stored as (method, url, params, form).
    """

    def __init__(self, *responses: tuple[int, str]) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict[str, Any], dict[str, Any] | None]] = []

    def queue(self, status_code: int, body: str) -> None:
        self.responses.append((status_code, body))

    async def get(self, url: str, params: Mapping[str, Any]) -> tuple[int, str]:
        self.calls.append(("GET", url, dict(params), None))
        return self.responses.pop(0)

    async def post(
        self, url: str, params: Mapping[str, Any], form: Mapping[str, Any]
    ) -> tuple[int, str]:
        self.calls.append(("POST", url, dict(params), dict(form)))
        return self.responses.pop(0)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def dc_config() -> ClientConfig:
    return ClientConfig(
        endpoint="http://app.311.dc.gov/CWI/Open311/v2/",
        format="xml",
        jurisdiction="dc.gov",
    )


# =============================================================================
# Service list
# =============================================================================

SERVICE_ONE = {
    "service_code": "001",
    "service_name": "Cans left out 24x7",
    "description": "Garbage or recycling cans that have been left out for more than 24 hours.",
    "metadata": True,
    "type": "realtime",
    "keywords": "lorem, ipsum, dolor",
    "group": "sanitation",
}

SERVICE_TWO = {
    "service_code": "002",
    "service_name": "Construction plate shifted",
    "description": "Metal construction plate covering the street or sidewalk has been moved.",
    "metadata": False,
    "type": "batch",
    "keywords": "lorem, ipsum, dolor",
    "group": "street",
}

SERVICES_XML_ONE = """<?xml version="1.0" encoding="utf-8"?>
<services>
  <service>
    <service_code>001</service_code>
    <service_name>Cans left out 24x7</service_name>
    <description>Garbage or recycling cans that have been left out for more than 24 hours.</description>
    <metadata>true</metadata>
    <type>realtime</type>
    <keywords>lorem, ipsum, dolor</keywords>
    <group>sanitation</group>
  </service>
</services>
"""

SERVICES_XML_TWO = """<?xml version="1.0" encoding="utf-8"?>
<services>
  <service>
    <service_code>001</service_code>
    <service_name>Cans left out 24x7</service_name>
    <description>Garbage or recycling cans that have been left out for more than 24 hours.</description>
    <metadata>true</metadata>
    <type>realtime</type>
    <keywords>lorem, ipsum, dolor</keywords>
    <group>sanitation</group>
  </service>
  <service>
    <service_code>002</service_code>
    <service_name>Construction plate shifted</service_name>
    <description>Metal construction plate covering the street or sidewalk has been moved.</description>
    <metadata>false</metadata>
    <type>batch</type>
    <keywords>lorem, ipsum, dolor</keywords>
    <group>street</group>
  </service>
</services>
"""

SERVICES_JSON_ONE = json.dumps([SERVICE_ONE])
SERVICES_JSON_TWO = json.dumps([SERVICE_ONE, SERVICE_TWO])


# =============================================================================
# Service definition
# =============================================================================

DEFINITION_XML = """<?xml version="1.0" encoding="utf-8"?>
<service_definition>
  <service_code>DMV66</service_code>
  <attributes>
    <attribute>
      <variable>true</variable>
      <code>WHISHETN</code>
      <datatype>singlevaluelist</datatype>
      <required>true</required>
      <datatype_description></datatype_description>
      <description>What is the ticket/tag/DL number?</description>
      <values>
        <value>
          <key>123</key>
          <name>Ford</name>
        </value>
        <value>
          <key>124</key>
          <name>Chrysler</name>
        </value>
      </values>
    </attribute>
    <attribute>
      <variable>true</variable>
      <code>COLOR</code>
      <datatype>singlevaluelist</datatype>
      <required>false</required>
      <description>What color is it?</description>
      <values>
        <value>
          <key>blue</key>
          <name>Blue</name>
        </value>
      </values>
    </attribute>
    <attribute>
      <variable>true</variable>
      <code>NOTES</code>
      <datatype>text</datatype>
      <required>false</required>
      <description>Anything else?</description>
      <values/>
    </attribute>
  </attributes>
</service_definition>
"""

DEFINITION_JSON = json.dumps(
    {
        "service_code": "DMV66",
        "attributes": [
            {
                "variable": True,
                "code": "WHISHETN",
                "datatype": "singlevaluelist",
                "required": True,
                "datatype_description": None,
                "description": "What is the ticket/tag/DL number?",
                "values": [
                    {"key": "123", "name": "Ford"},
                    {"key": "124", "name": "Chrysler"},
                ],
            },
            {
                "variable": True,
                "code": "COLOR",
                "datatype": "singlevaluelist",
                "required": False,
                "description": "What color is it?",
                "values": [{"key": "blue", "name": "Blue"}],
            },
            {
                "variable": True,
                "code": "NOTES",
                "datatype": "text",
                "required": False,
                "description": "Anything else?",
                "values": None,
            },
        ],
    }
)


# =============================================================================
# Submission, tokens, service requests
# =============================================================================

SUBMISSION_TOKEN_XML = """<?xml version="1.0" encoding="utf-8"?>
<service_requests>
  <request>
    <token>12345</token>
  </request>
</service_requests>
"""

SUBMISSION_ID_XML = """<?xml version="1.0" encoding="utf-8"?>
<service_requests>
  <request>
    <service_request_id>293944</service_request_id>
    <service_notice>The City will inspect and require the responsible party to correct within 24 hours and/or issue a Correction Notice or Notice of Violation of the Public Works Code</service_notice>
    <account_id/>
  </request>
</service_requests>
"""

SUBMISSION_TOKEN_JSON = json.dumps([{"token": "12345"}])

TOKEN_XML = """<?xml version="1.0" encoding="utf-8"?>
<service_requests>
  <request>
    <service_request_id>638344</service_request_id>
    <token>12345</token>
  </request>
</service_requests>
"""

TOKEN_JSON = json.dumps([{"service_request_id": "638344", "token": "12345"}])

REQUEST_638344 = {
    "service_request_id": "638344",
    "status": "closed",
    "status_notes": "Duplicate request.",
    "service_name": "Sidewalk and Curb Issues",
    "service_code": "006",
    "description": None,
    "agency_responsible": None,
    "service_notice": None,
    "requested_datetime": "2010-04-19T06:37:38-08:00",
    "updated_datetime": "2010-04-19T06:37:38-08:00",
    "expected_datetime": "2010-04-19T06:37:38-08:00",
    "address": "8TH AVE and JUDAH ST",
    "address_id": "545483",
    "zipcode": "94122",
    "lat": "37.762221815",
    "long": "-122.4651145",
    "media_url": "http://city.gov.s3.amazonaws.com/requests/media/638344.jpg",
}

REQUESTS_XML_ONE = """<?xml version="1.0" encoding="utf-8"?>
<service_requests>
  <request>
    <service_request_id>638344</service_request_id>
    <status>closed</status>
    <status_notes>Duplicate request.</status_notes>
    <service_name>Sidewalk and Curb Issues</service_name>
    <service_code>006</service_code>
    <description></description>
    <agency_responsible></agency_responsible>
    <service_notice></service_notice>
    <requested_datetime>2010-04-19T06:37:38-08:00</requested_datetime>
    <updated_datetime>2010-04-19T06:37:38-08:00</updated_datetime>
    <expected_datetime>2010-04-19T06:37:38-08:00</expected_datetime>
    <address>8TH AVE and JUDAH ST</address>
    <address_id>545483</address_id>
    <zipcode>94122</zipcode>
    <lat>37.762221815</lat>
    <long>-122.4651145</long>
    <media_url>http://city.gov.s3.amazonaws.com/requests/media/638344.jpg</media_url>
  </request>
</service_requests>
"""

REQUESTS_XML_TWO = """<?xml version="1.0" encoding="utf-8"?>
<service_requests>
  <request>
    <service_request_id>638344</service_request_id>
    <status>closed</status>
  </request>
  <request>
    <service_request_id>638349</service_request_id>
    <status>open</status>
  </request>
</service_requests>
"""

REQUESTS_JSON_ONE = json.dumps([REQUEST_638344])


# =============================================================================
# Discovery
# =============================================================================

SPEC_V2 = "http://wiki.open311.org/GeoReport_v2"

DISCOVERY_JSON = json.dumps(
    {
        "changeset": "2011-04-05T17:48:34Z",
        "contact": "You can email or call for assistance api@yourcity.net +1 (555) 555-5555",
        "key_service": "You can request a key here: http://api.yourcity.net/request_key.html",
        "endpoints": [
            {
                "specification": SPEC_V2,
                "url": "http://open311.sfgov.org/dev/v2",
                "changeset": "2011-04-20T17:48:34Z",
                "type": "production",
                "formats": ["text/xml", "application/json"],
            },
            {
                "specification": SPEC_V2,
                "url": "http://open311.sfgov.org/dev/v2/",
                "changeset": "2011-04-20T17:48:34Z",
                "type": "test",
                "formats": ["text/xml"],
            },
        ],
    }
)

DISCOVERY_XML = """<?xml version="1.0" encoding="utf-8"?>
<discovery>
  <changeset>2011-04-05T17:48:34Z</changeset>
  <contact>You can email or call for assistance api@yourcity.net +1 (555) 555-5555</contact>
  <key_service>You can request a key here: http://api.yourcity.net/request_key.html</key_service>
  <endpoints>
    <endpoint>
      <specification>http://wiki.open311.org/GeoReport_v2</specification>
      <url>http://open311.sfgov.org/dev/v2</url>
      <changeset>2011-04-20T17:48:34Z</changeset>
      <type>production</type>
      <formats>
        <format>text/xml</format>
      </formats>
    </endpoint>
  </endpoints>
</discovery>
"""

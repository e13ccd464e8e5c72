import asyncio
from unittest.mock import patch, MagicMock

import pytest

from nextbus_agency.client import NextBusClient

LOWER_BOUND = 40.0
UPPER_BOUND = 40.6

ROUTE_CONFIG_XML = """<?xml version="1.0" encoding="utf-8" ?>
<body copyright="All data copyright Rutgers University 2024.">
  <route tag="a" title="A" color="ff0000" oppositeColor="ffffff">
    <stop tag="S1" title="Scott Hall" lat="40.5002" lon="-74.4480" stopId="1001"/>
    <stop tag="S2" title="Hill Center" lat="40.5218" lon="-74.4633"/>
    <stop tag="S3" title="Stadium" lat="40.5136" lon="-74.4650"/>
    <stop tag="S1" title="Scott Hall" lat="40.5002" lon="-74.4480"/>
    <direction tag="loop" title="Loop" useForUI="true">
      <stop tag="S1"/>
      <stop tag="S2"/>
      <stop tag="S3"/>
    </direction>
  </route>
  <route tag="b" title="B">
    <stop tag="S2" title="Hill Center" lat="40.5218" lon="-74.4633"/>
    <stop tag="S4" title="Hill Center" lat="40.5220" lon="-74.4636"/>
    <stop tag="S5" title="Busch Suites" lat="40.5240" lon="-74.4590"/>
    <direction tag="out" title="To Busch Campus" useForUI="true">
      <stop tag="S2"/>
      <stop tag="S5"/>
    </direction>
    <direction tag="in" title="To College Avenue" useForUI="true">
      <stop tag="S4"/>
    </direction>
  </route>
  <route tag="nwk" title="Newark Express">
    <stop tag="S1" title="Scott Hall" lat="40.5002" lon="-74.4480"/>
    <stop tag="S9" title="Newark Penn Station" lat="40.7347" lon="-74.1644"/>
  </route>
</body>
"""


def make_response(body, status=200):
    response = MagicMock()
    response.status_code = status
    response.content = body.encode("utf-8") if isinstance(body, str) else body
    return response


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def route_config_xml():
    return ROUTE_CONFIG_XML


@pytest.fixture
def cached_client():
    client = NextBusClient()
    with patch('requests.get', return_value=make_response(ROUTE_CONFIG_XML)):
        run(client.cache_agency('rutgers', LOWER_BOUND, UPPER_BOUND))
    return client

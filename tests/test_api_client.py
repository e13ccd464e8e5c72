from unittest.mock import patch

import pytest
import requests

from nextbus_agency.api_client import APIClient, parse_document
from nextbus_agency.errors import ParseFailure, TransportFailure

from conftest import make_response, run


def test_parse_document_returns_root():
    root = parse_document(b'<body><lastTime time="1"/></body>')
    assert root.tag == "body"
    assert root.find("lastTime").get("time") == "1"


def test_parse_document_rejects_invalid_xml():
    with pytest.raises(ParseFailure) as excinfo:
        parse_document(b"<body>")
    assert excinfo.value.name == "ParseError"


def test_query_builds_url_and_params():
    client = APIClient(base_url="http://feed.example/service", timeout=5)
    with patch('requests.get', return_value=make_response("<body/>")) as mock_get:
        client.query("rutgers", "predictionsForMultiStops", "&stops=a|null|S1", {"t": "9"})
    args, kwargs = mock_get.call_args
    assert args[0] == "http://feed.example/service?stops=a|null|S1"
    assert kwargs["params"] == [("command", "predictionsForMultiStops"), ("a", "rutgers"), ("t", "9")]
    assert kwargs["timeout"] == 5


def test_query_without_fragment_uses_base_url():
    client = APIClient(base_url="http://feed.example/service")
    with patch('requests.get', return_value=make_response("<body/>")) as mock_get:
        client.query("rutgers", "vehicleLocations")
    assert mock_get.call_args[0][0] == "http://feed.example/service"


def test_fetch_runs_query():
    client = APIClient(base_url="http://feed.example/service")
    with patch('requests.get', return_value=make_response("<body><route tag='a'/></body>")):
        root = run(client.fetch("rutgers", "routeConfig", "&terse"))
    assert root.find("route").get("tag") == "a"


def test_timeout_is_transport_failure():
    client = APIClient()
    with patch('requests.get', side_effect=requests.exceptions.Timeout("slow")):
        with pytest.raises(TransportFailure) as excinfo:
            client.query("rutgers", "routeConfig")
    assert excinfo.value.status is None
    assert isinstance(excinfo.value.__cause__, requests.exceptions.Timeout)

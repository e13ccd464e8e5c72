from unittest.mock import patch

import pytest

from nextbus_agency.client import NextBusClient
from nextbus_agency.errors import NoCacheError, TransportFailure
from nextbus_agency.records import ActiveSnapshot

from conftest import make_response, run

NOW = 1700000000.0

VEHICLES_XML = """<body>
  <vehicle id="4001" routeTag="b" dirTag="out" lat="40.5230" lon="-74.4600" secsSinceReport="12"
           predictable="true" heading="90" speedKmHr="24"/>
  <vehicle id="4002" routeTag="b" dirTag="in" lat="40.5210" lon="-74.4630" secsSinceReport="40"
           predictable="false" heading="270" speedKmHr="0"/>
  <vehicle id="4100" routeTag="nwk" dirTag="out" lat="40.7300" lon="-74.1700" secsSinceReport="5"
           predictable="true" heading="0" speedKmHr="60"/>
  <lastTime time="1700000000123"/>
</body>"""


def test_vehicle_locations_groups_in_bound_vehicles(cached_client):
    with patch('requests.get', return_value=make_response(VEHICLES_XML)):
        vehicles = run(cached_client.vehicle_locations())
    assert list(vehicles) == ["b"]
    assert vehicles["b"][0] == {
        "id": "4001", "dirtag": "out", "lat": "40.5230", "lon": "-74.4600",
        "predictable": True, "heading": "90", "since": "12", "speed": "24",
    }
    assert vehicles["b"][1]["predictable"] is False


def test_vehicle_locations_sends_last_time(cached_client):
    with patch('requests.get', return_value=make_response(VEHICLES_XML)) as mock_get:
        run(cached_client.vehicle_locations())
        run(cached_client.vehicle_locations(route="b"))
        run(cached_client.vehicle_locations(reset_time=True))
    first, second, third = [dict(call[1]["params"]) for call in mock_get.call_args_list]
    assert "t" not in first
    assert second == {"command": "vehicleLocations", "a": "rutgers", "r": "b", "t": "1700000000123"}
    assert "t" not in third
    assert cached_client.get_agency_cache().last_vehicle_time == "1700000000123"


def test_guess_active_needs_cache():
    client = NextBusClient()
    with pytest.raises(NoCacheError):
        run(client.guess_active())


def test_guess_active_builds_snapshot(cached_client):
    with patch('requests.get', return_value=make_response(VEHICLES_XML)), \
         patch('time.time', return_value=NOW):
        snapshot = run(cached_client.guess_active())
    assert snapshot.timestamp == NOW
    assert snapshot.routes == ({"tag": "b", "title": "B"},)
    assert [s["title"] for s in snapshot.stops] == ["Busch Suites", "Hill Center"]
    assert cached_client.get_agency_cache().active is snapshot
    with pytest.raises(AttributeError):
        snapshot.timestamp = 0


def test_active_data_expires(cached_client):
    with patch('requests.get', return_value=make_response(VEHICLES_XML)), \
         patch('time.time', return_value=NOW):
        run(cached_client.guess_active())

    with patch('time.time', return_value=NOW + 1):
        assert cached_client.is_active_fresh()
        assert [r["tag"] for r in cached_client.get_routes()] == ["b"]
        assert len(cached_client.get_stops()) == 2
        assert len(cached_client.get_stops(ignore_active=True)) == 4

    with patch('time.time', return_value=NOW + 601):
        assert not cached_client.is_active_fresh()
        assert [r["tag"] for r in cached_client.get_routes()] == ["a", "b"]
        assert len(cached_client.get_stops()) == 4


def test_active_expire_time_is_configurable(cached_client):
    cached_client.set_active(ActiveSnapshot(NOW, [{"tag": "a", "title": "A"}], []))
    cached_client.set_active_expire_time(30)
    with patch('time.time', return_value=NOW + 31):
        assert not cached_client.is_active_fresh()
    cached_client.set_active_expire_time(3600)
    with patch('time.time', return_value=NOW + 31):
        assert cached_client.is_active_fresh()


def test_failed_probe_keeps_previous_snapshot(cached_client):
    previous = ActiveSnapshot(NOW, [{"tag": "a", "title": "A"}], [])
    cached_client.set_active(previous.to_dict())
    with patch('requests.get', return_value=make_response("", status=500)):
        with pytest.raises(TransportFailure):
            run(cached_client.guess_active())
    assert cached_client.get_agency_cache().active.routes == previous.routes


def test_closest_stops_prefers_fresh_active_stops(cached_client):
    # right next to Scott Hall, which is not on an active route
    lat, lon = 40.5003, -74.4481
    nearest = cached_client.closest_stops(lat, lon, 1)
    assert list(nearest) == ["Scott Hall"]

    with patch('requests.get', return_value=make_response(VEHICLES_XML)), \
         patch('time.time', return_value=NOW):
        run(cached_client.guess_active())
    with patch('time.time', return_value=NOW + 10):
        nearest = cached_client.closest_stops(lat, lon, 2)
    assert set(nearest) == {"Hill Center", "Busch Suites"}


def test_vehicle_on_uncached_route_is_skipped(cached_client):
    vehicles_xml = """<body>
      <vehicle id="5001" routeTag="zz" dirTag="out" lat="40.5100" lon="-74.4500" predictable="true"/>
      <vehicle id="4001" routeTag="a" dirTag="loop" lat="40.5100" lon="-74.4500" predictable="true"/>
      <lastTime time="1700000000123"/>
    </body>"""
    with patch('requests.get', return_value=make_response(vehicles_xml)):
        snapshot = run(cached_client.guess_active())
    assert snapshot.routes == ({"tag": "a", "title": "A"},)
    assert [s["title"] for s in snapshot.stops] == ["Hill Center", "Scott Hall", "Stadium"]

"""
Guessing which routes and stops are currently in service.

A route is active when the vehicle probe reports at least one vehicle on it
inside the latitude window; every stop on an active route is active.
"""
import logging
import time

from .agency_cache import title_key
from .errors import ParseFailure
from .records import ActiveSnapshot


def parse_vehicle_locations(root, lower_bound, upper_bound):
    """
    Returns ``(vehicles_by_route, last_time)`` from a ``vehicleLocations`` response.
    Vehicles outside the latitude bounds are dropped, and so are routes left with none.
    """
    last_time = root.find(".//lastTime")
    if last_time is None:
        raise ParseFailure("vehicleLocations response has no 'lastTime' element", data=root)

    result = {}
    for vehicle in root.iter("vehicle"):
        try:
            lat = float(vehicle.get("lat"))
        except (TypeError, ValueError):
            logging.debug(f"Vehicle {vehicle.get('id')} has no usable latitude")
            continue
        if lat < lower_bound or lat > upper_bound:
            continue
        result.setdefault(vehicle.get("routeTag"), []).append({
            "id": vehicle.get("id"),
            "dirtag": vehicle.get("dirtag") or vehicle.get("dirTag"),
            "lat": vehicle.get("lat"),
            "lon": vehicle.get("lon"),
            "predictable": vehicle.get("predictable") == "true",
            "heading": vehicle.get("heading"),
            "since": vehicle.get("secsSinceReport"),
            "speed": vehicle.get("speedKmHr"),
        })
    return result, last_time.get("time")


def estimate_active(cache, vehicles_by_route, now=None) -> ActiveSnapshot:
    """Builds a snapshot of active routes and stops, both sorted by title."""
    routes = []
    stop_titles = {}
    for route_tag in vehicles_by_route:
        route = cache.routes.get(route_tag)
        if route is None:
            logging.warning(f"Vehicle reported on route '{route_tag}' which is not in the agency cache")
            continue
        routes.append({"tag": route_tag, "title": route.title})
        for stop_tag in route.stops:
            stop_titles[cache.stops[stop_tag].title] = True

    stops = [{"title": title, "geoHash": cache.stops_by_title[title].geo_hash} for title in stop_titles]
    routes.sort(key=lambda item: title_key(item["title"]))
    stops.sort(key=lambda item: title_key(item["title"]))

    snapshot = ActiveSnapshot(time.time() if now is None else now, routes, stops)
    logging.info("Estimated %d active routes and %d active stops", len(routes), len(stops))
    return snapshot


def is_fresh(snapshot, expire_seconds, now=None) -> bool:
    if snapshot is None:
        return False
    age = (time.time() if now is None else now) - snapshot.timestamp
    return age < expire_seconds

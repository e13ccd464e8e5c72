import logging

from . import geo
from .errors import ParseFailure
from .records import AgencyCache, RouteRecord, StopRecord, TitleGroup


def title_key(title):
    """Sort key for display titles: case-insensitive, ties broken by the raw string."""
    title = title or ""
    return (title.casefold(), title)


def _latitude(stop_elem) -> float:
    try:
        return float(stop_elem.get("lat"))
    except (TypeError, ValueError) as e:
        raise ParseFailure(f"stop {stop_elem.get('tag')} has no usable latitude",
                           detail=stop_elem.get("lat")) from e


def _route_stops(route_elem, lower_bound, upper_bound):
    """
    Returns the route's stop elements keyed by stop tag in configuration order,
    or None if any stop lies outside the latitude bounds.

    Stop elements without a title are the stop listings repeated under each
    <direction> and are skipped.
    """
    stops = {}
    for stop_elem in route_elem.iter("stop"):
        if not stop_elem.get("title"):
            continue
        stop_tag = stop_elem.get("tag")
        if stop_tag in stops:
            continue
        lat = _latitude(stop_elem)
        if lat < lower_bound or lat > upper_bound:
            logging.debug(f"Route {route_elem.get('tag')} has stop {stop_tag} at {lat}, outside bounds; skipping route")
            return None
        stops[stop_tag] = stop_elem
    return stops


def build_agency_cache(root, lower_bound, upper_bound, agency=None) -> AgencyCache:
    """
    Builds the route and stop index from a parsed ``routeConfig`` document.

    Routes with any stop outside [lower_bound, upper_bound] are left out
    entirely, and so are stops that only those routes served.
    """
    cache = AgencyCache(agency)
    cache.lower_bound = lower_bound
    cache.upper_bound = upper_bound
    discarded = 0

    for route_elem in root.iter("route"):
        route_tag = route_elem.get("tag")
        stop_elems = _route_stops(route_elem, lower_bound, upper_bound)
        if stop_elems is None:
            discarded += 1
            continue

        route = RouteRecord(route_tag, route_elem.get("title", ""))
        for stop_tag, stop_elem in stop_elems.items():
            stop = cache.stops.get(stop_tag)
            if stop is None:
                stop = StopRecord(stop_tag, stop_elem.get("title"), stop_elem.get("lat"), stop_elem.get("lon"))
                cache.stops[stop_tag] = stop
            route.stops.append(stop_tag)
            stop.routes.append(route_tag)
            if stop_elem.get("stopId"):
                stop.stop_id = stop_elem.get("stopId")

        for dir_elem in route_elem.iter("direction"):
            route.directions.append({"title": dir_elem.get("title"), "tag": dir_elem.get("tag")})

        cache.routes[route_tag] = route

    combine_stops(cache)
    cache.index_routes_by_title()
    sort_listings(cache)

    logging.info("Cached agency %s: %d routes, %d stops, %d routes outside bounds",
                 agency, len(cache.routes), len(cache.stops), discarded)
    return cache


def combine_stops(cache: AgencyCache):
    """
    Groups stop tags by title so stops with identical names but different tags
    can be queried at once. Each group is geohashed from its first stop.
    """
    titles = {}
    for tag, stop in cache.stops.items():
        group = titles.get(stop.title)
        if group is None:
            group = TitleGroup(stop.title)
            titles[stop.title] = group
        group.tags.append(tag)
        if group.geo_hash is None:
            group.geo_hash = geo.encode(stop.lat, stop.lon)
    cache.stops_by_title = titles


def sort_listings(cache: AgencyCache):
    cache.sorted_stops = sorted(
        ({"title": title, "geoHash": group.geo_hash} for title, group in cache.stops_by_title.items()),
        key=lambda item: title_key(item["title"]),
    )
    cache.sorted_routes = sorted(
        ({"tag": tag, "title": route.title} for tag, route in cache.routes.items()),
        key=lambda item: title_key(item["title"]),
    )

"""
Query strings for the ``predictionsForMultiStops`` command.

Each route, stop and title group keeps the fragments built for it in its
``queries`` map, keyed by direction. A missing direction is sent to the feed
as the literal ``null`` and cached under that key.
"""
import logging

NO_DIRECTION = "null"


def direction_key(direction) -> str:
    return NO_DIRECTION if direction is None else str(direction)


def build_fragment(triples) -> str:
    """Serializes (route tag, direction, stop tag) triples as repeated ``stops`` parameters."""
    return "".join(f"&stops={route}|{direction}|{stop}" for route, direction, stop in triples)


def route_query(route, direction=None) -> str:
    """Fragment asking for every stop of ``route``, memoized on the route."""
    key = direction_key(direction)
    if key not in route.queries:
        route.queries[key] = build_fragment((route.tag, key, stop) for stop in route.stops)
        logging.debug(f"Built query for route {route.tag} direction {key}")
    return route.queries[key]


def stop_query(cache, entity, tags, direction=None) -> str:
    """
    Fragment asking for every route serving ``tags``, memoized on ``entity``
    (the StopRecord or TitleGroup the caller looked up).
    """
    key = direction_key(direction)
    if key not in entity.queries:
        entity.queries[key] = build_fragment(
            (route, key, tag) for tag in tags for route in cache.stops[tag].routes
        )
        logging.debug(f"Built query for stop(s) {tags} direction {key}")
    return entity.queries[key]

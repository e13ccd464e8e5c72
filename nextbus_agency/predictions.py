"""
Reshapes ``predictionsForMultiStops`` responses into flat lists of records.

Three shapes are produced, one per kind of query:

    by route  {title, tag, predictions}
    by stop   {direction, title, predictions}
    by pairs  {routeTitle, stopTitle, direction, predictions}

Each prediction is the raw attribute string for the requested unit, or a
``{minutes, seconds}`` dict when ``units`` is ``'both'``. A record whose
group held no prediction at all gets ``predictions = None``.
"""
import logging
from typing import List, NamedTuple

from .errors import EmptyQueryError, ParseFailure, TypeMismatch
from .queries import NO_DIRECTION
from .resolve import resolve_route, resolve_stop

UNITS = ("minutes", "seconds", "both")

# The feed has used both spellings of this attribute
NO_PREDICTION_DIRECTION_ATTRS = ("dirTitleBecauseNoPredictions", "dirTitleBecauseNoPrediction")


class DirectionBlock(NamedTuple):
    title: str
    leaves: list
    # True when the feed sent no <direction> and the title came from the group itself
    synthesized: bool


def check_units(units):
    if units not in UNITS:
        raise TypeMismatch(f"units must be one of {', '.join(UNITS)}, got {units!r}")
    return units


def prediction_value(leaf, units):
    if units == "both":
        return {"minutes": leaf.get("minutes"), "seconds": leaf.get("seconds")}
    return leaf.get(units)


def prediction_groups(root):
    groups = list(root.iter("predictions"))
    if not groups:
        logging.error("Prediction response has no 'predictions' elements")
        raise ParseFailure("response has no 'predictions' elements", detail="zero length data", data=root)
    return groups


def direction_blocks(group) -> List[DirectionBlock]:
    directions = group.findall("direction")
    if directions:
        return [DirectionBlock(d.get("title"), d.findall("prediction"), False) for d in directions]

    title = None
    for attr in NO_PREDICTION_DIRECTION_ATTRS:
        if group.get(attr) is not None:
            title = group.get(attr)
            break
    return [DirectionBlock(title, [], True)]


def normalize_route_predictions(root, route, direction=NO_DIRECTION, units="minutes"):
    """
    One record per stop group in the response, put back into the order the
    route's stops were configured in. When ``direction`` is given, predictions
    for other directions are left out.
    """
    results = []
    for group in prediction_groups(root):
        values = []
        for leaf in group.iter("prediction"):
            if direction != NO_DIRECTION and leaf.get("dirTag") != direction:
                continue
            values.append(prediction_value(leaf, units))
        results.append({
            "title": group.get("stopTitle"),
            "tag": group.get("stopTag"),
            "predictions": values or None,
        })

    sorter = route.get_sorter()
    results.sort(key=lambda record: sorter.get(record["tag"], len(sorter)))
    return results


def normalize_stop_predictions(root, units="minutes"):
    results = []
    for group in prediction_groups(root):
        route_title = group.get("routeTitle")
        for block in direction_blocks(group):
            values = [prediction_value(leaf, units) for leaf in block.leaves]
            results.append({
                "direction": block.title,
                "title": route_title,
                "predictions": values or None,
            })
    return results


def normalize_pair_predictions(root, units="both"):
    results = []
    for group in prediction_groups(root):
        route_title = group.get("routeTitle")
        stop_title = group.get("stopTitle")
        for block in direction_blocks(group):
            values = [prediction_value(leaf, units) for leaf in block.leaves]
            results.append({
                "routeTitle": route_title,
                "stopTitle": stop_title,
                "direction": block.title,
                "predictions": values or None,
            })
    return results


def resolve_pairs(cache, route_stops):
    """
    Turns ``[{'route': ..., 'stop': ...}]`` into (route tag, direction, stop tag)
    triples. Routes and stops may be tags or titles. Pairs that cannot be
    resolved are logged and dropped; stop tags the route does not serve are
    silently left out.
    """
    triples = []
    for item in route_stops:
        route_key = item.get("route")
        stop_key = item.get("stop")

        stop = resolve_stop(cache, stop_key)
        if not stop.found:
            logging.warning(f"stop '{stop_key}' not found")
            continue
        route = resolve_route(cache, route_key)
        if not route.found:
            logging.warning(f"route '{route_key}' not found")
            continue

        route_stops_tags = route.record.stops
        triples.extend(
            (route.record.tag, NO_DIRECTION, tag) for tag in stop.tags if tag in route_stops_tags
        )

    if not triples:
        raise EmptyQueryError()
    return triples

"""
Lookup of routes and stops given either a tag or a display title.
"""
from enum import Enum
from typing import Any, NamedTuple, Sequence


class ResolutionKind(Enum):
    TAG = "tag"
    TITLE_GROUP = "title"
    NOT_FOUND = "notfound"


class Resolution(NamedTuple):
    kind: ResolutionKind
    key: str
    record: Any = None
    tags: Sequence[str] = ()

    @property
    def found(self) -> bool:
        return self.kind is not ResolutionKind.NOT_FOUND


def resolve_stop(cache, stop) -> Resolution:
    """Tags win over titles; a title expands to every stop tag sharing it."""
    if stop in cache.stops:
        return Resolution(ResolutionKind.TAG, stop, cache.stops[stop], [stop])
    group = cache.stops_by_title.get(stop)
    if group is not None:
        return Resolution(ResolutionKind.TITLE_GROUP, stop, group, list(group.tags))
    return Resolution(ResolutionKind.NOT_FOUND, stop)


def resolve_route(cache, route) -> Resolution:
    if route in cache.routes:
        return Resolution(ResolutionKind.TAG, route, cache.routes[route], [route])
    record = cache.routes_by_title.get(route)
    if record is not None:
        return Resolution(ResolutionKind.TITLE_GROUP, route, record, [record.tag])
    return Resolution(ResolutionKind.NOT_FOUND, route)

from typing import Dict, List, Optional, Any


class RouteRecord:
    def __init__(self, tag, title, stops=None, directions=None, queries=None, sorter=None):
        self.tag = tag
        self.title = title
        self.stops: List[str] = list(stops or [])
        self.directions: List[Dict[str, str]] = list(directions or [])
        # direction key -> query fragment, filled on first use
        self.queries: Dict[str, str] = dict(queries or {})
        self.sorter: Optional[Dict[str, int]] = sorter

    def get_sorter(self) -> Dict[str, int]:
        """Stop tag -> position in the configured stop order, built once."""
        if self.sorter is None:
            self.sorter = {tag: index for index, tag in enumerate(self.stops)}
        return self.sorter

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag,
            "title": self.title,
            "stops": list(self.stops),
            "directions": [dict(d) for d in self.directions],
            "queries": dict(self.queries),
            "sorter": dict(self.sorter) if self.sorter is not None else None,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data["tag"], data.get("title"), data.get("stops"), data.get("directions"),
                   data.get("queries"), data.get("sorter"))

    def __repr__(self):
        return f"RouteRecord({self.tag}, {self.title}, {len(self.stops)} stops)"


class StopRecord:
    def __init__(self, tag, title, lat, lon, stop_id=None, routes=None, queries=None):
        self.tag = tag
        self.title = title
        self.lat = float(lat)
        self.lon = float(lon)
        self.stop_id = stop_id
        self.routes: List[str] = list(routes or [])
        self.queries: Dict[str, str] = dict(queries or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag,
            "title": self.title,
            "lat": self.lat,
            "lon": self.lon,
            "stopId": self.stop_id,
            "routes": list(self.routes),
            "queries": dict(self.queries),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data["tag"], data.get("title"), data["lat"], data["lon"], data.get("stopId"),
                   data.get("routes"), data.get("queries"))

    def __repr__(self):
        return f"StopRecord({self.tag}, {self.title}, {self.lat}, {self.lon})"


class TitleGroup:
    """Stop tags sharing one rider-facing title, queried as a single stop."""

    def __init__(self, title, tags=None, geo_hash=None, queries=None):
        self.title = title
        self.tags: List[str] = list(tags or [])
        self.geo_hash = geo_hash
        self.queries: Dict[str, str] = dict(queries or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "tags": list(self.tags),
            "geoHash": self.geo_hash,
            "queries": dict(self.queries),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data["title"], data.get("tags"), data.get("geoHash"), data.get("queries"))

    def __repr__(self):
        return f"TitleGroup({self.title}, {self.tags})"


class ActiveSnapshot:
    """
    Routes and stops estimated to be in service at ``timestamp`` (epoch seconds).
    Never modified after creation; a new estimate replaces it.
    """
    __slots__ = ("timestamp", "routes", "stops")

    def __init__(self, timestamp, routes, stops):
        object.__setattr__(self, "timestamp", float(timestamp))
        object.__setattr__(self, "routes", tuple(dict(r) for r in routes))
        object.__setattr__(self, "stops", tuple(dict(s) for s in stops))

    def __setattr__(self, key, value):
        raise AttributeError("ActiveSnapshot is immutable")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.timestamp,
            "routes": [dict(r) for r in self.routes],
            "stops": [dict(s) for s in self.stops],
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data["time"], data.get("routes", []), data.get("stops", []))

    def __repr__(self):
        return f"ActiveSnapshot({self.timestamp}, {len(self.routes)} routes, {len(self.stops)} stops)"


class AgencyCache:
    """
    Everything known about one agency's topology. Built in one piece by
    ``agency_cache.build_agency_cache`` and swapped in whole by the client.
    """

    def __init__(self, agency=None):
        self.agency = agency
        self.routes: Dict[str, RouteRecord] = {}
        self.stops: Dict[str, StopRecord] = {}
        self.stops_by_title: Dict[str, TitleGroup] = {}
        # title -> the same RouteRecord held in ``routes``
        self.routes_by_title: Dict[str, RouteRecord] = {}
        self.sorted_routes: List[Dict[str, str]] = []
        self.sorted_stops: List[Dict[str, str]] = []
        self.active: Optional[ActiveSnapshot] = None
        self.last_vehicle_time: Optional[str] = None
        # latitude window the cache was built with, reused by the vehicle probe
        self.lower_bound: Optional[float] = None
        self.upper_bound: Optional[float] = None

    def index_routes_by_title(self):
        self.routes_by_title = {route.title: route for route in self.routes.values()}

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form, safe to hand to ``json.dumps``."""
        return {
            "agency": self.agency,
            "routes": {tag: route.to_dict() for tag, route in self.routes.items()},
            "stops": {tag: stop.to_dict() for tag, stop in self.stops.items()},
            "stopsByTitle": {title: group.to_dict() for title, group in self.stops_by_title.items()},
            "sortedRoutes": [dict(r) for r in self.sorted_routes],
            "sortedStops": [dict(s) for s in self.sorted_stops],
            "active": self.active.to_dict() if self.active else None,
            "lastVehicleTime": self.last_vehicle_time,
            "lowerBound": self.lower_bound,
            "upperBound": self.upper_bound,
        }

    @classmethod
    def from_dict(cls, data):
        cache = cls(data.get("agency"))
        cache.routes = {tag: RouteRecord.from_dict(r) for tag, r in data.get("routes", {}).items()}
        cache.stops = {tag: StopRecord.from_dict(s) for tag, s in data.get("stops", {}).items()}
        cache.stops_by_title = {title: TitleGroup.from_dict(g)
                                for title, g in data.get("stopsByTitle", {}).items()}
        cache.index_routes_by_title()
        cache.sorted_routes = [dict(r) for r in data.get("sortedRoutes", [])]
        cache.sorted_stops = [dict(s) for s in data.get("sortedStops", [])]
        if data.get("active"):
            cache.active = ActiveSnapshot.from_dict(data["active"])
        cache.last_vehicle_time = data.get("lastVehicleTime")
        cache.lower_bound = data.get("lowerBound")
        cache.upper_bound = data.get("upperBound")
        return cache

    def __repr__(self):
        return f"AgencyCache({self.agency}, {len(self.routes)} routes, {len(self.stops)} stops)"

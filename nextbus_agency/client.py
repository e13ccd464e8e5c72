import asyncio
import logging
from typing import Optional

from . import geo
from .active import estimate_active, is_fresh, parse_vehicle_locations
from .agency_cache import build_agency_cache
from .api_client import APIClient
from .config import Config
from .errors import NoCacheError, TypeMismatch, UnknownRouteError, UnknownStopError
from .predictions import (
    check_units,
    normalize_pair_predictions,
    normalize_route_predictions,
    normalize_stop_predictions,
    resolve_pairs,
)
from .queries import build_fragment, direction_key, route_query, stop_query
from .records import ActiveSnapshot, AgencyCache
from .resolve import resolve_route, resolve_stop

PREDICT_COMMAND = "predictionsForMultiStops"


class NextBusClient:
    """
    Client for one NextBus agency.

    ``cache_agency`` downloads the agency's route configuration (a large
    document, so this takes a few seconds) and indexes it. The predictors,
    the active estimate and the nearest-stop lookup all need that cache.
    Query strings are cached on the route and stop records as they are used.

    The cache can be exported with ``get_agency_cache`` and loaded into
    another client with ``set_agency_cache``.
    """

    def __init__(self, api_client=None, active_expire_seconds=None):
        self.api_client = api_client or APIClient()
        self.agency: Optional[str] = None
        self.lower_bound = Config.LAT_LOWER_BOUND
        self.upper_bound = Config.LAT_UPPER_BOUND
        self.vehicle_last_time: Optional[str] = None
        self._cache: Optional[AgencyCache] = None
        self._rebuild_lock = asyncio.Lock()
        self.set_active_expire_time(
            Config.ACTIVE_EXPIRE_SECONDS if active_expire_seconds is None else active_expire_seconds
        )

    @property
    def is_cached(self) -> bool:
        return self._cache is not None

    def _require_cache(self) -> AgencyCache:
        if self._cache is None:
            raise NoCacheError()
        return self._cache

    async def cache_agency(self, name, lower_bound=None, upper_bound=None) -> AgencyCache:
        """
        Loads and indexes the route configuration of agency ``name``.

        Routes with a stop outside [lower_bound, upper_bound] are not cached.
        If anything fails the previous cache, if any, stays in place.
        """
        if not isinstance(name, str):
            raise TypeMismatch("agency must be a string")
        lower_bound = self.lower_bound if lower_bound is None else lower_bound
        upper_bound = self.upper_bound if upper_bound is None else upper_bound

        async with self._rebuild_lock:
            logging.info(f"Caching agency '{name}' between latitudes {lower_bound} and {upper_bound}")
            root = await self.api_client.fetch(name, "routeConfig", "&terse")
            cache = build_agency_cache(root, lower_bound, upper_bound, name)
            if name == self.agency:
                cache.last_vehicle_time = self.vehicle_last_time
            else:
                self.vehicle_last_time = None

            self._cache = cache
            self.agency = name
            self.lower_bound = lower_bound
            self.upper_bound = upper_bound
        return cache

    def get_agency_cache(self) -> Optional[AgencyCache]:
        return self._cache

    def set_agency_cache(self, data, agency_name=None):
        """
        Installs a cache produced by another client, either the AgencyCache
        itself or its ``to_dict()`` form.
        """
        cache = data if isinstance(data, AgencyCache) else AgencyCache.from_dict(data)
        agency_name = agency_name or cache.agency
        if not isinstance(agency_name, str):
            raise TypeMismatch("agency must be a string")
        cache.agency = agency_name
        self._cache = cache
        self.agency = agency_name
        self.vehicle_last_time = cache.last_vehicle_time
        if cache.lower_bound is not None:
            self.lower_bound = cache.lower_bound
        if cache.upper_bound is not None:
            self.upper_bound = cache.upper_bound

    async def route_predict(self, route, direction=None, units="minutes"):
        """
        Predictions for every stop of ``route`` (tag or title), in the route's
        stop order.

        Example:
            >>> await client.route_predict('a', None)
            [{'title': 'Scott Hall', 'tag': 'scott', 'predictions': ['8', '19', '31']},
             {'title': 'Hill Center', 'tag': 'hill', 'predictions': None}]
        """
        cache = self._require_cache()
        check_units(units)
        resolution = resolve_route(cache, route)
        if not resolution.found:
            raise UnknownRouteError(route)

        record = resolution.record
        fragment = route_query(record, direction)
        record.get_sorter()

        root = await self.api_client.fetch(self.agency, PREDICT_COMMAND, fragment)
        return normalize_route_predictions(root, record, direction_key(direction), units)

    async def stop_predict(self, stop, direction=None, units="minutes"):
        """
        Predictions for every route serving ``stop``. A title covers all stop
        tags with that title.

        Example:
            >>> await client.stop_predict('Hill Center', None)
            [{'direction': 'To Busch Student Center', 'title': 'A', 'predictions': ['7', '20']},
             {'direction': 'To Allison Road Classrooms', 'title': 'C', 'predictions': None}]
        """
        cache = self._require_cache()
        check_units(units)
        resolution = resolve_stop(cache, stop)
        if not resolution.found:
            raise UnknownStopError(stop)

        fragment = stop_query(cache, resolution.record, resolution.tags, direction)
        root = await self.api_client.fetch(self.agency, PREDICT_COMMAND, fragment)
        return normalize_stop_predictions(root, units)

    async def custom_predict(self, route_stops, units="both"):
        """
        Predictions for arbitrary ``[{'route': ..., 'stop': ...}]`` pairs. Pairs
        that don't resolve are dropped; if none are left, EmptyQueryError is
        raised without calling the feed.
        """
        cache = self._require_cache()
        check_units(units)
        fragment = build_fragment(resolve_pairs(cache, route_stops))
        logging.debug(f"url params: {fragment}")

        root = await self.api_client.fetch(self.agency, PREDICT_COMMAND, fragment)
        return normalize_pair_predictions(root, units)

    async def vehicle_locations(self, lower_bound=None, upper_bound=None, route=None, reset_time=False):
        """
        Vehicles grouped by route tag. Only vehicles reported since the previous
        call are returned, unless ``reset_time`` is set, in which case the feed
        returns the last 15 minutes.
        """
        if self.agency is None:
            raise NoCacheError()
        lower_bound = self.lower_bound if lower_bound is None else lower_bound
        upper_bound = self.upper_bound if upper_bound is None else upper_bound

        params = {}
        if route:
            params["r"] = route
        if not reset_time and self.vehicle_last_time:
            params["t"] = self.vehicle_last_time

        root = await self.api_client.fetch(self.agency, "vehicleLocations", params=params)
        vehicles, last_time = parse_vehicle_locations(root, lower_bound, upper_bound)
        self.vehicle_last_time = last_time
        if self._cache is not None:
            self._cache.last_vehicle_time = last_time
        return vehicles

    async def guess_active(self, lower_bound=None, upper_bound=None) -> ActiveSnapshot:
        """
        Estimates which routes and stops are in service from a vehicle probe and
        keeps the result as the cache's active snapshot.
        """
        cache = self._require_cache()
        vehicles = await self.vehicle_locations(lower_bound, upper_bound)
        snapshot = estimate_active(cache, vehicles)
        cache.active = snapshot
        return snapshot

    def set_active(self, active):
        """Installs an active snapshot retrieved by another client."""
        cache = self._require_cache()
        cache.active = active if isinstance(active, ActiveSnapshot) else ActiveSnapshot.from_dict(active)

    def set_active_expire_time(self, seconds):
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            raise TypeMismatch("expire time must be a number of seconds")
        self.active_expire_seconds = seconds

    def is_active_fresh(self) -> bool:
        if self._cache is None:
            return False
        return is_fresh(self._cache.active, self.active_expire_seconds)

    def get_routes(self, ignore_active=False):
        """Active routes if a fresh estimate exists, otherwise all routes; sorted by title."""
        cache = self._require_cache()
        if not ignore_active and self.is_active_fresh():
            return list(cache.active.routes)
        return list(cache.sorted_routes)

    def get_stops(self, ignore_active=False):
        cache = self._require_cache()
        if not ignore_active and self.is_active_fresh():
            return list(cache.active.stops)
        return list(cache.sorted_stops)

    def closest_stops(self, lat, lon, num=3, precision=None):
        """
        The ``num`` stop titles closest to (lat, lon), mapped to the number of
        geohash characters they share with it. Only active stops are
        considered while the active estimate is fresh.
        """
        self._require_cache()
        location = geo.encode(lat, lon)
        return geo.nearest(location, self.get_stops(), num, precision)

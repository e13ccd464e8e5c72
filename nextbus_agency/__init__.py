"""
NextBus Agency

This module provides a client for the NextBus public XML prediction feed.
It caches an agency's routes and stops once, then answers batched prediction
queries, guesses which routes are active, and finds the nearest stops.

To use, create a NextBusClient, cache an agency, then query it.

Example:
    import asyncio
    from nextbus_agency import NextBusClient

    async def main():
        rutgers = NextBusClient()
        await rutgers.cache_agency('rutgers', 40.0, 41.0)
        print(await rutgers.route_predict('a', None))
        print(await rutgers.stop_predict('Hill Center', None, units='both'))
        print(rutgers.closest_stops(40.40264, -74.384012))

    asyncio.run(main())
"""

from .client import NextBusClient
from .records import AgencyCache, ActiveSnapshot
from .errors import (
    NextBusError,
    NoCacheError,
    UnknownRouteError,
    UnknownStopError,
    EmptyQueryError,
    ParseFailure,
    TransportFailure,
    TypeMismatch,
)

__all__ = [
    'NextBusClient', 'AgencyCache', 'ActiveSnapshot',
    'NextBusError', 'NoCacheError', 'UnknownRouteError', 'UnknownStopError',
    'EmptyQueryError', 'ParseFailure', 'TransportFailure', 'TypeMismatch',
]

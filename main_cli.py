#!/usr/bin/env python3
import argparse
import asyncio
import json
import logging
import os
import sys

# Add the parent directory to the path so we can import the package
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from nextbus_agency.client import NextBusClient
from nextbus_agency.config import Config
from nextbus_agency.errors import NextBusError


def setup_logging(debug=False):
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def parse_pair(text):
    """Parse a 'route:stop' argument into a route/stop pair."""
    route, sep, stop = text.partition(":")
    if not sep or not route or not stop:
        raise argparse.ArgumentTypeError(f"expected ROUTE:STOP, got '{text}'")
    return {"route": route, "stop": stop}


def format_predictions(predictions):
    if predictions is None:
        return "no predictions"
    values = []
    for prediction in predictions:
        if isinstance(prediction, dict):
            values.append(f"{prediction['minutes']}m ({prediction['seconds']}s)")
        else:
            values.append(str(prediction))
    return ", ".join(values)


async def load_cache(client, args):
    """Load the agency cache from the cache file if there is one, otherwise fetch it."""
    if args.cache_file and os.path.exists(args.cache_file):
        with open(args.cache_file, 'r') as f:
            client.set_agency_cache(json.load(f), args.agency)
        logging.info(f"Loaded agency cache from {args.cache_file}")
        return

    print(f"📥 Caching agency '{args.agency}'...")
    cache = await client.cache_agency(args.agency, args.lower, args.upper)
    print(f"✅ Cached {len(cache.routes)} routes and {len(cache.stops)} stops")
    if args.cache_file:
        with open(args.cache_file, 'w') as f:
            json.dump(cache.to_dict(), f)
        logging.info(f"Saved agency cache to {args.cache_file}")


async def run(args):
    client = NextBusClient()
    await load_cache(client, args)

    if args.command == 'routes':
        for route in client.get_routes(ignore_active=args.all):
            print(f"  🚌 {route['title']} ({route['tag']})")
    elif args.command == 'stops':
        for stop in client.get_stops(ignore_active=args.all):
            print(f"  🚏 {stop['title']}")
    elif args.command == 'route':
        results = await client.route_predict(args.route, args.direction, args.units)
        for record in results:
            print(f"  🚏 {record['title']}: {format_predictions(record['predictions'])}")
    elif args.command == 'stop':
        results = await client.stop_predict(args.stop, args.direction, args.units)
        for record in results:
            print(f"  🚌 {record['title']} {record['direction']}: {format_predictions(record['predictions'])}")
    elif args.command == 'pairs':
        results = await client.custom_predict(args.pairs, args.units)
        for record in results:
            print(f"  🚌 {record['routeTitle']} at {record['stopTitle']} "
                  f"{record['direction']}: {format_predictions(record['predictions'])}")
    elif args.command == 'active':
        snapshot = await client.guess_active(args.lower, args.upper)
        print(f"✅ {len(snapshot.routes)} active routes, {len(snapshot.stops)} active stops:")
        for route in snapshot.routes:
            print(f"  🚌 {route['title']} ({route['tag']})")
    elif args.command == 'nearest':
        if args.active:
            await client.guess_active(args.lower, args.upper)
        nearest = client.closest_stops(args.lat, args.lon, args.count, args.precision)
        for title, score in nearest.items():
            print(f"  📍 {title} (geohash match {score})")


def main():
    parser = argparse.ArgumentParser(
        description="NextBus Agency CLI - query real-time predictions for a NextBus agency",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Predictions for every stop on route "a"
  ./main_cli.py --agency rutgers route a

  # Predictions for every route at a stop, by title
  ./main_cli.py stop "Hill Center" --units both

  # Specific route/stop pairs, keeping the agency cache on disk
  ./main_cli.py --cache-file rutgers.json pairs a:hill "REX B:Hill Center"

  # Closest stops, preferring stops on active routes
  ./main_cli.py nearest 40.40264 -74.384012 --active
        """
    )

    parser.add_argument('--debug', action='store_true', default=Config.DEBUG, help='Enable debug logging')
    parser.add_argument('--agency', type=str, default=Config.AGENCY, help='NextBus agency tag')
    parser.add_argument('--lower', type=float, help='Lowest latitude to cache (default: cache bounds or config)')
    parser.add_argument('--upper', type=float, help='Highest latitude to cache (default: cache bounds or config)')
    parser.add_argument('--cache-file', type=str, help='JSON file to load the agency cache from, or save it to')

    subparsers = parser.add_subparsers(dest='command', help='Sub-command help')

    routes_parser = subparsers.add_parser('routes', help='List routes')
    routes_parser.add_argument('--all', action='store_true', help='Ignore active route data')

    stops_parser = subparsers.add_parser('stops', help='List stops')
    stops_parser.add_argument('--all', action='store_true', help='Ignore active stop data')

    route_parser = subparsers.add_parser('route', help='Predictions for a route')
    route_parser.add_argument('route', type=str, help='Route tag or title')
    route_parser.add_argument('--direction', type=str, help='Direction tag')
    route_parser.add_argument('--units', choices=['minutes', 'seconds', 'both'], default='minutes')

    stop_parser = subparsers.add_parser('stop', help='Predictions for a stop')
    stop_parser.add_argument('stop', type=str, help='Stop tag or title')
    stop_parser.add_argument('--direction', type=str, help='Direction tag')
    stop_parser.add_argument('--units', choices=['minutes', 'seconds', 'both'], default='minutes')

    pairs_parser = subparsers.add_parser('pairs', help='Predictions for route/stop pairs')
    pairs_parser.add_argument('pairs', type=parse_pair, nargs='+', help='ROUTE:STOP pairs')
    pairs_parser.add_argument('--units', choices=['minutes', 'seconds', 'both'], default='both')

    subparsers.add_parser('active', help='Guess which routes are active')

    nearest_parser = subparsers.add_parser('nearest', help='Closest stops to a location')
    nearest_parser.add_argument('lat', type=float, help='Latitude')
    nearest_parser.add_argument('lon', type=float, help='Longitude')
    nearest_parser.add_argument('--count', type=int, default=3, help='Number of stops')
    nearest_parser.add_argument('--precision', type=int, help='Geohash characters to compare')
    nearest_parser.add_argument('--active', action='store_true', help='Estimate active stops first')

    args = parser.parse_args()
    setup_logging(args.debug)

    if not args.command:
        parser.print_help()
        return

    try:
        asyncio.run(run(args))
    except NextBusError as e:
        print(f"❌ {e.name}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
Geohash helpers for the nearest-stop lookup, built on pygeohash.
"""
from typing import Dict, Iterable

import pygeohash as pgh

from .config import Config


def encode(lat, lon, precision=12) -> str:
    return pgh.encode(float(lat), float(lon), precision=precision)


def shared_prefix(hash_a: str, hash_b: str, limit: int) -> int:
    """Number of leading geohash characters two hashes share, capped at ``limit``."""
    count = 0
    for a, b in zip(hash_a[:limit], hash_b[:limit]):
        if a != b:
            break
        count += 1
    return count


def nearest(location_hash: str, candidates: Iterable[Dict[str, str]], count=3, precision=None) -> Dict[str, int]:
    """
    Ranks ``candidates`` (dicts with ``title`` and ``geoHash``) by closeness to
    ``location_hash`` and returns the first ``count`` as an ordered mapping of
    title to shared prefix length, nearest first.

    Candidates sharing the same prefix length are ordered by haversine distance.
    """
    precision = precision or Config.GEOHASH_PRECISION
    scored = []
    for candidate in candidates:
        geo_hash = candidate.get("geoHash")
        if not geo_hash:
            continue
        score = shared_prefix(location_hash, geo_hash, precision)
        distance = pgh.geohash_haversine_distance(location_hash, geo_hash)
        scored.append((-score, distance, candidate["title"]))

    scored.sort()
    return {title: -negative_score for negative_score, _, title in scored[:count]}

#Purpose: Route distance/duration for fare calculation.
#Returns the road distance and travel time for a pickup/destination pair.
#Uses OSRM /route when a client is configured; otherwise, or when OSRM fails,
#falls back to straight-line haversine distance at an assumed average speed.
#Results are memoised briefly so repeated quotes for the same pair (one per
#vehicle class) hit OSRM once. Expired entries are dropped whenever a new
#route is stored, so the cache only holds pairs seen within the TTL.
#Best-effort by contract: get_route never raises for routing failures.

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import requests

from routing.geo import Coordinate, haversine_km
from routing.osrm_client import OSRMClient, OSRMError

logger = logging.getLogger(__name__)

SOURCE_OSRM = "osrm"
SOURCE_HAVERSINE = "haversine"

DEFAULT_AVERAGE_SPEED_KMH = 30.0
DEFAULT_CACHE_TTL_SECONDS = 120.0

CacheKey = Tuple[float, float, float, float]


@dataclass(frozen=True)
class RouteEstimate:
    distance_km: float
    duration_min: float
    source: str = SOURCE_OSRM


def haversine_route(
        pickup: Coordinate,
        destination: Coordinate,
        average_speed_kmh: float = DEFAULT_AVERAGE_SPEED_KMH,
) -> RouteEstimate:
    """Straight-line estimate: haversine distance driven at average_speed_kmh."""
    distance_km = haversine_km(pickup, destination)
    return RouteEstimate(
        distance_km=distance_km,
        duration_min=(distance_km / average_speed_kmh) * 60.0,
        source=SOURCE_HAVERSINE,
    )


class RouteService:
    """
    RouteDistanceProvider backed by an optional OSRMClient.

    Thread-safe: the cache is the only mutable state and is guarded by a lock.
    """
    def __init__(
            self,
            osrm_client: Optional[OSRMClient] = None,
            *,
            average_speed_kmh: float = DEFAULT_AVERAGE_SPEED_KMH,
            cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
            clock=time.monotonic,
    ):
        if average_speed_kmh <= 0:
            raise ValueError("average_speed_kmh must be > 0")
        self.osrm_client = osrm_client
        self.average_speed_kmh = average_speed_kmh
        self.cache_ttl_seconds = cache_ttl_seconds
        self._clock = clock
        self._cache: Dict[CacheKey, Tuple[RouteEstimate, float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _cache_key(pickup: Coordinate, destination: Coordinate) -> CacheKey:
        # 6 decimal places is ~0.1 m, plenty to tell two addresses apart
        return (
            round(pickup.latitude, 6),
            round(pickup.longitude, 6),
            round(destination.latitude, 6),
            round(destination.longitude, 6),
        )

    def get_route(self, pickup: Coordinate, destination: Coordinate) -> RouteEstimate:
        key = self._cache_key(pickup, destination)
        now = self._clock()

        with self._lock:
            cached = self._cache.get(key)
            if cached and (now - cached[1]) < self.cache_ttl_seconds:
                return cached[0]

        route = self._fetch(pickup, destination)

        with self._lock:
            self._evict_expired(now)
            self._cache[key] = (route, now)
        return route

    def _evict_expired(self, now: float) -> None:
        # caller holds self._lock
        expired = [
            key for key, (_, stored_at) in self._cache.items()
            if (now - stored_at) >= self.cache_ttl_seconds
        ]
        for key in expired:
            del self._cache[key]

    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    def _fetch(self, pickup: Coordinate, destination: Coordinate) -> RouteEstimate:
        if self.osrm_client is None:
            return haversine_route(pickup, destination, self.average_speed_kmh)

        try:
            result = self.osrm_client.compute_route([pickup, destination])
            route = RouteEstimate(
                distance_km=result["distance_km"],
                duration_min=result["duration_min"],
                source=SOURCE_OSRM,
            )
            logger.info(
                "OSRM route %.2f km / %.1f min", route.distance_km, route.duration_min
            )
            return route
        except (OSRMError, requests.RequestException, KeyError, TypeError, ValueError) as error:
            logger.warning(
                "Route lookup failed (%s); falling back to straight-line distance at %.0f km/h",
                error,
                self.average_speed_kmh,
            )
            return haversine_route(pickup, destination, self.average_speed_kmh)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

"""Pairwise distance/geometry matrix between trip locations.

Every ordered pair is queried separately against the route provider. A failed
pair never aborts the build: it falls back to the haversine distance with a
straight two-point geometry.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from ...config import settings
from ...models.domain import Location
from ..geospatial import haversine_m, straight_line
from .models import Coordinate, RouteLeg

logger = logging.getLogger(__name__)

RouteProvider = Callable[[Coordinate, Coordinate], RouteLeg]
Pair = tuple[str, str]


@dataclass(slots=True)
class DistanceMatrix:
    location_ids: list[str] = field(default_factory=list)
    distances: dict[Pair, float] = field(default_factory=dict)
    paths: dict[Pair, list[Coordinate]] = field(default_factory=dict)
    fallback_pairs: list[Pair] = field(default_factory=list)

    def distance(self, from_id: str, to_id: str, default: float = 0.0) -> float:
        if from_id == to_id:
            return 0.0
        return self.distances.get((from_id, to_id), default)

    def path(self, from_id: str, to_id: str) -> list[Coordinate]:
        return self.paths.get((from_id, to_id), [])

    def row(self, from_id: str) -> dict[str, float]:
        return {to_id: value for (origin, to_id), value in self.distances.items() if origin == from_id}

    def __contains__(self, pair: object) -> bool:
        return pair in self.distances

    def __len__(self) -> int:
        return len(self.distances)


def fallback_leg(origin: Location, destination: Location) -> RouteLeg:
    return RouteLeg(
        distance_m=haversine_m(origin.lat, origin.lng, destination.lat, destination.lng),
        geometry=straight_line(origin.lat, origin.lng, destination.lat, destination.lng),
    )


def default_provider() -> Optional[RouteProvider]:
    """OSRM client from settings, or None when no base URL is configured."""
    if not settings.osrm_base_url:
        return None
    from .osrm_client import OSRMClient

    return OSRMClient()


def _query_pair(provider: Optional[RouteProvider], origin: Location, destination: Location) -> tuple[RouteLeg, bool]:
    if provider is None:
        return fallback_leg(origin, destination), True
    try:
        leg = provider(origin.coordinate, destination.coordinate)
    except Exception as e:
        logger.warning(
            "Route lookup %s -> %s failed, using straight-line distance: %s", origin.id, destination.id, e
        )
        return fallback_leg(origin, destination), True
    return leg, False


def build_distance_matrix(
    locations: Sequence[Location],
    provider: Optional[RouteProvider] = None,
    max_parallel: int | None = None,
) -> DistanceMatrix:
    """Query every ordered pair of ``locations`` and collect distances and geometries.

    Args:
        locations: Trip stops; ids must be unique.
        provider: Callable returning a :class:`RouteLeg` for two (lat, lng) points.
            Defaults to the configured OSRM client. When no provider is available
            every pair uses the haversine fallback.
        max_parallel: Concurrent pair queries (defaults to settings; 1 is sequential).

    Returns:
        A :class:`DistanceMatrix` keyed by ``(from_id, to_id)``.
    """
    if provider is None:
        provider = default_provider()
    workers = max_parallel if max_parallel is not None else settings.matrix_max_parallel_requests

    pairs = [
        (origin, destination)
        for origin in locations
        for destination in locations
        if origin.id != destination.id
    ]
    matrix = DistanceMatrix(location_ids=[location.id for location in locations])
    if not pairs:
        return matrix

    start_time = time.time()
    logger.info("Building distance matrix: %d locations, %d pair requests", len(locations), len(pairs))

    if workers <= 1:
        results = [_query_pair(provider, origin, destination) for origin, destination in pairs]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() keeps input order, so assembly is independent of completion order
            results = list(executor.map(lambda pair: _query_pair(provider, *pair), pairs))

    for (origin, destination), (leg, used_fallback) in zip(pairs, results):
        key = (origin.id, destination.id)
        matrix.distances[key] = leg.distance_m
        matrix.paths[key] = list(leg.geometry)
        if used_fallback:
            matrix.fallback_pairs.append(key)

    logger.info(
        "Distance matrix complete: %d pairs (%d fallback) in %.2fs",
        len(pairs), len(matrix.fallback_pairs), time.time() - start_time,
    )
    return matrix

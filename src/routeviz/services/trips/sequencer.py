"""Closed-tour sequencing for trip locations.

Nearest-neighbor construction from the start location, followed by 2-opt
local search for small trips. The start location always stays first.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from ...config import settings
from ...models.domain import Location
from .distance_matrix import DistanceMatrix
from .models import Coordinate, Tour, TourSegment, TripPlanningError

logger = logging.getLogger(__name__)


def tour_length(order: Sequence[str], matrix: DistanceMatrix) -> float:
    """Length of the closed circuit through ``order``, including the return leg."""
    total = sum(matrix.distance(order[i], order[i + 1]) for i in range(len(order) - 1))
    if len(order) > 1:
        total += matrix.distance(order[-1], order[0])
    return total


def nearest_neighbor_tour(location_ids: Sequence[str], matrix: DistanceMatrix, start_id: str) -> list[str]:
    """Greedy tour: always move to the closest unvisited location.

    Ties go to the location listed first. Locations the matrix has no entry for
    from the current stop are appended in input order once nothing else is reachable.
    """
    unvisited = [location_id for location_id in location_ids if location_id != start_id]
    order = [start_id]
    current = start_id

    while unvisited:
        next_id = None
        min_distance = float("inf")
        for candidate in unvisited:
            distance = matrix.distances.get((current, candidate))
            if distance is not None and distance < min_distance:
                min_distance = distance
                next_id = candidate
        if next_id is None:
            order.extend(unvisited)
            break
        unvisited.remove(next_id)
        order.append(next_id)
        current = next_id

    return order


def _reverse_segment(order: list[str], start: int, end: int) -> None:
    order[start : end + 1] = order[start : end + 1][::-1]


def two_opt(order: Sequence[str], matrix: DistanceMatrix) -> tuple[list[str], float, int]:
    """Improve ``order`` with 2-opt moves until a full pass finds nothing better.

    A reversal of ``order[i:j]`` is tried when replacing edges (i-1, i) and
    (j-1, j) with (i-1, j-1) and (i, j) looks shorter, and kept only if the whole
    circuit gets strictly shorter.

    Returns:
        (improved order, its closed length, number of passes)
    """
    route = list(order)
    best_distance = tour_length(route, matrix)
    d = matrix.distance
    passes = 0
    improved = True

    while improved:
        improved = False
        passes += 1
        for i in range(1, len(route) - 1):
            for j in range(i + 2, len(route)):
                current = d(route[i - 1], route[i]) + d(route[j - 1], route[j])
                swapped = d(route[i - 1], route[j - 1]) + d(route[i], route[j])
                if current <= swapped:
                    continue
                _reverse_segment(route, i, j - 1)
                new_distance = tour_length(route, matrix)
                if new_distance < best_distance:
                    best_distance = new_distance
                    improved = True
                else:
                    # asymmetric distances can make a promising swap worse overall
                    _reverse_segment(route, i, j - 1)

    return route, best_distance, passes


def assemble_tour(order: Sequence[str], locations: Sequence[Location], matrix: DistanceMatrix) -> Tour:
    """Walk ``order`` and collect geometry, segment distances and 1-based positions."""
    by_id = {location.id: location for location in locations}
    ordered_locations = [replace(by_id[location_id], order=index) for index, location_id in enumerate(order, start=1)]

    legs = list(zip(order, order[1:]))
    if len(order) > 1:
        legs.append((order[-1], order[0]))

    path: list[Coordinate] = []
    segments: list[TourSegment] = []
    cumulative = 0.0
    for from_id, to_id in legs:
        distance = matrix.distance(from_id, to_id)
        cumulative += distance
        path.extend(matrix.path(from_id, to_id))
        segments.append(TourSegment(from_id=from_id, to_id=to_id, distance_m=distance, cumulative_m=cumulative))

    return Tour(
        order=list(order),
        ordered_locations=ordered_locations,
        path=path,
        total_distance=cumulative,
        segments=segments,
    )


def find_optimal_tour(
    locations: Sequence[Location],
    matrix: DistanceMatrix,
    start_id: str,
    two_opt_max_locations: int | None = None,
) -> Tour:
    """Approximate the shortest closed tour over ``locations`` starting at ``start_id``.

    Trips with at most ``two_opt_max_locations`` stops (default from settings)
    get 2-opt improvement on top of nearest-neighbor; larger trips keep the
    nearest-neighbor tour. Fewer than two locations give an empty tour.
    """
    if len(locations) <= 1:
        return Tour(order=[], ordered_locations=[], path=[], total_distance=0.0)

    location_ids = [location.id for location in locations]
    if start_id not in location_ids:
        raise TripPlanningError(f"Start location '{start_id}' not found.")
    limit = two_opt_max_locations if two_opt_max_locations is not None else settings.two_opt_max_locations

    order = nearest_neighbor_tour(location_ids, matrix, start_id)
    seed_distance = tour_length(order, matrix)
    strategy = "nearest_neighbor"
    passes = 0
    if len(locations) <= limit:
        order, _, passes = two_opt(order, matrix)
        strategy = "nearest_neighbor+2opt"

    tour = assemble_tour(order, locations, matrix)
    tour.strategy = strategy
    tour.nearest_neighbor_distance = seed_distance
    tour.two_opt_passes = passes
    logger.info(
        "Tour over %d locations via %s: %.1f m (nearest-neighbor seed %.1f m, %d passes)",
        len(locations), strategy, tour.total_distance, seed_distance, passes,
    )
    return tour

"""Trip planning orchestration: matrix build, tour search, stale-result guard."""

from __future__ import annotations

import itertools
import logging
import threading
from collections import OrderedDict
from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Location
from ...schemas.trips import LocationModel, TourSegmentModel, TripPlanRequest, TripPlanResponse
from .distance_matrix import DistanceMatrix, RouteProvider, build_distance_matrix
from .models import StaleResultError, TripPlan, TripPlanningError
from .sequencer import find_optimal_tour

logger = logging.getLogger(__name__)


def validate_locations(locations: Sequence[Location], start_id: str | None = None) -> None:
    if len(locations) > settings.max_trip_locations:
        raise TripPlanningError(
            f"Too many locations ({len(locations)}); at most {settings.max_trip_locations} are supported."
        )
    seen: set[str] = set()
    for location in locations:
        if location.id in seen:
            raise TripPlanningError(f"Duplicate location id '{location.id}'.")
        seen.add(location.id)
        if not (-90.0 <= location.lat <= 90.0) or not (-180.0 <= location.lng <= 180.0):
            raise TripPlanningError(f"Location '{location.id}' has invalid coordinates ({location.lat}, {location.lng}).")
    if start_id is not None and len(locations) > 1 and start_id not in seen:
        raise TripPlanningError(f"Start location '{start_id}' not found.")


class TripPlanner:
    """Plans trips for one caller and drops results of superseded requests.

    Every :meth:`plan` call takes a new token. If another call starts before an
    earlier one finishes, the earlier one raises :class:`StaleResultError`
    instead of returning an outdated plan.
    """

    def __init__(self, provider: Optional[RouteProvider] = None, max_parallel: int | None = None) -> None:
        self.provider = provider
        self.max_parallel = max_parallel
        self._tokens = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    @property
    def latest_token(self) -> int:
        return self._latest

    def begin_request(self) -> int:
        with self._lock:
            self._latest = next(self._tokens)
            return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest

    def ensure_current(self, token: int) -> None:
        if not self.is_current(token):
            logger.warning("Discarding planning result %d, request %d is newer", token, self._latest)
            raise StaleResultError(token, self._latest)

    def build_matrix(self, locations: Sequence[Location]) -> tuple[int, DistanceMatrix]:
        token = self.begin_request()
        matrix = build_distance_matrix(locations, provider=self.provider, max_parallel=self.max_parallel)
        return token, matrix

    def plan(self, locations: Sequence[Location], start_id: str) -> TripPlan:
        validate_locations(locations, start_id)
        token, matrix = self.build_matrix(locations)
        self.ensure_current(token)
        tour = find_optimal_tour(locations, matrix, start_id)
        return TripPlan(
            request_token=token,
            tour=tour,
            fallback_pairs=list(matrix.fallback_pairs),
            distance_matrix={location_id: matrix.row(location_id) for location_id in matrix.location_ids},
        )


_planners: "OrderedDict[str, TripPlanner]" = OrderedDict()
_planners_lock = threading.Lock()


def get_planner(session_id: str) -> TripPlanner:
    with _planners_lock:
        planner = _planners.get(session_id)
        if planner is None:
            planner = _planners[session_id] = TripPlanner()
            while len(_planners) > settings.max_planner_sessions:
                evicted, _ = _planners.popitem(last=False)
                logger.debug("Dropped planner session %s", evicted)
        else:
            _planners.move_to_end(session_id)
        return planner


def plan_trip(locations: Sequence[Location], start_id: str, session_id: str | None = None) -> TripPlan:
    """Plan a trip. Calls sharing ``session_id`` supersede each other."""
    planner = get_planner(session_id) if session_id else TripPlanner()
    return planner.plan(locations, start_id)


def locations_from_request(payload: TripPlanRequest) -> list[Location]:
    return [Location(id=item.id, name=item.name, lat=item.lat, lng=item.lng) for item in payload.locations]


def plan_trip_response(payload: TripPlanRequest) -> TripPlanResponse:
    plan = plan_trip(locations_from_request(payload), payload.start_id, session_id=payload.session_id)
    tour = plan.tour
    return TripPlanResponse(
        request_token=plan.request_token,
        strategy=tour.strategy,
        ordered_locations=[
            LocationModel(id=loc.id, name=loc.name, lat=loc.lat, lng=loc.lng, order=loc.order)
            for loc in tour.ordered_locations
        ],
        path=[[lat, lng] for lat, lng in tour.path],
        total_distance_m=tour.total_distance,
        total_distance_km=tour.total_distance / 1000.0,
        nearest_neighbor_distance_m=tour.nearest_neighbor_distance,
        segments=[
            TourSegmentModel(
                from_id=segment.from_id,
                to_id=segment.to_id,
                distance_m=segment.distance_m,
                cumulative_m=segment.cumulative_m,
            )
            for segment in tour.segments
        ],
        fallback_pairs=[list(pair) for pair in plan.fallback_pairs],
        distance_matrix=plan.distance_matrix,
        stop_count=plan.stop_count,
        average_distance_km=plan.average_distance / 1000.0,
    )

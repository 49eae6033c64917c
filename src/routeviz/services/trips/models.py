"""Trip planning domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from ...models.domain import Location

Coordinate = tuple[float, float]


class TripPlanningError(ValueError):
    """Invalid planning input such as an unknown start location."""


class StaleResultError(RuntimeError):
    """A planning result belongs to a request that has since been superseded."""

    def __init__(self, token: int, latest: int) -> None:
        super().__init__(f"Planning request {token} was superseded by request {latest}.")
        self.token = token
        self.latest = latest


@dataclass(slots=True)
class RouteLeg:
    """Road distance in metres and (lat, lng) geometry between two points."""

    distance_m: float
    geometry: List[Coordinate]


@dataclass(slots=True)
class TourSegment:
    from_id: str
    to_id: str
    distance_m: float
    cumulative_m: float


@dataclass(slots=True)
class Tour:
    """Closed circuit over the trip locations; the last stop returns to the first."""

    order: List[str]
    ordered_locations: List[Location]
    path: List[Coordinate]
    total_distance: float
    segments: List[TourSegment] = field(default_factory=list)
    strategy: str = "nearest_neighbor"
    nearest_neighbor_distance: float = 0.0
    two_opt_passes: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.order


@dataclass(slots=True)
class TripPlan:
    request_token: int
    tour: Tour
    fallback_pairs: List[tuple[str, str]]
    distance_matrix: Dict[str, Dict[str, float]] = field(default_factory=dict)

    @property
    def stop_count(self) -> int:
        return len(self.tour.order)

    @property
    def average_distance(self) -> float:
        """Closed tour length per stop, as the route summary reports it."""
        return self.tour.total_distance / max(self.stop_count, 1)

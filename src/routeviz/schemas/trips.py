"""Trip planner request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class LocationModel(BaseModel):
    id: str
    name: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    order: int = 0


class TripPlanRequest(BaseModel):
    locations: List[LocationModel]
    start_id: str
    session_id: Optional[str] = Field(
        default=None,
        description="Requests sharing a session id supersede each other; older ones get 409.",
    )


class TourSegmentModel(BaseModel):
    from_id: str
    to_id: str
    distance_m: float
    cumulative_m: float


class TripPlanResponse(BaseModel):
    request_token: int
    strategy: str
    ordered_locations: List[LocationModel]
    path: List[List[float]]
    total_distance_m: float
    total_distance_km: float
    nearest_neighbor_distance_m: float
    segments: List[TourSegmentModel]
    fallback_pairs: List[List[str]]
    distance_matrix: Dict[str, Dict[str, float]] = Field(
        default_factory=dict,
        description="Metres from each location to every other; the diagonal is omitted.",
    )
    stop_count: int = 0
    average_distance_km: float = 0.0

"""Domain models for graph stops, connections and trip locations."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(slots=True)
class Position:
    """Canvas coordinates of a stop. Layout only, never read by the algorithms."""

    x: float
    y: float


@dataclass(slots=True)
class GeoMetadata:
    """Optional real-world information attached to a stop."""

    lat: Optional[float] = None
    lon: Optional[float] = None
    real_world: bool = False
    address: Optional[str] = None


@dataclass(slots=True)
class Node:
    """A stop in the editable graph."""

    id: str
    label: str
    position: Position = field(default_factory=lambda: Position(0.0, 0.0))
    metadata: Optional[GeoMetadata] = None


@dataclass(slots=True)
class Edge:
    """An undirected connection between two stops.

    ``time`` and ``distance`` are optional; ``None`` means the metric was never
    set for this connection and the engine falls back to ``cost``.
    """

    id: str
    source: str
    target: str
    cost: float
    time: Optional[float] = None
    distance: Optional[float] = None

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def other_end(self, node_id: str) -> str:
        return self.target if self.source == node_id else self.source

    def connects(self, a: str, b: str) -> bool:
        return {self.source, self.target} == {a, b}


@dataclass(slots=True)
class Location:
    """A geocoded trip stop. ``order`` is the 1-based tour position, 0 until sequenced."""

    id: str
    name: str
    lat: float
    lng: float
    order: int = 0

    @property
    def coordinate(self) -> tuple[float, float]:
        return (self.lat, self.lng)

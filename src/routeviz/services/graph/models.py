"""Shortest-path domain models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal, Mapping, Optional

from ...models.domain import Edge

Metric = Literal["cost", "time", "distance"]
METRICS: tuple[str, ...] = ("cost", "time", "distance")
INFINITY = math.inf


class GraphError(ValueError):
    """Base class for invalid graph input or edits."""


class NodeNotFoundError(GraphError):
    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node '{node_id}' does not exist.")
        self.node_id = node_id


class EdgeNotFoundError(GraphError):
    def __init__(self, edge_id: str) -> None:
        super().__init__(f"Edge '{edge_id}' does not exist.")
        self.edge_id = edge_id


class DuplicateEdgeError(GraphError):
    """Raised when a second connection is added between the same pair of stops."""


class InvalidEdgeError(GraphError):
    """Self-loops, negative weights or dangling endpoints."""


class InvalidMetricError(GraphError):
    def __init__(self, metric: str) -> None:
        super().__init__(f"Unknown metric '{metric}'. Expected one of: {', '.join(METRICS)}.")
        self.metric = metric


def edge_weight(edge: Edge, metric: str) -> float:
    """Return the weight of ``edge`` for ``metric``, falling back to ``cost`` when unset."""

    if metric not in METRICS:
        raise InvalidMetricError(metric)
    value = getattr(edge, metric)
    if value is None:
        return edge.cost
    return value


@dataclass(frozen=True, slots=True)
class AlgorithmStep:
    """Snapshot taken after a node is settled.

    ``distances`` only holds finite tentative distances; a missing node is at
    infinity. ``shortest_path`` is the best known path from the source to
    ``current_node`` and is empty when ``current_node`` is unreachable.
    """

    current_node: str
    visited_nodes: tuple[str, ...]
    distances: Mapping[str, float]
    previous_nodes: Mapping[str, Optional[str]]
    shortest_path: tuple[str, ...] = ()

    def distance_to(self, node_id: str) -> float:
        return self.distances.get(node_id, INFINITY)


@dataclass(frozen=True, slots=True)
class ShortestPathResult:
    path: tuple[str, ...]
    distance: float
    steps: tuple[AlgorithmStep, ...] = field(default_factory=tuple)
    no_path_found: bool = False

    @property
    def distance_label(self) -> str:
        from ..outputs.formatter import format_distance

        return format_distance(self.distance)

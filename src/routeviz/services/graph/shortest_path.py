"""Dijkstra shortest path with a per-settlement trace for animation.

Every settled node produces one :class:`AlgorithmStep`, in settlement order,
including the terminal one. The frontier is a binary heap with lazy deletion.
"""

from __future__ import annotations

import heapq
import logging
from typing import Optional, Sequence

from ...models.domain import Edge, Node
from .models import (
    INFINITY,
    METRICS,
    AlgorithmStep,
    InvalidEdgeError,
    InvalidMetricError,
    NodeNotFoundError,
    ShortestPathResult,
    edge_weight,
)

logger = logging.getLogger(__name__)

# (neighbor_id, weight)
AdjacencyEntry = tuple[str, float]


def _build_adjacency(
    node_ids: Sequence[str], edges: Sequence[Edge], metric: str
) -> dict[str, list[AdjacencyEntry]]:
    known = set(node_ids)
    adjacency: dict[str, list[AdjacencyEntry]] = {node_id: [] for node_id in node_ids}
    for edge in edges:
        if edge.source not in known or edge.target not in known:
            raise InvalidEdgeError(
                f"Edge '{edge.id}' references an unknown node ({edge.source} -> {edge.target})."
            )
        weight = edge_weight(edge, metric)
        if weight < 0:
            raise InvalidEdgeError(f"Edge '{edge.id}' has a negative {metric} weight ({weight}).")
        # Undirected: an edge is usable from either endpoint.
        adjacency[edge.source].append((edge.target, weight))
        if edge.target != edge.source:
            adjacency[edge.target].append((edge.source, weight))
    return adjacency


def _path_to(node_id: str, source_id: str, previous: dict[str, Optional[str]]) -> tuple[str, ...]:
    if node_id != source_id and previous.get(node_id) is None:
        return ()
    path: list[str] = []
    current: Optional[str] = node_id
    while current is not None:
        path.append(current)
        if current == source_id:
            break
        current = previous.get(current)
    path.reverse()
    return tuple(path)


def compute_shortest_path(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    source_id: str,
    target_id: str,
    metric: str = "cost",
) -> ShortestPathResult:
    """Run Dijkstra from ``source_id`` towards ``target_id``.

    A target that is missing or unreachable is not an error: the result has
    ``no_path_found=True``, an empty path and an infinite distance, and still
    carries the explored steps.

    Raises:
        InvalidMetricError: ``metric`` is not one of cost/time/distance.
        NodeNotFoundError: ``source_id`` is not in a non-empty ``nodes``.
        InvalidEdgeError: an edge has a dangling endpoint or a negative weight.
    """
    if metric not in METRICS:
        raise InvalidMetricError(metric)
    if not nodes:
        return ShortestPathResult(path=(), distance=INFINITY, steps=(), no_path_found=True)

    node_ids = [node.id for node in nodes]
    if source_id not in node_ids:
        raise NodeNotFoundError(source_id)

    adjacency = _build_adjacency(node_ids, edges, metric)
    input_order = {node_id: index for index, node_id in enumerate(node_ids)}

    distances: dict[str, float] = {source_id: 0.0}
    previous: dict[str, Optional[str]] = {node_id: None for node_id in node_ids}
    visited: list[str] = []
    settled: set[str] = set()
    steps: list[AlgorithmStep] = []
    # Ties on distance are broken by input order.
    heap: list[tuple[float, int, str]] = [(0.0, input_order[source_id], source_id)]

    def record(current: str) -> None:
        steps.append(
            AlgorithmStep(
                current_node=current,
                visited_nodes=tuple(visited),
                distances=dict(distances),
                previous_nodes=dict(previous),
                shortest_path=_path_to(current, source_id, previous),
            )
        )

    while len(settled) < len(node_ids):
        current: Optional[str] = None
        current_distance = INFINITY
        while heap:
            candidate_distance, _, candidate = heapq.heappop(heap)
            if candidate in settled or candidate_distance > distances.get(candidate, INFINITY):
                continue
            current, current_distance = candidate, candidate_distance
            break

        if current is None:
            # Frontier exhausted: every remaining node is at infinity.
            current = next(node_id for node_id in node_ids if node_id not in settled)

        visited.append(current)
        settled.add(current)
        logger.debug("Settled %s at distance %s", current, current_distance)

        if current == target_id or current_distance == INFINITY:
            record(current)
            break

        for neighbor_id, weight in adjacency[current]:
            if neighbor_id in settled:
                continue
            new_distance = current_distance + weight
            if new_distance < distances.get(neighbor_id, INFINITY):
                distances[neighbor_id] = new_distance
                previous[neighbor_id] = current
                heapq.heappush(heap, (new_distance, input_order[neighbor_id], neighbor_id))

        record(current)

    if target_id == source_id:
        return ShortestPathResult(path=(source_id,), distance=0.0, steps=tuple(steps))

    if previous.get(target_id) is None:
        return ShortestPathResult(path=(), distance=INFINITY, steps=tuple(steps), no_path_found=True)

    return ShortestPathResult(
        path=_path_to(target_id, source_id, previous),
        distance=distances[target_id],
        steps=tuple(steps),
    )

"""Display helpers for algorithm traces and trip tours."""

from __future__ import annotations

import csv
import io
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from ...models.domain import Node
from ..graph.models import AlgorithmStep
from ..trips.models import Tour

INFINITY_LABEL = "∞"


def format_distance(value: Optional[float], digits: int = 1) -> str:
    """Render a tentative distance; infinity (or a missing value) becomes "∞"."""
    if value is None or math.isinf(value):
        return INFINITY_LABEL
    return f"{value:.{digits}f}"


@dataclass(slots=True)
class StepTableRow:
    node_id: str
    label: str
    distance: Optional[float]
    distance_label: str
    status: str
    previous_label: Optional[str]
    in_path: bool
    is_source: bool
    is_target: bool


def step_table(
    step: AlgorithmStep,
    nodes: Sequence[Node],
    source_id: str | None = None,
    target_id: str | None = None,
) -> list[StepTableRow]:
    """Rows of the step table: current node, then path, then settled, then by distance."""
    labels = {node.id: node.label for node in nodes}
    visited = set(step.visited_nodes)
    in_path = set(step.shortest_path)

    def sort_key(node: Node) -> tuple:
        distance = step.distance_to(node.id)
        return (
            node.id != step.current_node,
            node.id not in in_path,
            node.id not in visited,
            math.isinf(distance),
            0.0 if math.isinf(distance) else distance,
        )

    rows = []
    for node in sorted(nodes, key=sort_key):
        distance = step.distance_to(node.id)
        if node.id == step.current_node:
            status = "Current"
        elif node.id in visited:
            status = "Visited"
        else:
            status = "Unvisited"
        previous = step.previous_nodes.get(node.id)
        rows.append(
            StepTableRow(
                node_id=node.id,
                label=node.label,
                distance=None if math.isinf(distance) else distance,
                distance_label=format_distance(distance),
                status=status,
                previous_label=labels.get(previous, previous) if previous else None,
                in_path=node.id in in_path,
                is_source=node.id == source_id,
                is_target=node.id == target_id,
            )
        )
    return rows


def short_name(name: str) -> str:
    """First comma-separated part of a geocoded place name."""
    return name.split(",")[0].strip()


def tour_to_csv(tour: Tour) -> str:
    names = {location.id: location.name for location in tour.ordered_locations}
    buffer = io.StringIO()
    fieldnames = ["leg", "from_id", "from_name", "to_id", "to_name", "distance_km", "cumulative_km"]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for index, segment in enumerate(tour.segments, start=1):
        writer.writerow(
            {
                "leg": index,
                "from_id": segment.from_id,
                "from_name": short_name(names.get(segment.from_id, segment.from_id)),
                "to_id": segment.to_id,
                "to_name": short_name(names.get(segment.to_id, segment.to_id)),
                "distance_km": round(segment.distance_m / 1000.0, 3),
                "cumulative_km": round(segment.cumulative_m / 1000.0, 3),
            }
        )
    return buffer.getvalue()

"""In-memory editable graph of stops and connections.

The editor owns the invariants the engine relies on: endpoints exist, there
are no self-loops, weights are non-negative and at most one edge joins any
unordered pair of stops. Deleting a stop removes every edge touching it.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import replace
from typing import Iterable, Optional

from ...models.domain import Edge, GeoMetadata, Node, Position
from .models import (
    DuplicateEdgeError,
    EdgeNotFoundError,
    GraphError,
    InvalidEdgeError,
    NodeNotFoundError,
    ShortestPathResult,
)
from .shortest_path import compute_shortest_path

logger = logging.getLogger(__name__)


def _check_weights(edge_id: str, **weights: Optional[float]) -> None:
    for name, value in weights.items():
        if value is not None and value < 0:
            raise InvalidEdgeError(f"Edge '{edge_id}' has a negative {name} weight ({value}).")


class GraphEditor:
    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}
        self._edges: dict[str, Edge] = {}
        self._node_counter = itertools.count(1)
        self._edge_counter = itertools.count(1)

    @classmethod
    def from_snapshot(cls, nodes: Iterable[Node], edges: Iterable[Edge]) -> "GraphEditor":
        editor = cls()
        for node in nodes:
            editor.add_node(
                label=node.label,
                position=(node.position.x, node.position.y),
                metadata=node.metadata,
                node_id=node.id,
            )
        for edge in edges:
            if edge.source not in editor or edge.target not in editor:
                raise InvalidEdgeError(
                    f"Edge '{edge.id}' references an unknown node ({edge.source} -> {edge.target})."
                )
            editor.connect(
                edge.source,
                edge.target,
                cost=edge.cost,
                time=edge.time,
                distance=edge.distance,
                edge_id=edge.id,
            )
        return editor

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> list[Edge]:
        return list(self._edges.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def get_edge(self, edge_id: str) -> Edge:
        try:
            return self._edges[edge_id]
        except KeyError:
            raise EdgeNotFoundError(edge_id) from None

    def _next_free_id(self, prefix: str, counter: "itertools.count[int]", taken: dict) -> str:
        while True:
            candidate = f"{prefix}-{next(counter)}"
            if candidate not in taken:
                return candidate

    def add_node(
        self,
        label: str | None = None,
        position: tuple[float, float] = (0.0, 0.0),
        metadata: GeoMetadata | None = None,
        node_id: str | None = None,
    ) -> Node:
        if node_id is None:
            node_id = self._next_free_id("node", self._node_counter, self._nodes)
        elif node_id in self._nodes:
            raise GraphError(f"Node '{node_id}' already exists.")
        node = Node(
            id=node_id,
            label=label or f"Node {len(self._nodes) + 1}",
            position=Position(float(position[0]), float(position[1])),
            metadata=metadata,
        )
        self._nodes[node_id] = node
        return node

    def move_node(self, node_id: str, x: float, y: float) -> Node:
        node = self.get_node(node_id)
        node.position.x = float(x)
        node.position.y = float(y)
        return node

    def rename_node(self, node_id: str, label: str) -> Node:
        node = self.get_node(node_id)
        node.label = label
        return node

    def delete_node(self, node_id: str) -> list[str]:
        """Remove a stop and every edge touching it. Returns the removed edge ids."""
        self.get_node(node_id)
        removed = [edge.id for edge in self._edges.values() if edge.touches(node_id)]
        for edge_id in removed:
            del self._edges[edge_id]
        del self._nodes[node_id]
        logger.debug("Deleted node %s and %d incident edges", node_id, len(removed))
        return removed

    def find_edge(self, a: str, b: str) -> Edge | None:
        """Return the edge joining ``a`` and ``b`` in either direction."""
        for edge in self._edges.values():
            if edge.connects(a, b):
                return edge
        return None

    def connect(
        self,
        source: str,
        target: str,
        cost: float,
        time: float | None = None,
        distance: float | None = None,
        edge_id: str | None = None,
    ) -> Edge:
        if source == target:
            raise InvalidEdgeError(f"Cannot connect node '{source}' to itself.")
        self.get_node(source)
        self.get_node(target)
        if self.find_edge(source, target) is not None:
            raise DuplicateEdgeError(f"Nodes '{source}' and '{target}' are already connected.")
        if edge_id is None:
            edge_id = self._next_free_id("edge", self._edge_counter, self._edges)
        elif edge_id in self._edges:
            raise DuplicateEdgeError(f"Edge '{edge_id}' already exists.")
        _check_weights(edge_id, cost=cost, time=time, distance=distance)
        edge = Edge(id=edge_id, source=source, target=target, cost=cost, time=time, distance=distance)
        self._edges[edge_id] = edge
        return edge

    def update_edge_weights(
        self,
        edge_id: str,
        cost: float | None = None,
        time: float | None = None,
        distance: float | None = None,
    ) -> Edge:
        edge = self.get_edge(edge_id)
        _check_weights(edge_id, cost=cost, time=time, distance=distance)
        if cost is not None:
            edge.cost = cost
        if time is not None:
            edge.time = time
        if distance is not None:
            edge.distance = distance
        return edge

    def delete_edge(self, edge_id: str) -> None:
        self.get_edge(edge_id)
        del self._edges[edge_id]

    def neighbors(self, node_id: str) -> list[tuple[str, Edge]]:
        self.get_node(node_id)
        return [(edge.other_end(node_id), edge) for edge in self._edges.values() if edge.touches(node_id)]

    def clear(self) -> None:
        self._nodes.clear()
        self._edges.clear()

    def snapshot(self) -> tuple[list[Node], list[Edge]]:
        """Copies of the current stops and connections, safe to hand to the engine."""
        nodes = [replace(node, position=replace(node.position)) for node in self._nodes.values()]
        edges = [replace(edge) for edge in self._edges.values()]
        return nodes, edges

    def shortest_path(self, source_id: str, target_id: str, metric: str = "cost") -> ShortestPathResult:
        nodes, edges = self.snapshot()
        return compute_shortest_path(nodes, edges, source_id, target_id, metric)

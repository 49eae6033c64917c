"""Visualizer orchestration: request models in, display-ready trace out."""

from __future__ import annotations

import logging
from dataclasses import asdict

from ...schemas.graph import (
    AlgorithmStepModel,
    EdgeModel,
    GraphModel,
    NodeModel,
    ShortestPathRequest,
    ShortestPathResponse,
    StepTableRowModel,
)
from ..outputs.formatter import step_table
from .demo import DEMO_SOURCE, DEMO_TARGET, build_demo_graph
from .editor import GraphEditor

logger = logging.getLogger(__name__)


def demo_graph() -> GraphModel:
    nodes, edges = build_demo_graph().snapshot()
    return GraphModel(
        nodes=[NodeModel.from_domain(node) for node in nodes],
        edges=[EdgeModel.from_domain(edge) for edge in edges],
        source_id=DEMO_SOURCE,
        target_id=DEMO_TARGET,
    )


def run_shortest_path(payload: ShortestPathRequest) -> ShortestPathResponse:
    # Rebuilding through the editor rejects duplicate connections and self-loops.
    editor = GraphEditor.from_snapshot(
        [node.to_domain() for node in payload.nodes],
        [edge.to_domain() for edge in payload.edges],
    )
    result = editor.shortest_path(payload.source_id, payload.target_id, payload.metric)
    nodes = editor.nodes
    labels = {node.id: node.label for node in nodes}

    steps = []
    for step in result.steps:
        table = []
        if payload.include_table:
            table = [
                StepTableRowModel(**asdict(row))
                for row in step_table(step, nodes, payload.source_id, payload.target_id)
            ]
        steps.append(
            AlgorithmStepModel(
                current_node=step.current_node,
                visited_nodes=list(step.visited_nodes),
                distances=dict(step.distances),
                previous_nodes=dict(step.previous_nodes),
                shortest_path=list(step.shortest_path),
                table=table,
            )
        )

    if result.no_path_found:
        logger.info("No path from %s to %s by %s", payload.source_id, payload.target_id, payload.metric)

    return ShortestPathResponse(
        path=list(result.path),
        path_labels=[labels.get(node_id, node_id) for node_id in result.path],
        distance=None if result.no_path_found else result.distance,
        distance_label=result.distance_label,
        no_path_found=result.no_path_found,
        metric=payload.metric,
        steps=steps,
    )

"""Sample graph loaded by the visualizer's demo button."""

from __future__ import annotations

from .editor import GraphEditor

DEMO_NODES: tuple[tuple[str, str, float, float], ...] = (
    ("node-demo-1", "Node 1", 200.0, 200.0),
    ("node-demo-2", "Node 2", 400.0, 150.0),
    ("node-demo-3", "Node 3", 600.0, 200.0),
    ("node-demo-4", "Node 4", 300.0, 350.0),
    ("node-demo-5", "Node 5", 500.0, 350.0),
)

DEMO_SOURCE = "node-demo-1"
DEMO_TARGET = "node-demo-3"

# (source, target, cost, time, distance)
DEMO_EDGES: tuple[tuple[str, str, float, float, float], ...] = (
    ("node-demo-1", "node-demo-2", 5.0, 2.5, 4.0),
    ("node-demo-2", "node-demo-3", 7.0, 3.5, 5.6),
    ("node-demo-1", "node-demo-4", 4.5, 2.3, 3.6),
    ("node-demo-4", "node-demo-5", 6.2, 3.1, 5.0),
    ("node-demo-2", "node-demo-5", 8.5, 4.3, 6.8),
    ("node-demo-3", "node-demo-5", 6.8, 3.4, 5.4),
)


def build_demo_graph() -> GraphEditor:
    editor = GraphEditor()
    for node_id, label, x, y in DEMO_NODES:
        editor.add_node(label=label, position=(x, y), node_id=node_id)
    for index, (source, target, cost, time, distance) in enumerate(DEMO_EDGES, start=1):
        editor.connect(source, target, cost=cost, time=time, distance=distance, edge_id=f"edge-demo-{index}")
    return editor

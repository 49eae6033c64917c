"""Shortest-path engine and graph editing helpers."""

from .demo import build_demo_graph
from .editor import GraphEditor
from .shortest_path import compute_shortest_path

__all__ = ["compute_shortest_path", "GraphEditor", "build_demo_graph"]

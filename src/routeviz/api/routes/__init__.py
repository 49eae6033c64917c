"""Route group exports."""

from . import graph, health, trips

__all__ = ["graph", "trips", "health"]

"""Trip planner: distance matrix, tour sequencing and planning service."""

from .distance_matrix import DistanceMatrix, build_distance_matrix
from .sequencer import find_optimal_tour

__all__ = ["build_distance_matrix", "find_optimal_tour", "DistanceMatrix"]

"""Batch clustering algorithms built on the stepwise engine."""

from .kmeans import KMeans
from .elbow import find_optimal_k, select_elbow

__all__ = [
    'KMeans',
    'find_optimal_k',
    'select_elbow'
]

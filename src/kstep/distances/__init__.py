"""Distance metrics for clustering algorithms."""

from ..base.data_structures import DISTANCE_METRICS
from ..base.exceptions import InvalidConfiguration
from ..base.interfaces import DistanceMetric
from .euclidean import EuclideanDistance, euclidean_distance
from .manhattan import ManhattanDistance, manhattan_distance


def get_distance_metric(name: str) -> DistanceMetric:
    """Instantiate the distance metric registered under ``name``."""
    if name == 'euclidean':
        return EuclideanDistance()
    elif name == 'manhattan':
        return ManhattanDistance()
    raise InvalidConfiguration(
        f"Unknown distance metric '{name}', expected one of {DISTANCE_METRICS}")


__all__ = [
    'EuclideanDistance',
    'ManhattanDistance',
    'euclidean_distance',
    'manhattan_distance',
    'get_distance_metric'
]

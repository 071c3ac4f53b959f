"""Initialization strategies for clustering algorithms."""

from typing import Optional

from ..base.data_structures import ClusteringConfiguration, INIT_METHODS
from ..base.exceptions import InvalidConfiguration
from ..base.interfaces import InitializationStrategy, DistanceMetric
from .random import RandomInit
from .kmeans_plusplus import KMeansPlusPlusInit
from .manual import ManualInit


def create_initialization(config: ClusteringConfiguration,
                          distance: Optional[DistanceMetric] = None) -> InitializationStrategy:
    """Build the strategy named by ``config.init_method``."""
    if config.init_method == 'random':
        return RandomInit()
    elif config.init_method == 'kmeans++':
        return KMeansPlusPlusInit(distance)
    elif config.init_method == 'manual':
        return ManualInit(config.initial_centroids)
    raise InvalidConfiguration(
        f"Unknown init method '{config.init_method}', expected one of {INIT_METHODS}")


__all__ = [
    'RandomInit',
    'KMeansPlusPlusInit',
    'ManualInit',
    'create_initialization'
]

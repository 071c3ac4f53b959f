"""
kstep: Stepwise k-means clustering for interactive visualization.

The clustering loop is exposed one iteration at a time so that a host
(an animation frame callback, a notebook, a test) can render every
assignment and centroid move.

Example usage:
    >>> import torch
    >>> from kstep import ClusteringDriver, ClusteringConfiguration
    >>>
    >>> X = torch.rand(500, 2)
    >>> driver = ClusteringDriver()
    >>> driver.start(X, ClusteringConfiguration(k=3, seed=0))
    >>>
    >>> # One iteration per frame
    >>> while driver.is_running:
    ...     result = driver.tick()
    >>>
    >>> report = driver.get_quality_report()

For batch use, ``KMeans`` offers a fitted-estimator interface and
``find_optimal_k`` runs the elbow method.
"""

__version__ = '0.1.0'

# Stepwise core
from .engine import ClusteringEngine, assign_points
from .driver import ClusteringDriver, DriverState

# Batch algorithms
from .algorithms.kmeans import KMeans
from .algorithms.elbow import find_optimal_k

# View transform
from .view import Viewport, ViewState, ViewTransform, Point2D

# Convenience imports
from .base import (
    ClusteringConfiguration,
    IterationResult,
    EngineState,
    RunMetadata,
    QualityReport,
    ElbowResult,
    ClusteringObserver,
    ClusteringError,
    InvalidInput,
    InvalidConfiguration,
    NotFitted
)

__all__ = [
    # Stepwise core
    'ClusteringEngine',
    'assign_points',
    'ClusteringDriver',
    'DriverState',

    # Algorithms
    'KMeans',
    'find_optimal_k',

    # View
    'Viewport',
    'ViewState',
    'ViewTransform',
    'Point2D',

    # Core data structures
    'ClusteringConfiguration',
    'IterationResult',
    'EngineState',
    'RunMetadata',
    'QualityReport',
    'ElbowResult',
    'ClusteringObserver',

    # Errors
    'ClusteringError',
    'InvalidInput',
    'InvalidConfiguration',
    'NotFitted',

    # Version
    '__version__'
]

"""
Core data structures for the stepwise clustering engine.

This module provides the containers passed between the engine, the driver
and the host: the run configuration, the mutable per-run engine state, the
per-iteration result and the derived quality report.
"""

from typing import Optional, List, Dict, Any
import torch
from torch import Tensor
from dataclasses import dataclass, field, replace

from .exceptions import InvalidConfiguration


INIT_METHODS = ('random', 'kmeans++', 'manual')
DISTANCE_METRICS = ('euclidean', 'manhattan')


@dataclass(frozen=True)
class ClusteringConfiguration:
    """Immutable parameters of one clustering run.

    Attributes:
        k: Number of clusters (>= 1, and <= number of points at run start)
        max_iterations: Hard cap on the number of steps
        tolerance: Largest centroid movement still counted as converged
        init_method: 'random', 'kmeans++' or 'manual'
        distance_metric: 'euclidean' or 'manhattan'
        seed: Seed for the run's generator; None draws a fresh one
        initial_centroids: (k, d) starting centroids, required for 'manual'
    """

    k: int
    max_iterations: int = 100
    tolerance: float = 1e-3
    init_method: str = 'kmeans++'
    distance_metric: str = 'euclidean'
    seed: Optional[int] = None
    initial_centroids: Optional[Tensor] = field(default=None, compare=False)

    def __post_init__(self):
        if isinstance(self.k, bool) or not isinstance(self.k, int):
            raise InvalidConfiguration(f"k must be int, got {type(self.k).__name__}")
        if self.k < 1:
            raise InvalidConfiguration(f"k must be at least 1, got {self.k}")
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int) \
                or self.max_iterations <= 0:
            raise InvalidConfiguration(
                f"max_iterations must be a positive int, got {self.max_iterations!r}")
        if not self.tolerance > 0:
            raise InvalidConfiguration(f"tolerance must be positive, got {self.tolerance}")
        if self.init_method not in INIT_METHODS:
            raise InvalidConfiguration(
                f"Unknown init method '{self.init_method}', expected one of {INIT_METHODS}")
        if self.distance_metric not in DISTANCE_METRICS:
            raise InvalidConfiguration(
                f"Unknown distance metric '{self.distance_metric}', "
                f"expected one of {DISTANCE_METRICS}")

        if self.init_method == 'manual':
            if self.initial_centroids is None:
                raise InvalidConfiguration("Manual initialization requires initial_centroids")
            try:
                centroids = torch.as_tensor(self.initial_centroids, dtype=torch.float64)
            except (TypeError, ValueError) as e:
                raise InvalidConfiguration(f"initial_centroids is not numeric: {e}") from e
            if centroids.dim() != 2:
                raise InvalidConfiguration(
                    f"initial_centroids must be 2D (k, d), got {centroids.dim()}D")
            if centroids.shape[0] != self.k:
                raise InvalidConfiguration(
                    f"initial_centroids has {centroids.shape[0]} centroids, but k={self.k}")
            object.__setattr__(self, 'initial_centroids', centroids)

    def with_k(self, k: int) -> 'ClusteringConfiguration':
        """Copy of this configuration with a different number of clusters."""
        return replace(self, k=k)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict form, e.g. for the ``start`` event payload."""
        return {
            'k': self.k,
            'max_iterations': self.max_iterations,
            'tolerance': self.tolerance,
            'init_method': self.init_method,
            'distance_metric': self.distance_metric,
            'seed': self.seed,
        }


@dataclass
class IterationResult:
    """Outcome of a single assignment/update step.

    ``assignments`` is the external label array (index -> cluster id); the
    input points themselves are never relabelled.
    """

    iteration: int
    assignments: Tensor  # (n,) long
    centroids: Tensor    # (k, d) centroids after the update
    inertia: float
    converged: bool
    max_shift: float = 0.0

    @property
    def n_clusters(self) -> int:
        return self.centroids.shape[0]

    def cluster_sizes(self) -> List[int]:
        """Number of points assigned to each cluster index."""
        counts = torch.bincount(self.assignments, minlength=self.n_clusters)
        return counts.tolist()


@dataclass
class EngineState:
    """Everything the engine needs to advance one run.

    Created by ``ClusteringEngine.initialize`` and mutated in place by
    ``ClusteringEngine.step``.
    """

    points: Tensor        # (n, d) float64
    config: ClusteringConfiguration
    centroids: Tensor     # (k, d) current centroids
    distance: Any         # DistanceMetric
    generator: torch.Generator
    criterion: Any        # ConvergenceCriterion
    initial_centroids: Optional[Tensor] = None
    assignments: Optional[Tensor] = None
    iteration: int = 0
    converged: bool = False
    inertia: float = float('inf')

    @property
    def n_points(self) -> int:
        return self.points.shape[0]

    @property
    def dimension(self) -> int:
        return self.points.shape[1]

    @property
    def finished(self) -> bool:
        """True once the run converged or used up its iteration budget."""
        return self.converged or self.iteration >= self.config.max_iterations


@dataclass
class RunMetadata:
    """Cumulative information about a driver run, sent with every update."""

    iteration: int
    max_iterations: int
    elapsed: float
    converged: bool = False

    @property
    def progress(self) -> float:
        """Fraction of the iteration budget used; 1.0 once converged."""
        if self.converged:
            return 1.0
        return min(1.0, self.iteration / self.max_iterations)


@dataclass
class QualityReport:
    """Quality metrics derived from a final assignment."""

    inertia: float
    silhouette_score: float
    cluster_sizes: List[int]
    davies_bouldin_score: float = 0.0
    calinski_harabasz_score: float = 0.0
    quality_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'inertia': self.inertia,
            'silhouette_score': self.silhouette_score,
            'cluster_sizes': list(self.cluster_sizes),
            'davies_bouldin_score': self.davies_bouldin_score,
            'calinski_harabasz_score': self.calinski_harabasz_score,
            'quality_score': self.quality_score,
        }


@dataclass
class ElbowResult:
    """Result of an elbow-method sweep over k."""

    optimal_k: int
    ks: List[int]
    inertias: List[float]
    silhouette_scores: List[float]
    strengths: Dict[int, float] = field(default_factory=dict)

    @property
    def recommendation(self) -> Dict[str, float]:
        """Row of the sweep table for the chosen k."""
        i = self.ks.index(self.optimal_k)
        return {
            'k': self.optimal_k,
            'inertia': self.inertias[i],
            'silhouette_score': self.silhouette_scores[i],
        }

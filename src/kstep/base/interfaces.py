"""
Core interfaces for the stepwise clustering engine.

This module defines the abstract base classes that the pluggable components
implement: distance metrics, initialization strategies, convergence criteria
and the observer that receives driver lifecycle events.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, TYPE_CHECKING
import torch
from torch import Tensor

if TYPE_CHECKING:
    from .data_structures import (
        ClusteringConfiguration, IterationResult, QualityReport, RunMetadata
    )


class DistanceMetric(ABC):
    """Abstract base class for point-to-point distance computations."""

    name: str = ''

    @abstractmethod
    def pairwise(self, points: Tensor, others: Tensor) -> Tensor:
        """Compute distances between every row of two point sets.

        Args:
            points: (n, d) tensor of points
            others: (m, d) tensor of points

        Returns:
            (n, m) tensor of distances
        """
        pass

    def paired(self, points: Tensor, others: Tensor) -> Tensor:
        """Distances between matching rows of two (n, d) tensors.

        Returns:
            (n,) tensor of distances
        """
        return torch.diagonal(self.pairwise(points, others))

    def __call__(self, a: Tensor, b: Tensor) -> float:
        """Distance between two single vectors."""
        return self.pairwise(a.reshape(1, -1), b.reshape(1, -1))[0, 0].item()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class InitializationStrategy(ABC):
    """Abstract base class for centroid initialization strategies."""

    @abstractmethod
    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Choose initial centroids.

        Args:
            points: (n, d) tensor of data points
            n_clusters: Number of centroids to produce
            generator: Seeded generator; all randomness must come from it
            **kwargs: Strategy-specific parameters

        Returns:
            (n_clusters, d) tensor of centroids
        """
        pass


class ConvergenceCriterion(ABC):
    """Abstract base class for convergence checking."""

    def __init__(self):
        self.history = []

    @abstractmethod
    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if algorithm has converged.

        Args:
            current_state: Dictionary containing current algorithm state

        Returns:
            True if converged, False otherwise
        """
        pass

    def reset(self):
        """Reset convergence history."""
        self.history = []


class ClusteringObserver:
    """Receiver of driver lifecycle events.

    Hosts subclass this and override the callbacks they care about; every
    callback defaults to doing nothing. Callbacks are invoked synchronously
    from inside the driver call that produced the event.
    """

    def on_start(self, algorithm: str, config: 'ClusteringConfiguration') -> None:
        """A run has been initialized and is now RUNNING."""
        pass

    def on_update(self, result: 'IterationResult', metadata: 'RunMetadata') -> None:
        """One iteration finished."""
        pass

    def on_complete(self, history: list, report: 'QualityReport') -> None:
        """The run converged or exhausted its iteration budget."""
        pass

    def on_error(self, error: Exception) -> None:
        """The run failed; the driver is now STOPPED or still IDLE."""
        pass

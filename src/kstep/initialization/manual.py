"""
Initialization from caller supplied centers.

Useful for warm starts, for replaying a run, or when the host lets the user
place centroids by hand.
"""

from typing import Optional
import torch
from torch import Tensor

from ..base.interfaces import InitializationStrategy
from ..utils.validation import validate_initial_centroids


class ManualInit(InitializationStrategy):
    """Initialize from a fixed (k, d) array of centers."""

    def __init__(self, initial_centroids):
        """
        Args:
            initial_centroids: (k, d) centers as tensor, array or nested list
        """
        self.initial_centroids = initial_centroids

    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Validate and return a copy of the supplied centers.

        Raises:
            InvalidConfiguration: If the count differs from n_clusters or the
                dimension differs from the data
        """
        centers = validate_initial_centroids(self.initial_centroids, n_clusters,
                                             points.shape[1], dtype=points.dtype)
        return centers.to(points.device)

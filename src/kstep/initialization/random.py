"""
Random initialization strategy.

Draws each centroid coordinate uniformly inside the bounding box of the data.
"""

from typing import Optional
import torch
from torch import Tensor

from ..base.interfaces import InitializationStrategy
from ..utils.linalg import data_bounds


class RandomInit(InitializationStrategy):
    """Uniform random centroids within the per-dimension data bounds.

    Unlike picking random data points, the centroids need not coincide with
    any input point, and some may start far from every point.
    """

    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Initialize centroids uniformly inside the data bounds.

        Args:
            points: (n, d) data points
            n_clusters: Number of clusters
            generator: Seeded generator

        Returns:
            (n_clusters, d) tensor of centroids
        """
        dimension = points.shape[1]
        low, high = data_bounds(points)

        # Row-major draw: centroid by centroid, coordinate by coordinate
        u = torch.rand((n_clusters, dimension), generator=generator,
                       dtype=points.dtype).to(points.device)
        return low.unsqueeze(0) + u * (high - low).unsqueeze(0)

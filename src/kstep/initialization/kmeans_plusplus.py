"""
K-means++ initialization strategy.

Selects initial cluster centers using the K-means++ algorithm, which chooses
centers that are far apart to reduce the chance of poor initial separation.
"""

from typing import Optional
import torch
from torch import Tensor

from ..base.interfaces import InitializationStrategy, DistanceMetric
from ..distances.euclidean import EuclideanDistance


class KMeansPlusPlusInit(InitializationStrategy):
    """K-means++ initialization for better starting positions.

    Algorithm:
    1. Choose first center uniformly at random among the points
    2. For each remaining center:
       - Compute distance from each point to nearest existing center
       - Choose next center with probability proportional to squared distance,
         by roulette selection over the cumulative sums
    """

    def __init__(self, distance: Optional[DistanceMetric] = None):
        """
        Args:
            distance: Metric used for nearest-center distances
                      (Euclidean by default). The distance is squared
                      before it is used as a weight.
        """
        self.distance = distance if distance is not None else EuclideanDistance()

    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Initialize cluster centers using K-means++.

        Args:
            points: (n, d) data points
            n_clusters: Number of clusters
            generator: Seeded generator

        Returns:
            (n_clusters, d) tensor of centroids
        """
        n_points = points.shape[0]

        if n_clusters > n_points:
            raise ValueError(f"Cannot create {n_clusters} clusters from {n_points} points")

        # Choose first center uniformly at random
        first_idx = torch.randint(n_points, (1,), generator=generator).item()
        center_indices = [first_idx]

        # Distance from every point to its nearest chosen center
        nearest = self.distance.pairwise(points, points[first_idx].unsqueeze(0))[:, 0]

        for c in range(1, n_clusters):
            weights = nearest * nearest
            cumulative = torch.cumsum(weights, dim=0)
            total = cumulative[-1].item()

            if total > 0:
                target = torch.rand(1, generator=generator, dtype=points.dtype) * total
                # First index whose cumulative weight exceeds the target;
                # zero-weight points (existing centers) can never be picked
                chosen = torch.searchsorted(cumulative, target.to(points.device),
                                            right=True).item()
                chosen = min(chosen, n_points - 1)
            else:
                # Every point already sits on a center
                chosen = 0

            center_indices.append(chosen)

            new_distances = self.distance.pairwise(points, points[chosen].unsqueeze(0))[:, 0]
            nearest = torch.minimum(nearest, new_distances)

        return points[torch.tensor(center_indices, device=points.device)].clone()

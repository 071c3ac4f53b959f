"""
Euclidean distance metric for clustering.

The default metric for k-means assignment, convergence checks and inertia.
"""

import torch
from torch import Tensor

from ..base.interfaces import DistanceMetric


class EuclideanDistance(DistanceMetric):
    """Euclidean (L2) distance metric.

    Computes ||x - y|| between points.
    """

    name = 'euclidean'

    def __init__(self, squared: bool = False):
        """
        Args:
            squared: If True, return squared distances.
                    If False (default), return actual Euclidean distances.
        """
        self.squared = squared

    def pairwise(self, points: Tensor, others: Tensor) -> Tensor:
        """Compute Euclidean distances between two point sets.

        Args:
            points: (n, d) tensor of points
            others: (m, d) tensor of points

        Returns:
            (n, m) tensor of distances
        """
        # Direct differences keep exact zeros and exact ties, which the
        # lowest-index tie break in the assignment step relies on
        distances = torch.cdist(points, others, p=2.0,
                                compute_mode='donot_use_mm_for_euclid_dist')

        if self.squared:
            return distances * distances
        return distances

    def paired(self, points: Tensor, others: Tensor) -> Tensor:
        diff = points - others
        squared_distances = torch.sum(diff * diff, dim=1)

        if self.squared:
            return squared_distances
        return torch.sqrt(squared_distances)

    def __repr__(self) -> str:
        return f"EuclideanDistance(squared={self.squared})"


def euclidean_distance(a: Tensor, b: Tensor) -> float:
    """Euclidean distance between two vectors."""
    diff = torch.as_tensor(a, dtype=torch.float64) - torch.as_tensor(b, dtype=torch.float64)
    return torch.sqrt(torch.sum(diff * diff)).item()

"""
Manhattan (city block) distance metric.
"""

import torch
from torch import Tensor

from ..base.interfaces import DistanceMetric


class ManhattanDistance(DistanceMetric):
    """Manhattan (L1) distance: sum_i |x_i - y_i|."""

    name = 'manhattan'

    def pairwise(self, points: Tensor, others: Tensor) -> Tensor:
        return torch.cdist(points, others, p=1.0)

    def paired(self, points: Tensor, others: Tensor) -> Tensor:
        return torch.sum(torch.abs(points - others), dim=1)


def manhattan_distance(a: Tensor, b: Tensor) -> float:
    """Manhattan distance between two vectors."""
    diff = torch.as_tensor(a, dtype=torch.float64) - torch.as_tensor(b, dtype=torch.float64)
    return torch.sum(torch.abs(diff)).item()

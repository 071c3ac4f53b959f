"""
Small numerical helpers shared by the engine and the metrics.
"""

from typing import Optional
import torch
from torch import Tensor


def vector_mean(points: Tensor, fallback: Optional[Tensor] = None) -> Tensor:
    """Coordinate-wise mean of a (n, d) point set.

    Args:
        points: (n, d) tensor
        fallback: (d,) value returned unchanged when ``points`` is empty

    Returns:
        (d,) mean vector
    """
    if points.shape[0] == 0:
        if fallback is None:
            raise ValueError("Cannot take the mean of an empty point set")
        return fallback.clone()
    return points.mean(dim=0)


def cluster_means(points: Tensor, labels: Tensor, previous: Tensor) -> Tensor:
    """Mean of the points assigned to each cluster.

    Clusters that received no points keep their row from ``previous``.

    Args:
        points: (n, d) data points
        labels: (n,) hard assignments in [0, k)
        previous: (k, d) centroids before the update

    Returns:
        (k, d) updated centroids
    """
    n_clusters = previous.shape[0]
    labels = labels.long()

    sums = torch.zeros_like(previous)
    sums.index_add_(0, labels, points)
    counts = torch.bincount(labels, minlength=n_clusters).to(points.dtype)

    means = sums / counts.clamp(min=1).unsqueeze(1)
    empty = (counts == 0).unsqueeze(1)
    return torch.where(empty, previous, means)


def data_bounds(points: Tensor):
    """Per-dimension (min, max) of a point set, each of shape (d,)."""
    return points.min(dim=0)[0], points.max(dim=0)[0]

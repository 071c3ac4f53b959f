"""
Clustering evaluation metrics.

Internal metrics computed from the fitted coordinates and a hard
assignment: inertia, silhouette, Davies-Bouldin, Calinski-Harabasz, and the
0-100 summary score shown next to an animated run.
"""

from typing import Optional, List, Sequence
import warnings
import torch
from torch import Tensor

from ..distances import get_distance_metric
from .linalg import vector_mean


# Above this many points the O(n^2) silhouette becomes noticeably slow
SILHOUETTE_WARN_SIZE = 5000


def pairwise_distances(X: Tensor, Y: Optional[Tensor] = None,
                       metric: str = 'euclidean') -> Tensor:
    """Compute pairwise distances between points.

    Args:
        X: (n, d) first set of points
        Y: (m, d) second set of points (if None, uses X)
        metric: Distance metric ('euclidean', 'manhattan')

    Returns:
        (n, m) distance matrix
    """
    if Y is None:
        Y = X
    return get_distance_metric(metric).pairwise(X, Y)


def cluster_sizes(labels: Tensor, n_clusters: int) -> List[int]:
    """Number of points carrying each label in [0, n_clusters)."""
    return torch.bincount(labels.long(), minlength=n_clusters).tolist()


def inertia(X: Tensor, labels: Tensor, centers: Tensor,
            metric: str = 'euclidean') -> float:
    """Compute sum of squared distances to assigned centers.

    Args:
        X: (n, d) data points
        labels: (n,) cluster labels
        centers: (k, d) cluster centers
        metric: Distance metric; the distance is squared whichever is used

    Returns:
        Total inertia (lower is better)
    """
    distances = get_distance_metric(metric).paired(X, centers[labels.long()])
    return torch.sum(distances * distances).item()


def silhouette_score(X: Tensor, labels: Tensor,
                     n_clusters: Optional[int] = None,
                     metric: str = 'euclidean',
                     sample_size: Optional[int] = None,
                     generator: Optional[torch.Generator] = None) -> float:
    """Compute mean Silhouette Coefficient.

    For each point, ``a`` is the mean distance to the other members of its
    cluster (0 if it has none) and ``b`` the smallest mean distance to the
    members of another non-empty cluster (0 if there is none). The point's
    value is ``(b - a) / max(a, b)``, or 0 when both are 0.

    The full computation holds an (n, n) distance matrix, so it is O(n^2) in
    time and memory. Pass ``sample_size`` to trade accuracy for speed on
    large inputs; the estimate is then taken over a random subset.

    Args:
        X: (n, d) data points
        labels: (n,) cluster labels
        n_clusters: Number of clusters k (defaults to labels.max() + 1)
        metric: Distance metric
        sample_size: If provided, subsample for efficiency
        generator: Generator used for subsampling

    Returns:
        Mean silhouette coefficient in [-1, 1]; exactly 0 when k <= 1 or
        fewer than two clusters are populated
    """
    labels = labels.long()
    n_samples = len(X)
    if n_clusters is None:
        n_clusters = int(labels.max().item()) + 1

    if n_clusters <= 1 or n_samples == 0:
        return 0.0

    # Subsample if requested
    if sample_size is not None and sample_size < n_samples:
        indices = torch.randperm(n_samples, generator=generator)[:sample_size]
        X = X[indices]
        labels = labels[indices]
        n_samples = sample_size
    elif n_samples > SILHOUETTE_WARN_SIZE:
        warnings.warn(f"Computing exact silhouette over {n_samples} points is O(n^2); "
                      f"consider passing sample_size")

    counts = torch.bincount(labels, minlength=n_clusters).to(X.dtype)
    if (counts > 0).sum() < 2:
        return 0.0

    distances = pairwise_distances(X, metric=metric)

    # Sum of distances from every point to every cluster: (n, k)
    one_hot = torch.nn.functional.one_hot(labels, n_clusters).to(X.dtype)
    sums = distances @ one_hot

    rows = torch.arange(n_samples)
    own_counts = counts[labels]

    # Mean intra-cluster distance (self distance is zero)
    own_sums = sums[rows, labels]
    a = torch.where(own_counts > 1,
                    own_sums / (own_counts - 1).clamp(min=1),
                    torch.zeros_like(own_sums))

    # Mean distance to the nearest other cluster
    means = sums / counts.clamp(min=1).unsqueeze(0)
    means = means.masked_fill((counts == 0).unsqueeze(0), float('inf'))
    means[rows, labels] = float('inf')
    b = means.min(dim=1)[0]
    b = torch.where(torch.isinf(b), torch.zeros_like(b), b)

    denom = torch.maximum(a, b)
    silhouette_values = torch.where(denom > 0, (b - a) / denom.clamp(min=1e-300),
                                    torch.zeros_like(denom))

    return silhouette_values.mean().item()


def davies_bouldin_score(X: Tensor, labels: Tensor, centers: Optional[Tensor] = None,
                         n_clusters: Optional[int] = None) -> float:
    """Compute Davies-Bouldin score.

    Lower values indicate better clustering. The score is defined as the
    average similarity measure of each cluster with its most similar cluster.
    Empty clusters are left out.

    Args:
        X: (n, d) data points
        labels: (n,) cluster labels
        centers: (k, d) cluster centers (computed if not provided)
        n_clusters: Number of clusters k (defaults to labels.max() + 1)

    Returns:
        Davies-Bouldin score (lower is better), 0 with fewer than two
        populated clusters
    """
    labels = labels.long()
    if n_clusters is None:
        n_clusters = int(labels.max().item()) + 1

    populated = [k for k in range(n_clusters) if (labels == k).any()]
    if len(populated) < 2:
        return 0.0

    centroids = []
    scatter = []
    for k in populated:
        cluster_points = X[labels == k]
        center = centers[k] if centers is not None else vector_mean(cluster_points)
        centroids.append(center)
        scatter.append(torch.norm(cluster_points - center, dim=1).mean())

    centroids = torch.stack(centroids)
    scatter = torch.stack(scatter)
    center_distances = pairwise_distances(centroids)

    db_values = torch.zeros(len(populated), dtype=X.dtype)
    for i in range(len(populated)):
        ratios = []
        for j in range(len(populated)):
            if i != j and center_distances[i, j] > 0:
                ratios.append((scatter[i] + scatter[j]) / center_distances[i, j])

        if len(ratios) > 0:
            db_values[i] = torch.stack(ratios).max()

    return db_values.mean().item()


def calinski_harabasz_score(X: Tensor, labels: Tensor,
                            n_clusters: Optional[int] = None) -> float:
    """Compute Calinski-Harabasz score (Variance Ratio Criterion).

    Higher values indicate better defined clusters.

    Args:
        X: (n, d) data points
        labels: (n,) cluster labels
        n_clusters: Number of clusters k (defaults to labels.max() + 1)

    Returns:
        Calinski-Harabasz score (higher is better), 0 when undefined
    """
    labels = labels.long()
    n_samples = len(X)
    if n_clusters is None:
        n_clusters = int(labels.max().item()) + 1

    populated = [k for k in range(n_clusters) if (labels == k).any()]
    n_populated = len(populated)
    if n_populated < 2 or n_samples <= n_populated:
        return 0.0

    mean = X.mean(dim=0)

    # Between-group and within-group sums of squares
    bgss = torch.tensor(0.0, dtype=X.dtype)
    wgss = torch.tensor(0.0, dtype=X.dtype)

    for k in populated:
        cluster_points = X[labels == k]
        cluster_mean = vector_mean(cluster_points)
        bgss += len(cluster_points) * torch.sum((cluster_mean - mean) ** 2)
        wgss += torch.sum((cluster_points - cluster_mean) ** 2)

    if wgss == 0:
        return 0.0

    ch_score = (bgss / wgss) * ((n_samples - n_populated) / (n_populated - 1))
    return ch_score.item()


def quality_score(silhouette: float, sizes: Sequence[int], converged: bool) -> float:
    """Summary score in [0, 100].

    Silhouette rescaled to [0, 100], plus 10 for a converged run, plus a
    balance term that starts at 10 and loses 10 for every unit of relative
    deviation of a cluster size from the average size.
    """
    normalized_silhouette = (silhouette + 1.0) * 50.0
    convergence_bonus = 10.0 if converged else 0.0

    balance = 10.0
    if len(sizes) > 0:
        average = sum(sizes) / len(sizes)
        if average > 0:
            for size in sizes:
                balance -= abs(size - average) / average * 10.0

    score = max(0.0, min(100.0, normalized_silhouette + convergence_bonus + balance))
    return round(score, 1)

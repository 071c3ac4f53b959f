"""
Quality metrics: silhouette (against a brute-force reference), inertia,
Davies-Bouldin, Calinski-Harabasz and the 0-100 summary score.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

try:
    import torch
except Exception:  # pragma: no cover
    torch = None  # type: ignore

from kstep.utils.metrics import (
    silhouette_score,
    davies_bouldin_score,
    calinski_harabasz_score,
    inertia,
    cluster_sizes,
    quality_score,
)


pytestmark = pytest.mark.skipif(torch is None, reason="PyTorch is required for these tests")


def _reference_silhouette(X: np.ndarray, labels: np.ndarray, k: int) -> float:
    """Point-by-point silhouette with the same empty / singleton conventions."""
    n = len(X)
    values = []
    for i in range(n):
        d = np.sqrt(((X - X[i]) ** 2).sum(axis=1))
        own = [j for j in range(n) if labels[j] == labels[i] and j != i]
        a = d[own].mean() if own else 0.0
        others = [d[labels == c].mean() for c in range(k)
                  if c != labels[i] and (labels == c).any()]
        b = min(others) if others else 0.0
        denom = max(a, b)
        values.append((b - a) / denom if denom > 0 else 0.0)
    return float(np.mean(values))


def test_silhouette_matches_reference(rng):
    X = rng.normal(size=(40, 3))
    labels = rng.integers(0, 4, size=40)
    labels[0] = 3  # make sure the top label occurs
    expected = _reference_silhouette(X, labels, 4)

    got = silhouette_score(torch.tensor(X), torch.tensor(labels), n_clusters=4)
    assert got == pytest.approx(expected, abs=1e-10)


def test_silhouette_with_singleton_and_empty_cluster():
    X = np.array([[0.0, 0.0], [0.0, 1.0], [5.0, 5.0]])
    labels = np.array([0, 0, 2])  # cluster 1 is empty, cluster 2 a singleton
    expected = _reference_silhouette(X, labels, 3)

    got = silhouette_score(torch.tensor(X), torch.tensor(labels), n_clusters=3)
    assert got == pytest.approx(expected, abs=1e-12)


def test_silhouette_bounds(three_blobs, rng):
    for _ in range(5):
        labels = torch.tensor(rng.integers(0, 3, size=150))
        score = silhouette_score(three_blobs, labels, n_clusters=3)
        assert -1.0 <= score <= 1.0

    true_labels = torch.arange(3).repeat_interleave(50)
    assert silhouette_score(three_blobs, true_labels, n_clusters=3) > 0.8


def test_silhouette_is_zero_for_single_cluster(three_blobs):
    labels = torch.zeros(150, dtype=torch.long)
    assert silhouette_score(three_blobs, labels, n_clusters=1) == 0.0
    # k > 1 but only one populated cluster
    assert silhouette_score(three_blobs, labels, n_clusters=3) == 0.0


def test_silhouette_sampling_is_seeded(three_blobs):
    labels = torch.arange(3).repeat_interleave(50)
    a = silhouette_score(three_blobs, labels, n_clusters=3, sample_size=30,
                         generator=torch.Generator().manual_seed(0))
    b = silhouette_score(three_blobs, labels, n_clusters=3, sample_size=30,
                         generator=torch.Generator().manual_seed(0))
    assert a == b
    assert -1.0 <= a <= 1.0


def test_inertia_and_sizes(two_pairs):
    labels = torch.tensor([0, 0, 1, 1])
    centers = torch.tensor([[0.0, 0.5], [10.0, 10.5]], dtype=torch.float64)
    assert inertia(two_pairs, labels, centers) == pytest.approx(1.0)
    assert cluster_sizes(labels, 3) == [2, 2, 0]


def test_davies_bouldin_and_calinski_harabasz(two_pairs):
    labels = torch.tensor([0, 0, 1, 1])
    # Each pair has mean distance 0.5 to its center; centers are sqrt(200) apart
    assert davies_bouldin_score(two_pairs, labels) == pytest.approx(1.0 / math.sqrt(200.0))
    # Between-group SS 200, within-group SS 1, (n - k) / (k - 1) = 2
    assert calinski_harabasz_score(two_pairs, labels) == pytest.approx(400.0)


def test_scores_undefined_for_one_cluster(two_pairs):
    labels = torch.zeros(4, dtype=torch.long)
    assert davies_bouldin_score(two_pairs, labels, n_clusters=2) == 0.0
    assert calinski_harabasz_score(two_pairs, labels, n_clusters=2) == 0.0


@pytest.mark.parametrize("silhouette, sizes, converged, expected", [
    (0.5, [2, 2], True, 95.0),
    (0.0, [3, 1], False, 50.0),
    (1.0, [5, 5, 5], True, 100.0),
    (-1.0, [10, 0], False, 0.0),
])
def test_quality_score(silhouette, sizes, converged, expected):
    assert quality_score(silhouette, sizes, converged) == pytest.approx(expected)

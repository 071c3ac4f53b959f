"""
Distance metrics: pairwise / paired agreement, exact zeros, registry lookup.
"""

from __future__ import annotations

import math

import pytest

try:
    import torch
except Exception:  # pragma: no cover
    torch = None  # type: ignore

from kstep.base.exceptions import InvalidConfiguration
from kstep.distances import (
    EuclideanDistance,
    ManhattanDistance,
    euclidean_distance,
    manhattan_distance,
    get_distance_metric,
)


pytestmark = pytest.mark.skipif(torch is None, reason="PyTorch is required for these tests")


def test_euclidean_three_four_five():
    assert euclidean_distance([0.0, 0.0], [3.0, 4.0]) == pytest.approx(5.0)
    assert euclidean_distance([1.0, 2.0], [1.0, 2.0]) == 0.0


def test_manhattan_sum_of_absolute_differences():
    assert manhattan_distance([0.0, 0.0], [3.0, -4.0]) == pytest.approx(7.0)
    assert manhattan_distance([1.5], [1.5]) == 0.0


@pytest.mark.parametrize("metric", [EuclideanDistance(), ManhattanDistance()])
def test_pairwise_matches_paired_on_diagonal(metric, rng):
    X = torch.tensor(rng.normal(size=(6, 3)), dtype=torch.float64)
    Y = torch.tensor(rng.normal(size=(6, 3)), dtype=torch.float64)

    full = metric.pairwise(X, Y)
    assert full.shape == (6, 6)
    assert torch.allclose(torch.diagonal(full), metric.paired(X, Y))


def test_euclidean_self_distance_is_exactly_zero(rng):
    X = torch.tensor(rng.uniform(size=(20, 4)) * 1000.0, dtype=torch.float64)
    D = EuclideanDistance().pairwise(X, X)
    assert torch.all(torch.diagonal(D) == 0.0)


def test_squared_euclidean():
    metric = EuclideanDistance(squared=True)
    a = torch.tensor([[0.0, 0.0]], dtype=torch.float64)
    b = torch.tensor([[3.0, 4.0]], dtype=torch.float64)
    assert metric.pairwise(a, b).item() == pytest.approx(25.0)
    assert metric.paired(a, b).item() == pytest.approx(25.0)


def test_metric_call_on_single_vectors():
    metric = EuclideanDistance()
    value = metric(torch.tensor([1.0, 1.0]), torch.tensor([2.0, 2.0]))
    assert value == pytest.approx(math.sqrt(2.0))


def test_registry_lookup():
    assert isinstance(get_distance_metric("euclidean"), EuclideanDistance)
    assert isinstance(get_distance_metric("manhattan"), ManhattanDistance)
    with pytest.raises(InvalidConfiguration):
        get_distance_metric("cosine")

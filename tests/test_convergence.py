# tests/test_convergence.py
"""
CentroidShift convergence criterion.

Covers:
- every centroid must move at most tol (inclusive)
- history records the largest movement per check
- the configured metric measures the movement
"""

from __future__ import annotations

import pytest

try:
    import torch
except Exception:  # pragma: no cover
    torch = None  # type: ignore

from kstep.distances import ManhattanDistance
from kstep.utils.convergence import CentroidShift


pytestmark = pytest.mark.skipif(torch is None, reason="PyTorch is required for these tests")


def _state(old, new, iteration=1):
    return {
        "iteration": iteration,
        "old_centroids": torch.tensor(old, dtype=torch.float64),
        "new_centroids": torch.tensor(new, dtype=torch.float64),
    }


def test_all_centroids_must_be_stable():
    crit = CentroidShift(tol=0.1)

    # One centroid still moving
    assert crit.check(_state([[0.0, 0.0], [1.0, 1.0]], [[0.0, 0.05], [1.0, 1.5]])) is False
    # Both within tolerance
    assert crit.check(_state([[0.0, 0.05], [1.0, 1.5]], [[0.0, 0.06], [1.0, 1.55]], 2)) is True

    assert len(crit.history) == 2
    assert crit.history[0]["max_shift"] == pytest.approx(0.5)
    assert crit.last_max_shift == pytest.approx(0.05)


def test_movement_equal_to_tol_counts_as_converged():
    crit = CentroidShift(tol=0.5)
    assert crit.check(_state([[0.0]], [[0.5]])) is True


def test_metric_is_used_for_movement():
    # Manhattan shift of (0.3, 0.3) is 0.6 > 0.5, Euclidean is ~0.42 < 0.5
    old, new = [[0.0, 0.0]], [[0.3, 0.3]]
    assert CentroidShift(tol=0.5).check(_state(old, new)) is True
    assert CentroidShift(tol=0.5, distance=ManhattanDistance()).check(_state(old, new)) is False


def test_shape_mismatch_raises():
    crit = CentroidShift()
    with pytest.raises(ValueError):
        crit.check(_state([[0.0, 0.0]], [[0.0, 0.0], [1.0, 1.0]]))


def test_reset_clears_history():
    crit = CentroidShift()
    crit.check(_state([[0.0]], [[1.0]]))
    crit.reset()
    assert crit.history == []
    assert crit.last_max_shift == 0.0

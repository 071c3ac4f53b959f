"""
Convergence criteria for the iterative engine.

A run is declared converged when no centroid moved further than the
tolerance between two consecutive iterations.
"""

from typing import Dict, Any, Optional
import torch
from torch import Tensor

from ..base.interfaces import ConvergenceCriterion, DistanceMetric
from ..distances.euclidean import EuclideanDistance


class CentroidShift(ConvergenceCriterion):
    """Convergence based on how far each centroid moved in one step."""

    def __init__(self, tol: float = 1e-3,
                 distance: Optional[DistanceMetric] = None):
        """
        Args:
            tol: Largest per-centroid movement still counted as stable.
                 Movement equal to tol counts as converged.
            distance: Metric used to measure movement (Euclidean by default)
        """
        super().__init__()
        self.tol = tol
        self.distance = distance if distance is not None else EuclideanDistance()

    def shifts(self, old_centroids: Tensor, new_centroids: Tensor) -> Tensor:
        """(k,) movement of each centroid between two iterations."""
        if old_centroids.shape != new_centroids.shape:
            raise ValueError(f"Centroid shapes differ: {tuple(old_centroids.shape)} "
                             f"vs {tuple(new_centroids.shape)}")
        return self.distance.paired(old_centroids, new_centroids)

    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if every centroid pair is within tolerance."""
        shifts = self.shifts(current_state['old_centroids'],
                             current_state['new_centroids'])
        max_shift = shifts.max().item()
        converged = bool(torch.all(shifts <= self.tol).item())

        self.history.append({
            'iteration': current_state.get('iteration', len(self.history)),
            'max_shift': max_shift,
            'converged': converged
        })

        return converged

    @property
    def last_max_shift(self) -> float:
        """Largest movement seen in the most recent check."""
        if not self.history:
            return 0.0
        return self.history[-1]['max_shift']

"""
Stepwise k-means engine.

Owns the partition-refinement loop. Unlike a monolithic ``fit``, the loop is
exposed one iteration at a time so that a host can render every assignment
and centroid move:

    engine = ClusteringEngine()
    state = engine.initialize(points, config)
    while not state.finished:
        result = engine.step(state)

The engine holds no run state of its own; everything lives in the
``EngineState`` returned by ``initialize``, so one engine can serve any
number of independent runs.
"""

from typing import Optional, List, Tuple
import time
import warnings
import torch
from torch import Tensor

from .base.data_structures import (
    ClusteringConfiguration, EngineState, IterationResult, QualityReport
)
from .base.exceptions import InvalidConfiguration, NotFitted
from .base.interfaces import DistanceMetric
from .distances import get_distance_metric
from .initialization import create_initialization
from .utils.convergence import CentroidShift
from .utils.linalg import cluster_means
from .utils.metrics import (
    silhouette_score, davies_bouldin_score, calinski_harabasz_score, quality_score
)
from .utils.validation import validate_points, check_n_clusters, check_random_state


def assign_points(points: Tensor, centroids: Tensor, distance: DistanceMetric) -> Tensor:
    """Index of the nearest centroid for every point.

    Exact ties resolve to the lowest centroid index.

    Returns:
        (n,) long tensor of cluster indices
    """
    distances = distance.pairwise(points, centroids)
    return torch.argmin(distances, dim=1)


class ClusteringEngine:
    """Iterative centroid refinement (Lloyd's algorithm) one step at a time."""

    def __init__(self, verbose: int = 0):
        """
        Args:
            verbose: Verbosity level (0=silent, 1=progress, 2=detailed)
        """
        self.verbose = verbose

    def initialize(self, points, config: ClusteringConfiguration) -> EngineState:
        """Validate the input and choose the initial centroids.

        Args:
            points: (n, d) points as tensor, array or nested list
            config: Run configuration

        Returns:
            Fresh state at iteration 0

        Raises:
            InvalidInput: Empty, ragged or non-finite points, or fewer than k
            InvalidConfiguration: Bad k or bad manual centroids
        """
        X = validate_points(points)
        n_points, dimension = X.shape
        check_n_clusters(config.k, n_points)

        distance = get_distance_metric(config.distance_metric)
        generator = check_random_state(config.seed)
        strategy = create_initialization(config, distance)

        if self.verbose:
            print(f"Initializing {config.k} clusters ({config.init_method}) "
                  f"for {n_points} points in {dimension}D...")

        centroids = strategy.initialize(X, config.k, generator=generator)

        if self.verbose >= 2:
            print(f"Initial centroids:\n{centroids}")

        return EngineState(
            points=X,
            config=config,
            centroids=centroids,
            distance=distance,
            generator=generator,
            criterion=CentroidShift(tol=config.tolerance, distance=distance),
            initial_centroids=centroids.clone()
        )

    def step(self, state: EngineState) -> IterationResult:
        """Run one assignment / update / convergence iteration.

        Mutates ``state`` in place and returns a snapshot of the iteration.

        Raises:
            RuntimeError: If the run has already finished
            InvalidConfiguration: If the centroid state does not match (k, d)
        """
        if state.finished:
            raise RuntimeError(f"Run already finished after {state.iteration} iterations")

        expected = (state.config.k, state.dimension)
        if tuple(state.centroids.shape) != expected:
            raise InvalidConfiguration(f"Centroid state has shape {tuple(state.centroids.shape)}, "
                                       f"expected {expected}")

        iter_start_time = time.time()
        iteration = state.iteration + 1
        old_centroids = state.centroids

        # Assignment step
        assignments = assign_points(state.points, old_centroids, state.distance)

        # Update step
        new_centroids = cluster_means(state.points, assignments, old_centroids)

        # Convergence test
        converged = state.criterion.check({
            'iteration': iteration,
            'old_centroids': old_centroids,
            'new_centroids': new_centroids
        })

        # Inertia against the updated centroids
        point_distances = state.distance.paired(state.points, new_centroids[assignments])
        inertia_value = torch.sum(point_distances * point_distances).item()

        state.iteration = iteration
        state.assignments = assignments
        state.centroids = new_centroids
        state.converged = converged
        state.inertia = inertia_value

        if self.verbose >= 2:
            iter_time = time.time() - iter_start_time
            print(f"Iteration {iteration:3d}: inertia = {inertia_value:.6f} "
                  f"max_shift = {state.criterion.last_max_shift:.2e} ({iter_time:.3f}s)")

        return IterationResult(
            iteration=iteration,
            assignments=assignments.clone(),
            centroids=new_centroids.clone(),
            inertia=inertia_value,
            converged=converged,
            max_shift=state.criterion.last_max_shift
        )

    def is_converged(self, state: EngineState) -> bool:
        """Whether the last step moved every centroid by at most the tolerance."""
        return state.converged

    def run(self, points, config: ClusteringConfiguration) -> Tuple[EngineState, List[IterationResult]]:
        """Run to completion outside any animation loop.

        Returns:
            Final state and the full history of iteration results
        """
        start_time = time.time()
        state = self.initialize(points, config)
        history = []

        while not state.finished:
            history.append(self.step(state))

            if self.verbose == 1 and state.iteration % 10 == 0:
                print(f"Iteration {state.iteration:3d}: inertia = {state.inertia:.6f}")

        total_time = time.time() - start_time

        if self.verbose:
            if state.converged:
                print(f"Converged at iteration {state.iteration}")
            else:
                warnings.warn(f"Failed to converge after {config.max_iterations} iterations")
            print(f"Total fitting time: {total_time:.3f}s")

        return state, history

    def quality_report(self, state: EngineState,
                       silhouette_sample_size: Optional[int] = None) -> QualityReport:
        """Quality metrics of the current assignment.

        Args:
            state: State after at least one step
            silhouette_sample_size: Subsample size for the O(n^2) silhouette;
                None computes it exactly

        Raises:
            NotFitted: If no step has been taken yet
        """
        if state.assignments is None:
            raise NotFitted("No assignment yet; call step() at least once")

        k = state.config.k
        labels = state.assignments
        sizes = torch.bincount(labels, minlength=k).tolist()

        silhouette = silhouette_score(state.points, labels, n_clusters=k,
                                      metric=state.config.distance_metric,
                                      sample_size=silhouette_sample_size,
                                      generator=state.generator)

        return QualityReport(
            inertia=state.inertia,
            silhouette_score=silhouette,
            cluster_sizes=sizes,
            davies_bouldin_score=davies_bouldin_score(state.points, labels,
                                                      state.centroids, n_clusters=k),
            calinski_harabasz_score=calinski_harabasz_score(state.points, labels, n_clusters=k),
            quality_score=quality_score(silhouette, sizes, state.converged)
        )

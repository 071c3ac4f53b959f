"""
Elbow-method selection of the number of clusters.

A batch utility: it performs one complete run per candidate k, so it belongs
outside the per-frame path of an animation.
"""

from typing import Optional, Sequence, Dict, Tuple

from ..base.data_structures import ClusteringConfiguration, ElbowResult
from ..base.exceptions import InvalidInput
from ..engine import ClusteringEngine
from ..utils.metrics import silhouette_score
from ..utils.validation import validate_points


def find_optimal_k(points, max_k: int = 10,
                   config: Optional[ClusteringConfiguration] = None,
                   silhouette_sample_size: Optional[int] = None,
                   verbose: int = 0) -> ElbowResult:
    """Choose k by the largest second difference of the inertia curve.

    Runs the full algorithm independently for every k in
    ``1..min(max_k, n - 1)`` and records the final inertia. The elbow
    strength of an interior k is
    ``(inertia[k-1] - inertia[k]) - (inertia[k] - inertia[k+1])``; the
    strongest elbow wins, ties going to the lowest k.
    See ``select_elbow`` for how negative strengths are handled.

    Args:
        points: (n, d) points, n >= 2
        max_k: Largest k to try
        config: Template configuration; its k is replaced for every run.
            Manual initialization cannot be swept and is replaced by k-means++.
        silhouette_sample_size: Passed to the silhouette of every run
        verbose: Verbosity level (0=silent, 1=one line per k)

    Returns:
        ElbowResult with the chosen k and the per-k table
    """
    X = validate_points(points)
    n_points = X.shape[0]
    upper = min(max_k, n_points - 1)
    if upper < 1:
        raise InvalidInput(f"Elbow sweep needs at least 2 points and max_k >= 1, "
                           f"got {n_points} points and max_k={max_k}")

    if config is None:
        config = ClusteringConfiguration(k=1)
    elif config.init_method == 'manual':
        config = ClusteringConfiguration(
            k=1,
            max_iterations=config.max_iterations,
            tolerance=config.tolerance,
            distance_metric=config.distance_metric,
            seed=config.seed
        )

    engine = ClusteringEngine()
    ks = list(range(1, upper + 1))
    inertias = []
    silhouettes = []

    for k in ks:
        state, _ = engine.run(X, config.with_k(k))
        inertias.append(state.inertia)
        silhouettes.append(silhouette_score(X, state.assignments, n_clusters=k,
                                            metric=config.distance_metric,
                                            sample_size=silhouette_sample_size,
                                            generator=state.generator))
        if verbose:
            print(f"k={k:2d}: inertia = {inertias[-1]:.6f}, "
                  f"silhouette = {silhouettes[-1]:.4f}")

    optimal_k, strengths = select_elbow(ks, inertias)

    if verbose:
        print(f"Optimal k = {optimal_k}")

    return ElbowResult(
        optimal_k=optimal_k,
        ks=ks,
        inertias=inertias,
        silhouette_scores=silhouettes,
        strengths=strengths
    )


def select_elbow(ks: Sequence[int],
                 inertias: Sequence[float]) -> Tuple[int, Dict[int, float]]:
    """Pick the k with the largest second difference of the inertia curve.

    Every interior k is a candidate, including when all strengths are zero
    or negative: the largest value wins even then, so a curve without a
    convex bend still yields its least concave point rather than falling
    back to k=1. Ties go to the lowest k. With fewer than three ks there is
    no interior point and the first k is returned.

    Returns:
        Chosen k and the strength of every interior k
    """
    strengths = {}
    optimal_k = ks[0]
    best_strength = None

    for i in range(1, len(ks) - 1):
        improvement = inertias[i - 1] - inertias[i]
        next_improvement = inertias[i] - inertias[i + 1]
        strength = improvement - next_improvement
        strengths[ks[i]] = strength

        if best_strength is None or strength > best_strength:
            best_strength = strength
            optimal_k = ks[i]

    return optimal_k, strengths

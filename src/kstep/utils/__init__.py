"""Utility functions for kstep."""

from .linalg import (
    vector_mean,
    cluster_means,
    data_bounds
)

from .convergence import CentroidShift

from .metrics import (
    pairwise_distances,
    cluster_sizes,
    inertia,
    silhouette_score,
    davies_bouldin_score,
    calinski_harabasz_score,
    quality_score
)

from .validation import (
    validate_points,
    check_n_clusters,
    check_random_state,
    validate_initial_centroids,
    minmax_scale,
    apply_minmax,
    invert_minmax
)

__all__ = [
    # Linear algebra
    'vector_mean',
    'cluster_means',
    'data_bounds',

    # Convergence criteria
    'CentroidShift',

    # Metrics
    'pairwise_distances',
    'cluster_sizes',
    'inertia',
    'silhouette_score',
    'davies_bouldin_score',
    'calinski_harabasz_score',
    'quality_score',

    # Validation
    'validate_points',
    'check_n_clusters',
    'check_random_state',
    'validate_initial_centroids',
    'minmax_scale',
    'apply_minmax',
    'invert_minmax'
]

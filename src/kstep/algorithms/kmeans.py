"""
K-means clustering estimator.

Batch facade over the stepwise engine, for callers that want a fitted model
rather than a frame-by-frame animation.
"""

from typing import Optional, Union, List
import torch
from torch import Tensor

from ..base.data_structures import ClusteringConfiguration, IterationResult, QualityReport
from ..base.exceptions import InvalidInput, NotFitted
from ..engine import ClusteringEngine, assign_points
from ..utils.validation import validate_points


class KMeans:
    """K-means clustering algorithm.

    Partitions data into K clusters by minimizing within-cluster sum of
    squared distances.

    Parameters
    ----------
    n_clusters : int
        Number of clusters
    init : str or array-like, default='kmeans++'
        Initialization method:
        - 'kmeans++' : K-means++ initialization
        - 'random' : Uniform random centroids inside the data bounds
        - array of shape (n_clusters, n_features) : Use as initial centers
    max_iter : int, default=100
        Maximum number of iterations
    tol : float, default=1e-3
        Convergence tolerance on per-centroid movement
    distance_metric : str, default='euclidean'
        'euclidean' or 'manhattan'
    verbose : int, default=0
        Verbosity level
    random_state : int, optional
        Random seed for reproducibility

    Attributes
    ----------
    cluster_centers_ : Tensor of shape (n_clusters, n_features)
        Cluster centroids
    labels_ : Tensor of shape (n_samples,)
        Cluster assignments for training data
    inertia_ : float
        Sum of squared distances to assigned cluster center
    n_iter_ : int
        Number of iterations run
    converged_ : bool
        Whether the run converged before max_iter
    history_ : list of IterationResult
        One entry per iteration
    """

    def __init__(self,
                 n_clusters: int,
                 init: Union[str, Tensor, List[List[float]]] = 'kmeans++',
                 max_iter: int = 100,
                 tol: float = 1e-3,
                 distance_metric: str = 'euclidean',
                 verbose: int = 0,
                 random_state: Optional[int] = None):
        self.n_clusters = n_clusters
        self.init = init
        self.max_iter = max_iter
        self.tol = tol
        self.distance_metric = distance_metric
        self.verbose = verbose
        self.random_state = random_state

        self.engine = ClusteringEngine(verbose=verbose)
        self.state_ = None
        self.history_: List[IterationResult] = []
        self.fitted_ = False

    @property
    def config(self) -> ClusteringConfiguration:
        """Run configuration built from the constructor parameters."""
        if isinstance(self.init, str):
            return ClusteringConfiguration(
                k=self.n_clusters,
                max_iterations=self.max_iter,
                tolerance=self.tol,
                init_method=self.init,
                distance_metric=self.distance_metric,
                seed=self.random_state
            )
        return ClusteringConfiguration(
            k=self.n_clusters,
            max_iterations=self.max_iter,
            tolerance=self.tol,
            init_method='manual',
            distance_metric=self.distance_metric,
            seed=self.random_state,
            initial_centroids=self.init
        )

    def fit(self, X, y=None) -> 'KMeans':
        """Fit K-means clustering.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Training data
        y : Ignored
            Not used, present for API consistency

        Returns
        -------
        self : KMeans
            Fitted estimator
        """
        self.state_, self.history_ = self.engine.run(X, self.config)
        self.fitted_ = True
        return self

    def fit_predict(self, X, y=None) -> Tensor:
        """Fit and return labels of the training data."""
        return self.fit(X).labels_

    def predict(self, X) -> Tensor:
        """Predict cluster labels for new data.

        The fitted centroids are not modified.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            New data to predict

        Returns
        -------
        labels : Tensor of shape (n_samples,)
            Index of the nearest fitted centroid

        Raises
        ------
        NotFitted
            If called before fit
        """
        self._check_fitted()
        X = validate_points(X)
        if X.shape[1] != self.state_.dimension:
            raise InvalidInput(f"Expected dimension {self.state_.dimension}, got {X.shape[1]}")
        return assign_points(X, self.state_.centroids, self.state_.distance)

    def score(self, X, y=None) -> float:
        """Opposite of the value of X on the K-means objective."""
        X = validate_points(X)
        labels = self.predict(X)
        distances = self.state_.distance.paired(X, self.state_.centroids[labels])
        return -torch.sum(distances * distances).item()

    def quality_report(self, silhouette_sample_size: Optional[int] = None) -> QualityReport:
        """Quality metrics of the training assignment."""
        self._check_fitted()
        return self.engine.quality_report(self.state_, silhouette_sample_size)

    def _check_fitted(self) -> None:
        if not self.fitted_:
            raise NotFitted("Model must be fitted before calling predict")

    @property
    def cluster_centers_(self) -> Tensor:
        self._check_fitted()
        return self.state_.centroids.clone()

    @property
    def labels_(self) -> Tensor:
        self._check_fitted()
        return self.state_.assignments.clone()

    @property
    def inertia_(self) -> float:
        self._check_fitted()
        return self.state_.inertia

    @property
    def n_iter_(self) -> int:
        self._check_fitted()
        return self.state_.iteration

    @property
    def converged_(self) -> bool:
        self._check_fitted()
        return self.state_.converged

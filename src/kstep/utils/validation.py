"""
Input validation and preprocessing utilities.

Provides functions for validating point sets and run parameters before
clustering, and the min-max scaling the driver applies to raw input.
"""

from typing import Optional, Union, Tuple, Dict, Sequence
import torch
from torch import Tensor
import numpy as np

from ..base.exceptions import InvalidInput, InvalidConfiguration


ArrayLike = Union[Tensor, np.ndarray, Sequence[Sequence[float]]]


def validate_points(X: ArrayLike,
                    dtype: torch.dtype = torch.float64,
                    device: Optional[torch.device] = None,
                    ensure_min_samples: int = 1,
                    copy: bool = True) -> Tensor:
    """Validate and convert a point set to a 2D tensor.

    Args:
        X: Points as tensor, numpy array, or sequence of equal-length vectors
        dtype: Target data type
        device: Target device
        ensure_min_samples: Minimum number of points required
        copy: Whether to force a copy, so the caller's data is never aliased

    Returns:
        (n, d) validated tensor

    Raises:
        InvalidInput: If the points are empty, ragged, non-numeric or non-finite
    """
    if isinstance(X, Tensor):
        X = X.detach().to(dtype=dtype, device=device)
        if copy:
            X = X.clone()
    elif isinstance(X, np.ndarray):
        if X.dtype == object:
            X = X.tolist()
        else:
            try:
                X = torch.tensor(X, dtype=dtype, device=device)
            except (TypeError, ValueError) as e:
                raise InvalidInput(f"Points are not numeric: {e}") from e

    if not isinstance(X, Tensor):
        X = _sequence_to_tensor(X, dtype, device)

    # Ensure 2D
    if X.dim() == 1:
        X = X.unsqueeze(1)
    elif X.dim() != 2:
        raise InvalidInput(f"Expected 2D point set, got {X.dim()}D")

    n_samples, n_features = X.shape

    if n_samples == 0:
        raise InvalidInput("Point set is empty")
    if n_features == 0:
        raise InvalidInput("Points have zero dimensions")
    if n_samples < ensure_min_samples:
        raise InvalidInput(f"Found {n_samples} points, but need at least "
                           f"{ensure_min_samples}")

    # Check for finite values
    if torch.isnan(X).any():
        raise InvalidInput("Points contain NaN values")
    if torch.isinf(X).any():
        raise InvalidInput("Points contain infinite values")

    return X


def _sequence_to_tensor(X, dtype: torch.dtype,
                        device: Optional[torch.device]) -> Tensor:
    """Convert a (possibly ragged) nested sequence, reporting raggedness."""
    try:
        rows = list(X)
    except TypeError as e:
        raise InvalidInput(f"Cannot convert {type(X).__name__} to a point set") from e

    if len(rows) == 0:
        raise InvalidInput("Point set is empty")

    first = rows[0]
    if isinstance(first, (list, tuple, np.ndarray, Tensor)):
        dimension = len(first)
        for i, row in enumerate(rows):
            if not isinstance(row, (list, tuple, np.ndarray, Tensor)) or len(row) != dimension:
                raise InvalidInput(
                    f"Inconsistent dimensionality: point 0 has {dimension} "
                    f"coordinates, point {i} does not")

    try:
        if isinstance(first, (Tensor, np.ndarray)):
            return torch.stack([torch.as_tensor(row) for row in rows]).to(
                dtype=dtype, device=device)
        return torch.tensor(rows, dtype=dtype, device=device)
    except (TypeError, ValueError, RuntimeError) as e:
        raise InvalidInput(f"Points are not numeric: {e}") from e


def check_n_clusters(n_clusters: int, n_samples: int) -> None:
    """Validate number of clusters against the number of points.

    Args:
        n_clusters: Number of clusters
        n_samples: Number of points

    Raises:
        InvalidConfiguration: If k is not a positive int
        InvalidInput: If there are fewer points than clusters
    """
    if isinstance(n_clusters, bool) or not isinstance(n_clusters, int):
        raise InvalidConfiguration(f"n_clusters must be int, got {type(n_clusters).__name__}")

    if n_clusters <= 0:
        raise InvalidConfiguration(f"n_clusters must be positive, got {n_clusters}")

    if n_clusters > n_samples:
        raise InvalidInput(f"n_clusters ({n_clusters}) cannot be larger than "
                           f"the number of points ({n_samples})")


def check_random_state(random_state: Optional[Union[int, torch.Generator]]) -> torch.Generator:
    """Create generator from random state.

    Args:
        random_state: Seed, generator, or None for a non-deterministic seed

    Returns:
        Generator owned by one run
    """
    if isinstance(random_state, torch.Generator):
        return random_state

    generator = torch.Generator()
    if random_state is None:
        generator.seed()
    elif isinstance(random_state, (int, np.integer)) and not isinstance(random_state, bool):
        generator.manual_seed(int(random_state))
    else:
        raise InvalidConfiguration(
            f"seed must be int or Generator, got {type(random_state).__name__}")
    return generator


def validate_initial_centroids(centroids: ArrayLike, n_clusters: int,
                               n_features: int,
                               dtype: torch.dtype = torch.float64) -> Tensor:
    """Validate caller supplied starting centroids.

    Returns:
        (n_clusters, n_features) tensor

    Raises:
        InvalidConfiguration: On wrong count, wrong dimension or bad values
    """
    if centroids is None:
        raise InvalidConfiguration("Manual initialization requires initial centroids")

    try:
        tensor = validate_points(centroids, dtype=dtype)
    except InvalidInput as e:
        raise InvalidConfiguration(f"Invalid initial centroids: {e}") from e

    if tensor.shape[0] != n_clusters:
        raise InvalidConfiguration(f"Got {tensor.shape[0]} initial centroids, "
                                   f"but k={n_clusters}")
    if tensor.shape[1] != n_features:
        raise InvalidConfiguration(f"Initial centroids have dimension {tensor.shape[1]}, "
                                   f"but points have dimension {n_features}")
    return tensor


def minmax_scale(X: Tensor) -> Tuple[Tensor, Dict[str, Tensor]]:
    """Scale every dimension to [0, 1].

    Dimensions with zero range are divided by 1 instead, so constant
    coordinates map to 0.

    Returns:
        Scaled data and the parameters needed by ``apply_minmax``
    """
    min_vals = X.min(dim=0, keepdim=True)[0]
    max_vals = X.max(dim=0, keepdim=True)[0]
    range_vals = max_vals - min_vals
    range_vals = torch.where(range_vals == 0, torch.ones_like(range_vals), range_vals)
    params = {'min': min_vals, 'range': range_vals}
    return apply_minmax(X, params), params


def apply_minmax(X: Tensor, params: Dict[str, Tensor]) -> Tensor:
    """Apply scaling parameters from ``minmax_scale`` to new data."""
    if X.shape[1] != params['min'].shape[1]:
        raise InvalidInput(f"Expected dimension {params['min'].shape[1]}, got {X.shape[1]}")
    return (X - params['min']) / params['range']


def invert_minmax(X: Tensor, params: Dict[str, Tensor]) -> Tensor:
    """Map scaled data back to the original coordinate system."""
    return X * params['range'] + params['min']

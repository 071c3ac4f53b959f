"""
Global pytest fixtures for kstep tests.

- Seeds Python, NumPy and PyTorch so that tests which do not pass an explicit
  seed are still reproducible.
- Forces single-threaded torch for stable reductions and timings.
- Provides small synthetic point sets shared across test modules.
"""

from __future__ import annotations

import os
import random
import sys
from typing import Generator
from pathlib import Path

import numpy as np
import pytest

try:
    import torch
except Exception:  # pragma: no cover
    torch = None  # type: ignore

# Add the project's src directory to the Python path so tests can import the code
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))


def _get_seed() -> int:
    """Resolve the test seed from env or default."""
    env = os.getenv("TEST_RANDOM_SEED", "1337")
    try:
        return int(env)
    except ValueError:
        return 1337


@pytest.fixture(scope="session", autouse=True)
def seed_all() -> None:
    """
    Seed Python, NumPy, and PyTorch RNGs once per session.

    Seed value comes from TEST_RANDOM_SEED (default 1337). The engine itself
    draws from a per-run torch.Generator, so this only covers test-side data.
    """
    seed = _get_seed()
    random.seed(seed)
    np.random.seed(seed)
    if torch is not None:
        torch.manual_seed(seed)


@pytest.fixture(scope="session", autouse=True)
def set_torch_threads() -> None:
    """Reduce PyTorch to a single thread."""
    if torch is not None and hasattr(torch, "set_num_threads"):
        torch.set_num_threads(1)


@pytest.fixture(scope="function")
def rng(seed_all: None) -> Generator[np.random.Generator, None, None]:
    """Per-test NumPy Generator seeded from the session seed."""
    gen = np.random.default_rng(_get_seed())
    yield gen


@pytest.fixture(scope="session")
def torch_device() -> "torch.device | None":
    """Standard device for tests; pinned to CPU."""
    if torch is None:
        return None
    return torch.device("cpu")


@pytest.fixture(scope="function")
def three_blobs(rng: np.random.Generator) -> "torch.Tensor":
    """150 points in three tight, well separated 2D blobs (50 each, in order)."""
    centers = np.array([[0.0, 0.0], [10.0, 0.0], [5.0, 10.0]])
    X = np.vstack([rng.normal(loc=c, scale=0.3, size=(50, 2)) for c in centers])
    return torch.tensor(X, dtype=torch.float64)


@pytest.fixture(scope="session")
def two_pairs() -> "torch.Tensor":
    """Two pairs of points one unit apart, the pairs far from each other."""
    return torch.tensor([[0.0, 0.0], [0.0, 1.0], [10.0, 10.0], [10.0, 11.0]],
                        dtype=torch.float64)

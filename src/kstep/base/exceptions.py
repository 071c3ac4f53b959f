"""
Exception types raised by the clustering engine and driver.

They subclass the builtin exceptions that callers would otherwise expect
(``ValueError`` for bad data or parameters, ``RuntimeError`` for using a
model before it has been fitted), so existing ``except ValueError`` handlers
keep working.
"""


class ClusteringError(Exception):
    """Base class for all kstep errors."""


class InvalidInput(ClusteringError, ValueError):
    """Points are empty, ragged, non-finite, or fewer than k."""


class InvalidConfiguration(ClusteringError, ValueError):
    """Bad k, bad manual centroids, unknown init method or distance metric."""


class NotFitted(ClusteringError, RuntimeError):
    """A query needing fitted centroids was made before any completed run."""

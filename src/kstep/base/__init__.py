"""Base classes, interfaces and data structures for kstep."""

from .exceptions import (
    ClusteringError,
    InvalidInput,
    InvalidConfiguration,
    NotFitted
)

from .interfaces import (
    DistanceMetric,
    InitializationStrategy,
    ConvergenceCriterion,
    ClusteringObserver
)

from .data_structures import (
    INIT_METHODS,
    DISTANCE_METRICS,
    ClusteringConfiguration,
    IterationResult,
    EngineState,
    RunMetadata,
    QualityReport,
    ElbowResult
)

__all__ = [
    # Exceptions
    'ClusteringError',
    'InvalidInput',
    'InvalidConfiguration',
    'NotFitted',

    # Interfaces
    'DistanceMetric',
    'InitializationStrategy',
    'ConvergenceCriterion',
    'ClusteringObserver',

    # Data structures
    'INIT_METHODS',
    'DISTANCE_METRICS',
    'ClusteringConfiguration',
    'IterationResult',
    'EngineState',
    'RunMetadata',
    'QualityReport',
    'ElbowResult'
]

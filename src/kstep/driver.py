"""
Frame-stepped clustering driver.

Wraps the engine in a small state machine so that a host can advance a run
one iteration per animation frame:

    IDLE --start--> RUNNING <--pause/resume--> PAUSED
    RUNNING --tick (converged or out of iterations)--> COMPLETED
    RUNNING / PAUSED --stop or error--> STOPPED
    any --reset--> IDLE

The driver owns no timer. The host calls ``tick()`` from whatever scheduler
it has (a frame callback, a timer, or a plain loop in tests) and every call
does at most one O(n k) engine step.
"""

from dataclasses import replace
from enum import Enum
from typing import Optional, List, Callable, Iterable, Dict
import time
import torch
from torch import Tensor

from .base.data_structures import (
    ClusteringConfiguration, EngineState, IterationResult, QualityReport, RunMetadata
)
from .base.exceptions import InvalidInput, NotFitted
from .base.interfaces import ClusteringObserver
from .engine import ClusteringEngine, assign_points
from .utils.validation import (
    validate_points, validate_initial_centroids, minmax_scale, apply_minmax, invert_minmax
)


ALGORITHM_NAME = 'kmeans'


class DriverState(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    PAUSED = 'paused'
    COMPLETED = 'completed'
    STOPPED = 'stopped'


class ClusteringDriver:
    """Stepwise animator around a ``ClusteringEngine``.

    Raw points are min-max scaled to [0, 1] per dimension before clustering
    (unless ``normalize=False``); the scaled points are what a renderer
    should draw, and ``predict`` applies the same scaling to new points.

    Starting a new run while one is RUNNING or PAUSED stops the old run and
    starts the new one.
    """

    def __init__(self,
                 observers: Optional[Iterable[ClusteringObserver]] = None,
                 engine: Optional[ClusteringEngine] = None,
                 normalize: bool = True,
                 silhouette_sample_size: Optional[int] = None,
                 verbose: int = 0,
                 clock: Callable[[], float] = time.perf_counter):
        """
        Args:
            observers: Receivers of start / update / complete / error events
            engine: Engine to drive (a fresh one if None)
            normalize: Scale every dimension to [0, 1] before clustering
            silhouette_sample_size: Subsample size for the final silhouette
            verbose: Verbosity level (0=silent, 1=lifecycle, 2=every tick)
            clock: Monotonic time source in seconds
        """
        self.observers: List[ClusteringObserver] = list(observers or [])
        self.engine = engine if engine is not None else ClusteringEngine()
        self.normalize = normalize
        self.silhouette_sample_size = silhouette_sample_size
        self.verbose = verbose
        self.clock = clock

        self._state = DriverState.IDLE
        self._config: Optional[ClusteringConfiguration] = None
        self._engine_state: Optional[EngineState] = None
        self._history: List[IterationResult] = []
        self._report: Optional[QualityReport] = None
        self._scaling: Optional[Dict[str, Tensor]] = None
        self._fitted_centroids: Optional[Tensor] = None
        self._fitted_distance = None
        self._fitted_scaling: Optional[Dict[str, Tensor]] = None
        self._start_time = 0.0

    # Observers

    def add_observer(self, observer: ClusteringObserver) -> None:
        if observer not in self.observers:
            self.observers.append(observer)

    def remove_observer(self, observer: ClusteringObserver) -> None:
        if observer in self.observers:
            self.observers.remove(observer)

    # Lifecycle

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == DriverState.RUNNING

    @property
    def config(self) -> Optional[ClusteringConfiguration]:
        return self._config

    def start(self, points, config: ClusteringConfiguration) -> None:
        """Validate the input, initialize a run and enter RUNNING.

        Manual initial centroids are given in raw coordinates and go through
        the same scaling as the points.

        A failure here happens before any run exists, so the driver stays
        IDLE rather than moving to STOPPED; only failures during ``tick``
        stop a run.

        Raises:
            InvalidInput, InvalidConfiguration: After an ``error`` event; the
                driver is left IDLE with no run
        """
        if self._state in (DriverState.RUNNING, DriverState.PAUSED):
            self.stop()
        self._clear_run()
        self._state = DriverState.IDLE

        try:
            X = validate_points(points)
            if self.normalize:
                X, self._scaling = minmax_scale(X)
            engine_state = self.engine.initialize(X, self._scaled_config(config, X.shape[1]))
        except Exception as e:
            self._clear_run()
            self._emit_error(e)
            raise

        self._config = config
        self._engine_state = engine_state
        self._start_time = self.clock()
        self._state = DriverState.RUNNING

        if self.verbose:
            print(f"Starting {ALGORITHM_NAME} clustering with {config.k} clusters "
                  f"on {engine_state.n_points} points")

        for observer in list(self.observers):
            observer.on_start(ALGORITHM_NAME, config)

    def tick(self) -> Optional[IterationResult]:
        """Advance the run by one iteration.

        A no-op returning None unless the driver is RUNNING. When the step
        converges or reaches the iteration cap, the ``update`` event is
        followed by ``complete`` and the driver enters COMPLETED.

        Raises:
            Any engine failure, after an ``error`` event and a move to STOPPED
        """
        if self._state != DriverState.RUNNING:
            return None

        try:
            result = self.engine.step(self._engine_state)
        except Exception as e:
            self._state = DriverState.STOPPED
            self._emit_error(e)
            raise

        self._history.append(result)
        metadata = self.metadata

        if self.verbose >= 2:
            print(f"Iteration {result.iteration:3d}: inertia = {result.inertia:.6f} "
                  f"({metadata.elapsed:.3f}s)")

        for observer in list(self.observers):
            observer.on_update(result, metadata)

        if self._engine_state.finished:
            self._complete()

        return result

    def run_to_completion(self) -> List[IterationResult]:
        """Tick until the run leaves RUNNING; for tests and headless hosts."""
        while self._state == DriverState.RUNNING:
            self.tick()
        return self.get_history()

    def pause(self) -> None:
        """Suspend ticking; pausing an already paused run does nothing."""
        if self._state == DriverState.PAUSED:
            return
        if self._state != DriverState.RUNNING:
            raise RuntimeError(f"Cannot pause a run in state {self._state.value}")
        self._state = DriverState.PAUSED
        if self.verbose:
            print("Clustering paused")

    def resume(self) -> None:
        """Continue a paused run; resuming a running run does nothing."""
        if self._state == DriverState.RUNNING:
            return
        if self._state != DriverState.PAUSED:
            raise RuntimeError(f"Cannot resume a run in state {self._state.value}")
        self._state = DriverState.RUNNING
        if self.verbose:
            print("Clustering resumed")

    def toggle_pause(self) -> DriverState:
        """Flip between RUNNING and PAUSED; returns the new state."""
        if self._state == DriverState.PAUSED:
            self.resume()
        else:
            self.pause()
        return self._state

    def stop(self) -> None:
        """Halt a RUNNING or PAUSED run, keeping its history for inspection.

        Does nothing when there is no active run.
        """
        if self._state not in (DriverState.RUNNING, DriverState.PAUSED):
            return
        self._state = DriverState.STOPPED
        if self.verbose:
            print(f"Clustering stopped after {self.iteration} iterations")

    def reset(self) -> None:
        """Discard the run, its history and fitted centroids; back to IDLE."""
        self._clear_run()
        self._fitted_centroids = None
        self._fitted_distance = None
        self._fitted_scaling = None
        self._state = DriverState.IDLE

    # Queries

    @property
    def iteration(self) -> int:
        return self._engine_state.iteration if self._engine_state is not None else 0

    @property
    def metadata(self) -> RunMetadata:
        """Cumulative metadata of the current run."""
        if self._engine_state is None:
            return RunMetadata(iteration=0, max_iterations=1, elapsed=0.0)
        return RunMetadata(
            iteration=self._engine_state.iteration,
            max_iterations=self._config.max_iterations,
            elapsed=self.clock() - self._start_time,
            converged=self._engine_state.converged
        )

    def get_history(self) -> List[IterationResult]:
        """Iteration results of the current (or last) run, oldest first."""
        return list(self._history)

    def get_points(self) -> Tensor:
        """Points as clustered, i.e. after normalization."""
        if self._engine_state is None:
            raise NotFitted("No run has been started")
        return self._engine_state.points.clone()

    def get_centroids(self, original_space: bool = False) -> Tensor:
        """Current centroids, optionally mapped back to raw coordinates."""
        if self._engine_state is None:
            raise NotFitted("No run has been started")
        centroids = self._engine_state.centroids.clone()
        if original_space and self._scaling is not None:
            centroids = invert_minmax(centroids, self._scaling)
        return centroids

    def get_assignments(self) -> Tensor:
        """Cluster index per point; -1 everywhere before the first tick."""
        if self._engine_state is None:
            raise NotFitted("No run has been started")
        if self._engine_state.assignments is None:
            return torch.full((self._engine_state.n_points,), -1, dtype=torch.long)
        return self._engine_state.assignments.clone()

    def get_cluster_sizes(self) -> List[int]:
        """Point count per cluster for the latest iteration."""
        if not self._history:
            raise NotFitted("No iteration has been run yet")
        return self._history[-1].cluster_sizes()

    def get_quality_report(self) -> QualityReport:
        """Quality metrics of the latest assignment.

        Cached once the run completes; computed on demand for a paused or
        stopped run.
        """
        if self._report is not None:
            return self._report
        if self._engine_state is None or self._engine_state.assignments is None:
            raise NotFitted("No iteration has been run yet")
        return self.engine.quality_report(self._engine_state, self.silhouette_sample_size)

    def predict(self, points) -> Tensor:
        """Classify unseen points against the last completed run.

        Points are given in raw coordinates and scaled like the training
        data. Fitted state is not modified.

        Raises:
            NotFitted: If no run has completed since the last reset
        """
        if self._fitted_centroids is None:
            raise NotFitted("Model must be fitted before prediction")

        X = validate_points(points)
        if X.shape[1] != self._fitted_centroids.shape[1]:
            raise InvalidInput(f"Expected dimension {self._fitted_centroids.shape[1]}, "
                               f"got {X.shape[1]}")
        if self._fitted_scaling is not None:
            X = apply_minmax(X, self._fitted_scaling)
        return assign_points(X, self._fitted_centroids, self._fitted_distance)

    # Internals

    def _scaled_config(self, config: ClusteringConfiguration,
                       dimension: int) -> ClusteringConfiguration:
        if self._scaling is None or config.init_method != 'manual':
            return config
        centroids = validate_initial_centroids(config.initial_centroids, config.k, dimension)
        return replace(config, initial_centroids=apply_minmax(centroids, self._scaling))

    def _complete(self) -> None:
        self._state = DriverState.COMPLETED
        self._report = self.engine.quality_report(self._engine_state,
                                                  self.silhouette_sample_size)
        self._fitted_centroids = self._engine_state.centroids.clone()
        self._fitted_distance = self._engine_state.distance
        self._fitted_scaling = self._scaling

        if self.verbose:
            status = "converged" if self._engine_state.converged else "reached max iterations"
            print(f"Clustering {status} after {self.iteration} iterations "
                  f"(inertia = {self._report.inertia:.6f}, "
                  f"silhouette = {self._report.silhouette_score:.4f})")

        history = self.get_history()
        for observer in list(self.observers):
            observer.on_complete(history, self._report)

    def _clear_run(self) -> None:
        self._config = None
        self._engine_state = None
        self._history = []
        self._report = None
        self._scaling = None
        self._start_time = 0.0

    def _emit_error(self, error: Exception) -> None:
        if self.verbose:
            print(f"Clustering failed: {error}")
        for observer in list(self.observers):
            observer.on_error(error)

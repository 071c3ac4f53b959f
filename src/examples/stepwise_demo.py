"""
Demo of stepwise k-means clustering.

This example shows how to:
1. Drive a run one iteration per "frame" and react to its events
2. Pause, resume and inspect the run
3. Pick k with the elbow method
4. Map points to screen space and hit-test a cursor
"""

import time

import torch

from kstep import (
    ClusteringDriver,
    ClusteringConfiguration,
    ClusteringObserver,
    DriverState,
    ViewTransform,
    Viewport,
    find_optimal_k,
)


def generate_blobs(n_points_per_cluster=100, centers=((0.0, 0.0), (6.0, 1.0), (3.0, 7.0)),
                   spread=0.8):
    """Gaussian blobs around fixed 2D centers."""
    torch.manual_seed(42)
    data = [torch.tensor(c, dtype=torch.float64) +
            spread * torch.randn(n_points_per_cluster, 2, dtype=torch.float64)
            for c in centers]
    return torch.cat(data, dim=0)


class ConsoleObserver(ClusteringObserver):
    """Prints one line per driver event."""

    def on_start(self, algorithm, config):
        print(f"[start] {algorithm} k={config.k} init={config.init_method}")

    def on_update(self, result, metadata):
        print(f"[update] iter {result.iteration:3d}  inertia {result.inertia:10.4f}  "
              f"shift {result.max_shift:.2e}  progress {metadata.progress:5.1%}")

    def on_complete(self, history, report):
        print(f"[complete] {len(history)} iterations, "
              f"silhouette {report.silhouette_score:.3f}, "
              f"quality {report.quality_score:.1f}/100, sizes {report.cluster_sizes}")

    def on_error(self, error):
        print(f"[error] {error}")


def main():
    X = generate_blobs()

    # Choose k first (batch, outside the frame loop)
    elbow = find_optimal_k(X, max_k=8, config=ClusteringConfiguration(k=1, seed=0))
    print(f"Elbow method suggests k = {elbow.optimal_k}")
    for k, inertia_value, silhouette in zip(elbow.ks, elbow.inertias, elbow.silhouette_scores):
        print(f"  k={k}: inertia {inertia_value:10.4f}, silhouette {silhouette:.3f}")

    driver = ClusteringDriver(observers=[ConsoleObserver()])
    driver.start(X, ClusteringConfiguration(k=elbow.optimal_k, init_method='random', seed=7))

    # Host frame loop; frames 3 and 4 are skipped while paused
    frame = 0
    while driver.state in (DriverState.RUNNING, DriverState.PAUSED):
        frame += 1
        if frame == 3:
            driver.pause()
        elif frame == 5:
            driver.resume()
        driver.tick()
        time.sleep(1 / 60)

    print("Centroids (original coordinates):")
    print(driver.get_centroids(original_space=True))

    # Screen mapping for a renderer
    view = ViewTransform(Viewport(800, 600))
    points = driver.get_points()
    view.zoom_in(anchor=(400.0, 300.0))
    cursor = view.to_screen(points[0])
    print(f"Point 0 is drawn at ({cursor.x:.1f}, {cursor.y:.1f}); "
          f"hit test there returns {view.hit_test(cursor, points)}")

    new_points = [[0.5, -0.2], [5.5, 1.5], [2.0, 8.0]]
    print(f"Predicted clusters for {new_points}: {driver.predict(new_points).tolist()}")


if __name__ == "__main__":
    main()

from typing import Callable

import numpy as np

from .._errors import DimensionMismatch


def has_cluster_changed(
    new_centers: np.ndarray,
    old_centers: np.ndarray,
    tolerance: float,
    distance: Callable,
) -> tuple[bool, float]:
    """
    Checks if any cluster center moved by more than the tolerance.

    Args:
        new_centers: The new cluster centers.
        old_centers: The old cluster centers.
        tolerance: Largest movement that does not count as a change.
        distance: The distance measure used to measure the movement.

    Returns:
        A tuple containing a boolean flag indicating if any cluster has changed
        and the largest movement of a single center.

    Raises:
        DimensionMismatch: If the shapes of new_centers and old_centers do not match.
    """
    if new_centers.shape[0] != old_centers.shape[0]:
        raise DimensionMismatch(old_centers.shape[0], new_centers.shape[0])
    if new_centers.shape[1:] != old_centers.shape[1:]:
        raise DimensionMismatch(old_centers.shape[1], new_centers.shape[1])

    largest_shift = 0.0
    for new_center, old_center in zip(new_centers, old_centers):
        largest_shift = max(largest_shift, float(distance(old_center, new_center)))
    return largest_shift > tolerance, largest_shift


def has_converged(
    previous_centroids: np.ndarray,
    new_centroids: np.ndarray,
    tolerance: float,
    iteration: int,
    max_iterations: int,
    distance: Callable,
) -> bool:
    """
    Decides whether training stops after this iteration.

    True when no centroid moved by more than `tolerance`, or when the iteration
    cap is reached. In the latter case the centroids are still usable, they just
    did not settle.

    Args:
        previous_centroids: Centroids broadcast at the start of the iteration.
        new_centroids: Centroids produced by the reduction.
        tolerance: Convergence threshold.
        iteration: 1-based number of the iteration that just finished.
        max_iterations: Hard iteration cap.
        distance: The distance measure.

    Returns:
        Whether to stop iterating.
    """
    changed, _ = has_cluster_changed(
        new_centroids, previous_centroids, tolerance, distance
    )
    return not changed or iteration >= max_iterations

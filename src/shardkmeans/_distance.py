from typing import Callable, Protocol

import numpy as np
import numpy.typing as npt


class DistanceMeasure(Protocol):
    """Anything that returns a non-negative, symmetric distance between two vectors."""

    def __call__(self, point_a: np.ndarray, point_b: np.ndarray) -> float:
        ...


class SquaredEuclideanDistance:
    """Squared Euclidean distance. The default measure for k-means."""

    name = "squared_euclidean"

    def __call__(self, point_a: np.ndarray, point_b: np.ndarray) -> float:
        diff = np.asarray(point_a, dtype=np.float64) - np.asarray(
            point_b, dtype=np.float64
        )
        return float(np.dot(diff, diff))

    @staticmethod
    def pairwise(items: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        """
        Squared distances between every item and every centroid.

        Args:
            items (np.ndarray): Array of shape (n_items, n_features).
            centroids (np.ndarray): Array of shape (n_clusters, n_features).

        Returns:
            np.ndarray: Distances of shape (n_items, n_clusters).
        """
        diff = items[:, np.newaxis, :] - centroids[np.newaxis, :, :]
        return np.einsum("ijk,ijk->ij", diff, diff)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class EuclideanDistance(SquaredEuclideanDistance):
    name = "euclidean"

    def __call__(self, point_a: np.ndarray, point_b: np.ndarray) -> float:
        return float(np.sqrt(super().__call__(point_a, point_b)))

    @staticmethod
    def pairwise(items: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        return np.sqrt(SquaredEuclideanDistance.pairwise(items, centroids))


class ManhattanDistance(SquaredEuclideanDistance):
    name = "manhattan"

    def __call__(self, point_a: np.ndarray, point_b: np.ndarray) -> float:
        return float(
            np.sum(
                np.abs(
                    np.asarray(point_a, dtype=np.float64)
                    - np.asarray(point_b, dtype=np.float64)
                )
            )
        )

    @staticmethod
    def pairwise(items: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        return np.abs(
            items[:, np.newaxis, :] - centroids[np.newaxis, :, :]
        ).sum(axis=2)


BUILTIN_DISTANCES: dict[str, type[SquaredEuclideanDistance]] = {
    cls.name: cls
    for cls in (SquaredEuclideanDistance, EuclideanDistance, ManhattanDistance)
}


def resolve_distance(distance: str | Callable | None) -> DistanceMeasure:
    """
    Turns a distance name or callable into a distance measure.

    Args:
        distance (str | Callable | None): A built-in measure name, any callable
            `distance(a, b) -> float`, or None for squared Euclidean.

    Returns:
        DistanceMeasure: The distance measure.

    Raises:
        ValueError: If the name is not a built-in measure.
    """
    if distance is None:
        return SquaredEuclideanDistance()
    if isinstance(distance, str):
        try:
            return BUILTIN_DISTANCES[distance]()
        except KeyError:
            raise ValueError(
                f"Unknown distance {distance!r}, expected one of "
                f"{sorted(BUILTIN_DISTANCES)}"
            ) from None
    if not callable(distance):
        raise ValueError(f"Distance must be callable, got {type(distance).__name__}")
    return distance


def pairwise_distances(
    items: npt.NDArray, centroids: npt.NDArray, distance: DistanceMeasure
) -> np.ndarray:
    """
    Distance matrix between items and centroids using the given measure.

    Measures that provide a vectorised `pairwise` method use it; plain
    callables are evaluated one pair at a time.

    Args:
        items (npt.NDArray): Array of shape (n_items, n_features).
        centroids (npt.NDArray): Array of shape (n_clusters, n_features).
        distance (Callable): The distance measure.

    Returns:
        np.ndarray: Distances of shape (n_items, n_clusters).
    """
    pairwise = getattr(distance, "pairwise", None)
    if pairwise is not None:
        return np.asarray(pairwise(items, centroids), dtype=np.float64)

    distances = np.empty((items.shape[0], centroids.shape[0]))
    for i, item in enumerate(items):
        for j, center in enumerate(centroids):
            distances[i, j] = distance(item, center)
    return distances

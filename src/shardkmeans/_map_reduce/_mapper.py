from dataclasses import dataclass
from typing import Callable

import numpy as np
import ray

from .._distance import pairwise_distances


@dataclass(frozen=True)
class PartitionAggregate:
    """
    The per-cluster partial sums one partition reports for one iteration.

    Attributes:
        partition_index (int): Index of the partition that computed the aggregate.
        sums (np.ndarray): Sum of the vectors assigned to each cluster, of shape
            (n_clusters, n_features). Zero rows for clusters with no records.
        counts (np.ndarray): Number of records assigned to each cluster, of shape (n_clusters,).
        cost (float): Sum of the distances from each record to its assigned centroid.
    """

    partition_index: int
    sums: np.ndarray
    counts: np.ndarray
    cost: float


def assign_clusters(
    items: np.ndarray, centroids: np.ndarray, distance: Callable
) -> tuple[np.ndarray, np.ndarray]:
    """
    Finds the closest centroid of every item.

    Args:
        items (np.ndarray): Array of shape (n_items, n_features).
        centroids (np.ndarray): Array of shape (n_clusters, n_features).
        distance (Callable): The distance measure.

    Returns:
        tuple[np.ndarray, np.ndarray]: Index of the closest centroid of each item,
        lowest index on ties, and the corresponding distance.
    """
    if items.shape[0] == 0:
        return np.empty(0, dtype=np.intp), np.empty(0)
    distances = pairwise_distances(items, centroids, distance)
    labels = np.argmin(distances, axis=1)
    return labels, distances[np.arange(items.shape[0]), labels]


def aggregate_partition(
    items: np.ndarray,
    centroids: np.ndarray,
    distance: Callable,
    partition_index: int = 0,
) -> PartitionAggregate:
    """
    Assigns every item of a partition and accumulates per-cluster sums and counts.

    This reads its inputs only, so partitions can be aggregated concurrently.

    Args:
        items (np.ndarray): The partition's vectors, of shape (n_items, n_features).
        centroids (np.ndarray): Current centroids, of shape (n_clusters, n_features).
        distance (Callable): The distance measure.
        partition_index (int, optional): Index of the partition. Defaults to 0.

    Returns:
        PartitionAggregate: The partition's contribution to the next centroids.
    """
    n_clusters, n_features = centroids.shape
    labels, min_distances = assign_clusters(items, centroids, distance)

    sums = np.zeros((n_clusters, n_features))
    np.add.at(sums, labels, items)
    counts = np.bincount(labels, minlength=n_clusters).astype(np.int64)
    for array in (sums, counts):
        array.setflags(write=False)

    return PartitionAggregate(
        partition_index=partition_index,
        sums=sums,
        counts=counts,
        cost=float(np.sum(min_distances)),
    )


@ray.remote
class KMeansMap:
    """
    A remote Ray actor that keeps one partition resident and aggregates it on demand.

    Args:
        items (np.ndarray): The partition's vectors.
        partition_index (int): Index of the partition.

    Attributes:
        items (np.ndarray): The partition's vectors.
        partition_index (int): Index of the partition.
    """

    def __init__(self, items: np.ndarray, partition_index: int) -> None:
        self.items = items
        self.partition_index = partition_index

    def read_items(self) -> np.ndarray:
        """
        Reads the input array of items.

        Returns:
            np.ndarray: The input array of items
        """
        return self.items

    def aggregate(self, centroids: np.ndarray, distance: Callable) -> PartitionAggregate:
        """
        Aggregates the partition against the broadcast centroids.

        Args:
            centroids (np.ndarray): The centroids of the current iteration.
            distance (Callable): The distance measure.

        Returns:
            PartitionAggregate: The partition's sums, counts and cost.
        """
        return aggregate_partition(
            self.items, centroids, distance, self.partition_index
        )

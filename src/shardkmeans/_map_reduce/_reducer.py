from collections.abc import Sequence

import numpy as np

from .._errors import PartitionFailure
from ._mapper import PartitionAggregate


def reduce_aggregates(
    aggregates: Sequence[PartitionAggregate],
    previous_centroids: np.ndarray,
    n_partitions: int | None = None,
) -> np.ndarray:
    """
    Merges the aggregates of all partitions into the next centroids.

    Sums and counts are accumulated in ascending partition index order, whatever
    order the aggregates arrived in, so floating point results are reproducible.
    A cluster with no assigned records in any partition keeps its previous centroid.

    Args:
        aggregates (Sequence[PartitionAggregate]): One aggregate per partition.
        previous_centroids (np.ndarray): Centroids the aggregates were computed
            against, of shape (n_clusters, n_features).
        n_partitions (int, optional): Expected number of partitions. Defaults to
            the number of aggregates.

    Returns:
        np.ndarray: New read-only centroids of shape (n_clusters, n_features).

    Raises:
        PartitionFailure: If a partition's aggregate is missing or reported twice.
    """
    expected = len(aggregates) if n_partitions is None else n_partitions
    ordered = sorted(aggregates, key=lambda aggregate: aggregate.partition_index)
    reported = [aggregate.partition_index for aggregate in ordered]
    if reported != list(range(expected)):
        missing = sorted(set(range(expected)) - set(reported))
        duplicated = sorted({i for i in reported if reported.count(i) > 1})
        unexpected = sorted(set(reported) - set(range(expected)))
        raise PartitionFailure(
            (missing or duplicated or unexpected)[0],
            f"incomplete reduction (missing {missing}, duplicated {duplicated}, "
            f"unexpected {unexpected})",
        )

    total_sums = np.zeros(previous_centroids.shape)
    total_counts = np.zeros(previous_centroids.shape[0], dtype=np.int64)
    for aggregate in ordered:
        total_sums += aggregate.sums
        total_counts += aggregate.counts

    centroids = np.array(previous_centroids, dtype=np.float64, copy=True)
    non_empty = total_counts > 0
    centroids[non_empty] = total_sums[non_empty] / total_counts[non_empty, np.newaxis]
    centroids.setflags(write=False)
    return centroids


def total_cost(aggregates: Sequence[PartitionAggregate]) -> float:
    """Sum of the partition costs, in partition index order."""
    return float(
        sum(
            aggregate.cost
            for aggregate in sorted(aggregates, key=lambda a: a.partition_index)
        )
    )

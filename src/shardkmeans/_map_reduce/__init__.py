from ._executor import LocalExecutor, RayExecutor, resolve_executor
from ._mapper import KMeansMap, PartitionAggregate, aggregate_partition, assign_clusters
from ._reducer import reduce_aggregates, total_cost
from ._utils import has_cluster_changed, has_converged

__all__ = [
    "KMeansMap",
    "PartitionAggregate",
    "LocalExecutor",
    "RayExecutor",
    "resolve_executor",
    "aggregate_partition",
    "assign_clusters",
    "reduce_aggregates",
    "total_cost",
    "has_cluster_changed",
    "has_converged",
]

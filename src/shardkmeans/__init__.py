from ._config import KMeansConfig
from ._dataset import LabeledRecord, PartitionedDataset, split_data
from ._distance import EuclideanDistance, ManhattanDistance, SquaredEuclideanDistance
from ._errors import (
    Cancelled,
    DimensionMismatch,
    EmptyDataset,
    InvalidConfiguration,
    KMeansError,
    PartitionFailure,
)
from ._evaluation import EvaluationReport, clustering_cost, evaluate
from ._initializer import initialize_clusters
from ._map_reduce import (
    LocalExecutor,
    PartitionAggregate,
    RayExecutor,
    aggregate_partition,
    has_converged,
    reduce_aggregates,
)
from ._model import KMeansModel
from ._trainer import CancellationToken, KMeansTrainer, TrainerState

__version__ = "0.1.0"

__all__ = [
    "KMeansTrainer",
    "KMeansModel",
    "KMeansConfig",
    "TrainerState",
    "CancellationToken",
    "PartitionedDataset",
    "LabeledRecord",
    "split_data",
    "PartitionAggregate",
    "aggregate_partition",
    "reduce_aggregates",
    "has_converged",
    "initialize_clusters",
    "LocalExecutor",
    "RayExecutor",
    "SquaredEuclideanDistance",
    "EuclideanDistance",
    "ManhattanDistance",
    "evaluate",
    "EvaluationReport",
    "clustering_cost",
    "KMeansError",
    "InvalidConfiguration",
    "EmptyDataset",
    "DimensionMismatch",
    "PartitionFailure",
    "Cancelled",
]

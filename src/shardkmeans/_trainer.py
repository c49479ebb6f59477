import enum
import logging
import threading
from dataclasses import fields
from typing import Any, Callable, Literal

import numpy as np
from tqdm import tqdm

from ._config import KMeansConfig
from ._dataset import FeatureExtractor, LabelExtractor, as_partitioned_dataset
from ._errors import Cancelled, EmptyDataset, InvalidConfiguration
from ._initializer import initialize_clusters
from ._map_reduce import (
    has_cluster_changed,
    reduce_aggregates,
    resolve_executor,
    total_cost,
)
from ._model import KMeansModel

logger = logging.getLogger(__name__)


class TrainerState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    ITERATING = "iterating"
    CONVERGED = "converged"
    MAX_ITERATIONS_REACHED = "max_iterations_reached"
    FINALIZED = "finalized"
    FAILED = "failed"
    CANCELLED = "cancelled"


class CancellationToken:
    """A thread-safe flag a caller sets to stop a running fit between iterations."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise Cancelled("Training was cancelled.")


class KMeansTrainer:
    """
    K-means clustering over a partitioned dataset.

    Every iteration broadcasts the current centroids to all partitions, lets each
    partition compute per-cluster sums and counts independently (map), waits for
    all of them and merges them into the next centroids (reduce). Training stops
    once no centroid moves by more than `tolerance` or after `max_iterations`.

    Args:
        k (int, optional): Number of clusters. Defaults to 2.
        seed (int, optional): Seed of the initialisation. Defaults to 1234.
        tolerance (float, optional): Convergence threshold on centroid movement. Defaults to 1e-4.
        max_iterations (int, optional): Hard iteration cap. Defaults to 10.
        distance (str | Callable, optional): Distance measure. Defaults to squared Euclidean.
        init (Literal["random", "k-means++"], optional): Initialisation strategy. Defaults to "random".
        executor (str | object, optional): "local", "threads", "ray" or an executor. Defaults to "local".
        n_partitions (int, optional): Shards to split DataFrames and mappings into. Defaults to 4.
        partition_timeout (float, optional): Seconds to wait for all partitions per iteration.
        verbose (bool, optional): Show a progress bar. Defaults to False.

    Attributes:
        config (KMeansConfig): The validated configuration.
        state (TrainerState): Where the last fit is, or ended.
        n_iter_ (int): Iterations run by the last fit.
        converged_ (bool): Whether the last fit converged before the iteration cap.
        cost_history_ (list[float]): Clustering cost at the start of each iteration.

    Raises:
        InvalidConfiguration: If any parameter is out of range.
    """

    def __init__(
        self,
        k: int = 2,
        *,
        seed: int = 1234,
        tolerance: float = 1e-4,
        max_iterations: int = 10,
        distance: str | Callable | None = None,
        init: Literal["random", "k-means++"] = "random",
        executor: Any = "local",
        n_partitions: int = 4,
        partition_timeout: float | None = None,
        verbose: bool = False,
    ) -> None:
        self.config = KMeansConfig(
            k=k,
            seed=seed,
            tolerance=tolerance,
            max_iterations=max_iterations,
            distance=distance,
            init=init,
            executor=executor,
            n_partitions=n_partitions,
            partition_timeout=partition_timeout,
            verbose=verbose,
        )
        self.state = TrainerState.UNINITIALIZED
        self.n_iter_: int | None = None
        self.converged_: bool | None = None
        self.cost_history_: list[float] = []

    @classmethod
    def from_config(cls, config: KMeansConfig) -> "KMeansTrainer":
        return cls(
            **{field.name: getattr(config, field.name) for field in fields(config)}
        )

    def fit(
        self,
        dataset: Any,
        feature_extractor: FeatureExtractor | None = None,
        label_extractor: LabelExtractor | None = None,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> KMeansModel:
        """Compute k-means clustering.

        Labels play no part in training: `label_extractor` is accepted so that
        the same extractor pair can be handed to `fit` and to
        `shardkmeans.evaluate`, but it is never called here.

        Args:
            dataset (Any): A PartitionedDataset, a key -> record mapping or a
                pandas DataFrame. Mappings and DataFrames are split into
                `n_partitions` partitions.
            feature_extractor (FeatureExtractor, optional): `(key, record) -> vector`.
                Defaults to using the record itself.
            label_extractor (LabelExtractor, optional): Ignored by training.
            cancel_token (CancellationToken, optional): Checked between iterations.

        Returns:
            KMeansModel: The trained model.

        Raises:
            InvalidConfiguration: If k exceeds the number of records.
            EmptyDataset: If the dataset has no records.
            DimensionMismatch: If records have different vector lengths.
            PartitionFailure: If a partition failed during an iteration.
            Cancelled: If `cancel_token` was cancelled.
        """
        config = self.config
        cancel_token = cancel_token or CancellationToken()
        self.n_iter_ = 0
        self.converged_ = None
        self.cost_history_ = []
        self.state = TrainerState.INITIALIZING

        try:
            dataset = as_partitioned_dataset(
                dataset, config.n_partitions, random_seed=config.seed
            )
            n_records = len(dataset)
            if n_records == 0:
                raise EmptyDataset("Cannot fit k-means on an empty dataset.")
            if config.k > n_records:
                raise InvalidConfiguration(
                    f"k={config.k} exceeds the number of records ({n_records})."
                )

            partitions = dataset.feature_partitions(feature_extractor)
            X = np.vstack(partitions)
            n_distinct = np.unique(X, axis=0).shape[0]
            if config.k > n_distinct:
                logger.warning(
                    "k=%d exceeds the %d distinct records; some clusters will stay empty",
                    config.k,
                    n_distinct,
                )
            centroids = initialize_clusters(X, config.k, config.seed, config.init)
            centroids = self._iterate(partitions, centroids, cancel_token)
        except Cancelled:
            self.state = TrainerState.CANCELLED
            logger.info("k-means fit cancelled after %d iterations", self.n_iter_)
            raise
        except Exception as e:
            self.state = TrainerState.FAILED
            logger.error("k-means fit failed: %s", e)
            raise

        model = KMeansModel(centroids, distance=config.distance)
        self.state = TrainerState.FINALIZED
        logger.info(
            "k-means fit finished: k=%d, %d iterations, converged=%s, cost=%.6g",
            config.k,
            self.n_iter_,
            self.converged_,
            self.cost_history_[-1],
        )
        return model

    def _iterate(
        self,
        partitions: list[np.ndarray],
        centroids: np.ndarray,
        cancel_token: CancellationToken,
    ) -> np.ndarray:
        config = self.config
        executor = resolve_executor(config.executor, len(partitions))
        executor.start(partitions)
        self.state = TrainerState.ITERATING
        try:
            for iteration in tqdm(
                range(1, config.max_iterations + 1),
                desc="k-means",
                disable=not config.verbose,
            ):
                cancel_token.raise_if_cancelled()
                aggregates = executor.run(
                    centroids, config.distance, timeout=config.partition_timeout
                )
                cancel_token.raise_if_cancelled()

                new_centroids = reduce_aggregates(
                    aggregates, centroids, n_partitions=len(partitions)
                )
                self.cost_history_.append(total_cost(aggregates))
                self.n_iter_ = iteration
                changed, shift = has_cluster_changed(
                    new_centroids, centroids, config.tolerance, config.distance
                )
                logger.debug(
                    "Iteration %d/%d: cost=%.6g, largest shift=%.3g",
                    iteration,
                    config.max_iterations,
                    self.cost_history_[-1],
                    shift,
                )
                stop = not changed or iteration >= config.max_iterations
                centroids = new_centroids
                if stop:
                    self.converged_ = not changed
                    break
        finally:
            executor.shutdown()

        self.state = (
            TrainerState.CONVERGED
            if self.converged_
            else TrainerState.MAX_ITERATIONS_REACHED
        )
        return centroids

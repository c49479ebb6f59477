import logging
import time
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable

import numpy as np
import ray
from ray.exceptions import GetTimeoutError, RayError

from .._errors import InvalidConfiguration, PartitionFailure
from ._mapper import KMeansMap, PartitionAggregate, aggregate_partition

logger = logging.getLogger(__name__)


def _remaining(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    return max(deadline - time.monotonic(), 0.0)


class LocalExecutor:
    """
    Runs the partition aggregators in this process.

    With `max_workers=1` the partitions are aggregated one after the other;
    otherwise they are submitted to a thread pool. Either way the aggregates are
    returned in partition index order.

    Args:
        max_workers (int, optional): Size of the thread pool, or None to let
            `ThreadPoolExecutor` choose. Defaults to 1.
    """

    def __init__(self, max_workers: int | None = 1) -> None:
        self.max_workers = max_workers
        self._partitions: Sequence[np.ndarray] = ()
        self._pool: ThreadPoolExecutor | None = None

    def start(self, partitions: Sequence[np.ndarray]) -> None:
        self._partitions = tuple(partitions)
        if self.max_workers != 1 and self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="kmeans-partition"
            )

    def run(
        self,
        centroids: np.ndarray,
        distance: Callable,
        timeout: float | None = None,
    ) -> list[PartitionAggregate]:
        """
        Aggregates every partition against the same read-only centroids.

        Args:
            centroids (np.ndarray): The broadcast centroids.
            distance (Callable): The distance measure.
            timeout (float, optional): Seconds to wait for all partitions.

        Returns:
            list[PartitionAggregate]: One aggregate per partition, by index.

        Raises:
            PartitionFailure: If a partition raised or did not finish in time.
                The thread pool is released without waiting for partitions that
                are still running.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        if self._pool is None:
            aggregates = []
            for index, items in enumerate(self._partitions):
                try:
                    aggregates.append(
                        aggregate_partition(items, centroids, distance, index)
                    )
                except Exception as e:
                    raise PartitionFailure(index, repr(e)) from e
                if _remaining(deadline) == 0.0:
                    raise PartitionFailure(index, f"timed out after {timeout}s")
            return aggregates

        futures: list[Future] = [
            self._pool.submit(aggregate_partition, items, centroids, distance, index)
            for index, items in enumerate(self._partitions)
        ]
        aggregates = []
        try:
            for index, future in enumerate(futures):
                try:
                    aggregates.append(future.result(timeout=_remaining(deadline)))
                except FutureTimeoutError as e:
                    raise PartitionFailure(index, f"timed out after {timeout}s") from e
                except Exception as e:
                    raise PartitionFailure(index, repr(e)) from e
        except PartitionFailure:
            # A running partition cannot be interrupted, so the pool is
            # abandoned instead of joined; its workers finish on their own.
            self._pool.shutdown(wait=False, cancel_futures=True)
            self._pool = None
            raise
        return aggregates

    def shutdown(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True, cancel_futures=True)
            self._pool = None
        self._partitions = ()


class RayExecutor:
    """
    Runs one `KMeansMap` actor per partition. Each actor keeps its partition
    resident for the whole fit; only the centroids travel every iteration.

    Ray is initialised on first use if the caller has not done so.

    Args:
        actor_options (dict, optional): Options passed to `KMeansMap.options`,
            e.g. `{"num_cpus": 1}`.
    """

    def __init__(self, actor_options: dict[str, Any] | None = None) -> None:
        self.actor_options = actor_options or {}
        self._mappers: list[ray.actor.ActorHandle] = []

    def start(self, partitions: Sequence[np.ndarray]) -> None:
        self.shutdown()
        self._mappers = [
            KMeansMap.options(**self.actor_options).remote(items, index)
            for index, items in enumerate(partitions)
        ]
        logger.debug("Started %d Ray partition actors", len(self._mappers))

    def run(
        self,
        centroids: np.ndarray,
        distance: Callable,
        timeout: float | None = None,
    ) -> list[PartitionAggregate]:
        """
        Broadcasts the centroids to every actor and gathers their aggregates.

        Args:
            centroids (np.ndarray): The broadcast centroids.
            distance (Callable): The distance measure.
            timeout (float, optional): Seconds to wait for all partitions.

        Returns:
            list[PartitionAggregate]: One aggregate per partition, by index.

        Raises:
            PartitionFailure: If an actor errored, died or did not answer in time.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        centroids_ref = ray.put(centroids)
        distance_ref = ray.put(distance)
        refs = [
            mapper.aggregate.remote(centroids_ref, distance_ref)
            for mapper in self._mappers
        ]

        aggregates = []
        for index, ref in enumerate(refs):
            try:
                aggregates.append(ray.get(ref, timeout=_remaining(deadline)))
            except GetTimeoutError as e:
                raise PartitionFailure(index, f"timed out after {timeout}s") from e
            except RayError as e:
                raise PartitionFailure(index, str(e)) from e
        return aggregates

    def shutdown(self) -> None:
        for mapper in self._mappers:
            ray.kill(mapper)
        self._mappers = []


def resolve_executor(executor: Any, n_partitions: int):
    """
    Builds the executor named by the configuration.

    Args:
        executor (Any): "local", "threads", "ray", or an object with `start`,
            `run` and `shutdown` methods.
        n_partitions (int): Number of partitions, used to size the thread pool.

    Returns:
        The executor.

    Raises:
        InvalidConfiguration: If the executor is not supported.
    """
    if executor == "local":
        return LocalExecutor()
    if executor == "threads":
        return LocalExecutor(max_workers=max(n_partitions, 1))
    if executor == "ray":
        return RayExecutor()
    if all(hasattr(executor, name) for name in ("start", "run", "shutdown")):
        return executor
    raise InvalidConfiguration(f"Unsupported executor {executor!r}")

import numbers
from dataclasses import dataclass, field
from typing import Any, Callable, Literal

from ._distance import resolve_distance
from ._errors import InvalidConfiguration

INIT_STRATEGIES = ("random", "k-means++")
EXECUTORS = ("local", "threads", "ray")


@dataclass(frozen=True)
class KMeansConfig:
    """Validated training parameters.

    Args:
        k (int, optional): Number of clusters. Defaults to 2.
        seed (int, optional): Seed of the initialisation generator. Defaults to 1234.
        tolerance (float, optional): Largest centroid movement, measured with
            `distance`, that still counts as converged. Defaults to 1e-4.
        max_iterations (int, optional): Hard cap on refinement iterations. Defaults to 10.
        distance (str | Callable, optional): Built-in measure name or any callable
            `distance(a, b) -> float`. Defaults to squared Euclidean.
        init (Literal["random", "k-means++"], optional): Initialisation strategy.
            Defaults to "random".
        executor (str | object, optional): "local", "threads", "ray" or an executor
            instance. Defaults to "local".
        n_partitions (int, optional): Number of shards a DataFrame or mapping is
            split into when it is not already partitioned. Defaults to 4.
        partition_timeout (float, optional): Seconds to wait for all partitions in
            one iteration. Defaults to None (wait indefinitely).
        verbose (bool, optional): Show a progress bar over iterations. Defaults to False.

    Raises:
        InvalidConfiguration: If any parameter is out of range.
    """

    k: int = 2
    seed: int = 1234
    tolerance: float = 1e-4
    max_iterations: int = 10
    distance: str | Callable | None = field(default=None, compare=False)
    init: Literal["random", "k-means++"] = "random"
    executor: Any = "local"
    n_partitions: int = 4
    partition_timeout: float | None = None
    verbose: bool = False

    def __post_init__(self) -> None:
        if not _is_int(self.k) or self.k < 1:
            raise InvalidConfiguration(f"k must be an integer >= 1, got {self.k!r}")
        if not _is_int(self.seed):
            raise InvalidConfiguration(f"seed must be an integer, got {self.seed!r}")
        if not self.tolerance > 0:
            raise InvalidConfiguration(
                f"tolerance must be > 0, got {self.tolerance!r}"
            )
        if not _is_int(self.max_iterations) or self.max_iterations < 1:
            raise InvalidConfiguration(
                f"max_iterations must be an integer >= 1, got {self.max_iterations!r}"
            )
        if self.init not in INIT_STRATEGIES:
            raise InvalidConfiguration(
                f"init must be one of {INIT_STRATEGIES}, got {self.init!r}"
            )
        if isinstance(self.executor, str) and self.executor not in EXECUTORS:
            raise InvalidConfiguration(
                f"executor must be one of {EXECUTORS}, got {self.executor!r}"
            )
        if not _is_int(self.n_partitions) or self.n_partitions < 1:
            raise InvalidConfiguration(
                f"n_partitions must be an integer >= 1, got {self.n_partitions!r}"
            )
        if self.partition_timeout is not None and not self.partition_timeout > 0:
            raise InvalidConfiguration(
                f"partition_timeout must be > 0, got {self.partition_timeout!r}"
            )
        try:
            distance = resolve_distance(self.distance)
        except ValueError as e:
            raise InvalidConfiguration(str(e)) from e
        object.__setattr__(self, "distance", distance)


def _is_int(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)

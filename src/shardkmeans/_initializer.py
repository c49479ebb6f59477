import logging

import numpy as np
import numpy.typing as npt
from sklearn.cluster import kmeans_plusplus

from ._errors import EmptyDataset, InvalidConfiguration

logger = logging.getLogger(__name__)


def as_generator(seed: int | np.random.Generator | None) -> np.random.Generator:
    """Returns `seed` if it already is a generator, else a new one seeded with it."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def initialize_clusters(
    data: npt.NDArray,
    n_clusters: int,
    random_state: int | np.random.Generator | None = None,
    init: str = "random",
) -> np.ndarray:
    """
    Initialize clusters for the k-means clustering algorithm.

    Both strategies use rows of `data` as the initial centroids, so every
    centroid is a copy of an actual record. With "random" the `n_clusters`
    distinct rows are picked uniformly in the order the generator draws them.
    With "k-means++" the rows are picked by scikit-learn's k-means++ seeding,
    itself seeded from the generator.

    Args:
        data (npt.NDArray): All feature vectors, of shape (n_samples, n_features),
            in partition order.
        n_clusters (int): The number of clusters to initialize.
        random_state (int | np.random.Generator, optional): Seed or generator.
            Identical seeds and identical data ordering give identical centroids.
        init (str, optional): "random" or "k-means++". Defaults to "random".

    Returns:
        np.ndarray: Read-only initial centroids of shape (n_clusters, n_features).

    Raises:
        EmptyDataset: If there is no data.
        InvalidConfiguration: If there are fewer rows than clusters.
        TypeError: If the data type is not supported.
    """
    if not isinstance(data, np.ndarray):
        raise TypeError("Data type not supported!")
    if data.shape[0] == 0:
        raise EmptyDataset("Cannot initialize clusters from an empty dataset.")
    if n_clusters < 1 or n_clusters > data.shape[0]:
        raise InvalidConfiguration(
            f"n_clusters must be in [1, {data.shape[0]}], got {n_clusters}"
        )

    rng = as_generator(random_state)
    if init == "random":
        indices = rng.choice(data.shape[0], size=n_clusters, replace=False)
    elif init == "k-means++":
        _, indices = kmeans_plusplus(
            np.ascontiguousarray(data),
            n_clusters,
            random_state=int(rng.integers(np.iinfo(np.int32).max)),
        )
    else:
        raise InvalidConfiguration(f"Unknown init strategy {init!r}")

    logger.debug("Initial centroids taken from rows %s", list(indices))
    centroids = data[np.asarray(indices)].astype(np.float64, copy=True)
    centroids.setflags(write=False)
    return centroids

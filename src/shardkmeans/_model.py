import json
from typing import Any, Callable

import numpy as np
import numpy.typing as npt
import pandas as pd

from ._distance import BUILTIN_DISTANCES, pairwise_distances, resolve_distance
from ._errors import DimensionMismatch, InvalidConfiguration
from ._map_reduce import assign_clusters


class KMeansModel:
    """
    Trained k-means centroids with nearest-centroid prediction.

    The model never changes after construction: it keeps a private read-only
    copy of the centroids, so it can be shared between threads freely.

    Args:
        centers (npt.ArrayLike): Centroids of shape (k, n_features), in cluster index order.
        distance (str | Callable, optional): The distance measure the model was
            trained with. Defaults to squared Euclidean.

    Raises:
        InvalidConfiguration: If there are no centroids or they are not a 2-D array.
    """

    __slots__ = ("_centers", "_distance")

    def __init__(
        self, centers: npt.ArrayLike, distance: str | Callable | None = None
    ) -> None:
        centers = np.array(centers, dtype=np.float64)
        if centers.ndim != 2 or centers.shape[0] == 0:
            raise InvalidConfiguration(
                f"Expected centers of shape (k, n_features) with k >= 1, got {centers.shape}"
            )
        centers.setflags(write=False)
        self._centers = centers
        self._distance = resolve_distance(distance)

    @property
    def centers(self) -> np.ndarray:
        """Read-only centroids of shape (k, n_features)."""
        return self._centers

    @property
    def k(self) -> int:
        return self._centers.shape[0]

    @property
    def dimension(self) -> int:
        return self._centers.shape[1]

    @property
    def distance(self) -> Callable:
        return self._distance

    def predict(self, vector: npt.ArrayLike) -> int:
        """
        Index of the centroid closest to a single feature vector.

        Args:
            vector (npt.ArrayLike): A feature vector of the model's dimensionality.

        Returns:
            int: Cluster index in [0, k), lowest index on ties.

        Raises:
            DimensionMismatch: If the vector's length differs from the model's.
        """
        vector = np.asarray(vector, dtype=np.float64)
        if vector.ndim != 1 or vector.shape[0] != self.dimension:
            raise DimensionMismatch(self.dimension, int(vector.size))
        labels, _ = assign_clusters(vector[np.newaxis, :], self._centers, self._distance)
        return int(labels[0])

    def predict_batch(self, X: npt.ArrayLike | pd.DataFrame) -> np.ndarray:
        """
        Predict the closest cluster each sample in X belongs to.

        Args:
            X (npt.ArrayLike | pd.DataFrame): Samples of shape (n_samples, n_features).

        Returns:
            np.ndarray: Index of the cluster each sample belongs to.
        """
        if isinstance(X, pd.DataFrame):
            X = X.values
        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2 or X.shape[1] != self.dimension:
            raise DimensionMismatch(
                self.dimension, X.shape[1] if X.ndim == 2 else int(X.size)
            )
        labels, _ = assign_clusters(X, self._centers, self._distance)
        return labels

    def cost(self, X: npt.ArrayLike | pd.DataFrame) -> float:
        """Sum of the distances from each sample to its closest centroid."""
        if isinstance(X, pd.DataFrame):
            X = X.values
        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2 or X.shape[1] != self.dimension:
            raise DimensionMismatch(
                self.dimension, X.shape[1] if X.ndim == 2 else int(X.size)
            )
        if X.shape[0] == 0:
            return 0.0
        return float(np.min(pairwise_distances(X, self._centers, self._distance), axis=1).sum())

    def to_dict(self) -> dict[str, Any]:
        """
        Minimal representation: k, dimensionality, ordered centroids and the
        name of the distance measure.

        Raises:
            ValueError: If the model uses a custom distance measure, which has no name.
        """
        name = getattr(self._distance, "name", None)
        if BUILTIN_DISTANCES.get(name) is not type(self._distance):
            raise ValueError(
                f"Cannot serialize custom distance measure {self._distance!r}"
            )
        return {
            "k": self.k,
            "dimension": self.dimension,
            "centers": self._centers.tolist(),
            "distance": name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KMeansModel":
        """
        Rebuilds a model from `to_dict` output.

        Raises:
            InvalidConfiguration: If the number of centroids is not `k`.
            DimensionMismatch: If a centroid does not have `dimension` features.
        """
        centers = data["centers"]
        if len(centers) != data["k"]:
            raise InvalidConfiguration(
                f"Expected {data['k']} centers, got {len(centers)}"
            )
        for center in centers:
            if len(center) != data["dimension"]:
                raise DimensionMismatch(data["dimension"], len(center))
        return cls(centers, distance=data.get("distance"))

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, payload: str) -> "KMeansModel":
        return cls.from_dict(json.loads(payload))

    def __repr__(self) -> str:
        return f"KMeansModel(k={self.k}, dimension={self.dimension}, distance={self._distance!r})"

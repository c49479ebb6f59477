import logging
from collections.abc import Hashable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
import pandas as pd

from ._errors import DimensionMismatch, EmptyDataset, InvalidConfiguration

logger = logging.getLogger(__name__)

FeatureExtractor = Callable[[Hashable, Any], Any]
LabelExtractor = Callable[[Hashable, Any], float]


def default_feature_extractor(key: Hashable, record: Any) -> np.ndarray:
    """Uses the raw record itself as the feature vector."""
    return np.asarray(record, dtype=np.float64)


@dataclass(frozen=True)
class LabeledRecord:
    """A keyed feature vector with an optional ground-truth label.

    The label is only ever read by evaluation code, never by training.
    """

    key: Hashable
    features: np.ndarray
    label: float | None = None


def split_data(
    data_frame: pd.DataFrame, num_splits: int = 3, random_seed: int | None = None
) -> tuple[pd.DataFrame, ...]:
    """
    Splits a pandas DataFrame into multiple disjoint subsets.

    Args:
        data_frame: The input DataFrame to be split.
        num_splits: The number of subsets to create (default: 3).
        random_seed: The seed of the row permutation (default: None).

    Returns:
        A tuple of DataFrame subsets obtained by splitting the input DataFrame.
    """
    rng = np.random.default_rng(random_seed)
    num_rows = len(data_frame.index)
    permutation = rng.permutation(num_rows)
    split_points = np.linspace(0, num_rows, num_splits + 1, dtype=int)
    return tuple(
        data_frame.iloc[permutation[split_points[i] : split_points[i + 1]]]
        for i in range(num_splits)
    )


def to_feature_vector(value: Any, key: Hashable = None) -> np.ndarray:
    """
    Converts an extractor result into a read-only float64 vector.

    Args:
        value (Any): Anything numpy can turn into a 1-D array.
        key (Hashable, optional): Record key, used in error messages.

    Returns:
        np.ndarray: The feature vector.

    Raises:
        ValueError: If the value is not one-dimensional.
    """
    vector = np.array(value, dtype=np.float64)
    if vector.ndim != 1:
        raise ValueError(
            f"Feature vector for record {key!r} must be one-dimensional, "
            f"got shape {vector.shape}"
        )
    vector.setflags(write=False)
    return vector


class PartitionedDataset:
    """
    A keyed collection of raw records split into disjoint partitions.

    Args:
        partitions (Iterable[Iterable[tuple[Hashable, Any]]]): One iterable of
            `(key, record)` pairs per partition. Keys must be unique across the
            whole dataset. Partitions may be empty.

    Raises:
        EmptyDataset: If there are no partitions.
        InvalidConfiguration: If a key repeats.
    """

    def __init__(self, partitions: Iterable[Iterable[tuple[Hashable, Any]]]) -> None:
        self._partitions = tuple(tuple(partition) for partition in partitions)
        if not self._partitions:
            raise EmptyDataset("A dataset needs at least one partition.")

        seen: set = set()
        for partition in self._partitions:
            for key, _ in partition:
                if key in seen:
                    raise InvalidConfiguration(f"Duplicate record key {key!r}.")
                seen.add(key)

    @classmethod
    def from_mapping(
        cls, records: Mapping[Hashable, Any], n_partitions: int = 1
    ) -> "PartitionedDataset":
        """
        Splits a key -> record mapping into contiguous partitions in iteration order.

        Args:
            records (Mapping[Hashable, Any]): The records, e.g. the contents of a cache.
            n_partitions (int, optional): Number of partitions. Defaults to 1.

        Returns:
            PartitionedDataset: The partitioned records.
        """
        if n_partitions < 1:
            raise InvalidConfiguration(
                f"n_partitions must be >= 1, got {n_partitions!r}"
            )
        items = list(records.items())
        split_points = np.linspace(0, len(items), n_partitions + 1, dtype=int)
        return cls(
            items[split_points[i] : split_points[i + 1]] for i in range(n_partitions)
        )

    @classmethod
    def from_dataframe(
        cls,
        data_frame: pd.DataFrame,
        n_partitions: int = 3,
        random_seed: int | None = None,
    ) -> "PartitionedDataset":
        """
        Randomly splits the rows of a DataFrame into partitions.

        Each record is keyed by its index label and its raw record is the row's
        values as a numpy array.

        Args:
            data_frame (pd.DataFrame): The data.
            n_partitions (int, optional): Number of partitions. Defaults to 3.
            random_seed (int, optional): Seed of the split. Defaults to None.

        Returns:
            PartitionedDataset: The partitioned rows.
        """
        if n_partitions < 1:
            raise InvalidConfiguration(
                f"n_partitions must be >= 1, got {n_partitions!r}"
            )
        return cls(
            zip(split.index, split.to_numpy())
            for split in split_data(data_frame, n_partitions, random_seed)
        )

    @property
    def partitions(self) -> tuple[tuple[tuple[Hashable, Any], ...], ...]:
        return self._partitions

    @property
    def n_partitions(self) -> int:
        return len(self._partitions)

    def __len__(self) -> int:
        return sum(len(partition) for partition in self._partitions)

    def __iter__(self) -> Iterator[tuple[Hashable, Any]]:
        for partition in self._partitions:
            yield from partition

    def feature_partitions(
        self, feature_extractor: FeatureExtractor | None = None
    ) -> list[np.ndarray]:
        """
        Extracts the feature matrix of every partition, in partition order.

        Vector lengths are checked as each record is extracted; the first record
        whose length differs from the first vector seen aborts the extraction.

        Args:
            feature_extractor (FeatureExtractor, optional): `(key, record) -> vector`.
                Defaults to using the record itself.

        Returns:
            list[np.ndarray]: One read-only array of shape (n_records, n_features)
            per partition. Empty partitions give a (0, n_features) array.

        Raises:
            DimensionMismatch: If two records have different vector lengths.
        """
        extractor = feature_extractor or default_feature_extractor
        n_features = None
        rows_per_partition = []
        for partition in self._partitions:
            rows = []
            for key, record in partition:
                vector = to_feature_vector(extractor(key, record), key)
                if n_features is None:
                    n_features = vector.shape[0]
                elif vector.shape[0] != n_features:
                    raise DimensionMismatch(n_features, vector.shape[0], key)
                rows.append(vector)
            rows_per_partition.append(rows)

        matrices = []
        for rows in rows_per_partition:
            matrix = (
                np.vstack(rows) if rows else np.empty((0, n_features or 0))
            ).astype(np.float64, copy=False)
            matrix.setflags(write=False)
            matrices.append(matrix)
        logger.debug(
            "Extracted %d records with %s features from %d partitions",
            sum(m.shape[0] for m in matrices),
            n_features,
            len(matrices),
        )
        return matrices

    def labeled_records(
        self,
        feature_extractor: FeatureExtractor | None = None,
        label_extractor: LabelExtractor | None = None,
    ) -> Iterator[LabeledRecord]:
        """
        Yields every record with its features and, if requested, its label.

        Args:
            feature_extractor (FeatureExtractor, optional): `(key, record) -> vector`.
            label_extractor (LabelExtractor, optional): `(key, record) -> float`.

        Yields:
            LabeledRecord: The extracted record.
        """
        extractor = feature_extractor or default_feature_extractor
        for key, record in self:
            yield LabeledRecord(
                key=key,
                features=to_feature_vector(extractor(key, record), key),
                label=(
                    float(label_extractor(key, record))
                    if label_extractor is not None
                    else None
                ),
            )


def as_partitioned_dataset(
    dataset: Any, n_partitions: int = 1, random_seed: int | None = None
) -> PartitionedDataset:
    """
    Coerces the supported dataset shapes into a PartitionedDataset.

    Args:
        dataset (Any): A PartitionedDataset, a pandas DataFrame or a key -> record mapping.
        n_partitions (int, optional): Partitions to create for DataFrames and mappings.
        random_seed (int, optional): Seed of the DataFrame row split.

    Returns:
        PartitionedDataset: The dataset.

    Raises:
        TypeError: If the data type is not supported.
    """
    if isinstance(dataset, PartitionedDataset):
        return dataset
    if isinstance(dataset, pd.DataFrame):
        return PartitionedDataset.from_dataframe(dataset, n_partitions, random_seed)
    if isinstance(dataset, Mapping):
        return PartitionedDataset.from_mapping(dataset, n_partitions)
    raise TypeError(f"Data type not supported: {type(dataset).__name__}")

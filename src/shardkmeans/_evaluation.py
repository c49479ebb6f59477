from dataclasses import dataclass
from typing import Any

import numpy.typing as npt
import pandas as pd
from sklearn.metrics import adjusted_rand_score

from ._dataset import (
    FeatureExtractor,
    LabelExtractor,
    PartitionedDataset,
    as_partitioned_dataset,
)
from ._errors import EmptyDataset
from ._model import KMeansModel


@dataclass(frozen=True)
class EvaluationReport:
    """
    Predictions of a model compared with ground-truth labels.

    Attributes:
        predictions (pd.DataFrame): One row per record with `key`, `prediction` and `label`.
        total (int): Number of records.
        errors (int): Records whose predicted cluster index differs from the label.
        accuracy (float): `1 - errors / total`.
        adjusted_rand_index (float): Agreement between clusters and labels,
            invariant to how clusters are numbered.
    """

    predictions: pd.DataFrame
    total: int
    errors: int
    accuracy: float
    adjusted_rand_index: float


def evaluate(
    model: KMeansModel,
    dataset: Any,
    feature_extractor: FeatureExtractor | None,
    label_extractor: LabelExtractor,
) -> EvaluationReport:
    """
    Scores a model's predictions against the labels of a dataset.

    Cluster indices are compared with labels as they are, so the accuracy is only
    meaningful when labels are cluster indices. The adjusted Rand index does not
    depend on the numbering. Records are reported in dataset order; DataFrame
    rows keep their order.

    Args:
        model (KMeansModel): A trained model.
        dataset (Any): A PartitionedDataset, a key -> record mapping or a DataFrame.
        feature_extractor (FeatureExtractor | None): `(key, record) -> vector`.
        label_extractor (LabelExtractor): `(key, record) -> float`.

    Returns:
        EvaluationReport: The comparison.

    Raises:
        EmptyDataset: If the dataset has no records.
        DimensionMismatch: If a record does not match the model's dimensionality.
    """
    if isinstance(dataset, pd.DataFrame):
        # One partition in row order, so the report follows the frame.
        dataset = PartitionedDataset([zip(dataset.index, dataset.to_numpy())])
    records = list(
        as_partitioned_dataset(dataset).labeled_records(
            feature_extractor, label_extractor
        )
    )
    if not records:
        raise EmptyDataset("Cannot evaluate on an empty dataset.")

    predictions = pd.DataFrame(
        {
            "key": [record.key for record in records],
            "prediction": [model.predict(record.features) for record in records],
            "label": [record.label for record in records],
        }
    )
    total = len(predictions)
    errors = int((predictions["prediction"] != predictions["label"]).sum())
    return EvaluationReport(
        predictions=predictions,
        total=total,
        errors=errors,
        accuracy=1 - errors / total,
        adjusted_rand_index=float(
            adjusted_rand_score(predictions["label"], predictions["prediction"])
        ),
    )


def clustering_cost(model: KMeansModel, X: npt.ArrayLike | pd.DataFrame) -> float:
    """
    Sum of the distances from each row of X to its nearest centroid, under the
    model's distance measure.

    Raises:
        DimensionMismatch: If X does not have the model's number of features.
    """
    return model.cost(X)

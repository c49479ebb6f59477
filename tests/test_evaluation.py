import pandas as pd
import pytest

from shardkmeans import (
    DimensionMismatch,
    EmptyDataset,
    KMeansModel,
    KMeansTrainer,
    clustering_cost,
    evaluate,
)


def features(key, row):
    return row[1:]


def label(key, row):
    return row[0]


def test_errors_and_accuracy():
    model = KMeansModel([[0.0, 0.0], [10.0, 10.0]])
    records = {
        "a": [0.0, 0.0, 1.0],
        "b": [0.0, 1.0, 0.0],
        "c": [1.0, 10.0, 10.0],
        "d": [0.0, 11.0, 10.0],
    }
    report = evaluate(model, records, features, label)
    assert report.total == 4
    assert report.errors == 1
    assert report.accuracy == pytest.approx(0.75)
    assert list(report.predictions.columns) == ["key", "prediction", "label"]
    assert list(report.predictions["prediction"]) == [0, 0, 1, 1]


def test_adjusted_rand_index_ignores_cluster_numbering():
    model = KMeansModel([[10.0, 10.0], [0.0, 0.0]])
    records = {
        "a": [0.0, 0.0, 1.0],
        "b": [0.0, 1.0, 0.0],
        "c": [1.0, 10.0, 10.0],
        "d": [1.0, 11.0, 10.0],
    }
    report = evaluate(model, records, features, label)
    assert report.errors == 4
    assert report.adjusted_rand_index == pytest.approx(1.0)


def test_labels_are_only_read_by_evaluation():
    read = []

    def tracking_label(key, row):
        read.append(key)
        return row[0]

    records = {i: [float(i >= 3), float(10 * (i >= 3)), 0.0] for i in range(6)}
    model = KMeansTrainer(k=2, seed=0).fit(records, features, tracking_label)
    assert read == []

    evaluate(model, records, features, tracking_label)
    assert sorted(read) == list(range(6))


def test_empty_dataset():
    with pytest.raises(EmptyDataset):
        evaluate(KMeansModel([[0.0]]), {}, None, label)


def test_dataframe_rows_keep_their_order():
    model = KMeansModel([[0.0, 0.0], [10.0, 10.0]])
    df = pd.DataFrame(
        [[1.0, 10.0, 10.0], [0.0, 0.0, 1.0], [1.0, 11.0, 10.0], [0.0, 1.0, 0.0]],
        index=[7, 3, 9, 1],
        columns=["label", "x", "y"],
    )
    for _ in range(3):
        report = evaluate(model, df, features, label)
        assert list(report.predictions["key"]) == [7, 3, 9, 1]
        assert list(report.predictions["prediction"]) == [1, 0, 1, 0]
        assert report.errors == 0


def test_clustering_cost():
    model = KMeansModel([[0.0, 0.0], [10.0, 10.0]])
    X = [[1.0, 0.0], [10.0, 12.0], [0.0, 0.0]]
    assert clustering_cost(model, X) == pytest.approx(1.0 + 4.0)
    assert clustering_cost(model, pd.DataFrame(X)) == pytest.approx(5.0)
    with pytest.raises(DimensionMismatch):
        clustering_cost(model, [[1.0, 2.0, 3.0]])

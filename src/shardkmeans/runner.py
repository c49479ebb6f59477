import logging

import numpy as np
import ray
from sklearn.datasets import load_iris

from . import EvaluationReport, KMeansTrainer, evaluate

logger = logging.getLogger(__name__)


def load_iris_records(n_classes: int = 2) -> dict[int, np.ndarray]:
    """
    The first `n_classes` Iris species keyed by row number, with the species in
    column 0 and the four measurements after it.
    """
    iris = load_iris()
    mask = iris.target < n_classes
    rows = np.column_stack([iris.target[mask], iris.data[mask]]).astype(np.float64)
    return {i: row for i, row in enumerate(rows)}


def features(key: int, record: np.ndarray) -> np.ndarray:
    return record[1:]


def label(key: int, record: np.ndarray) -> float:
    return float(record[0])


def main(executor: str = "ray", seed: int = 7867) -> EvaluationReport:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(message)s")
    if executor == "ray":
        ray.init(ignore_reinit_error=True)

    records = load_iris_records()
    trainer = KMeansTrainer(k=2, seed=seed, executor=executor, verbose=True)
    model = trainer.fit(records, features)

    for index, center in enumerate(model.centers):
        logger.info("Centroid %d: %s", index, np.array2string(center, precision=4))

    report = evaluate(model, records, features, label)
    logger.info("| Predicted cluster | Real label |")
    for row in report.predictions.itertuples(index=False):
        logger.info("| %.4f | %.4f |", row.prediction, row.label)
    logger.info("Absolute amount of errors %d", report.errors)
    logger.info("Accuracy %.4f", report.accuracy)
    return report


if __name__ == "__main__":
    main()

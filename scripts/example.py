# From root: poetry run python scripts/example.py

import logging

import pandas as pd
import ray
from sklearn.datasets import make_blobs

from shardkmeans import KMeansTrainer, PartitionedDataset


def get_data() -> pd.DataFrame:
    x_array, target, centers_ = make_blobs(  # type: ignore
        n_samples=100,
        n_features=3,
        centers=3,
        random_state=0,
        return_centers=True,
    )
    return pd.DataFrame(data=x_array)


def single_process_demo(X: pd.DataFrame) -> None:
    trainer = KMeansTrainer(k=3, max_iterations=100, n_partitions=4)
    model = trainer.fit(X)
    print(model.centers)
    print(f"iterations: {trainer.n_iter_}, converged: {trainer.converged_}")


def distributed_demo(X: pd.DataFrame) -> None:
    dataset = PartitionedDataset.from_dataframe(X, n_partitions=2, random_seed=0)
    trainer = KMeansTrainer(
        k=3, max_iterations=100, init="k-means++", executor="ray", verbose=True
    )
    model = trainer.fit(dataset)
    print(model.centers)
    print(model.predict_batch(X)[:10])


def main():
    logging.basicConfig(level=logging.INFO)
    x = get_data()
    single_process_demo(x)
    ray.init()
    distributed_demo(x)


if __name__ == "__main__":
    main()

from shardkmeans import runner


def test_iris_records_put_the_label_first():
    records = runner.load_iris_records()
    assert len(records) == 100
    assert {runner.label(k, r) for k, r in records.items()} == {0.0, 1.0}
    assert all(runner.features(k, r).shape == (4,) for k, r in records.items())


def test_runner_separates_the_two_species():
    report = runner.main(executor="local")
    assert report.total == 100
    assert report.adjusted_rand_index > 0.9

import numpy as np
import pytest

from condkendall.ckt import InvalidArgument, dataset_pairs


def test_pairs_keep_close_non_tied_pairs():
    x1 = [1.0, 2.0, 3.0, 4.0]
    x2 = [1.0, 2.0, 4.0, 3.0]
    z = [0.0, 0.1, 0.2, 5.0]

    df = dataset_pairs(x1, x2, z, h=1.0, kernel="Epa", cut=0.0)

    assert list(df.columns) == ["sign", "z0", "kernel_value", "i", "j"]
    assert list(df["i"]) == [0, 0, 1]
    assert list(df["j"]) == [1, 2, 2]
    assert list(df["sign"]) == [1, 1, 1]
    np.testing.assert_allclose(df["z0"], [0.05, 0.1, 0.15])
    np.testing.assert_allclose(df["kernel_value"], [0.7425, 0.72, 0.7425])


def test_tied_pairs_are_dropped():
    df = dataset_pairs([1.0, 1.0, 2.0], [0.0, 1.0, 2.0], [0.0, 0.0, 0.0], h=1.0, cut=0.0)
    assert list(zip(df["i"], df["j"])) == [(0, 2), (1, 2)]


def test_cut_keeps_only_the_closest_pairs():
    rng = np.random.default_rng(0)
    n = 60
    z = rng.uniform(size=(n, 2))
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)

    everything = dataset_pairs(x1, x2, z, h=0.5, kernel="Gaussian", cut=0.0)
    closest = dataset_pairs(x1, x2, z, h=0.5, kernel="Gaussian", cut=0.9)

    assert list(everything.columns) == ["sign", "z0", "z1", "kernel_value", "i", "j"]
    assert len(everything) == n * (n - 1) // 2
    assert 0 < len(closest) <= int(np.ceil(0.1 * len(everything)))
    threshold = np.quantile(everything["kernel_value"], 0.9)
    assert closest["kernel_value"].min() > threshold


def test_invalid_cut_or_sizes():
    with pytest.raises(InvalidArgument):
        dataset_pairs([1.0, 2.0], [1.0, 2.0], [0.0, 1.0], h=1.0, cut=1.0)
    with pytest.raises(InvalidArgument):
        dataset_pairs([1.0, 2.0], [1.0, 2.0], [0.0], h=1.0)

import numpy as np
import pytest

from condkendall.ckt import (
    DegenerateWeights,
    InvalidArgument,
    KernelName,
    UnknownKernel,
    compute_weights,
    kernel_support,
    kernel_values,
)


def test_gaussian_weights_unnormalized_values():
    w = compute_weights(np.array([0.0, 0.5, 1.0]), 0.0, 1.0, "Gaussian", normalize=False)
    np.testing.assert_allclose(w, [1.0, np.exp(-0.25), np.exp(-1.0)])


def test_epanechnikov_weights_have_compact_support():
    w = compute_weights(np.array([0.0, 0.5, 2.0]), 0.0, 1.0, "Epa", normalize=False)
    np.testing.assert_allclose(w, [0.75, 0.5625, 0.0])


@pytest.mark.parametrize("kernel", ["Gaussian", "Epa", KernelName.EPANECHNIKOV])
def test_normalized_weights_sum_to_one(kernel):
    rng = np.random.default_rng(0)
    z = rng.uniform(size=200)
    w = compute_weights(z, 0.4, 0.2, kernel)
    assert np.all(w >= 0)
    assert w.sum() == pytest.approx(1.0)


def test_product_kernel_in_several_dimensions():
    z = np.array([[0.0, 0.0], [0.5, 0.5], [0.5, 2.0]])
    w = compute_weights(z, [0.0, 0.0], 1.0, "Epa", normalize=False)
    np.testing.assert_allclose(w, [0.5625, 0.5625 ** 2, 0.0])
    np.testing.assert_allclose(kernel_values(np.array([[0.5, 0.5]]), "Epa"), [0.5625 ** 2])


def test_isolated_point_raises_degenerate_weights():
    with pytest.raises(DegenerateWeights):
        compute_weights(np.array([0.0, 0.1, 0.2]), 5.0, 0.5, "Epa")


def test_gaussian_underflow_raises_degenerate_weights():
    with pytest.raises(DegenerateWeights):
        compute_weights(np.array([0.0, 1.0]), 0.5, 1e-3, "Gaussian")


def test_unknown_kernel_is_rejected():
    with pytest.raises(UnknownKernel):
        compute_weights(np.array([0.0, 1.0]), 0.5, 1.0, "Triangle")
    # UnknownKernel is an InvalidArgument, which is a ValueError
    with pytest.raises(ValueError):
        KernelName.parse("gaussian")


@pytest.mark.parametrize("h", [0.0, -1.0, np.nan, np.inf, "wide"])
def test_invalid_bandwidth(h):
    with pytest.raises(InvalidArgument):
        compute_weights(np.array([0.0, 1.0]), 0.5, h, "Gaussian")


def test_point_dimension_must_match_covariates():
    z = np.zeros((4, 2))
    with pytest.raises(InvalidArgument):
        compute_weights(z, [0.0, 0.0, 0.0], 1.0, "Gaussian")
    with pytest.raises(InvalidArgument):
        compute_weights(np.zeros(4), [0.0, 1.0], 1.0, "Gaussian")


def test_epanechnikov_support_matches_full_weights():
    rng = np.random.default_rng(5)
    z = rng.uniform(size=(300, 2))
    point = np.array([0.5, 0.3])
    h = 0.15

    indices, weights = kernel_support(z, point, h, "Epa")
    full = compute_weights(z, point, h, "Epa")

    assert indices.size < z.shape[0]
    assert np.all(np.abs(z[indices] - point) <= h)
    np.testing.assert_allclose(weights, full[indices])
    outside = np.setdiff1d(np.arange(z.shape[0]), indices)
    np.testing.assert_array_equal(full[outside], 0.0)


def test_gaussian_support_keeps_every_row():
    z = np.linspace(0.0, 1.0, 11)
    indices, weights = kernel_support(z, 0.5, 0.3, "Gaussian")
    np.testing.assert_array_equal(indices, np.arange(11))
    assert weights.sum() == pytest.approx(1.0)


def test_support_is_drawn_from_rows_subset():
    z = np.linspace(0.0, 1.0, 11)
    rows = np.array([0, 4, 5, 6, 10])
    indices, weights = kernel_support(z, 0.5, 0.15, "Epa", rows=rows)
    np.testing.assert_array_equal(indices, [4, 5, 6])
    assert weights.sum() == pytest.approx(1.0)
    with pytest.raises(DegenerateWeights):
        kernel_support(z, 0.25, 0.1, "Epa", rows=rows)

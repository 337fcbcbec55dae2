import numpy as np
import pytest

from condkendall.ckt import InvalidArgument, compute_sign_matrix, pair_signs


def test_sign_matrix_small_example():
    S = compute_sign_matrix([1.0, 2.0, 3.0], [1.0, 3.0, 2.0], type_est=4)
    expected = np.array(
        [
            [0.0, 1.0, 1.0],
            [1.0, 0.0, -1.0],
            [1.0, -1.0, 0.0],
        ]
    )
    np.testing.assert_array_equal(S, expected)


def test_ties_give_zero_sign():
    S = compute_sign_matrix([1.0, 1.0, 2.0], [0.0, 1.0, 2.0], type_est=2)
    assert S[0, 1] == 0.0
    assert S[1, 0] == 0.0
    assert S[0, 2] == 1.0


@pytest.mark.parametrize("type_est", [2, 4])
def test_sign_matrix_is_symmetric_with_zero_diagonal(type_est):
    rng = np.random.default_rng(3)
    x1 = rng.standard_normal(30)
    x2 = rng.standard_normal(30)
    S = compute_sign_matrix(x1, x2, type_est=type_est)
    assert S.shape == (30, 30)
    np.testing.assert_array_equal(S, S.T)
    np.testing.assert_array_equal(np.diag(S), np.zeros(30))
    assert set(np.unique(S)).issubset({-1.0, 0.0, 1.0})


def test_directional_indicators_for_types_1_and_3():
    x1 = [1.0, 2.0, 3.0]
    x2 = [1.0, 3.0, 2.0]
    C = compute_sign_matrix(x1, x2, type_est=1)
    D = compute_sign_matrix(x1, x2, type_est=3)
    # C[i, j] = 1 when observation j dominates observation i in both coordinates
    np.testing.assert_array_equal(C, [[0, 1, 1], [0, 0, 0], [0, 0, 0]])
    np.testing.assert_array_equal(D, [[0, 0, 0], [0, 0, 1], [0, 0, 0]])
    # symmetrized, they split the pairs into concordant / discordant
    S = compute_sign_matrix(x1, x2, type_est=2)
    np.testing.assert_array_equal((C + C.T) - (D + D.T), S)


@pytest.mark.parametrize("type_est", [1, 3])
def test_pair_signs_recover_signs_from_indicator_matrices(type_est):
    rng = np.random.default_rng(11)
    x1 = rng.standard_normal(25)
    x2 = x1 + rng.standard_normal(25)
    S = compute_sign_matrix(x1, x2, type_est=4)
    M = compute_sign_matrix(x1, x2, type_est=type_est)
    ii, jj = np.nonzero(~np.eye(25, dtype=bool))
    np.testing.assert_array_equal(pair_signs(M, ii, jj, type_est), S[ii, jj])


def test_invalid_type_raises():
    with pytest.raises(InvalidArgument):
        compute_sign_matrix([1.0, 2.0], [2.0, 1.0], type_est=5)
    with pytest.raises(InvalidArgument):
        compute_sign_matrix([1.0, 2.0], [2.0, 1.0], type_est="4")


def test_length_mismatch_and_empty_inputs_raise():
    with pytest.raises(InvalidArgument):
        compute_sign_matrix([1.0, 2.0, 3.0], [2.0, 1.0])
    with pytest.raises(InvalidArgument):
        compute_sign_matrix([], [])
    with pytest.raises(ValueError):
        compute_sign_matrix(np.ones((2, 2)), np.ones((2, 2)))

from __future__ import annotations

import numpy as np

from .errors import InvalidArgument
from .types import EstimatorType


def _as_sample(values, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.ndim != 1:
        raise InvalidArgument(f"{name} must be a 1D array of observations.")
    if arr.size == 0:
        raise InvalidArgument(f"{name} must contain at least one observation.")
    return arr


def compute_sign_matrix(x1, x2, type_est: EstimatorType | int = 4) -> np.ndarray:
    """
    Pairwise concordance matrix of (X1, X2), the sufficient statistic of every
    kernel CKT estimator.

    Args:
        x1, x2: Observations of the two variables, same length n.
        type_est: Estimator type the matrix is built for.
            2 and 4: sign((X1i - X1j)(X2i - X2j)), symmetric, 0 on ties.
            1: directional concordance indicator 1{X1i < X1j, X2i < X2j}.
            3: directional discordance indicator 1{X1i < X1j, X2i > X2j}.

    Returns:
        (n, n) float array with a zero diagonal.
    """
    kind = EstimatorType.parse(type_est)
    x1 = _as_sample(x1, "observedX1")
    x2 = _as_sample(x2, "observedX2")
    if x1.shape[0] != x2.shape[0]:
        raise InvalidArgument("observedX1 and observedX2 must have the same length.")

    # d1[i, j] = X1j - X1i
    d1 = x1[None, :] - x1[:, None]
    d2 = x2[None, :] - x2[:, None]

    if kind.uses_signs:
        return np.sign(d1 * d2)
    if kind is EstimatorType.CONCORDANCE:
        return ((d1 > 0) & (d2 > 0)).astype(float)
    return ((d1 > 0) & (d2 < 0)).astype(float)


def pair_signs(
    signs: np.ndarray,
    rows: np.ndarray,
    cols: np.ndarray,
    type_est: EstimatorType | int,
) -> np.ndarray:
    """
    Symmetric pair signs for the pairs (rows[k], cols[k]), rows[k] != cols[k],
    recovered from any matrix built by compute_sign_matrix.

    For types 1 and 3 the directional indicators only record one of
    concordance/discordance, so ties are read as the opposite class.
    """
    kind = EstimatorType.parse(type_est)
    if kind.uses_signs:
        return signs[rows, cols]
    sym = signs[rows, cols] + signs[cols, rows]
    if kind is EstimatorType.CONCORDANCE:
        return 2.0 * sym - 1.0
    return 1.0 - 2.0 * sym

from __future__ import annotations

from typing import Optional

import numpy as np

from .kernel import kernel_support
from .types import EstimatorType, KernelName

# Above this share of n, the full matrix is used through a padded weight
# vector instead of copying the support sub-matrix.
_DENSE_SUPPORT_SHARE = 0.5


def weighted_pair_sum(signs: np.ndarray, indices: np.ndarray, weights: np.ndarray) -> float:
    """q = sum_{i,j in support} w_i w_j S[i, j]."""
    n = signs.shape[0]
    if indices.size > _DENSE_SUPPORT_SHARE * n:
        padded = np.zeros(n, dtype=float)
        padded[indices] = weights
        return float(padded @ (signs @ padded))
    sub = signs[np.ix_(indices, indices)]
    return float(weights @ (sub @ weights))


def pointwise_ckt(
    signs: np.ndarray,
    observed_z,
    h: float,
    point_z,
    kernel: KernelName | str = "Epa",
    type_est: EstimatorType | int = 4,
    *,
    rows: Optional[np.ndarray] = None,
) -> float:
    """
    Conditional Kendall's tau of X1 and X2 given Z = point_z.

    `signs` must come from compute_sign_matrix with the same type_est.
    `rows` restricts the estimate to a subset of the observations without
    copying the sign matrix. Validation of shapes is left to evaluate_ckt.
    """
    kind = EstimatorType.parse(type_est)
    indices, weights = kernel_support(observed_z, point_z, h, kernel, rows=rows)
    q = weighted_pair_sum(signs, indices, weights)
    return kind.combine(q, float(np.sum(weights * weights)))

from __future__ import annotations

import logging
import warnings
from typing import Optional, Tuple

import numpy as np

from .errors import DegenerateWeights, InvalidArgument, NumericOutOfRange
from .kernel import as_observed_z, check_bandwidth
from .pointwise import pointwise_ckt
from .types import EstimatorType, KernelName, ProgressCallback

logger = logging.getLogger(__name__)

_RANGE_TOL = 1e-12


def check_range(estimates: np.ndarray) -> np.ndarray:
    """Warn with NumericOutOfRange if any estimate leaves [-1, 1]; values are kept."""
    outside = np.abs(estimates) > 1.0 + _RANGE_TOL
    if np.any(outside):
        warnings.warn(
            f"{int(outside.sum())} conditional Kendall's tau estimate(s) fall outside [-1, 1].",
            NumericOutOfRange,
            stacklevel=3,
        )
    return estimates


def _validate_inputs(signs, observed_z, new_z) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    signs = np.asarray(signs, dtype=float)
    if signs.ndim != 2 or signs.shape[0] != signs.shape[1]:
        raise InvalidArgument("matrixSignsPairs must be a square matrix.")
    z = as_observed_z(observed_z)
    if z.shape[0] != signs.shape[0]:
        raise InvalidArgument(
            "observedZ must have the same number of observations as the rows of matrixSignsPairs."
        )

    points = np.asarray(new_z, dtype=float)
    if z.ndim == 1:
        points = np.atleast_1d(points)
        if points.ndim != 1:
            raise InvalidArgument("ZToEstimate must be a vector when observedZ is a vector.")
    else:
        if points.ndim != 2:
            raise InvalidArgument("ZToEstimate must be a matrix (m, d) when observedZ is a matrix.")
        if points.shape[1] != z.shape[1]:
            raise InvalidArgument("observedZ and ZToEstimate must have the same number of columns.")
    return signs, z, points


def broadcast_bandwidth(h, n_points: int) -> np.ndarray:
    """A scalar h is repeated for every point; a vector must have one entry per point."""
    h_arr = np.atleast_1d(np.asarray(h, dtype=float))
    if h_arr.ndim != 1:
        raise InvalidArgument("h must be a scalar or a vector.")
    if h_arr.size == 1:
        h_arr = np.repeat(h_arr, n_points)
    elif h_arr.size != n_points:
        raise InvalidArgument(
            f"h has {h_arr.size} values for {n_points} points; give one value or one per point."
        )
    for value in np.unique(h_arr):
        check_bandwidth(value)
    return h_arr


def evaluate_ckt(
    signs: np.ndarray,
    observed_z,
    h,
    new_z,
    kernel: KernelName | str = "Epa",
    type_est: EstimatorType | int = 4,
    *,
    rows: Optional[np.ndarray] = None,
    progress: Optional[ProgressCallback] = None,
) -> np.ndarray:
    """
    Estimate the conditional Kendall's tau at several points.

    Args:
        signs: Square sign matrix from compute_sign_matrix.
        observed_z: (n,) or (n, d) observed covariates, aligned with signs.
        h: Scalar bandwidth, or one bandwidth per point of new_z.
        new_z: (m,) points for univariate observed_z, (m, d) points otherwise.
        kernel: "Gaussian" or "Epa".
        type_est: Estimator type 1..4, matching the sign matrix.
        rows: Optional subset of observations to estimate from.
        progress: Called once after each point.

    Returns:
        (m,) array of estimates.

    Raises:
        DegenerateWeights: The first point where the weights cannot be
            normalized aborts the batch; ``point_index`` identifies it.
    """
    kern = KernelName.parse(kernel)
    kind = EstimatorType.parse(type_est)
    signs, z, points = _validate_inputs(signs, observed_z, new_z)
    n_points = points.shape[0]
    h_vect = broadcast_bandwidth(h, n_points)
    logger.debug(
        "Estimating CKT at %d point(s) from %d observation(s), dim=%d, kernel=%s, type=%d",
        n_points,
        z.shape[0] if rows is None else len(rows),
        1 if z.ndim == 1 else z.shape[1],
        kern.value,
        int(kind),
    )

    estimates = np.empty(n_points, dtype=float)
    for k in range(n_points):
        try:
            estimates[k] = pointwise_ckt(signs, z, h_vect[k], points[k], kern, kind, rows=rows)
        except DegenerateWeights as exc:
            raise DegenerateWeights(
                f"Query point {k} (h={h_vect[k]}): {exc}", point_index=k
            ) from exc
        if progress is not None:
            progress()

    return check_range(estimates)

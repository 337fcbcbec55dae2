from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .errors import DegenerateWeights, InvalidArgument
from .types import KernelName


def check_bandwidth(h) -> float:
    try:
        value = float(h)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"bandwidth must be a positive scalar, got {h!r}.") from exc
    if not np.isfinite(value) or value <= 0:
        raise InvalidArgument(f"bandwidth must be a positive finite scalar, got {value}.")
    return value


def as_observed_z(observed_z) -> np.ndarray:
    """Covariates as a float array: (n,) for the univariate path, (n, d) otherwise."""
    z = np.asarray(observed_z, dtype=float)
    if z.ndim not in (1, 2):
        raise InvalidArgument("observedZ must be a vector (n,) or a matrix (n, d).")
    if z.shape[0] == 0:
        raise InvalidArgument("observedZ must contain at least one observation.")
    return z


def _as_point(point_z, observed_z: np.ndarray) -> np.ndarray:
    point = np.asarray(point_z, dtype=float)
    if observed_z.ndim == 1:
        if point.size != 1:
            raise InvalidArgument("pointZ must be a scalar for univariate observedZ.")
        return point.reshape(())
    point = point.reshape(-1)
    if point.shape[0] != observed_z.shape[1]:
        raise InvalidArgument(
            f"pointZ has {point.shape[0]} coordinates but observedZ has {observed_z.shape[1]} columns."
        )
    return point


def kernel_values(u: np.ndarray, kernel: KernelName | str = "Epa") -> np.ndarray:
    """
    Raw kernel values on scaled distances.

    A 2D u (n, d) is reduced with a product over its columns (product kernel).
    """
    kern = KernelName.parse(kernel)
    values = kern.evaluate(np.asarray(u, dtype=float))
    if values.ndim == 2:
        return np.prod(values, axis=1)
    return values


def _normalize(raw: np.ndarray) -> np.ndarray:
    total = float(np.sum(raw))
    if not np.isfinite(total) or total <= 0.0:
        raise DegenerateWeights(
            "Kernel weights sum to zero at this point; no observation carries weight "
            "(bandwidth too small or point outside the data)."
        )
    return raw / total


def compute_weights(
    observed_z,
    point_z,
    h: float,
    kernel: KernelName | str = "Epa",
    *,
    normalize: bool = True,
) -> np.ndarray:
    """
    Kernel weights of every observation with respect to point_z.

    Args:
        observed_z: (n,) univariate or (n, d) multivariate covariates.
        point_z: Scalar, or length-d point.
        h: Bandwidth, positive.
        kernel: "Gaussian" or "Epa".
        normalize: Divide by the sum of weights. Raises DegenerateWeights
            when that sum is zero.

    Returns:
        (n,) array of nonnegative weights.
    """
    kern = KernelName.parse(kernel)
    h = check_bandwidth(h)
    z = as_observed_z(observed_z)
    point = _as_point(point_z, z)
    raw = kernel_values((z - point) / h, kern)
    return _normalize(raw) if normalize else raw


def kernel_support(
    observed_z,
    point_z,
    h: float,
    kernel: KernelName | str = "Epa",
    *,
    rows: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Indices of the observations that can carry weight at point_z, together
    with their normalized weights.

    The indices refer to rows of observed_z (and therefore of the sign
    matrix) and are the only index set the weights may be paired with.
    For the Epanechnikov kernel, observations outside the cube
    |Z_i - point| <= h are dropped before any weight is computed.

    Args:
        rows: Optional subset of row indices the support is drawn from.
    """
    kern = KernelName.parse(kernel)
    h = check_bandwidth(h)
    z = as_observed_z(observed_z)
    point = _as_point(point_z, z)

    if rows is None:
        indices = np.arange(z.shape[0])
        candidates = z
    else:
        indices = np.asarray(rows, dtype=int)
        candidates = z[indices]

    if kern.compact:
        within = np.abs(candidates - point) <= h
        if within.ndim == 2:
            within = np.all(within, axis=1)
        indices = indices[within]
        candidates = candidates[within]
        if indices.size == 0:
            raise DegenerateWeights(f"No observation lies within bandwidth {h} of the point.")

    weights = _normalize(kernel_values((candidates - point) / h, kern))
    return indices, weights

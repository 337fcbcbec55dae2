from __future__ import annotations

import numpy as np
import pandas as pd

from .errors import InvalidArgument
from .kernel import as_observed_z, check_bandwidth, kernel_values
from .signs import compute_sign_matrix
from .types import KernelName


def dataset_pairs(
    x1,
    x2,
    z,
    h: float,
    *,
    kernel: KernelName | str = "Epa",
    cut: float = 0.9,
) -> pd.DataFrame:
    """
    Pair-level training table for classification-style CKT estimators.

    Each row is an unordered pair i < j of non-tied observations, labelled by
    its concordance sign and located at the covariate midpoint. Pairs whose
    kernel value K((Z_i - Z_j) / h) is not above the `cut` quantile of the
    positive kernel values are dropped, so that only pairs with close
    covariates are kept.

    Args:
        x1, x2: n observations of the two variables.
        z: (n,) or (n, d) covariates.
        h: Bandwidth of the proximity kernel.
        kernel: "Epa" or "Gaussian".
        cut: Quantile level in [0, 1); 0 keeps every positive-weight pair.

    Returns:
        DataFrame with columns sign, z0..z{d-1}, kernel_value, i, j.
    """
    if not 0.0 <= float(cut) < 1.0:
        raise InvalidArgument("cut must lie in [0, 1).")
    h = check_bandwidth(h)
    signs = compute_sign_matrix(x1, x2, type_est=4)
    z = as_observed_z(z)
    if z.shape[0] != signs.shape[0]:
        raise InvalidArgument("z must have the same number of observations as x1 and x2.")
    z2 = z[:, None] if z.ndim == 1 else z

    ii, jj = np.triu_indices(signs.shape[0], k=1)
    sign = signs[ii, jj]
    kernel_value = kernel_values((z2[ii] - z2[jj]) / h, kernel)

    keep = (sign != 0) & (kernel_value > 0)
    if cut > 0 and np.any(keep):
        threshold = np.quantile(kernel_value[keep], cut)
        keep &= kernel_value > threshold

    midpoints = 0.5 * (z2[ii[keep]] + z2[jj[keep]])
    df = pd.DataFrame(midpoints, columns=[f"z{k}" for k in range(z2.shape[1])])
    df.insert(0, "sign", sign[keep].astype(int))
    df["kernel_value"] = kernel_value[keep]
    df["i"] = ii[keep]
    df["j"] = jj[keep]
    return df

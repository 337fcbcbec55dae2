from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .cv import BandwidthSelection, BandwidthSelector
from .estimator import KernelCKT
from .types import CKTConfig, CVMethod, EstimatorType, KernelName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CKTResult:
    """
    estimated_ckt: (m,) estimates at the requested points.
    h: bandwidth actually used.
    selection: cross-validation details, None when h was given as a scalar.
    """

    estimated_ckt: np.ndarray
    h: float
    selection: Optional[BandwidthSelection] = None


def ckt_kernel(
    observed_x1,
    observed_x2,
    observed_z,
    new_z,
    h,
    *,
    config: Optional[CKTConfig] = None,
    kernel: KernelName | str = KernelName.EPANECHNIKOV,
    method_cv: CVMethod | str = CVMethod.KFOLDS,
    n_folds: int = 5,
    n_pairs: Optional[int] = None,
    type_est: EstimatorType | int = EstimatorType.SELF_NORMALIZED,
    progress_bar: bool = False,
    seed: Optional[int] = None,
    selector: Optional[BandwidthSelector] = None,
) -> CKTResult:
    """
    Estimate the conditional Kendall's tau of X1 and X2 given Z by kernel smoothing.

    Args:
        observed_x1, observed_x2: n observations of the two variables.
        observed_z: (n,) observations of a univariate covariate, or an (n, d)
            matrix; the matrix form takes the product-kernel path even for d=1.
        new_z: Points at which the CKT is estimated, (m,) or (m, d) matching observed_z.
        h: Bandwidth. A vector of several values is a grid of candidates and
            triggers cross-validation with `method_cv`.
        config: Full estimator settings; when given, the individual keyword
            settings below are ignored.
        kernel: "Epa" (Epanechnikov) or "Gaussian".
        method_cv: "Kfolds" or "leave-one-out".
        n_folds: Number of folds for "Kfolds".
        n_pairs: Number of pairs for "leave-one-out" (default 10 n).
        type_est: Estimator type; 4 is the recommended one, 1 and 3 are
            biased and 2 does not attain the full range [-1, 1].
        progress_bar: Show tqdm progress bars.
        seed: Seed of the fold shuffling / pair sampling.
        selector: Custom BandwidthSelector overriding `method_cv`.

    Returns:
        CKTResult with the estimates and the bandwidth used.

    References:
        Derumigny, A., & Fermanian, J. D. (2019). On kernel-based estimation of
        conditional Kendall's tau: finite-distance bounds and asymptotic behavior.
        Dependence Modeling, 7(1), 292-321.
    """
    if config is None:
        config = CKTConfig(
            kernel=kernel,
            type_est=type_est,
            method_cv=method_cv,
            n_folds=n_folds,
            n_pairs=n_pairs,
            seed=seed,
            progress_bar=progress_bar,
        )

    model = KernelCKT(h, config, selector=selector).fit(
        observed_x1, observed_x2, observed_z, new_z=new_z
    )
    estimates = model.predict(new_z)
    logger.debug("Estimated CKT at %d point(s) with h=%g", estimates.size, model.bandwidth_)
    return CKTResult(estimated_ckt=estimates, h=model.bandwidth_, selection=model.selection_)

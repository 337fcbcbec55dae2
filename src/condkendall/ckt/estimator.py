from __future__ import annotations

import logging
from typing import Optional, Protocol

import numpy as np

from .cv import BandwidthSelection, BandwidthSelector, make_selector
from .errors import InvalidArgument
from .evaluate import evaluate_ckt
from .kernel import as_observed_z
from .progress import progress_reporter
from .signs import compute_sign_matrix
from .types import CKTConfig

logger = logging.getLogger(__name__)


class CKTEstimator(Protocol):
    """
    Calling contract shared by conditional Kendall's tau estimators: fit on a
    sample, then predict the CKT at new covariate values.
    """

    def fit(self, *args, **kwargs) -> "CKTEstimator": ...

    def predict(self, new_z) -> np.ndarray: ...


class KernelCKT:
    """
    Kernel-smoothing estimator of the conditional Kendall's tau.

    `h` is either a single bandwidth, used as is, or a grid of candidates
    from which `fit` selects one by cross-validation. The sign matrix is
    built once in `fit` and reused by every `predict`.
    """

    def __init__(
        self,
        h,
        config: Optional[CKTConfig] = None,
        *,
        selector: Optional[BandwidthSelector] = None,
    ):
        self.h = np.atleast_1d(np.asarray(h, dtype=float))
        if self.h.ndim != 1 or self.h.size == 0:
            raise InvalidArgument("h must be a scalar or a non-empty vector of candidates.")
        self.config = config if config is not None else CKTConfig()
        self.selector = selector if selector is not None else make_selector(self.config)

        self.signs_: Optional[np.ndarray] = None
        self.observed_z_: Optional[np.ndarray] = None
        self.bandwidth_: Optional[float] = None
        self.selection_: Optional[BandwidthSelection] = None

    def fit(self, observed_x1, observed_x2, observed_z, new_z=None) -> "KernelCKT":
        """
        Build the sign matrix and settle the bandwidth.

        new_z is forwarded to the selector as evaluation points; selectors
        that do not need it ignore it.
        """
        cfg = self.config
        signs = compute_sign_matrix(observed_x1, observed_x2, cfg.type_est)
        z = as_observed_z(observed_z)
        if z.shape[0] != signs.shape[0]:
            raise InvalidArgument("observedZ must have the same number of observations as observedX1.")
        logger.debug(
            "Fitted sign matrix on n=%d observations, covariate dim=%d",
            signs.shape[0],
            1 if z.ndim == 1 else z.shape[1],
        )

        if self.h.size == 1:
            self.selection_ = None
            self.bandwidth_ = float(self.h[0])
        else:
            with progress_reporter(cfg.progress_bar, self.h.size, "bandwidth CV") as progress:
                self.selection_ = self.selector.select(
                    self.h,
                    signs,
                    z,
                    new_z=new_z,
                    kernel=cfg.kernel,
                    type_est=cfg.type_est,
                    progress=progress,
                )
            self.bandwidth_ = self.selection_.bandwidth

        self.signs_ = signs
        self.observed_z_ = z
        return self

    def predict(self, new_z, h=None) -> np.ndarray:
        """CKT at new_z, with the fitted bandwidth unless `h` (scalar or per point) is given."""
        if self.signs_ is None or self.observed_z_ is None:
            raise InvalidArgument("KernelCKT must be fitted before calling predict.")
        bandwidth = self.bandwidth_ if h is None else h
        points = np.asarray(new_z, dtype=float)
        n_points = points.shape[0] if points.ndim > 0 else 1
        with progress_reporter(self.config.progress_bar, n_points, "CKT estimation") as progress:
            return evaluate_ckt(
                self.signs_,
                self.observed_z_,
                bandwidth,
                points,
                self.config.kernel,
                self.config.type_est,
                progress=progress,
            )

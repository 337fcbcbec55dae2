"""
Bandwidth selection by cross-validation.

Both selectors score every candidate bandwidth by how well the kernel
estimate predicts held-out pair signs. A pair (i, j) is a noisy proxy for the
conditional Kendall's tau near Z_i, so each squared error is weighted by the
proximity K((Z_i - Z_j) / h) and the criterion is the weighted mean

    sum_p K_p (S_p - tau_hat_p)^2 / sum_p K_p.

The sign matrix is shared read-only; held-out observations are excluded
through row subsets, never by copying it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold

from .errors import DegenerateWeights, InvalidArgument
from .evaluate import evaluate_ckt
from .kernel import as_observed_z, kernel_values
from .pointwise import pointwise_ckt
from .signs import pair_signs
from .types import CKTConfig, CVMethod, EstimatorType, KernelName, ProgressCallback, as_count

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BandwidthSelection:
    """Outcome of a cross-validation run."""

    bandwidth: float
    candidates: np.ndarray
    criteria: np.ndarray  # np.inf marks candidates where the criterion could not be computed
    method: str

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"h": self.candidates, "criterion": self.criteria})


class BandwidthSelector(Protocol):
    """
    Picks one bandwidth among `candidates` for the sample (signs, observed_z).

    `new_z` carries the points the CKT will be evaluated at. The built-in
    selectors score candidates at the observations and ignore it; custom
    selectors may use it to target the criterion at those points.
    """

    def select(
        self,
        candidates,
        signs: np.ndarray,
        observed_z,
        *,
        new_z=None,
        kernel: KernelName | str = "Epa",
        type_est: EstimatorType | int = 4,
        progress: Optional[ProgressCallback] = None,
    ) -> BandwidthSelection: ...


def check_candidates(candidates) -> np.ndarray:
    arr = np.atleast_1d(np.asarray(candidates, dtype=float))
    if arr.ndim != 1 or arr.size == 0:
        raise InvalidArgument("The set of candidate bandwidths must be a non-empty vector.")
    if not np.all(np.isfinite(arr)) or np.any(arr <= 0):
        raise InvalidArgument("Candidate bandwidths must be positive and finite.")
    return arr


def _check_sample(signs, observed_z) -> Tuple[np.ndarray, np.ndarray]:
    signs = np.asarray(signs, dtype=float)
    if signs.ndim != 2 or signs.shape[0] != signs.shape[1]:
        raise InvalidArgument("matrixSignsPairs must be a square matrix.")
    z = as_observed_z(observed_z)
    if z.shape[0] != signs.shape[0]:
        raise InvalidArgument(
            "observedZ must have the same number of observations as the rows of matrixSignsPairs."
        )
    return signs, z


def _proximity(z: np.ndarray, ii: np.ndarray, jj: np.ndarray, h: float, kernel: KernelName) -> np.ndarray:
    return kernel_values((z[ii] - z[jj]) / h, kernel)


def _pick(candidates: np.ndarray, criteria: np.ndarray, method: CVMethod) -> BandwidthSelection:
    if not np.any(np.isfinite(criteria)):
        raise DegenerateWeights(
            f"{method.value} cross-validation failed for every candidate bandwidth; "
            "try larger bandwidths."
        )
    # argmin returns the first minimum, so ties go to the earliest candidate
    best = int(np.argmin(criteria))
    logger.info(
        "%s cross-validation selected h=%g (criterion %.6g) among %d candidate(s)",
        method.value,
        candidates[best],
        criteria[best],
        candidates.size,
    )
    return BandwidthSelection(
        bandwidth=float(candidates[best]),
        candidates=candidates,
        criteria=criteria,
        method=method.value,
    )


@dataclass(frozen=True)
class _HeldOutFold:
    train: np.ndarray
    ii: np.ndarray
    jj: np.ndarray
    target: np.ndarray


@dataclass(frozen=True)
class KFoldsSelector:
    """
    K-folds cross-validation.

    Observations are shuffled with `seed` and split into `n_folds` nearly equal
    folds. For each fold, the CKT at every held-out Z_i is estimated from the
    other folds and compared with the signs of the held-out pairs (i, j).
    """

    n_folds: int = 5
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        n_folds = as_count(self.n_folds, "Kfolds")
        if n_folds < 2:
            raise InvalidArgument("Kfolds must be at least 2.")
        object.__setattr__(self, "n_folds", n_folds)

    def folds(self, n: int) -> List[np.ndarray]:
        if self.n_folds > n:
            raise InvalidArgument(f"Kfolds={self.n_folds} exceeds the number of observations {n}.")
        kf = KFold(n_splits=self.n_folds, shuffle=True, random_state=self.seed)
        return [test for _, test in kf.split(np.arange(n))]

    def _held_out(self, signs: np.ndarray, kind: EstimatorType) -> List[_HeldOutFold]:
        n = signs.shape[0]
        everything = np.arange(n)
        out = []
        for test in self.folds(n):
            ii, jj = np.meshgrid(test, test, indexing="ij")
            off_diag = ii != jj
            ii, jj = ii[off_diag], jj[off_diag]
            out.append(
                _HeldOutFold(
                    train=np.setdiff1d(everything, test, assume_unique=True),
                    ii=ii,
                    jj=jj,
                    target=pair_signs(signs, ii, jj, kind),
                )
            )
        return out

    def _criterion(
        self,
        h: float,
        signs: np.ndarray,
        z: np.ndarray,
        folds: List[_HeldOutFold],
        kernel: KernelName,
        kind: EstimatorType,
    ) -> float:
        num = 0.0
        den = 0.0
        for k, fold in enumerate(folds):
            prox = _proximity(z, fold.ii, fold.jj, h, kernel)
            active = prox > 0
            if not np.any(active):
                continue
            ii = fold.ii[active]
            needed = np.unique(ii)
            try:
                est = evaluate_ckt(signs, z, h, z[needed], kernel, kind, rows=fold.train)
            except DegenerateWeights as exc:
                logger.warning("h=%g dropped from K-folds cross-validation (fold %d): %s", h, k, exc)
                return np.inf
            residual = fold.target[active] - est[np.searchsorted(needed, ii)]
            num += float(prox[active] @ (residual * residual))
            den += float(prox[active].sum())
        if den == 0.0:
            logger.warning("h=%g dropped from K-folds cross-validation: no held-out pair within reach.", h)
            return np.inf
        return num / den

    def select(
        self,
        candidates,
        signs: np.ndarray,
        observed_z,
        *,
        new_z=None,
        kernel: KernelName | str = "Epa",
        type_est: EstimatorType | int = 4,
        progress: Optional[ProgressCallback] = None,
    ) -> BandwidthSelection:
        """
        Select the bandwidth among `candidates`.

        `new_z` is accepted for interface compatibility; the criterion is
        computed at the held-out observations themselves.
        """
        cands = check_candidates(candidates)
        kern = KernelName.parse(kernel)
        kind = EstimatorType.parse(type_est)
        signs, z = _check_sample(signs, observed_z)
        folds = self._held_out(signs, kind)

        criteria = np.empty(cands.size, dtype=float)
        for c, h in enumerate(cands):
            criteria[c] = self._criterion(float(h), signs, z, folds, kern, kind)
            if progress is not None:
                progress()
        return _pick(cands, criteria, CVMethod.KFOLDS)


@dataclass(frozen=True)
class LeaveOneOutSelector:
    """
    Leave-one-out cross-validation over pairs.

    `n_pairs` distinct unordered pairs i < j are drawn without replacement
    once with `seed` (default 10 n) and shared by all candidates; if n_pairs
    covers every unordered pair they are enumerated instead. Each pair's sign
    is predicted by the CKT at the midpoint (Z_i + Z_j) / 2 estimated without
    observations i and j.
    """

    n_pairs: Optional[int] = None
    seed: Optional[int] = None

    def pairs(self, n: int) -> Tuple[np.ndarray, np.ndarray]:
        if n < 3:
            raise InvalidArgument("Leave-one-out cross-validation needs at least 3 observations.")
        n_pairs = 10 * n if self.n_pairs is None else as_count(self.n_pairs, "nPairs")
        if n_pairs < 1:
            raise InvalidArgument("nPairs must be positive.")
        if n_pairs >= n * (n - 1) // 2:
            return np.triu_indices(n, k=1)
        # k indexes the unordered pair i < j as k = j (j - 1) / 2 + i
        k = np.random.default_rng(self.seed).choice(n * (n - 1) // 2, size=n_pairs, replace=False)
        jj = ((1 + np.sqrt(1 + 8 * k)) // 2).astype(np.int64)
        jj -= (jj * (jj - 1) // 2 > k).astype(np.int64)
        jj += ((jj + 1) * jj // 2 <= k).astype(np.int64)
        ii = k - jj * (jj - 1) // 2
        return ii, jj

    def _criterion(
        self,
        h: float,
        signs: np.ndarray,
        z: np.ndarray,
        ii: np.ndarray,
        jj: np.ndarray,
        target: np.ndarray,
        midpoints: np.ndarray,
        kernel: KernelName,
        kind: EstimatorType,
    ) -> float:
        prox = _proximity(z, ii, jj, h, kernel)
        everything = np.arange(z.shape[0])
        num = 0.0
        den = 0.0
        for p in np.flatnonzero(prox > 0):
            rows = np.delete(everything, [ii[p], jj[p]])
            try:
                est = pointwise_ckt(signs, z, h, midpoints[p], kernel, kind, rows=rows)
            except DegenerateWeights as exc:
                logger.warning(
                    "h=%g dropped from leave-one-out cross-validation (pair %d, %d): %s",
                    h,
                    ii[p],
                    jj[p],
                    exc,
                )
                return np.inf
            num += prox[p] * (target[p] - est) ** 2
            den += prox[p]
        if den == 0.0:
            logger.warning("h=%g dropped from leave-one-out cross-validation: no pair within reach.", h)
            return np.inf
        return float(num / den)

    def select(
        self,
        candidates,
        signs: np.ndarray,
        observed_z,
        *,
        new_z=None,
        kernel: KernelName | str = "Epa",
        type_est: EstimatorType | int = 4,
        progress: Optional[ProgressCallback] = None,
    ) -> BandwidthSelection:
        cands = check_candidates(candidates)
        kern = KernelName.parse(kernel)
        kind = EstimatorType.parse(type_est)
        signs, z = _check_sample(signs, observed_z)
        ii, jj = self.pairs(z.shape[0])
        target = pair_signs(signs, ii, jj, kind)
        midpoints = 0.5 * (z[ii] + z[jj])
        logger.debug("Leave-one-out cross-validation on %d pair(s)", ii.size)

        criteria = np.empty(cands.size, dtype=float)
        for c, h in enumerate(cands):
            criteria[c] = self._criterion(float(h), signs, z, ii, jj, target, midpoints, kern, kind)
            if progress is not None:
                progress()
        return _pick(cands, criteria, CVMethod.LEAVE_ONE_OUT)


def make_selector(config: CKTConfig) -> BandwidthSelector:
    method = CVMethod.parse(config.method_cv)
    if method is CVMethod.KFOLDS:
        return KFoldsSelector(n_folds=config.n_folds, seed=config.seed)
    return LeaveOneOutSelector(n_pairs=config.n_pairs, seed=config.seed)

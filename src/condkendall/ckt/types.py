from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, Optional

import numpy as np

from .errors import DegenerateWeights, InvalidArgument, UnknownKernel

# Zero-argument observer invoked after each unit of work.
ProgressCallback = Callable[[], Any]


def as_count(value, name: str) -> int:
    """Integer count; integral floats such as 5.0 are accepted."""
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}.")
    return int(value)


def _gaussian(u: np.ndarray) -> np.ndarray:
    return np.exp(-(u * u))


def _epanechnikov(u: np.ndarray) -> np.ndarray:
    return 0.75 * (1.0 - u * u) * (np.abs(u) <= 1.0)


class KernelName(str, Enum):
    """
    Smoothing kernels on scaled distances u = (z - point) / h.

    GAUSSIAN uses exp(-u^2) (not the density-normalized Gaussian);
    EPANECHNIKOV uses 0.75 (1 - u^2) on |u| <= 1 and zero outside.
    """

    GAUSSIAN = "Gaussian"
    EPANECHNIKOV = "Epa"

    @classmethod
    def parse(cls, name: "KernelName | str") -> "KernelName":
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnknownKernel(
                f"kernel name {name!r} is not supported; choose 'Gaussian' or 'Epa'."
            ) from None

    @property
    def compact(self) -> bool:
        return self is KernelName.EPANECHNIKOV

    def evaluate(self, u: np.ndarray) -> np.ndarray:
        return _KERNEL_FORMULAS[self](u)


_KERNEL_FORMULAS: dict[KernelName, Callable[[np.ndarray], np.ndarray]] = {
    KernelName.GAUSSIAN: _gaussian,
    KernelName.EPANECHNIKOV: _epanechnikov,
}


class EstimatorType(IntEnum):
    """
    Ways of turning the weighted pair sum q = sum_ij w_i w_j S_ij into a CKT.

    CONCORDANCE (1) and DISCORDANCE (3) work on directional indicator matrices
    and are biased downward/upward by sum w_i^2. SIGN (2) never reaches +-1.
    SELF_NORMALIZED (4) divides by the effective sample size correction.
    """

    CONCORDANCE = 1
    SIGN = 2
    DISCORDANCE = 3
    SELF_NORMALIZED = 4

    @classmethod
    def parse(cls, value: "EstimatorType | int") -> "EstimatorType":
        if isinstance(value, cls):
            return value
        value = as_count(value, "typeEstCKT")
        try:
            return cls(value)
        except ValueError:
            raise InvalidArgument(f"typeEstCKT: {value} is not in {{1,2,3,4}}.") from None

    @property
    def uses_signs(self) -> bool:
        return self in (EstimatorType.SIGN, EstimatorType.SELF_NORMALIZED)

    def combine(self, weighted_sum: float, sum_sq_weights: float) -> float:
        return _TYPE_FORMULAS[self](weighted_sum, sum_sq_weights)


def _self_normalized(q: float, sum_sq: float) -> float:
    denominator = 1.0 - sum_sq
    if denominator <= np.finfo(float).eps:
        raise DegenerateWeights("A single observation carries all the kernel weight.")
    return q / denominator


_TYPE_FORMULAS: dict[EstimatorType, Callable[[float, float], float]] = {
    EstimatorType.CONCORDANCE: lambda q, _s: 4.0 * q - 1.0,
    EstimatorType.SIGN: lambda q, _s: q,
    EstimatorType.DISCORDANCE: lambda q, _s: 1.0 - 4.0 * q,
    EstimatorType.SELF_NORMALIZED: _self_normalized,
}


class CVMethod(str, Enum):
    KFOLDS = "Kfolds"
    LEAVE_ONE_OUT = "leave-one-out"

    @classmethod
    def parse(cls, name: "CVMethod | str") -> "CVMethod":
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise InvalidArgument(
                f"methodCV {name!r} is not supported; choose 'Kfolds' or 'leave-one-out'."
            ) from None


@dataclass(frozen=True)
class CKTConfig:
    """
    Settings of the kernel CKT estimator.

    kernel / type_est accept either the enum members or their raw values
    ("Epa", "Gaussian"; 1..4). n_pairs defaults to 10 * n at selection time.
    """

    kernel: KernelName | str = KernelName.EPANECHNIKOV
    type_est: EstimatorType | int = EstimatorType.SELF_NORMALIZED
    method_cv: CVMethod | str = CVMethod.KFOLDS
    n_folds: int = 5
    n_pairs: Optional[int] = None
    seed: Optional[int] = None
    progress_bar: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "kernel", KernelName.parse(self.kernel))
        object.__setattr__(self, "type_est", EstimatorType.parse(self.type_est))
        object.__setattr__(self, "method_cv", CVMethod.parse(self.method_cv))
        n_folds = as_count(self.n_folds, "Kfolds")
        if n_folds < 2:
            raise InvalidArgument("Kfolds must be at least 2.")
        object.__setattr__(self, "n_folds", n_folds)
        if self.n_pairs is not None:
            n_pairs = as_count(self.n_pairs, "nPairs")
            if n_pairs < 1:
                raise InvalidArgument("nPairs must be positive.")
            object.__setattr__(self, "n_pairs", n_pairs)

"""
Kernel-based estimation of conditional Kendall's tau.

The sign matrix of all pairs is computed once per sample; every estimate is a
kernel-weighted quadratic form on it. Bandwidths are given directly or chosen
among a grid of candidates by K-folds or leave-one-out cross-validation.
"""

from .types import CKTConfig, CVMethod, EstimatorType, KernelName
from .errors import CKTError, DegenerateWeights, InvalidArgument, NumericOutOfRange, UnknownKernel
from .signs import compute_sign_matrix, pair_signs
from .kernel import compute_weights, kernel_support, kernel_values
from .pointwise import pointwise_ckt
from .evaluate import evaluate_ckt
from .cv import (
    BandwidthSelection,
    BandwidthSelector,
    KFoldsSelector,
    LeaveOneOutSelector,
    make_selector,
)
from .estimator import CKTEstimator, KernelCKT
from .ckt import CKTResult, ckt_kernel
from .pairs import dataset_pairs

__all__ = [
    "CKTConfig",
    "CVMethod",
    "EstimatorType",
    "KernelName",
    "CKTError",
    "DegenerateWeights",
    "InvalidArgument",
    "NumericOutOfRange",
    "UnknownKernel",
    "compute_sign_matrix",
    "pair_signs",
    "compute_weights",
    "kernel_support",
    "kernel_values",
    "pointwise_ckt",
    "evaluate_ckt",
    "BandwidthSelection",
    "BandwidthSelector",
    "KFoldsSelector",
    "LeaveOneOutSelector",
    "make_selector",
    "CKTEstimator",
    "KernelCKT",
    "CKTResult",
    "ckt_kernel",
    "dataset_pairs",
]

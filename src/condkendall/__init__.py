import logging

from .ckt import (
    BandwidthSelection,
    CKTConfig,
    CKTResult,
    DegenerateWeights,
    EstimatorType,
    InvalidArgument,
    KernelCKT,
    KernelName,
    NumericOutOfRange,
    UnknownKernel,
    ckt_kernel,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BandwidthSelection",
    "CKTConfig",
    "CKTResult",
    "DegenerateWeights",
    "EstimatorType",
    "InvalidArgument",
    "KernelCKT",
    "KernelName",
    "NumericOutOfRange",
    "UnknownKernel",
    "ckt_kernel",
]

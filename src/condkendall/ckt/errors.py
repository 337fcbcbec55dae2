from __future__ import annotations

from typing import Optional


class CKTError(Exception):
    """Base class for conditional Kendall's tau estimation errors."""


class InvalidArgument(CKTError, ValueError):
    """Raised when inputs have the wrong shape, length or value."""


class UnknownKernel(InvalidArgument):
    """Raised for a kernel name outside the supported set."""


class DegenerateWeights(CKTError, ArithmeticError):
    """
    Kernel weights cannot be normalized at a query point.

    Happens when no observation falls inside an Epanechnikov window, when
    Gaussian weights all underflow, or when a single observation carries all
    the weight so the type-4 correction divides by zero.
    """

    def __init__(self, message: str, *, point_index: Optional[int] = None):
        super().__init__(message)
        self.point_index = point_index


class NumericOutOfRange(UserWarning):
    """An estimate fell outside [-1, 1]; returned unchanged."""

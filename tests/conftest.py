"""
Test configuration to ensure the package is importable without an installed distribution.

By prepending the local `src` directory to sys.path, `python -m pytest` works
in a fresh clone without `pip install -e .`.
"""

import os
import sys

import numpy as np
import pytest


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)


def _simulate(n, tau_fn, *, dim=1, seed=0):
    """
    Draw (X1, X2, Z) with Z ~ U(0,1)^dim and (X1, X2) | Z from a Gaussian copula
    whose Kendall's tau is tau_fn(Z). For the Gaussian copula rho = sin(pi tau / 2).
    """
    rng = np.random.default_rng(seed)
    z = rng.uniform(0.0, 1.0, size=n if dim == 1 else (n, dim))
    tau = np.asarray(tau_fn(z), dtype=float) * np.ones(n)
    rho = np.sin(0.5 * np.pi * tau)
    x1 = rng.standard_normal(n)
    x2 = rho * x1 + np.sqrt(1.0 - rho * rho) * rng.standard_normal(n)
    return x1, x2, z


@pytest.fixture
def simulate():
    return _simulate

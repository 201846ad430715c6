################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Robust kernels for M-estimation of whitened residuals.

The Geman-McClure kernel is evaluated on the whitened residual norm
e = ||R r||. It provides the loss rho(e) and the reweighting function
w(e) = rho'(e) / e used by iteratively reweighted least squares.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from typing import runtime_checkable

import numpy as np


# Kernel tag for Geman-McClure
KERNEL_GEMAN_MCCLURE: str = "geman_mcclure"


def geman_mcclure_weight(sq_norm: float, scale: float) -> float:
    """Return the Geman-McClure weight for a squared residual norm."""
    if scale <= 0.0:
        return 1.0
    c_sq: float = scale * scale
    denom: float = c_sq + sq_norm
    return float((c_sq * c_sq) / (denom * denom))


@runtime_checkable
class RobustKernel(Protocol):
    """Robust loss applied to a whitened residual norm."""

    @property
    def name(self) -> str:
        """Return the kernel tag."""
        ...

    def loss(self, error: float) -> float:
        """Return rho(e) for a whitened residual norm."""
        ...

    def weight(self, error: float) -> float:
        """Return the IRLS weight w(e) for a whitened residual norm."""
        ...

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        """Return True when the kernels match within tolerance."""
        ...


def _require_positive_scale(scale: float, name: str) -> float:
    value: float = float(scale)
    if not np.isfinite(value) or value <= 0.0:
        raise ValueError(f"{name} must be positive and finite")
    return value


@dataclass(frozen=True)
class GemanMcClureKernel:
    """Geman-McClure kernel rho(e) = 0.5 c^2 e^2 / (c^2 + e^2).

    Attributes:
        c: Kernel scale in whitened units
    """

    c: float = 1.0

    def __post_init__(self) -> None:
        """Validate the kernel scale."""
        object.__setattr__(self, "c", _require_positive_scale(self.c, "c"))

    @property
    def name(self) -> str:
        return KERNEL_GEMAN_MCCLURE

    def loss(self, error: float) -> float:
        c_sq: float = self.c * self.c
        e_sq: float = float(error) * float(error)
        return float(0.5 * c_sq * e_sq / (c_sq + e_sq))

    def weight(self, error: float) -> float:
        return geman_mcclure_weight(float(error) * float(error), self.c)

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        if not isinstance(other, GemanMcClureKernel):
            return False
        return abs(self.c - other.c) <= tol


################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Report types emitted by the GNC continuation loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import NDArray


class GncStatus(Enum):
    """Terminal state of a GNC solve."""

    # mu reached 1, the surrogate equals the true robust loss
    CONVERGED = "converged"
    # Iteration cap reached first, the last result was returned
    ITERATIONS_EXHAUSTED = "iterations_exhausted"


def _frozen_weights(weights: Any) -> NDArray[np.float64]:
    array: NDArray[np.float64] = np.array(weights, dtype=np.float64).reshape(-1)
    if np.any(array < 0.0) or np.any(array > 1.0):
        raise ValueError("weights must lie in [0, 1]")
    array.setflags(write=False)
    return array


def _require_finite_non_negative(value: float, name: str) -> None:
    """Require a finite, non-negative scalar value."""
    if not np.isfinite(value):
        raise ValueError(f"{name} must be finite")
    if value < 0.0:
        raise ValueError(f"{name} must be non-negative")


@dataclass(frozen=True)
class GncIterationReport:
    """State after one continuation iteration.

    Attributes:
        iteration: Zero-based continuation iteration index
        mu: Shape parameter used for this iteration's weights
        weights: Per-slot weights used for this iteration's solve
        error: Weighted graph error at this iteration's result
    """

    iteration: int
    mu: float
    weights: NDArray[np.float64]
    error: float

    def __post_init__(self) -> None:
        """Validate report fields."""
        if not isinstance(self.iteration, int) or isinstance(self.iteration, bool):
            raise ValueError("iteration must be an int")
        if self.iteration < 0:
            raise ValueError("iteration must be non-negative")
        _require_finite_non_negative(self.mu, "mu")
        _require_finite_non_negative(self.error, "error")
        object.__setattr__(self, "weights", _frozen_weights(self.weights))

    def to_dict(self) -> dict[str, Any]:
        return {
            "iteration": self.iteration,
            "mu": float(self.mu),
            "weights": self.weights.tolist(),
            "error": float(self.error),
        }


@dataclass(frozen=True)
class GncSummary:
    """Outcome of a GNC solve.

    Attributes:
        iterations: Number of continuation iterations executed
        final_mu: Shape parameter of the last weight update
        status: Whether mu reached 1 or the iteration cap was hit
        weights: Final per-slot weights
        error: Unweighted graph error at the returned values
    """

    iterations: int
    final_mu: float
    status: GncStatus
    weights: NDArray[np.float64]
    error: float

    def __post_init__(self) -> None:
        """Validate summary fields."""
        if not isinstance(self.iterations, int) or isinstance(self.iterations, bool):
            raise ValueError("iterations must be an int")
        if self.iterations < 0:
            raise ValueError("iterations must be non-negative")
        if not isinstance(self.status, GncStatus):
            raise ValueError("status must be a GncStatus")
        _require_finite_non_negative(self.final_mu, "final_mu")
        _require_finite_non_negative(self.error, "error")
        object.__setattr__(self, "weights", _frozen_weights(self.weights))

    @property
    def converged(self) -> bool:
        return self.status is GncStatus.CONVERGED

    def outliers(self, threshold: float = 0.5) -> list[int]:
        """Return slot indices whose final weight is below a threshold."""
        return [int(idx) for idx in np.flatnonzero(self.weights < threshold)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "iterations": self.iterations,
            "final_mu": float(self.final_mu),
            "status": self.status.value,
            "weights": self.weights.tolist(),
            "error": float(self.error),
        }

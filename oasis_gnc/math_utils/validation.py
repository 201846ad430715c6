################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Validation helpers for estimation inputs."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray


# Matrix symmetry tolerance for soft symmetrization
SYMMETRY_ATOL: float = 1e-8
SYMMETRY_RTOL: float = 1e-5


def as_float_vector(values: Any, name: str) -> NDArray[np.float64]:
    """Return a finite 1D float64 copy of the input."""
    array: NDArray[np.float64] = np.array(values, dtype=np.float64)
    if array.ndim == 0:
        array = array.reshape((1,))
    if array.ndim != 1:
        raise ValueError(f"{name} must be a vector")
    if array.size == 0:
        raise ValueError(f"{name} must not be empty")
    if not np.all(np.isfinite(array)):
        raise ValueError(f"{name} must be finite")

    return array


def as_square_matrix(values: Any, name: str) -> NDArray[np.float64]:
    """Return a finite square float64 copy of the input."""
    matrix: NDArray[np.float64] = np.array(values, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"{name} must be a square matrix")
    if matrix.shape[0] == 0:
        raise ValueError(f"{name} must not be empty")
    if not np.all(np.isfinite(matrix)):
        raise ValueError(f"{name} must be finite")

    return matrix


def as_symmetric_matrix(values: Any, name: str) -> NDArray[np.float64]:
    """Return a square matrix, symmetrizing small asymmetries."""
    matrix: NDArray[np.float64] = as_square_matrix(values, name)
    if not np.allclose(matrix, matrix.T, atol=SYMMETRY_ATOL, rtol=SYMMETRY_RTOL):
        raise ValueError(f"{name} must be symmetric")

    if not np.array_equal(matrix, matrix.T):
        # Round-off from upstream products, keep the matrix exactly symmetric
        matrix = 0.5 * (matrix + matrix.T)

    if np.any(np.diag(matrix) < 0.0):
        raise ValueError(f"{name} diagonal must be non-negative")

    return matrix


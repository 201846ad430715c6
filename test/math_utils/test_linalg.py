################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for linear algebra helpers."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.typing import NDArray

from oasis_gnc.math_utils.linalg import Linalg


def test_sqrt_information_positive_definite() -> None:
    """Check R^T R reproduces a positive-definite information matrix."""
    info: NDArray[np.float64] = np.array([[4.0, 1.0], [1.0, 3.0]], dtype=np.float64)
    R: NDArray[np.float64] = Linalg.sqrt_information(info)
    assert np.allclose(R.T @ R, info, atol=1e-12)


def test_sqrt_information_zero_matrix() -> None:
    """Ensure a zero-weighted information matrix yields a zero factor."""
    info: NDArray[np.float64] = np.zeros((2, 2), dtype=np.float64)
    R: NDArray[np.float64] = Linalg.sqrt_information(info)
    assert np.allclose(R, 0.0)


def test_sqrt_information_semi_definite() -> None:
    """Check the eigen fallback for a rank-deficient matrix."""
    info: NDArray[np.float64] = np.array([[1.0, 1.0], [1.0, 1.0]], dtype=np.float64)
    R: NDArray[np.float64] = Linalg.sqrt_information(info)
    assert np.allclose(R.T @ R, info, atol=1e-12)


def test_solve_normal_equations_regular() -> None:
    """Check the step solves H delta = -g."""
    H: NDArray[np.float64] = np.array([[2.0, 0.0], [0.0, 4.0]], dtype=np.float64)
    g: NDArray[np.float64] = np.array([2.0, -8.0], dtype=np.float64)
    delta: NDArray[np.float64] = Linalg.solve_normal_equations(H, g)
    assert np.allclose(delta, [-1.0, 2.0])


def test_solve_normal_equations_singular() -> None:
    """Ensure a singular system still returns a finite step."""
    H: NDArray[np.float64] = np.zeros((2, 2), dtype=np.float64)
    g: NDArray[np.float64] = np.zeros(2, dtype=np.float64)
    delta: NDArray[np.float64] = Linalg.solve_normal_equations(H, g)
    assert np.all(np.isfinite(delta))
    assert np.allclose(delta, 0.0)


def test_ensure_shape_rejects_mismatch() -> None:
    """Ensure a wrong shape raises ValueError."""
    with pytest.raises(ValueError):
        Linalg.ensure_shape(np.zeros(3, dtype=np.float64), (2,), "x")

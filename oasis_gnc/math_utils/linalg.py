################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Linear algebra helpers for least-squares problems."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


# Units: unitless. Meaning: Levenberg-Marquardt diagonal damping for singular solves
SINGULAR_DAMPING: float = 1e-6


class Linalg:
    """General linear algebra helpers."""

    @staticmethod
    def ensure_shape(x: NDArray[np.float64], shape: tuple[int, ...], name: str) -> None:
        """Ensure an array has the expected shape."""
        if x.shape != shape:
            raise ValueError(f"{name} must have shape {shape}")

    @staticmethod
    def sqrt_information(info: NDArray[np.float64]) -> NDArray[np.float64]:
        """Return an upper-triangular-like factor R with R^T R = info.

        Uses a Cholesky factorization for positive-definite input and falls
        back to a symmetric eigendecomposition for semi-definite input, such as
        an information matrix scaled by a zero weight.
        """
        mat: NDArray[np.float64] = np.asarray(info, dtype=np.float64)
        try:
            lower: NDArray[np.float64] = np.linalg.cholesky(mat)
            return np.asarray(lower.T, dtype=np.float64)
        except np.linalg.LinAlgError:
            eigvals: NDArray[np.float64]
            eigvecs: NDArray[np.float64]
            eigvals, eigvecs = np.linalg.eigh(mat)
            eigvals = np.clip(eigvals, 0.0, None)
            return np.asarray(np.diag(np.sqrt(eigvals)) @ eigvecs.T, dtype=np.float64)

    @staticmethod
    def solve_normal_equations(
        H: NDArray[np.float64],
        g: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Solve H delta = -g, damping or falling back to least squares."""
        rhs: NDArray[np.float64] = -g
        try:
            delta: NDArray[np.float64] = np.asarray(
                np.linalg.solve(H, rhs),
                dtype=np.float64,
            )
        except np.linalg.LinAlgError:
            dim: int = int(H.shape[0])
            H_damped: NDArray[np.float64] = (
                H + np.eye(dim, dtype=np.float64) * SINGULAR_DAMPING
            )
            try:
                delta = np.asarray(
                    np.linalg.solve(H_damped, rhs),
                    dtype=np.float64,
                )
            except np.linalg.LinAlgError:
                delta = np.asarray(
                    np.linalg.lstsq(H_damped, rhs, rcond=None)[0],
                    dtype=np.float64,
                )
        return delta

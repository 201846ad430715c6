################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Finite-difference derivatives."""

from __future__ import annotations

from typing import Callable

import numpy as np
from numpy.typing import NDArray


# Units: tangent-space units. Meaning: central-difference perturbation
JACOBIAN_EPSILON: float = 1e-6


def central_difference_jacobian(
    fn: Callable[[NDArray[np.float64]], NDArray[np.float64]],
    dim: int,
    epsilon: float = JACOBIAN_EPSILON,
) -> NDArray[np.float64]:
    """Return d fn(delta) / d delta at delta = 0 using central differences.

    Args:
        fn: Function of a tangent-space perturbation returning a residual
        dim: Dimension of the perturbation
        epsilon: Perturbation magnitude

    Returns:
        Jacobian with one column per perturbation coordinate
    """
    if dim <= 0:
        raise ValueError("dim must be positive")
    if epsilon <= 0.0:
        raise ValueError("epsilon must be positive")

    columns: list[NDArray[np.float64]] = []
    for idx in range(dim):
        delta: NDArray[np.float64] = np.zeros(dim, dtype=np.float64)
        delta[idx] = epsilon
        f_plus: NDArray[np.float64] = np.asarray(fn(delta), dtype=np.float64)
        f_minus: NDArray[np.float64] = np.asarray(fn(-delta), dtype=np.float64)
        columns.append((f_plus - f_minus) / (2.0 * epsilon))

    return np.stack(columns, axis=1)

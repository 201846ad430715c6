################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Normal-equation assembly for nonlinear least squares."""

from __future__ import annotations

from typing import Hashable
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from oasis_gnc.graph.factor import Factor
from oasis_gnc.graph.factor_graph import FactorGraph
from oasis_gnc.graph.factor_graph import FactorGraphError
from oasis_gnc.graph.values import Values
from oasis_gnc.math_utils.linalg import Linalg
from oasis_gnc.solver.ordering import Ordering
from oasis_gnc.solver.ordering import VariableBlock


def _accumulate_factor(
    H: NDArray[np.float64],
    g: NDArray[np.float64],
    keys: tuple[Hashable, ...],
    jacobians: list[NDArray[np.float64]],
    residual: NDArray[np.float64],
    ordering: Ordering,
) -> None:
    if len(jacobians) != len(keys):
        raise FactorGraphError("factor must return one Jacobian block per key")
    blocks: list[VariableBlock] = []
    key: Hashable
    for key in keys:
        if not ordering.has(key):
            raise FactorGraphError(f"key {key!r} not found in values")
        blocks.append(ordering.block(key))

    block: VariableBlock
    J: NDArray[np.float64]
    for block, J in zip(blocks, jacobians):
        Linalg.ensure_shape(
            J, (residual.shape[0], block.dim), f"jacobian for {block.key!r}"
        )

    block_i: VariableBlock
    J_i: NDArray[np.float64]
    for block_i, J_i in zip(blocks, jacobians):
        sl_i: slice = block_i.sl()
        g[sl_i] += J_i.T @ residual
        block_j: VariableBlock
        J_j: NDArray[np.float64]
        for block_j, J_j in zip(blocks, jacobians):
            H[sl_i, block_j.sl()] += J_i.T @ J_j


def build_normal_equations(
    graph: FactorGraph,
    values: Values,
    ordering: Ordering,
) -> tuple[NDArray[np.float64], NDArray[np.float64], float]:
    """Linearize every factor at values and return (H, g, error).

    H = sum J^T J and g = sum J^T r over the whitened systems of all non-empty
    slots. The returned error is the nonlinear graph error at values.
    """
    dim: int = ordering.dim()
    H: NDArray[np.float64] = np.zeros((dim, dim), dtype=np.float64)
    g: NDArray[np.float64] = np.zeros(dim, dtype=np.float64)
    cost: float = 0.0

    factor: Optional[Factor]
    for factor in graph:
        if factor is None:
            continue
        jacobians: list[NDArray[np.float64]]
        residual: NDArray[np.float64]
        jacobians, residual = factor.linearize(values)
        _accumulate_factor(H, g, factor.keys(), jacobians, residual, ordering)
        cost += float(factor.error(values))

    return H, g, cost

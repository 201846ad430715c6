################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Small factor graphs for GNC tests."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from oasis_gnc.graph.factor import BetweenFactor
from oasis_gnc.graph.factor import FunctionFactor
from oasis_gnc.graph.factor import PriorFactor
from oasis_gnc.graph.factor_graph import FactorGraph
from oasis_gnc.graph.noise_model import GaussianNoiseModel
from oasis_gnc.graph.noise_model import NoiseModel
from oasis_gnc.graph.noise_model import RobustNoiseModel
from oasis_gnc.graph.robust_kernel import GemanMcClureKernel
from oasis_gnc.graph.values import Values


# Key of the estimated 2D point
POINT_KEY: str = "x1"

# Units: meters. Meaning: measurement standard deviation of the point priors
POINT_SIGMA: float = 0.1


def cos_sin(x: NDArray[np.float64]) -> NDArray[np.float64]:
    """Return [cos x0, sin x1]."""
    return np.array([np.cos(x[0]), np.sin(x[1])], dtype=np.float64)


def really_nonlinear_graph(sigma: float = POINT_SIGMA) -> FactorGraph:
    """Return one factor with residual [cos x0, sin x1] - [1, 0]."""
    model: GaussianNoiseModel = GaussianNoiseModel.isotropic(2, sigma)
    return FactorGraph([FunctionFactor([POINT_KEY], cos_sin, [1.0, 0.0], model)])


def point_graph_with_outliers(robust: bool = False) -> FactorGraph:
    """Return three priors at the origin and one outlier prior at (1, 0)."""
    gaussian: GaussianNoiseModel = GaussianNoiseModel.isotropic(2, POINT_SIGMA)
    model: NoiseModel = gaussian
    if robust:
        model = RobustNoiseModel(GemanMcClureKernel(1.0), gaussian)
    return FactorGraph(
        [
            PriorFactor(POINT_KEY, [0.0, 0.0], model),
            PriorFactor(POINT_KEY, [0.0, 0.0], model),
            PriorFactor(POINT_KEY, [0.0, 0.0], model),
            PriorFactor(POINT_KEY, [1.0, 0.0], model),
        ]
    )


def point_values(x: float, y: float) -> Values:
    """Return values holding one 2D point."""
    return Values({POINT_KEY: [x, y]})


def position_chain(
    positions: list[tuple[float, float]],
    odometry_sigma: float,
) -> tuple[FactorGraph, Values]:
    """Return a prior plus odometry between consecutive 2D positions.

    The initial values are the true positions perturbed deterministically.
    """
    prior_model: GaussianNoiseModel = GaussianNoiseModel.isotropic(2, 0.01)
    odom_model: GaussianNoiseModel = GaussianNoiseModel.isotropic(2, odometry_sigma)
    truth: NDArray[np.float64] = np.asarray(positions, dtype=np.float64)

    graph: FactorGraph = FactorGraph()
    graph.add(PriorFactor(0, truth[0], prior_model))
    idx: int
    for idx in range(1, truth.shape[0]):
        graph.add(BetweenFactor(idx - 1, idx, truth[idx] - truth[idx - 1], odom_model))

    initial: Values = Values()
    for idx in range(truth.shape[0]):
        offset: NDArray[np.float64] = np.array(
            [0.1 * np.sin(idx), -0.1 * np.cos(idx)], dtype=np.float64
        )
        initial.insert(idx, truth[idx] + offset)
    return graph, initial

################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Graph reweighting helpers for Graduated Non-Convexity.

These functions operate on plain graphs and weight vectors so each step of the
continuation loop can be exercised on its own.
"""

from __future__ import annotations

from typing import Collection
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from oasis_gnc.gnc.gnc_loss import GncLoss
from oasis_gnc.graph.factor import Factor
from oasis_gnc.graph.factor_graph import FactorGraph
from oasis_gnc.graph.noise_model import GaussianNoiseModel
from oasis_gnc.graph.noise_model import NoiseModel
from oasis_gnc.graph.noise_model import NoiseModelError
from oasis_gnc.graph.noise_model import RobustNoiseModel
from oasis_gnc.graph.values import Values


class GncOptimizerError(Exception):
    """Raised when a GNC problem or its reweighting is inconsistent."""


def normalize_noise_models(graph: FactorGraph) -> FactorGraph:
    """Return a graph whose robust noise models are unwrapped to Gaussian.

    Keys, measurements and slot order are unchanged. Gaussian factors and empty
    slots pass through as-is.
    """
    normalized: FactorGraph = FactorGraph()
    index: int
    factor: Optional[Factor]
    for index, factor in enumerate(graph):
        if factor is None:
            normalized.add(None)
            continue
        noise: NoiseModel = factor.noise_model()
        if isinstance(noise, GaussianNoiseModel):
            normalized.add(factor)
        elif isinstance(noise, RobustNoiseModel):
            normalized.add(factor.with_noise_model(noise.unwrap()))
        else:
            raise GncOptimizerError(
                f"slot {index}: noise model must be Gaussian or robust, "
                f"got {type(noise).__name__}"
            )
    return normalized


def make_weighted_graph(
    graph: FactorGraph, weights: NDArray[np.float64]
) -> FactorGraph:
    """Return a graph with each slot's information matrix scaled by its weight."""
    weight_vec: NDArray[np.float64] = np.asarray(weights, dtype=np.float64).reshape(-1)
    if weight_vec.shape[0] != len(graph):
        raise GncOptimizerError(
            f"weights has {weight_vec.shape[0]} entries for {len(graph)} slots"
        )

    weighted: FactorGraph = FactorGraph()
    index: int
    factor: Optional[Factor]
    for index, factor in enumerate(graph):
        if factor is None:
            weighted.add(None)
            continue
        noise: NoiseModel = factor.noise_model()
        if not isinstance(noise, GaussianNoiseModel):
            raise GncOptimizerError(
                f"slot {index}: cannot weight a {type(noise).__name__}, "
                "expected a Gaussian noise model"
            )
        try:
            scaled: GaussianNoiseModel = noise.scaled(float(weight_vec[index]))
        except NoiseModelError as exc:
            raise GncOptimizerError(f"slot {index}: {exc}") from exc
        weighted.add(factor.with_noise_model(scaled))
    return weighted


def max_factor_error(graph: FactorGraph, values: Values) -> float:
    """Return the largest factor error, or 0 for a graph without factors."""
    rmax_sq: float = 0.0
    factor: Optional[Factor]
    for factor in graph:
        if factor is not None:
            rmax_sq = max(rmax_sq, float(factor.error(values)))
    return rmax_sq


def calculate_weights(
    graph: FactorGraph,
    values: Values,
    mu: float,
    barc_sq: float,
    loss: GncLoss,
    known_inliers: Collection[int] = (),
) -> NDArray[np.float64]:
    """Return one weight per slot for the factor errors at values.

    Known inliers and empty slots keep weight 1.
    """
    fixed: frozenset[int] = frozenset(int(idx) for idx in known_inliers)
    weights: NDArray[np.float64] = np.ones(len(graph), dtype=np.float64)
    index: int
    factor: Optional[Factor]
    for index, factor in enumerate(graph):
        if factor is None or index in fixed:
            continue
        u_sq: float = float(factor.error(values))
        weights[index] = loss.update_weight(u_sq, mu, barc_sq)
    return weights

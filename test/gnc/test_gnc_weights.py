################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for GNC reweighting helpers."""

from __future__ import annotations

from typing import Optional

import numpy as np
import pytest
from numpy.typing import NDArray
from small_graphs import point_graph_with_outliers
from small_graphs import point_values
from small_graphs import really_nonlinear_graph

from oasis_gnc.gnc.gnc_loss import GemanMcClureGncLoss
from oasis_gnc.gnc.gnc_weights import GncOptimizerError
from oasis_gnc.gnc.gnc_weights import calculate_weights
from oasis_gnc.gnc.gnc_weights import make_weighted_graph
from oasis_gnc.gnc.gnc_weights import max_factor_error
from oasis_gnc.gnc.gnc_weights import normalize_noise_models
from oasis_gnc.graph.factor import Factor
from oasis_gnc.graph.factor_graph import FactorGraph
from oasis_gnc.graph.noise_model import GaussianNoiseModel
from oasis_gnc.graph.noise_model import RobustNoiseModel


def test_normalize_unwraps_robust_models() -> None:
    """Check a robust graph normalizes to the equivalent Gaussian graph."""
    robust: FactorGraph = point_graph_with_outliers(robust=True)
    normalized: FactorGraph = normalize_noise_models(robust)
    assert normalized.equals(point_graph_with_outliers())
    first: Optional[Factor] = robust[0]
    assert first is not None
    assert isinstance(first.noise_model(), RobustNoiseModel)


def test_normalize_preserves_empty_slots() -> None:
    """Ensure empty slots keep their positions."""
    graph: FactorGraph = point_graph_with_outliers()
    graph.remove(1)
    normalized: FactorGraph = normalize_noise_models(graph)
    assert len(normalized) == 4
    assert normalized[1] is None
    assert normalized[3] is graph[3]


def test_weighted_graph_identity_is_bitwise() -> None:
    """Ensure all-ones weights reproduce information matrices exactly."""
    graph: FactorGraph = point_graph_with_outliers()
    weighted: FactorGraph = make_weighted_graph(graph, np.ones(4, dtype=np.float64))
    for original, scaled in zip(graph, weighted):
        assert original is not None and scaled is not None
        original_model = original.noise_model()
        scaled_model = scaled.noise_model()
        assert isinstance(original_model, GaussianNoiseModel)
        assert isinstance(scaled_model, GaussianNoiseModel)
        assert np.array_equal(original_model.information(), scaled_model.information())
        assert scaled.keys() == original.keys()


def test_weighted_graph_matches_sigma() -> None:
    """Check weight 1e-4 on sigma 0.1 equals sigma 10."""
    weighted: FactorGraph = make_weighted_graph(
        really_nonlinear_graph(0.1), np.array([1e-4], dtype=np.float64)
    )
    assert weighted.equals(really_nonlinear_graph(10.0))


def test_weighted_graph_size_mismatch() -> None:
    """Ensure a weight vector of the wrong length raises GncOptimizerError."""
    with pytest.raises(GncOptimizerError):
        make_weighted_graph(point_graph_with_outliers(), np.ones(3, dtype=np.float64))


def test_weighted_graph_rejects_robust_slot() -> None:
    """Ensure an unnormalized robust slot raises GncOptimizerError."""
    with pytest.raises(GncOptimizerError):
        make_weighted_graph(
            point_graph_with_outliers(robust=True), np.ones(4, dtype=np.float64)
        )


def test_calculate_weights_scenarios() -> None:
    """Check outlier weights for two thresholds and shape parameters."""
    graph: FactorGraph = point_graph_with_outliers()
    weights: NDArray[np.float64] = calculate_weights(
        graph, point_values(0.0, 0.0), 1.0, 1.0, GemanMcClureGncLoss()
    )
    assert np.allclose(weights, [1.0, 1.0, 1.0, (1.0 / 51.0) ** 2])

    weights = calculate_weights(
        graph, point_values(0.0, 0.0), 2.0, 5.0, GemanMcClureGncLoss()
    )
    assert np.isclose(weights[3], (10.0 / 60.0) ** 2)


def test_calculate_weights_known_inliers() -> None:
    """Ensure known inliers keep weight exactly 1 whatever their error."""
    graph: FactorGraph = point_graph_with_outliers()
    weights: NDArray[np.float64] = calculate_weights(
        graph,
        point_values(5.0, 5.0),
        1.0,
        1.0,
        GemanMcClureGncLoss(),
        known_inliers=[2, 0],
    )
    assert weights.shape == (4,)
    assert weights[0] == 1.0
    assert weights[2] == 1.0
    assert weights[1] < 1e-3


def test_calculate_weights_empty_slot() -> None:
    """Ensure empty slots get weight 1 and are not evaluated."""
    graph: FactorGraph = point_graph_with_outliers()
    graph.remove(3)
    weights: NDArray[np.float64] = calculate_weights(
        graph, point_values(0.0, 0.0), 1.0, 1.0, GemanMcClureGncLoss()
    )
    assert np.array_equal(weights, np.ones(4))


def test_max_factor_error() -> None:
    """Check the largest factor error and the empty-graph case."""
    assert np.isclose(
        max_factor_error(point_graph_with_outliers(), point_values(0.0, 0.0)), 50.0
    )
    assert np.isclose(
        max_factor_error(really_nonlinear_graph(), point_values(3.0, 3.0)),
        198.999,
        atol=1e-3,
    )
    assert max_factor_error(FactorGraph([None]), point_values(0.0, 0.0)) == 0.0


def test_normalize_rejects_unknown_noise_model() -> None:
    """Ensure a noise model that is neither Gaussian nor robust is rejected."""

    class _ScalarNoise:
        def dim(self) -> int:
            return 2

        def error(self, residual: NDArray[np.float64]) -> float:
            return float(residual @ residual)

        def whiten_system(self, jacobians, residual):  # type: ignore[no-untyped-def]
            return list(jacobians), residual

        def equals(self, other: object, tol: float = 1e-9) -> bool:
            return other is self

    graph: FactorGraph = point_graph_with_outliers()
    factor: Factor | None = graph[0]
    assert factor is not None
    graph.replace(0, factor.with_noise_model(_ScalarNoise()))
    with pytest.raises(GncOptimizerError):
        normalize_noise_models(graph)

################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Graduated Non-Convexity robust estimator.

GNC solves a nonlinear least-squares problem with unknown outliers by
continuing a surrogate of a robust kernel from a near-convex shape (large mu)
to the true kernel (mu = 1). Each continuation iteration:

    1. Computes one weight per measurement from its error at the last result
    2. Scales each measurement's information matrix by its weight
    3. Re-solves the weighted problem from the original initial values
    4. Stops when mu has reached 1, otherwise shrinks mu by mu_step

Reaching the iteration cap before mu reaches 1 is not an error. The last
result is returned and the summary status records the early stop.

Usage:
    params = GncParams().with_known_inliers([0, 1])
    gnc = GncOptimizer(graph, initial, params)
    result = gnc.optimize()
    outliers = gnc.summary().outliers()
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from oasis_gnc.config.gnc_params import GncParams
from oasis_gnc.config.gnc_params import GncParamsError
from oasis_gnc.config.gnc_params import GncVerbosity
from oasis_gnc.gnc.gnc_loss import GncLoss
from oasis_gnc.gnc.gnc_loss import gnc_loss_for
from oasis_gnc.gnc.gnc_report import GncIterationReport
from oasis_gnc.gnc.gnc_report import GncStatus
from oasis_gnc.gnc.gnc_report import GncSummary
from oasis_gnc.gnc.gnc_weights import GncOptimizerError
from oasis_gnc.gnc.gnc_weights import calculate_weights
from oasis_gnc.gnc.gnc_weights import make_weighted_graph
from oasis_gnc.gnc.gnc_weights import max_factor_error
from oasis_gnc.gnc.gnc_weights import normalize_noise_models
from oasis_gnc.graph.factor_graph import FactorGraph
from oasis_gnc.graph.factor_graph import FactorGraphError
from oasis_gnc.graph.values import Values
from oasis_gnc.solver.optimizer import NonlinearOptimizer
from oasis_gnc.solver.optimizer import OptimizerFactory
from oasis_gnc.solver.optimizer import make_optimizer


_LOG: logging.Logger = logging.getLogger(__name__)


class GncOptimizer:
    """Continuation loop around a base nonlinear least-squares solver.

    Not safe for concurrent calls to optimize() on one instance.
    """

    def __init__(
        self,
        graph: FactorGraph,
        initial: Values,
        params: GncParams | None = None,
        optimizer_factory: OptimizerFactory | None = None,
    ) -> None:
        """Normalize the graph and store private copies of the inputs.

        Args:
            graph: Measurements, with Gaussian or robust noise models
            initial: Initial estimate for every key referenced by the graph
            params: GNC configuration, defaults to GncParams()
            optimizer_factory: Base solver constructor, defaults to
                make_optimizer
        """
        if not isinstance(graph, FactorGraph):
            raise GncOptimizerError("graph must be a FactorGraph")
        if not isinstance(initial, Values):
            raise GncOptimizerError("initial must be a Values instance")

        resolved: GncParams = params if params is not None else GncParams()
        if not isinstance(resolved, GncParams):
            raise GncParamsError("params must be GncParams")
        resolved.validate()

        try:
            graph.check_values(initial)
        except FactorGraphError as exc:
            raise GncOptimizerError(str(exc)) from exc

        out_of_range: list[int] = sorted(
            idx for idx in resolved.known_inliers if idx >= len(graph)
        )
        if out_of_range:
            raise GncOptimizerError(
                f"known inlier {out_of_range[0]} out of range for "
                f"{len(graph)} slots"
            )

        self._nfg: FactorGraph = normalize_noise_models(graph)
        self._state: Values = initial.copy()
        self._params: GncParams = resolved
        self._loss: GncLoss = gnc_loss_for(resolved.loss_type)
        self._optimizer_factory: OptimizerFactory = (
            optimizer_factory if optimizer_factory is not None else make_optimizer
        )
        self._weights: NDArray[np.float64] = np.ones(len(self._nfg), dtype=np.float64)
        self._summary: GncSummary | None = None
        self._iteration_callbacks: list[Callable[[GncIterationReport], None]] = []
        self._summary_callbacks: list[Callable[[GncSummary], None]] = []

    def factors(self) -> FactorGraph:
        """Return the graph with robust noise models unwrapped."""
        return self._nfg.copy()

    def state(self) -> Values:
        """Return the initial values."""
        return self._state.copy()

    def params(self) -> GncParams:
        return self._params

    def weights(self) -> NDArray[np.float64]:
        """Return the weights from the most recent weight update."""
        return self._weights.copy()

    def summary(self) -> GncSummary | None:
        """Return the summary of the last optimize() call, if any."""
        return self._summary

    def add_iteration_callback(
        self, callback: Callable[[GncIterationReport], None]
    ) -> None:
        """Register a callback for each iteration at VALUES verbosity."""
        self._iteration_callbacks.append(callback)

    def add_summary_callback(self, callback: Callable[[GncSummary], None]) -> None:
        """Register a callback for the final summary at SUMMARY verbosity."""
        self._summary_callbacks.append(callback)

    def optimize(self) -> Values:
        """Run the continuation loop and return the final estimate."""
        self._weights = np.ones(len(self._nfg), dtype=np.float64)
        result: Values = self._solve(self._nfg)

        mu: float = self.initialize_mu()
        last_mu: float = mu
        status: GncStatus = GncStatus.ITERATIONS_EXHAUSTED
        iterations: int = 0

        iteration: int
        for iteration in range(self._params.max_iterations):
            self._weights = self.calculate_weights(result, mu)
            weighted: FactorGraph = self.make_weighted_graph(self._weights)
            result = self._solve(weighted)
            iterations = iteration + 1
            last_mu = mu

            if self._params.verbosity >= GncVerbosity.VALUES:
                self._emit_iteration(
                    GncIterationReport(
                        iteration=iteration,
                        mu=mu,
                        weights=self._weights,
                        error=weighted.error(result),
                    )
                )

            if self.check_mu_convergence(mu):
                status = GncStatus.CONVERGED
                break

            mu = self.update_mu(mu)

        summary: GncSummary = GncSummary(
            iterations=iterations,
            final_mu=last_mu,
            status=status,
            weights=self._weights,
            error=self._nfg.error(result),
        )
        self._summary = summary
        if self._params.verbosity >= GncVerbosity.SUMMARY:
            self._emit_summary(summary)

        return result

    def initialize_mu(self) -> float:
        """Return the initial mu from the largest factor error at the initial values."""
        rmax_sq: float = max_factor_error(self._nfg, self._state)
        return self._loss.initialize_mu(rmax_sq, self._params.barc_sq)

    def update_mu(self, mu: float) -> float:
        return self._loss.update_mu(mu, self._params.mu_step)

    def check_mu_convergence(self, mu: float) -> bool:
        return self._loss.has_converged(mu)

    def calculate_weights(self, values: Values, mu: float) -> NDArray[np.float64]:
        """Return one weight per slot for the factor errors at values."""
        return calculate_weights(
            self._nfg,
            values,
            mu,
            self._params.barc_sq,
            self._loss,
            self._params.known_inliers,
        )

    def make_weighted_graph(self, weights: NDArray[np.float64]) -> FactorGraph:
        """Return the normalized graph with information scaled by weights."""
        return make_weighted_graph(self._nfg, weights)

    def _solve(self, graph: FactorGraph) -> Values:
        base: NonlinearOptimizer = self._optimizer_factory(
            graph, self._state, self._params.base_params
        )
        return base.optimize()

    def _emit_iteration(self, report: GncIterationReport) -> None:
        _LOG.debug(
            "GNC iteration %d mu %.9g error %.9g weights %s",
            report.iteration,
            report.mu,
            report.error,
            report.weights.tolist(),
        )
        for callback in self._iteration_callbacks:
            callback(report)

    def _emit_summary(self, summary: GncSummary) -> None:
        _LOG.info(
            "GNC %s after %d iterations, final mu %.9g, error %.9g",
            summary.status.value,
            summary.iterations,
            summary.final_mu,
            summary.error,
        )
        for callback in self._summary_callbacks:
            callback(summary)

################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Gauss-Newton and Levenberg-Marquardt solvers for factor graphs.

Each solver is constructed for one (graph, initial values, params) triple and
solved once. Steps are computed from the normal equations of the whitened
linearization and applied through the values retraction.
"""

from __future__ import annotations

import logging
from typing import Any
from typing import Protocol
from typing import runtime_checkable

import numpy as np
from numpy.typing import NDArray

from oasis_gnc.config.solver_params import GaussNewtonParams
from oasis_gnc.config.solver_params import LevenbergMarquardtParams
from oasis_gnc.config.solver_params import NonlinearOptimizerParams
from oasis_gnc.config.solver_params import OptimizerVerbosity
from oasis_gnc.config.solver_params import SolverParamsError
from oasis_gnc.graph.factor_graph import FactorGraph
from oasis_gnc.graph.values import Values
from oasis_gnc.math_utils.linalg import Linalg
from oasis_gnc.solver.linearization import build_normal_equations
from oasis_gnc.solver.ordering import Ordering


_LOG: logging.Logger = logging.getLogger(__name__)


@runtime_checkable
class NonlinearOptimizer(Protocol):
    """A solver bound to one problem instance."""

    def optimize(self) -> Values:
        """Run to convergence and return the refined values."""
        ...


class OptimizerFactory(Protocol):
    """Constructs a solver for a graph, initial values and base configuration."""

    def __call__(
        self,
        graph: FactorGraph,
        initial: Values,
        params: NonlinearOptimizerParams,
    ) -> NonlinearOptimizer: ...


def check_convergence(
    params: NonlinearOptimizerParams,
    current_error: float,
    new_error: float,
) -> bool:
    """Return True when the error change satisfies any stopping tolerance."""
    if new_error <= params.error_tol:
        return True

    absolute_decrease: float = current_error - new_error
    relative_decrease: float
    if current_error > 0.0:
        relative_decrease = absolute_decrease / current_error
    else:
        relative_decrease = 0.0

    return (
        relative_decrease <= params.relative_error_tol
        or absolute_decrease <= params.absolute_error_tol
    )


class _OptimizerBase:
    """State shared by the base solvers."""

    def __init__(
        self,
        graph: FactorGraph,
        initial: Values,
        params: NonlinearOptimizerParams,
    ) -> None:
        params.validate()
        graph.check_values(initial)
        self._graph: FactorGraph = graph
        self._params: Any = params
        self._values: Values = initial.copy()
        self._ordering: Ordering = Ordering.from_values(self._values)
        self._error: float = graph.error(self._values)
        self._iterations: int = 0

    def values(self) -> Values:
        return self._values.copy()

    def error(self) -> float:
        """Return the graph error at the current values."""
        return self._error

    def iterations(self) -> int:
        return self._iterations

    def _log_iteration(self, step: NDArray[np.float64] | None) -> None:
        verbosity: OptimizerVerbosity = self._params.verbosity
        if verbosity >= OptimizerVerbosity.ERROR:
            _LOG.debug(
                "%s iteration %d error %.9g",
                type(self).__name__,
                self._iterations,
                self._error,
            )
        if step is not None and verbosity >= OptimizerVerbosity.DELTA:
            _LOG.debug("step norm %.9g", float(np.linalg.norm(step)))


class GaussNewtonOptimizer(_OptimizerBase):
    """Undamped Gauss-Newton iteration."""

    def __init__(
        self,
        graph: FactorGraph,
        initial: Values,
        params: GaussNewtonParams | None = None,
    ) -> None:
        super().__init__(
            graph, initial, params if params is not None else GaussNewtonParams()
        )

    def optimize(self) -> Values:
        if self._ordering.dim() == 0:
            return self.values()

        while self._iterations < self._params.max_iterations:
            H: NDArray[np.float64]
            g: NDArray[np.float64]
            H, g, _ = build_normal_equations(self._graph, self._values, self._ordering)
            step: NDArray[np.float64] = Linalg.solve_normal_equations(H, g)

            current_error: float = self._error
            self._values = self._values.retract(step, self._ordering)
            self._error = self._graph.error(self._values)
            self._iterations += 1
            self._log_iteration(step)

            if check_convergence(self._params, current_error, self._error):
                break

        return self.values()


class LevenbergMarquardtOptimizer(_OptimizerBase):
    """Levenberg-Marquardt iteration with identity damping."""

    def __init__(
        self,
        graph: FactorGraph,
        initial: Values,
        params: LevenbergMarquardtParams | None = None,
    ) -> None:
        super().__init__(
            graph,
            initial,
            params if params is not None else LevenbergMarquardtParams(),
        )
        self._lambda: float = float(self._params.lambda_initial)

    def damping(self) -> float:
        """Return the current damping value."""
        return self._lambda

    def optimize(self) -> Values:
        if self._ordering.dim() == 0:
            return self.values()

        params: LevenbergMarquardtParams = self._params
        eye: NDArray[np.float64] = np.eye(self._ordering.dim(), dtype=np.float64)

        while self._iterations < params.max_iterations:
            H: NDArray[np.float64]
            g: NDArray[np.float64]
            H, g, _ = build_normal_equations(self._graph, self._values, self._ordering)
            current_error: float = self._error

            accepted: bool = False
            step: NDArray[np.float64] = np.zeros(self._ordering.dim(), dtype=np.float64)
            while self._lambda <= params.lambda_upper_bound:
                step = Linalg.solve_normal_equations(H + self._lambda * eye, g)
                candidate: Values = self._values.retract(step, self._ordering)
                candidate_error: float = self._graph.error(candidate)
                if candidate_error <= current_error:
                    self._values = candidate
                    self._error = candidate_error
                    self._lambda = max(
                        params.lambda_lower_bound,
                        self._lambda / params.lambda_factor,
                    )
                    accepted = True
                    break
                if self._lambda > 0.0:
                    self._lambda *= params.lambda_factor
                else:
                    self._lambda = params.lambda_initial

            self._iterations += 1
            if not accepted:
                if params.verbosity >= OptimizerVerbosity.ERROR:
                    _LOG.debug(
                        "damping exceeded %g, stopping", params.lambda_upper_bound
                    )
                break

            self._log_iteration(step)
            if check_convergence(params, current_error, self._error):
                break

        return self.values()


def make_optimizer(
    graph: FactorGraph,
    initial: Values,
    params: NonlinearOptimizerParams,
) -> NonlinearOptimizer:
    """Construct the solver matching the configuration type."""
    if isinstance(params, LevenbergMarquardtParams):
        return LevenbergMarquardtOptimizer(graph, initial, params)
    if isinstance(params, GaussNewtonParams):
        return GaussNewtonOptimizer(graph, initial, params)
    raise SolverParamsError(f"no solver for params type {type(params).__name__}")

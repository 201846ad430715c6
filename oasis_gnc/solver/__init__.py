################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Base nonlinear least-squares solvers."""

from __future__ import annotations

from oasis_gnc.solver.optimizer import GaussNewtonOptimizer
from oasis_gnc.solver.optimizer import LevenbergMarquardtOptimizer
from oasis_gnc.solver.optimizer import NonlinearOptimizer
from oasis_gnc.solver.optimizer import OptimizerFactory
from oasis_gnc.solver.optimizer import make_optimizer


__all__ = [
    "GaussNewtonOptimizer",
    "LevenbergMarquardtOptimizer",
    "NonlinearOptimizer",
    "OptimizerFactory",
    "make_optimizer",
]

################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Configuration for GNC and the base solvers."""

from __future__ import annotations

from oasis_gnc.config.gnc_params import GncLossType
from oasis_gnc.config.gnc_params import GncParams
from oasis_gnc.config.gnc_params import GncParamsError
from oasis_gnc.config.gnc_params import GncVerbosity
from oasis_gnc.config.params_yaml import GncPersistenceError
from oasis_gnc.config.params_yaml import load_params_yaml
from oasis_gnc.config.params_yaml import save_params_yaml
from oasis_gnc.config.solver_params import GaussNewtonParams
from oasis_gnc.config.solver_params import LevenbergMarquardtParams
from oasis_gnc.config.solver_params import OptimizerVerbosity
from oasis_gnc.config.solver_params import SolverParamsError


__all__ = [
    "GaussNewtonParams",
    "GncLossType",
    "GncParams",
    "GncParamsError",
    "GncPersistenceError",
    "GncVerbosity",
    "LevenbergMarquardtParams",
    "OptimizerVerbosity",
    "SolverParamsError",
    "load_params_yaml",
    "save_params_yaml",
]

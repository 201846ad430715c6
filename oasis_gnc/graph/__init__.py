################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Factor graph building blocks."""

from __future__ import annotations

from oasis_gnc.graph.factor import BetweenFactor
from oasis_gnc.graph.factor import Factor
from oasis_gnc.graph.factor import FunctionFactor
from oasis_gnc.graph.factor import NoiseModelFactor
from oasis_gnc.graph.factor import PriorFactor
from oasis_gnc.graph.factor_graph import FactorGraph
from oasis_gnc.graph.factor_graph import FactorGraphError
from oasis_gnc.graph.noise_model import GaussianNoiseModel
from oasis_gnc.graph.noise_model import NoiseModel
from oasis_gnc.graph.noise_model import NoiseModelError
from oasis_gnc.graph.noise_model import RobustNoiseModel
from oasis_gnc.graph.robust_kernel import GemanMcClureKernel
from oasis_gnc.graph.robust_kernel import RobustKernel
from oasis_gnc.graph.values import Manifold
from oasis_gnc.graph.values import Values


__all__ = [
    "BetweenFactor",
    "Factor",
    "FactorGraph",
    "FactorGraphError",
    "FunctionFactor",
    "GaussianNoiseModel",
    "GemanMcClureKernel",
    "Manifold",
    "NoiseModel",
    "NoiseModelError",
    "NoiseModelFactor",
    "PriorFactor",
    "RobustKernel",
    "RobustNoiseModel",
    "Values",
]

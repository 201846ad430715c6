################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Graduated Non-Convexity robust estimation."""

from __future__ import annotations

from oasis_gnc.gnc.gnc_loss import GncLoss
from oasis_gnc.gnc.gnc_loss import GncLossError
from oasis_gnc.gnc.gnc_optimizer import GncOptimizer
from oasis_gnc.gnc.gnc_report import GncIterationReport
from oasis_gnc.gnc.gnc_report import GncStatus
from oasis_gnc.gnc.gnc_report import GncSummary
from oasis_gnc.gnc.gnc_weights import GncOptimizerError


__all__ = [
    "GncIterationReport",
    "GncLoss",
    "GncLossError",
    "GncOptimizer",
    "GncOptimizerError",
    "GncStatus",
    "GncSummary",
]

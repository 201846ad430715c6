################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Graduated Non-Convexity robust estimation over factor graphs."""

from __future__ import annotations

from oasis_gnc.config.gnc_params import GncLossType
from oasis_gnc.config.gnc_params import GncParams
from oasis_gnc.config.gnc_params import GncVerbosity
from oasis_gnc.gnc.gnc_optimizer import GncOptimizer
from oasis_gnc.gnc.gnc_report import GncStatus
from oasis_gnc.gnc.gnc_report import GncSummary


__all__ = [
    "GncLossType",
    "GncOptimizer",
    "GncParams",
    "GncStatus",
    "GncSummary",
    "GncVerbosity",
]

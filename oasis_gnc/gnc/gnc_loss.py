################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Continuation rules for the robust kernels supported by GNC.

Each kernel supplies four operations: the initial shape parameter mu, the
per-measurement weight for a given mu, the next mu, and the convergence test on
mu. Kernels without a full implementation map to UnsupportedGncLoss, which
raises on every operation instead of approximating.
"""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod

from oasis_gnc.config.gnc_params import GncLossType
from oasis_gnc.config.gnc_params import GncParamsError


# Units: unitless. Meaning: |mu - 1| below which the continuation has finished
MU_CONVERGENCE_TOL: float = 1e-9


class GncLossError(GncParamsError):
    """Raised when a loss type without a GNC implementation is used."""


class GncLoss(ABC):
    """Shape-parameter schedule and weighting rule of one robust kernel."""

    @property
    @abstractmethod
    def loss_type(self) -> GncLossType:
        """Return the kernel selector."""

    @abstractmethod
    def initialize_mu(self, rmax_sq: float, barc_sq: float) -> float:
        """Return the initial mu for the largest initial factor error."""

    @abstractmethod
    def update_weight(self, u_sq: float, mu: float, barc_sq: float) -> float:
        """Return the weight in [0, 1] of a measurement with error u_sq."""

    @abstractmethod
    def update_mu(self, mu: float, mu_step: float) -> float:
        """Return the next mu."""

    @abstractmethod
    def has_converged(self, mu: float) -> bool:
        """Return True when mu has reached the true robust loss."""


class GemanMcClureGncLoss(GncLoss):
    """Geman-McClure continuation, mu decreasing from 2 rmax^2 / barc_sq to 1."""

    @property
    def loss_type(self) -> GncLossType:
        return GncLossType.GM

    def initialize_mu(self, rmax_sq: float, barc_sq: float) -> float:
        return 2.0 * float(rmax_sq) / float(barc_sq)

    def update_weight(self, u_sq: float, mu: float, barc_sq: float) -> float:
        scaled: float = float(mu) * float(barc_sq)
        denom: float = float(u_sq) + scaled
        if denom <= 0.0:
            return 1.0
        ratio: float = scaled / denom
        return ratio * ratio

    def update_mu(self, mu: float, mu_step: float) -> float:
        return max(1.0, float(mu) / float(mu_step))

    def has_converged(self, mu: float) -> bool:
        return abs(float(mu) - 1.0) < MU_CONVERGENCE_TOL


class UnsupportedGncLoss(GncLoss):
    """Placeholder for a declared kernel without a GNC implementation."""

    def __init__(self, loss_type: GncLossType) -> None:
        self._loss_type: GncLossType = loss_type

    @property
    def loss_type(self) -> GncLossType:
        return self._loss_type

    def initialize_mu(self, rmax_sq: float, barc_sq: float) -> float:
        raise self._error("initialize_mu")

    def update_weight(self, u_sq: float, mu: float, barc_sq: float) -> float:
        raise self._error("update_weight")

    def update_mu(self, mu: float, mu_step: float) -> float:
        raise self._error("update_mu")

    def has_converged(self, mu: float) -> bool:
        raise self._error("has_converged")

    def _error(self, operation: str) -> GncLossError:
        return GncLossError(
            f"{operation}: loss type {self._loss_type.name} is not implemented"
        )


def gnc_loss_for(loss_type: GncLossType) -> GncLoss:
    """Return the continuation rules for a loss type."""
    if loss_type is GncLossType.GM:
        return GemanMcClureGncLoss()
    return UnsupportedGncLoss(loss_type)

################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for GNC continuation rules."""

from __future__ import annotations

import numpy as np
import pytest

from oasis_gnc.config.gnc_params import GncLossType
from oasis_gnc.config.gnc_params import GncParamsError
from oasis_gnc.gnc.gnc_loss import GemanMcClureGncLoss
from oasis_gnc.gnc.gnc_loss import GncLoss
from oasis_gnc.gnc.gnc_loss import GncLossError
from oasis_gnc.gnc.gnc_loss import UnsupportedGncLoss
from oasis_gnc.gnc.gnc_loss import gnc_loss_for


def test_gm_initial_mu() -> None:
    """Check mu0 = 2 rmax^2 / barc_sq."""
    loss: GemanMcClureGncLoss = GemanMcClureGncLoss()
    assert np.isclose(loss.initialize_mu(198.999, 1.0), 397.998)
    assert np.isclose(loss.initialize_mu(50.0, 4.0), 25.0)


def test_gm_weight() -> None:
    """Check the Geman-McClure weight formula."""
    loss: GemanMcClureGncLoss = GemanMcClureGncLoss()
    assert loss.update_weight(0.0, 1.0, 1.0) == 1.0
    assert np.isclose(loss.update_weight(50.0, 1.0, 1.0), (1.0 / 51.0) ** 2)
    assert np.isclose(loss.update_weight(50.0, 2.0, 5.0), (10.0 / 60.0) ** 2)


def test_gm_weight_degenerate_mu() -> None:
    """Ensure a zero mu with zero error keeps full weight."""
    loss: GemanMcClureGncLoss = GemanMcClureGncLoss()
    assert loss.update_weight(0.0, 0.0, 1.0) == 1.0


def test_gm_update_mu() -> None:
    """Check mu shrinks by mu_step and saturates exactly at 1."""
    loss: GemanMcClureGncLoss = GemanMcClureGncLoss()
    assert np.isclose(loss.update_mu(5.0, 1.4), 5.0 / 1.4)
    assert np.isclose(loss.update_mu(5.0, 1.4), 3.5714, atol=1e-4)
    assert loss.update_mu(1.2, 1.4) == 1.0


def test_gm_mu_sequence_non_increasing() -> None:
    """Check repeated updates never increase mu and settle at 1."""
    loss: GemanMcClureGncLoss = GemanMcClureGncLoss()
    mu: float = 397.998
    sequence: list[float] = [mu]
    for _ in range(40):
        mu = loss.update_mu(mu, 1.4)
        sequence.append(mu)
    assert all(sequence[i + 1] <= sequence[i] for i in range(len(sequence) - 1))
    assert sequence[-1] == 1.0
    assert loss.has_converged(sequence[-1])


def test_gm_convergence() -> None:
    """Check convergence only when mu equals 1."""
    loss: GemanMcClureGncLoss = GemanMcClureGncLoss()
    assert loss.has_converged(1.0)
    assert not loss.has_converged(1.0 + 1e-6)


def test_unsupported_loss_fails_fast() -> None:
    """Ensure every operation of an unimplemented loss raises GncLossError."""
    loss: GncLoss = gnc_loss_for(GncLossType.TLS)
    assert isinstance(loss, UnsupportedGncLoss)
    assert loss.loss_type is GncLossType.TLS
    with pytest.raises(GncLossError):
        loss.initialize_mu(1.0, 1.0)
    with pytest.raises(GncLossError):
        loss.update_weight(1.0, 1.0, 1.0)
    with pytest.raises(GncLossError):
        loss.update_mu(2.0, 1.4)
    with pytest.raises(GncLossError):
        loss.has_converged(1.0)


def test_loss_error_is_params_error() -> None:
    """Check unsupported losses surface as configuration errors."""
    assert issubclass(GncLossError, GncParamsError)
    assert isinstance(gnc_loss_for(GncLossType.GM), GemanMcClureGncLoss)

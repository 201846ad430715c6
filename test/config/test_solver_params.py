################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for base solver parameters."""

from __future__ import annotations

import pytest

from oasis_gnc.config.solver_params import GaussNewtonParams
from oasis_gnc.config.solver_params import LevenbergMarquardtParams
from oasis_gnc.config.solver_params import OptimizerVerbosity
from oasis_gnc.config.solver_params import SolverParamsError
from oasis_gnc.config.solver_params import solver_type_name


def test_defaults() -> None:
    """Check default tolerances and damping."""
    params: LevenbergMarquardtParams = LevenbergMarquardtParams.defaults()
    params.validate()
    assert params.max_iterations == 100
    assert params.relative_error_tol == 1e-5
    assert params.absolute_error_tol == 1e-5
    assert params.error_tol == 0.0
    assert params.lambda_initial == 1e-5
    assert params.verbosity is OptimizerVerbosity.SILENT


def test_equals_detects_verbosity_and_type() -> None:
    """Check equality notices verbosity and solver type changes."""
    base: GaussNewtonParams = GaussNewtonParams()
    assert base.equals(GaussNewtonParams())
    assert not base.equals(base.replace(verbosity=OptimizerVerbosity.ERROR))
    assert not base.equals(LevenbergMarquardtParams())


def test_verbosity_coercion() -> None:
    """Check verbosity accepts names and values."""
    assert GaussNewtonParams(verbosity="delta").verbosity is OptimizerVerbosity.DELTA
    assert GaussNewtonParams(verbosity=1).verbosity is OptimizerVerbosity.ERROR
    with pytest.raises(SolverParamsError):
        GaussNewtonParams(verbosity="loud")


def test_validate_rejects_invalid() -> None:
    """Ensure invalid settings raise SolverParamsError."""
    with pytest.raises(SolverParamsError):
        GaussNewtonParams(max_iterations=0).validate()
    with pytest.raises(SolverParamsError):
        GaussNewtonParams(relative_error_tol=-1.0).validate()
    with pytest.raises(SolverParamsError):
        LevenbergMarquardtParams(lambda_factor=1.0).validate()
    with pytest.raises(SolverParamsError):
        LevenbergMarquardtParams(
            lambda_lower_bound=10.0, lambda_upper_bound=1.0
        ).validate()


def test_from_dict_round_trip() -> None:
    """Check dict conversion preserves every setting."""
    params: LevenbergMarquardtParams = LevenbergMarquardtParams(
        max_iterations=20,
        lambda_factor=4.0,
        verbosity=OptimizerVerbosity.DELTA,
    )
    restored: LevenbergMarquardtParams = LevenbergMarquardtParams.from_dict(
        params.as_nested_dict()
    )
    assert restored.equals(params)
    assert solver_type_name(restored) == "levenberg_marquardt"


def test_from_dict_rejects_unknown_and_mistyped() -> None:
    """Ensure unknown keys and wrong types raise SolverParamsError."""
    with pytest.raises(SolverParamsError):
        GaussNewtonParams.from_dict({"lambda_factor": 2.0})
    with pytest.raises(SolverParamsError):
        GaussNewtonParams.from_dict({"max_iterations": 1.5})


def test_describe_lists_fields() -> None:
    """Check describe reports each setting."""
    text: str = LevenbergMarquardtParams().describe()
    assert "LevenbergMarquardtParams" in text
    assert "lambda_upper_bound" in text
    assert "verbosity: SILENT" in text

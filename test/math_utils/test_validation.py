################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for input validation helpers."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.typing import NDArray

from oasis_gnc.math_utils.validation import as_float_vector
from oasis_gnc.math_utils.validation import as_symmetric_matrix


def test_as_float_vector_scalar_and_list() -> None:
    """Check scalars become length-one vectors and lists are copied."""
    source: list[float] = [1.0, 2.0]
    vec: NDArray[np.float64] = as_float_vector(source, "v")
    assert vec.dtype == np.float64
    assert np.array_equal(vec, [1.0, 2.0])
    assert as_float_vector(3.0, "s").shape == (1,)


def test_as_float_vector_rejects_invalid() -> None:
    """Ensure matrices, empty input and non-finite values are rejected."""
    with pytest.raises(ValueError):
        as_float_vector([[1.0]], "v")
    with pytest.raises(ValueError):
        as_float_vector([], "v")
    with pytest.raises(ValueError):
        as_float_vector([np.nan], "v")


def test_as_symmetric_matrix_symmetrizes_round_off() -> None:
    """Check tiny asymmetries are averaged away."""
    mat: NDArray[np.float64] = np.array(
        [[1.0, 0.5], [0.5 + 1e-12, 2.0]], dtype=np.float64
    )
    result: NDArray[np.float64] = as_symmetric_matrix(mat, "m")
    assert np.array_equal(result, result.T)


def test_as_symmetric_matrix_rejects_asymmetric() -> None:
    """Ensure a clearly asymmetric matrix raises ValueError."""
    with pytest.raises(ValueError):
        as_symmetric_matrix([[1.0, 0.0], [1.0, 1.0]], "m")


def test_as_symmetric_matrix_rejects_negative_diagonal() -> None:
    """Ensure a negative diagonal raises ValueError."""
    with pytest.raises(ValueError):
        as_symmetric_matrix([[-1.0]], "m")


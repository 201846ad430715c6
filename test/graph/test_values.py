################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for variable estimates."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pytest
from numpy.typing import NDArray

from oasis_gnc.graph.values import Manifold
from oasis_gnc.graph.values import Values
from oasis_gnc.solver.ordering import Ordering


@dataclass(frozen=True)
class _Angle:
    """Planar rotation wrapped to [-pi, pi)."""

    theta: float

    def dim(self) -> int:
        return 1

    def retract(self, delta: NDArray[np.float64]) -> _Angle:
        wrapped: float = (self.theta + float(delta[0]) + np.pi) % (2.0 * np.pi) - np.pi
        return _Angle(wrapped)

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        return isinstance(other, _Angle) and abs(self.theta - other.theta) <= tol


def test_insert_update_at() -> None:
    """Check insert, update and lookup of vector estimates."""
    values: Values = Values()
    values.insert(1, [0.0, 1.0])
    assert values.exists(1)
    assert np.array_equal(values.at(1), [0.0, 1.0])
    values.update(1, [2.0, 3.0])
    assert np.array_equal(values.at(1), [2.0, 3.0])
    assert values.keys() == [1]
    assert len(values) == 1


def test_insert_duplicate_and_update_missing() -> None:
    """Ensure duplicate inserts and missing updates raise KeyError."""
    values: Values = Values({"x": [1.0]})
    with pytest.raises(KeyError):
        values.insert("x", [2.0])
    with pytest.raises(KeyError):
        values.update("y", [2.0])
    with pytest.raises(KeyError):
        values.at("y")


def test_at_returns_copy() -> None:
    """Ensure callers cannot mutate stored vectors."""
    values: Values = Values({"x": [1.0, 2.0]})
    estimate: NDArray[np.float64] = values.at("x")  # type: ignore[assignment]
    estimate[0] = 99.0
    assert np.array_equal(values.at("x"), [1.0, 2.0])


def test_retract_by_ordering() -> None:
    """Check a stacked step moves each variable by its block."""
    values: Values = Values({"a": [0.0, 0.0], "b": _Angle(3.0)})
    ordering: Ordering = Ordering.from_values(values)
    delta: NDArray[np.float64] = np.array([1.0, 2.0, 0.5], dtype=np.float64)
    moved: Values = values.retract(delta, ordering)
    assert np.array_equal(moved.at("a"), [1.0, 2.0])
    angle: Manifold = moved.at("b")  # type: ignore[assignment]
    assert angle.equals(_Angle(3.5 - 2.0 * np.pi))
    assert np.array_equal(values.at("a"), [0.0, 0.0])


def test_equals_and_copy() -> None:
    """Check copies compare equal and diverge independently."""
    values: Values = Values({"a": [1.0], "b": _Angle(0.1)})
    clone: Values = values.copy()
    assert values.equals(clone)
    clone.update("a", [1.5])
    assert not values.equals(clone)
    assert values.equals(clone, tol=1.0)


def test_rejects_non_finite() -> None:
    """Ensure non-finite estimates raise ValueError."""
    with pytest.raises(ValueError):
        Values({"a": [np.inf]})

################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Measurement factors.

A factor references a fixed tuple of variable keys, computes an unwhitened
residual from the current values, and delegates weighting of that residual to
its noise model. Jacobians are taken with respect to the tangent-space step of
each referenced variable.
"""

from __future__ import annotations

import copy
from abc import ABC
from abc import abstractmethod
from typing import Any
from typing import Callable
from typing import Hashable
from typing import Protocol
from typing import Sequence
from typing import runtime_checkable

import numpy as np
from numpy.typing import NDArray

from oasis_gnc.graph.noise_model import NoiseModel
from oasis_gnc.graph.values import Estimate
from oasis_gnc.graph.values import Values
from oasis_gnc.math_utils.numerical import central_difference_jacobian
from oasis_gnc.math_utils.validation import as_float_vector


@runtime_checkable
class Factor(Protocol):
    """Capability interface for a measurement in a factor graph."""

    def keys(self) -> tuple[Hashable, ...]:
        """Return the referenced variable keys."""
        ...

    def noise_model(self) -> NoiseModel:
        """Return the noise model."""
        ...

    def with_noise_model(self, noise_model: NoiseModel) -> Factor:
        """Return a copy with the same keys and measurement but a new model."""
        ...

    def error(self, values: Values) -> float:
        """Return the scalar error, 0.5 r^T Lambda r for Gaussian models."""
        ...

    def linearize(
        self, values: Values
    ) -> tuple[list[NDArray[np.float64]], NDArray[np.float64]]:
        """Return whitened Jacobian blocks, one per key, and whitened residual."""
        ...

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        """Return True when the factors match within tolerance."""
        ...


class NoiseModelFactor(ABC):
    """Base class for factors whose error is weighted by a noise model."""

    def __init__(self, keys: Sequence[Hashable], noise_model: NoiseModel) -> None:
        if not keys:
            raise ValueError("factor must reference at least one key")
        self._keys: tuple[Hashable, ...] = tuple(keys)
        self._noise_model: NoiseModel = noise_model

    def keys(self) -> tuple[Hashable, ...]:
        return self._keys

    def noise_model(self) -> NoiseModel:
        return self._noise_model

    def with_noise_model(self, noise_model: NoiseModel) -> NoiseModelFactor:
        clone: NoiseModelFactor = copy.copy(self)
        clone._noise_model = noise_model
        return clone

    @abstractmethod
    def unwhitened_error(self, values: Values) -> NDArray[np.float64]:
        """Return the residual h(x) - z before noise weighting."""

    def jacobians(self, values: Values) -> list[NDArray[np.float64]]:
        """Return d residual / d step for each key.

        The default uses central differences through the values retraction.
        Subclasses with closed-form Jacobians override this.
        """
        result: list[NDArray[np.float64]] = []
        key: Hashable
        for key in self._keys:
            result.append(self._numerical_jacobian(values, key))
        return result

    def error(self, values: Values) -> float:
        return float(self._noise_model.error(self.unwhitened_error(values)))

    def linearize(
        self, values: Values
    ) -> tuple[list[NDArray[np.float64]], NDArray[np.float64]]:
        residual: NDArray[np.float64] = self.unwhitened_error(values)
        return self._noise_model.whiten_system(self.jacobians(values), residual)

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        if not isinstance(other, NoiseModelFactor) or type(other) is not type(self):
            return False
        if other._keys != self._keys:
            return False
        if not self._noise_model.equals(other._noise_model, tol):
            return False
        return self._measurement_equals(other, tol)

    def _measurement_equals(self, other: Any, tol: float) -> bool:
        return True

    def _numerical_jacobian(
        self, values: Values, key: Hashable
    ) -> NDArray[np.float64]:
        def perturbed(delta: NDArray[np.float64]) -> NDArray[np.float64]:
            moved: Values = values.copy()
            moved.update(key, values.retract_key(key, delta))
            return self.unwhitened_error(moved)

        return central_difference_jacobian(perturbed, values.dim(key))


def _vector_estimate(values: Values, key: Hashable) -> NDArray[np.float64]:
    estimate: Estimate = values.at(key)
    if not isinstance(estimate, np.ndarray):
        raise TypeError(f"key {key!r} must hold a vector estimate")
    return estimate


class PriorFactor(NoiseModelFactor):
    """Unary factor with residual x - prior on a vector-space variable."""

    def __init__(
        self, key: Hashable, prior: Sequence[float], noise_model: NoiseModel
    ) -> None:
        super().__init__((key,), noise_model)
        self._prior: NDArray[np.float64] = as_float_vector(prior, "prior")

    @property
    def prior(self) -> NDArray[np.float64]:
        return self._prior.copy()

    def unwhitened_error(self, values: Values) -> NDArray[np.float64]:
        x: NDArray[np.float64] = _vector_estimate(values, self._keys[0])
        if x.shape != self._prior.shape:
            raise ValueError("prior dimension does not match the variable")
        return x - self._prior

    def jacobians(self, values: Values) -> list[NDArray[np.float64]]:
        return [np.eye(self._prior.shape[0], dtype=np.float64)]

    def _measurement_equals(self, other: Any, tol: float) -> bool:
        return bool(np.allclose(self._prior, other._prior, atol=tol, rtol=0.0))


class BetweenFactor(NoiseModelFactor):
    """Binary factor with residual (x2 - x1) - measured on vector-space variables."""

    def __init__(
        self,
        key1: Hashable,
        key2: Hashable,
        measured: Sequence[float],
        noise_model: NoiseModel,
    ) -> None:
        super().__init__((key1, key2), noise_model)
        self._measured: NDArray[np.float64] = as_float_vector(measured, "measured")

    @property
    def measured(self) -> NDArray[np.float64]:
        return self._measured.copy()

    def unwhitened_error(self, values: Values) -> NDArray[np.float64]:
        x1: NDArray[np.float64] = _vector_estimate(values, self._keys[0])
        x2: NDArray[np.float64] = _vector_estimate(values, self._keys[1])
        if x1.shape != self._measured.shape or x2.shape != self._measured.shape:
            raise ValueError("measurement dimension does not match the variables")
        return (x2 - x1) - self._measured

    def jacobians(self, values: Values) -> list[NDArray[np.float64]]:
        eye: NDArray[np.float64] = np.eye(self._measured.shape[0], dtype=np.float64)
        return [-eye, eye.copy()]

    def _measurement_equals(self, other: Any, tol: float) -> bool:
        return bool(np.allclose(self._measured, other._measured, atol=tol, rtol=0.0))


class FunctionFactor(NoiseModelFactor):
    """Factor with residual fn(x_1, ..., x_n) - measured.

    The measurement function receives the estimates for each key in order.
    Jacobians are computed numerically.
    """

    def __init__(
        self,
        keys: Sequence[Hashable],
        fn: Callable[..., Any],
        measured: Sequence[float],
        noise_model: NoiseModel,
    ) -> None:
        super().__init__(keys, noise_model)
        self._fn: Callable[..., Any] = fn
        self._measured: NDArray[np.float64] = as_float_vector(measured, "measured")

    def unwhitened_error(self, values: Values) -> NDArray[np.float64]:
        estimates: list[Estimate] = [values.at(key) for key in self._keys]
        predicted: NDArray[np.float64] = np.asarray(
            self._fn(*estimates), dtype=np.float64
        ).reshape(-1)
        if predicted.shape != self._measured.shape:
            raise ValueError("measurement function returned the wrong dimension")
        return predicted - self._measured

    def _measurement_equals(self, other: Any, tol: float) -> bool:
        if self._fn is not other._fn:
            return False
        return bool(np.allclose(self._measured, other._measured, atol=tol, rtol=0.0))

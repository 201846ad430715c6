################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Measurement noise models.

Two variants are supported:

    - GaussianNoiseModel: defined by its information matrix (inverse covariance)
    - RobustNoiseModel: a Gaussian model wrapped with a robust kernel

The factor error for a residual r is 0.5 r^T Lambda r for a Gaussian model and
rho(||R r||) for a robust model, where R^T R = Lambda.
"""

from __future__ import annotations

from typing import Protocol
from typing import Sequence
from typing import Union
from typing import runtime_checkable

import numpy as np
from numpy.typing import NDArray

from oasis_gnc.graph.robust_kernel import RobustKernel
from oasis_gnc.math_utils.linalg import Linalg
from oasis_gnc.math_utils.validation import as_float_vector
from oasis_gnc.math_utils.validation import as_symmetric_matrix


class NoiseModelError(Exception):
    """Raised when a noise model is malformed or misused."""


@runtime_checkable
class NoiseModel(Protocol):
    """Capability interface shared by all noise model variants."""

    def dim(self) -> int:
        """Return the residual dimension."""
        ...

    def error(self, residual: NDArray[np.float64]) -> float:
        """Return the scalar error contribution of an unwhitened residual."""
        ...

    def whiten_system(
        self,
        jacobians: Sequence[NDArray[np.float64]],
        residual: NDArray[np.float64],
    ) -> tuple[list[NDArray[np.float64]], NDArray[np.float64]]:
        """Return whitened Jacobian blocks and residual."""
        ...

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        """Return True when the models match within tolerance."""
        ...


class GaussianNoiseModel:
    """Gaussian noise model parameterized by its information matrix."""

    def __init__(self, information: NDArray[np.float64]) -> None:
        """Initialize from an information matrix, see from_information()."""
        try:
            info: NDArray[np.float64] = as_symmetric_matrix(information, "information")
        except ValueError as exc:
            raise NoiseModelError(str(exc)) from exc

        self._information: NDArray[np.float64] = info
        self._information.setflags(write=False)
        self._sqrt_information: NDArray[np.float64] | None = None

    @classmethod
    def from_information(cls, information: NDArray[np.float64]) -> GaussianNoiseModel:
        """Create a model from an information matrix."""
        return cls(information)

    @classmethod
    def from_covariance(cls, covariance: NDArray[np.float64]) -> GaussianNoiseModel:
        """Create a model from a positive-definite covariance matrix."""
        try:
            cov: NDArray[np.float64] = as_symmetric_matrix(covariance, "covariance")
        except ValueError as exc:
            raise NoiseModelError(str(exc)) from exc
        try:
            info: NDArray[np.float64] = np.asarray(np.linalg.inv(cov), dtype=np.float64)
        except np.linalg.LinAlgError as exc:
            raise NoiseModelError("covariance must be invertible") from exc
        return cls(0.5 * (info + info.T))

    @classmethod
    def from_sigmas(cls, sigmas: Sequence[float]) -> GaussianNoiseModel:
        """Create a diagonal model from per-axis standard deviations."""
        try:
            sigma_vec: NDArray[np.float64] = as_float_vector(sigmas, "sigmas")
        except ValueError as exc:
            raise NoiseModelError(str(exc)) from exc
        if np.any(sigma_vec <= 0.0):
            raise NoiseModelError("sigmas must be positive")
        return cls(np.diag(1.0 / (sigma_vec * sigma_vec)))

    @classmethod
    def isotropic(cls, dim: int, sigma: float) -> GaussianNoiseModel:
        """Create a model with the same standard deviation on every axis."""
        if dim <= 0:
            raise NoiseModelError("dim must be positive")
        return cls.from_sigmas([float(sigma)] * int(dim))

    @classmethod
    def unit(cls, dim: int) -> GaussianNoiseModel:
        """Create a model with identity information."""
        if dim <= 0:
            raise NoiseModelError("dim must be positive")
        return cls(np.eye(int(dim), dtype=np.float64))

    def dim(self) -> int:
        return int(self._information.shape[0])

    def information(self) -> NDArray[np.float64]:
        """Return a copy of the information matrix."""
        return self._information.copy()

    def covariance(self) -> NDArray[np.float64]:
        """Return the covariance, pseudo-inverting singular information."""
        return np.asarray(np.linalg.pinv(self._information), dtype=np.float64)

    def sqrt_information(self) -> NDArray[np.float64]:
        """Return a read-only R such that R^T R equals the information matrix."""
        if self._sqrt_information is None:
            sqrt_info: NDArray[np.float64] = Linalg.sqrt_information(self._information)
            sqrt_info.setflags(write=False)
            self._sqrt_information = sqrt_info
        return self._sqrt_information

    def whiten(self, residual: NDArray[np.float64]) -> NDArray[np.float64]:
        """Return R r."""
        r: NDArray[np.float64] = self._check_residual(residual)
        return np.asarray(self.sqrt_information() @ r, dtype=np.float64)

    def squared_mahalanobis_distance(self, residual: NDArray[np.float64]) -> float:
        """Return r^T Lambda r."""
        r: NDArray[np.float64] = self._check_residual(residual)
        return float(r @ self._information @ r)

    def error(self, residual: NDArray[np.float64]) -> float:
        return 0.5 * self.squared_mahalanobis_distance(residual)

    def whiten_system(
        self,
        jacobians: Sequence[NDArray[np.float64]],
        residual: NDArray[np.float64],
    ) -> tuple[list[NDArray[np.float64]], NDArray[np.float64]]:
        R: NDArray[np.float64] = self.sqrt_information()
        whitened: list[NDArray[np.float64]] = [
            np.asarray(R @ np.asarray(J, dtype=np.float64), dtype=np.float64)
            for J in jacobians
        ]
        return whitened, self.whiten(residual)

    def scaled(self, weight: float) -> GaussianNoiseModel:
        """Return a new model with information scaled by a weight."""
        scale: float = float(weight)
        if not np.isfinite(scale) or scale < 0.0:
            raise NoiseModelError("weight must be finite and non-negative")
        return GaussianNoiseModel(scale * self._information)

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        if not isinstance(other, GaussianNoiseModel):
            return False
        if other.dim() != self.dim():
            return False
        return bool(
            np.allclose(self._information, other._information, atol=tol, rtol=0.0)
        )

    def __repr__(self) -> str:
        return f"GaussianNoiseModel(information={self._information.tolist()})"

    def _check_residual(self, residual: NDArray[np.float64]) -> NDArray[np.float64]:
        r: NDArray[np.float64] = np.asarray(residual, dtype=np.float64).reshape(-1)
        if r.shape != (self.dim(),):
            raise NoiseModelError(
                f"residual must have dimension {self.dim()}, got {r.shape[0]}"
            )
        return r


class RobustNoiseModel:
    """Gaussian noise model wrapped with a robust kernel."""

    def __init__(self, kernel: RobustKernel, noise: GaussianNoiseModel) -> None:
        """Initialize the robust wrapper."""
        if not isinstance(noise, GaussianNoiseModel):
            raise NoiseModelError("robust noise model must wrap a Gaussian model")
        if not isinstance(kernel, RobustKernel):
            raise NoiseModelError("kernel must implement RobustKernel")
        self._kernel: RobustKernel = kernel
        self._noise: GaussianNoiseModel = noise

    @property
    def kernel(self) -> RobustKernel:
        """Return the robust kernel."""
        return self._kernel

    def unwrap(self) -> GaussianNoiseModel:
        """Return the wrapped Gaussian model."""
        return self._noise

    def dim(self) -> int:
        return self._noise.dim()

    def error(self, residual: NDArray[np.float64]) -> float:
        whitened: NDArray[np.float64] = self._noise.whiten(residual)
        return self._kernel.loss(float(np.linalg.norm(whitened)))

    def whiten_system(
        self,
        jacobians: Sequence[NDArray[np.float64]],
        residual: NDArray[np.float64],
    ) -> tuple[list[NDArray[np.float64]], NDArray[np.float64]]:
        whitened_jacobians: list[NDArray[np.float64]]
        whitened_residual: NDArray[np.float64]
        whitened_jacobians, whitened_residual = self._noise.whiten_system(
            jacobians, residual
        )
        weight: float = self._kernel.weight(float(np.linalg.norm(whitened_residual)))
        sqrt_weight: float = float(np.sqrt(weight))
        return (
            [J * sqrt_weight for J in whitened_jacobians],
            whitened_residual * sqrt_weight,
        )

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        if not isinstance(other, RobustNoiseModel):
            return False
        return self._kernel.equals(other._kernel, tol) and self._noise.equals(
            other._noise, tol
        )

    def __repr__(self) -> str:
        return f"RobustNoiseModel(kernel={self._kernel!r}, noise={self._noise!r})"


SharedNoiseModel = Union[GaussianNoiseModel, RobustNoiseModel]

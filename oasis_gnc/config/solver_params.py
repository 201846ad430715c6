################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Configuration for the base nonlinear least-squares solvers."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import fields
from dataclasses import replace
from enum import IntEnum
from typing import Any
from typing import Mapping

import numpy as np


# Maximum solver iterations per solve
MAX_ITERATIONS: int = 100

# Units: unitless. Meaning: stop when the relative error decrease falls below
RELATIVE_ERROR_TOL: float = 1e-5

# Units: graph error. Meaning: stop when the absolute error decrease falls below
ABSOLUTE_ERROR_TOL: float = 1e-5

# Units: graph error. Meaning: stop when the total error falls below
ERROR_TOL: float = 0.0

# Units: unitless. Meaning: initial Levenberg-Marquardt damping
LAMBDA_INITIAL: float = 1e-5

# Units: unitless. Meaning: damping multiplier after a rejected step
LAMBDA_FACTOR: float = 10.0

# Units: unitless. Meaning: damping above which the solver gives up
LAMBDA_UPPER_BOUND: float = 1e5

# Units: unitless. Meaning: damping floor after accepted steps
LAMBDA_LOWER_BOUND: float = 0.0


class SolverParamsError(Exception):
    """Raised when base solver parameter validation fails."""


class OptimizerVerbosity(IntEnum):
    """Diagnostic volume of the base solvers."""

    SILENT = 0
    ERROR = 1
    DELTA = 2


def _require_positive(value: float, name: str) -> None:
    """Require a positive finite value."""
    if not np.isfinite(value) or value <= 0.0:
        raise SolverParamsError(f"{name} must be positive")


def _require_non_negative(value: float, name: str) -> None:
    """Require a non-negative finite value."""
    if not np.isfinite(value) or value < 0.0:
        raise SolverParamsError(f"{name} must be non-negative")


def _require_positive_int(value: int, name: str) -> None:
    """Require a positive integer value."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise SolverParamsError(f"{name} must be an int")
    if value <= 0:
        raise SolverParamsError(f"{name} must be positive")


@dataclass(frozen=True)
class NonlinearOptimizerParams:
    """Settings shared by every base solver."""

    # Maximum solver iterations per solve
    max_iterations: int = MAX_ITERATIONS
    # Relative error decrease threshold for convergence
    relative_error_tol: float = RELATIVE_ERROR_TOL
    # Absolute error decrease threshold for convergence
    absolute_error_tol: float = ABSOLUTE_ERROR_TOL
    # Total error threshold for convergence
    error_tol: float = ERROR_TOL
    # Diagnostic volume
    verbosity: OptimizerVerbosity = OptimizerVerbosity.SILENT

    def __post_init__(self) -> None:
        """Coerce verbosity given by name or value."""
        object.__setattr__(self, "verbosity", _as_verbosity(self.verbosity))

    @classmethod
    def defaults(cls) -> Any:
        """Return the default parameters."""
        return cls()

    def validate(self) -> None:
        """Validate parameter invariants and constraints."""
        _require_positive_int(self.max_iterations, "max_iterations")
        _require_non_negative(self.relative_error_tol, "relative_error_tol")
        _require_non_negative(self.absolute_error_tol, "absolute_error_tol")
        _require_non_negative(self.error_tol, "error_tol")

    def replace(self, **overrides: Any) -> Any:
        """Return a modified copy of the parameters."""
        return replace(self, **overrides)

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        """Return True when both parameter sets match within tolerance."""
        if type(other) is not type(self):
            return False
        for field_def in fields(self):
            mine: Any = getattr(self, field_def.name)
            theirs: Any = getattr(other, field_def.name)
            if isinstance(mine, float) and not isinstance(mine, bool):
                if abs(mine - float(theirs)) > tol:
                    return False
            elif mine != theirs:
                return False
        return True

    def as_nested_dict(self) -> dict[str, Any]:
        """Return a plain dict representation."""
        result: dict[str, Any] = {}
        for field_def in fields(self):
            value: Any = getattr(self, field_def.name)
            result[field_def.name] = (
                value.name if isinstance(value, OptimizerVerbosity) else value
            )
        return result

    def describe(self) -> str:
        """Return a multi-line report of every setting."""
        lines: list[str] = [f"{type(self).__name__}:"]
        name: str
        value: Any
        for name, value in self.as_nested_dict().items():
            lines.append(f"  {name}: {value}")
        return "\n".join(lines)

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> Any:
        """Construct parameters from a mapping, rejecting unknown keys."""
        if not isinstance(params, Mapping):
            raise SolverParamsError("params must be a mapping")
        known: dict[str, Any] = {field_def.name: field_def for field_def in fields(cls)}
        unknown_keys: list[str] = sorted(set(params.keys()) - set(known.keys()))
        if unknown_keys:
            raise SolverParamsError(f"unknown parameter: {unknown_keys[0]}")

        kwargs: dict[str, Any] = {}
        name: str
        value: Any
        for name, value in params.items():
            default: Any = getattr(cls.defaults(), name)
            if name == "verbosity":
                kwargs[name] = value
            elif isinstance(default, int):
                kwargs[name] = _as_int(name, value)
            else:
                kwargs[name] = _as_float(name, value)
        result: NonlinearOptimizerParams = cls(**kwargs)
        result.validate()
        return result


@dataclass(frozen=True)
class GaussNewtonParams(NonlinearOptimizerParams):
    """Gauss-Newton solver configuration."""


@dataclass(frozen=True)
class LevenbergMarquardtParams(NonlinearOptimizerParams):
    """Levenberg-Marquardt solver configuration."""

    # Initial damping
    lambda_initial: float = LAMBDA_INITIAL
    # Damping multiplier after a rejected step
    lambda_factor: float = LAMBDA_FACTOR
    # Damping above which the solver stops
    lambda_upper_bound: float = LAMBDA_UPPER_BOUND
    # Damping floor after accepted steps
    lambda_lower_bound: float = LAMBDA_LOWER_BOUND

    def validate(self) -> None:
        """Validate parameter invariants and constraints."""
        super().validate()
        _require_positive(self.lambda_initial, "lambda_initial")
        _require_positive(self.lambda_upper_bound, "lambda_upper_bound")
        _require_non_negative(self.lambda_lower_bound, "lambda_lower_bound")
        if not np.isfinite(self.lambda_factor) or self.lambda_factor <= 1.0:
            raise SolverParamsError("lambda_factor must be greater than 1")
        if self.lambda_lower_bound > self.lambda_upper_bound:
            raise SolverParamsError(
                "lambda_lower_bound must not exceed lambda_upper_bound"
            )


# Registry of solver configuration types by tag
SOLVER_TYPES: dict[str, type[NonlinearOptimizerParams]] = {
    "gauss_newton": GaussNewtonParams,
    "levenberg_marquardt": LevenbergMarquardtParams,
}


def solver_type_name(params: NonlinearOptimizerParams) -> str:
    """Return the registry tag of a solver configuration."""
    tag: str
    params_type: type[NonlinearOptimizerParams]
    for tag, params_type in SOLVER_TYPES.items():
        if type(params) is params_type:
            return tag
    raise SolverParamsError(f"unregistered solver params type: {type(params).__name__}")


def _as_verbosity(value: Any) -> OptimizerVerbosity:
    if isinstance(value, OptimizerVerbosity):
        return value
    if isinstance(value, str):
        try:
            return OptimizerVerbosity[value.upper()]
        except KeyError as exc:
            raise SolverParamsError(f"unknown verbosity: {value}") from exc
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return OptimizerVerbosity(value)
        except ValueError as exc:
            raise SolverParamsError(f"unknown verbosity: {value}") from exc
    raise SolverParamsError("verbosity must be a name or an int")


def _as_float(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SolverParamsError(f"{name} must be a float")
    return float(value)


def _as_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SolverParamsError(f"{name} must be an int")
    return int(value)

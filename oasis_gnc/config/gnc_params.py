################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Configuration for Graduated Non-Convexity.

GncParams is immutable. The with_* builders return modified copies, and
with_known_inliers replaces the known-inlier set instead of extending it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from dataclasses import replace
from enum import Enum
from enum import IntEnum
from typing import Any
from typing import Iterable
from typing import Mapping

import numpy as np

from oasis_gnc.config.solver_params import SOLVER_TYPES
from oasis_gnc.config.solver_params import GaussNewtonParams
from oasis_gnc.config.solver_params import NonlinearOptimizerParams
from oasis_gnc.config.solver_params import SolverParamsError
from oasis_gnc.config.solver_params import solver_type_name


_LOG: logging.Logger = logging.getLogger(__name__)


# Maximum continuation iterations
MAX_ITERATIONS: int = 100

# Units: whitened squared residual. Meaning: inlier/outlier error threshold
BARC_SQ: float = 1.0

# Units: unitless. Meaning: divisor applied to mu each continuation iteration
MU_STEP: float = 1.4


class GncParamsError(Exception):
    """Raised when GNC parameter validation fails."""


class GncLossType(Enum):
    """Robust kernel continued by GNC."""

    # Geman-McClure
    GM = "gm"
    # Truncated least squares, declared but not implemented
    TLS = "tls"


class GncVerbosity(IntEnum):
    """Diagnostic volume of the continuation loop."""

    SILENT = 0
    SUMMARY = 1
    VALUES = 2


def _require_positive(value: float, name: str) -> None:
    """Require a positive finite value."""
    if not np.isfinite(value) or value <= 0.0:
        raise GncParamsError(f"{name} must be positive")


@dataclass(frozen=True)
class GncParams:
    """Complete GNC configuration including the embedded base solver settings."""

    # Base solver configuration, also selects the solver type
    base_params: NonlinearOptimizerParams = field(default_factory=GaussNewtonParams)
    # Robust kernel
    loss_type: GncLossType = GncLossType.GM
    # Maximum continuation iterations
    max_iterations: int = MAX_ITERATIONS
    # Inlier/outlier threshold in whitened squared residual units
    barc_sq: float = BARC_SQ
    # Divisor applied to mu each iteration
    mu_step: float = MU_STEP
    # Diagnostic volume
    verbosity: GncVerbosity = GncVerbosity.SILENT
    # Slot indices fixed at weight 1
    known_inliers: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        """Coerce enum and set fields."""
        object.__setattr__(self, "loss_type", _as_loss_type(self.loss_type))
        object.__setattr__(self, "verbosity", _as_verbosity(self.verbosity))
        object.__setattr__(
            self, "known_inliers", _as_index_set(self.known_inliers)
        )

    @classmethod
    def defaults(cls) -> GncParams:
        """Return the default GNC parameters."""
        return cls()

    def validate(self) -> None:
        """Validate parameter invariants and constraints."""
        if isinstance(self.max_iterations, bool) or not isinstance(
            self.max_iterations, int
        ):
            raise GncParamsError("max_iterations must be an int")
        if self.max_iterations <= 0:
            raise GncParamsError("max_iterations must be positive")
        _require_positive(self.barc_sq, "barc_sq")
        if not np.isfinite(self.mu_step) or self.mu_step <= 1.0:
            raise GncParamsError("mu_step must be greater than 1")
        if not isinstance(self.base_params, NonlinearOptimizerParams):
            raise GncParamsError("base_params must be solver parameters")
        try:
            self.base_params.validate()
        except SolverParamsError as exc:
            raise GncParamsError(f"base_params: {exc}") from exc

    def replace(self, **overrides: Any) -> GncParams:
        """Return a modified copy of the parameters."""
        return replace(self, **overrides)

    def with_base_params(self, base_params: NonlinearOptimizerParams) -> GncParams:
        return self.replace(base_params=base_params)

    def with_loss_type(self, loss_type: GncLossType | str) -> GncParams:
        return self.replace(loss_type=loss_type)

    def with_max_iterations(self, max_iterations: int) -> GncParams:
        """Return a copy with a new iteration cap.

        Changing the cap away from the default is allowed, but can stop the
        continuation before mu reaches 1 and reduce accuracy.
        """
        if max_iterations != MAX_ITERATIONS:
            _LOG.warning(
                "Changing the GNC iteration cap from %d to %d may reduce "
                "solution accuracy",
                MAX_ITERATIONS,
                max_iterations,
            )
        return self.replace(max_iterations=max_iterations)

    def with_inlier_threshold(self, barc_sq: float) -> GncParams:
        return self.replace(barc_sq=barc_sq)

    def with_mu_step(self, mu_step: float) -> GncParams:
        return self.replace(mu_step=mu_step)

    def with_verbosity(self, verbosity: GncVerbosity | str | int) -> GncParams:
        return self.replace(verbosity=verbosity)

    def with_known_inliers(self, known_inliers: Iterable[int]) -> GncParams:
        """Return a copy whose known-inlier set is exactly the given indices."""
        return self.replace(known_inliers=known_inliers)

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        """Return True when every field, including base_params, matches."""
        if not isinstance(other, GncParams):
            return False
        return (
            self.base_params.equals(other.base_params, tol)
            and self.loss_type == other.loss_type
            and self.max_iterations == other.max_iterations
            and abs(self.barc_sq - other.barc_sq) <= tol
            and abs(self.mu_step - other.mu_step) <= tol
            and self.verbosity == other.verbosity
            and self.known_inliers == other.known_inliers
        )

    def as_nested_dict(self) -> dict[str, Any]:
        """Return a nested dict of plain Python values."""
        result: dict[str, Any] = {}
        for field_def in fields(self):
            value: Any = getattr(self, field_def.name)
            if isinstance(value, NonlinearOptimizerParams):
                nested: dict[str, Any] = {"type": solver_type_name(value)}
                nested.update(value.as_nested_dict())
                result[field_def.name] = nested
            elif isinstance(value, GncLossType):
                result[field_def.name] = value.value
            elif isinstance(value, GncVerbosity):
                result[field_def.name] = value.name
            elif isinstance(value, frozenset):
                result[field_def.name] = sorted(value)
            else:
                result[field_def.name] = value
        return result

    def describe(self) -> str:
        """Return a multi-line report of the GNC and base solver settings."""
        lines: list[str] = [
            "GncParams:",
            f"  loss_type: {self.loss_type.name}",
            f"  max_iterations: {self.max_iterations}",
            f"  barc_sq: {self.barc_sq}",
            f"  mu_step: {self.mu_step}",
            f"  verbosity: {self.verbosity.name}",
            f"  known_inliers: {sorted(self.known_inliers)}",
        ]
        base_line: str
        for base_line in self.base_params.describe().splitlines():
            lines.append(f"  {base_line}")
        return "\n".join(lines)

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> GncParams:
        """Construct parameters from a mapping, rejecting unknown keys."""
        if not isinstance(params, Mapping):
            raise GncParamsError("params must be a mapping")
        known: set[str] = {field_def.name for field_def in fields(cls)}
        unknown_keys: list[str] = sorted(set(params.keys()) - known)
        if unknown_keys:
            raise GncParamsError(f"unknown parameter: {unknown_keys[0]}")

        defaults: GncParams = cls.defaults()
        base_params: NonlinearOptimizerParams = defaults.base_params
        if "base_params" in params:
            base_params = _base_params_from_dict(params["base_params"])

        try:
            result: GncParams = cls(
                base_params=base_params,
                loss_type=params.get("loss_type", defaults.loss_type),
                max_iterations=_as_int(
                    "max_iterations",
                    params.get("max_iterations", defaults.max_iterations),
                ),
                barc_sq=_as_float("barc_sq", params.get("barc_sq", defaults.barc_sq)),
                mu_step=_as_float("mu_step", params.get("mu_step", defaults.mu_step)),
                verbosity=params.get("verbosity", defaults.verbosity),
                known_inliers=params.get("known_inliers", defaults.known_inliers),
            )
        except (TypeError, ValueError) as exc:
            raise GncParamsError(str(exc)) from exc
        result.validate()
        return result


def _base_params_from_dict(value: Any) -> NonlinearOptimizerParams:
    if not isinstance(value, Mapping):
        raise GncParamsError("base_params must be a mapping")
    entries: dict[str, Any] = dict(value)
    tag: Any = entries.pop("type", "gauss_newton")
    if tag not in SOLVER_TYPES:
        raise GncParamsError(f"unknown base solver type: {tag}")
    try:
        return SOLVER_TYPES[tag].from_dict(entries)
    except SolverParamsError as exc:
        raise GncParamsError(f"base_params: {exc}") from exc


def _as_loss_type(value: Any) -> GncLossType:
    if isinstance(value, GncLossType):
        return value
    if isinstance(value, str):
        name: str = value.strip().lower()
        loss_type: GncLossType
        for loss_type in GncLossType:
            if name in (loss_type.value, loss_type.name.lower()):
                return loss_type
    raise GncParamsError(f"unknown loss type: {value!r}")


def _as_verbosity(value: Any) -> GncVerbosity:
    if isinstance(value, GncVerbosity):
        return value
    if isinstance(value, str):
        try:
            return GncVerbosity[value.strip().upper()]
        except KeyError as exc:
            raise GncParamsError(f"unknown verbosity: {value}") from exc
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return GncVerbosity(value)
        except ValueError as exc:
            raise GncParamsError(f"unknown verbosity: {value}") from exc
    raise GncParamsError("verbosity must be a name or an int")


def _as_index_set(values: Any) -> frozenset[int]:
    if isinstance(values, (str, bytes)):
        raise GncParamsError("known_inliers must be a collection of indices")
    try:
        items: list[Any] = list(values)
    except TypeError as exc:
        raise GncParamsError("known_inliers must be iterable") from exc

    indices: set[int] = set()
    item: Any
    for item in items:
        if isinstance(item, bool) or not isinstance(item, (int, np.integer)):
            raise GncParamsError("known_inliers must contain ints")
        if int(item) < 0:
            raise GncParamsError("known_inliers must be non-negative")
        indices.add(int(item))
    return frozenset(indices)


def _as_float(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise GncParamsError(f"{name} must be a float")
    return float(value)


def _as_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise GncParamsError(f"{name} must be an int")
    return int(value)

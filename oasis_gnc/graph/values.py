################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Variable estimates keyed by hashable identifiers.

Estimates are either float64 vectors, updated by addition, or objects that
implement the Manifold protocol and update through retraction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any
from typing import Hashable
from typing import Iterator
from typing import Protocol
from typing import Union
from typing import runtime_checkable

import numpy as np
from numpy.typing import NDArray

from oasis_gnc.math_utils.validation import as_float_vector


if TYPE_CHECKING:
    from oasis_gnc.solver.ordering import Ordering


@runtime_checkable
class Manifold(Protocol):
    """Estimate living on a manifold with a local tangent parameterization."""

    def dim(self) -> int:
        """Return the tangent-space dimension."""
        ...

    def retract(self, delta: NDArray[np.float64]) -> Manifold:
        """Return the estimate moved by a tangent-space step."""
        ...

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        """Return True when the estimates match within tolerance."""
        ...


Estimate = Union[NDArray[np.float64], Manifold]


class Values:
    """Ordered mapping from variable keys to estimates."""

    def __init__(self, entries: dict[Hashable, Any] | None = None) -> None:
        """Initialize from an optional mapping of key to estimate."""
        self._entries: dict[Hashable, Estimate] = {}
        if entries is not None:
            key: Hashable
            value: Any
            for key, value in entries.items():
                self.insert(key, value)

    def insert(self, key: Hashable, value: Any) -> None:
        """Add a new variable, raising KeyError if it already exists."""
        if key in self._entries:
            raise KeyError(f"key {key!r} already exists")
        self._entries[key] = _coerce_estimate(key, value)

    def update(self, key: Hashable, value: Any) -> None:
        """Replace an existing variable, raising KeyError if it is missing."""
        if key not in self._entries:
            raise KeyError(f"key {key!r} not found")
        self._entries[key] = _coerce_estimate(key, value)

    def at(self, key: Hashable) -> Estimate:
        """Return the estimate for a key."""
        try:
            value: Estimate = self._entries[key]
        except KeyError as exc:
            raise KeyError(f"key {key!r} not found") from exc
        if isinstance(value, np.ndarray):
            return value.copy()
        return value

    def exists(self, key: Hashable) -> bool:
        return key in self._entries

    def keys(self) -> list[Hashable]:
        return list(self._entries.keys())

    def dim(self, key: Hashable) -> int:
        """Return the tangent dimension of one variable."""
        value: Estimate = self._entries[key]
        if isinstance(value, np.ndarray):
            return int(value.shape[0])
        return int(value.dim())

    def copy(self) -> Values:
        """Return an independent copy."""
        result: Values = Values()
        key: Hashable
        value: Estimate
        for key, value in self._entries.items():
            result._entries[key] = (
                value.copy() if isinstance(value, np.ndarray) else value
            )
        return result

    def retract_key(self, key: Hashable, delta: NDArray[np.float64]) -> Estimate:
        """Return the estimate for a key moved by a tangent-space step."""
        value: Estimate = self._entries[key]
        step: NDArray[np.float64] = np.asarray(delta, dtype=np.float64).reshape(-1)
        if isinstance(value, np.ndarray):
            if step.shape != value.shape:
                raise ValueError(
                    f"step for key {key!r} must have shape {value.shape}"
                )
            return value + step
        return value.retract(step)

    def retract(self, delta: NDArray[np.float64], ordering: Ordering) -> Values:
        """Return new values with every ordered variable moved by its step block."""
        result: Values = self.copy()
        key: Hashable
        for key in ordering.keys():
            block_step: NDArray[np.float64] = delta[ordering.block(key).sl()]
            result._entries[key] = self.retract_key(key, block_step)
        return result

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        if not isinstance(other, Values):
            return False
        if set(self._entries.keys()) != set(other._entries.keys()):
            return False

        key: Hashable
        value: Estimate
        for key, value in self._entries.items():
            other_value: Estimate = other._entries[key]
            if isinstance(value, np.ndarray):
                if not isinstance(other_value, np.ndarray):
                    return False
                if value.shape != other_value.shape:
                    return False
                if not np.allclose(value, other_value, atol=tol, rtol=0.0):
                    return False
            elif not value.equals(other_value, tol):
                return False
        return True

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._entries.keys()))

    def __repr__(self) -> str:
        parts: list[str] = []
        key: Hashable
        value: Estimate
        for key, value in self._entries.items():
            shown: Any = value.tolist() if isinstance(value, np.ndarray) else value
            parts.append(f"{key!r}: {shown!r}")
        return "Values({" + ", ".join(parts) + "})"


def _coerce_estimate(key: Hashable, value: Any) -> Estimate:
    if isinstance(value, Manifold) and not isinstance(value, np.ndarray):
        return value
    try:
        return as_float_vector(value, f"value for key {key!r}")
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid estimate for key {key!r}: {exc}") from exc

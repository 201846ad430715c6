################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Ordered collection of factor slots.

Slot indices are stable identities. Removing a factor nulls its slot instead of
shifting later factors, so indices used for weighting stay valid.
"""

from __future__ import annotations

import operator
from typing import Hashable
from typing import Iterable
from typing import Iterator
from typing import Optional

from oasis_gnc.graph.factor import Factor
from oasis_gnc.graph.values import Values


class FactorGraphError(Exception):
    """Raised when a factor graph is accessed or evaluated incorrectly."""


class FactorGraph:
    """Ordered list of optional factors."""

    def __init__(self, factors: Iterable[Optional[Factor]] | None = None) -> None:
        self._factors: list[Optional[Factor]] = []
        if factors is not None:
            factor: Optional[Factor]
            for factor in factors:
                self.add(factor)

    def add(self, factor: Optional[Factor]) -> int:
        """Append a factor or an empty slot and return its slot index."""
        if factor is not None and not isinstance(factor, Factor):
            raise FactorGraphError("factor must implement the Factor interface")
        self._factors.append(factor)
        return len(self._factors) - 1

    def resize(self, size: int) -> None:
        """Grow with empty slots or truncate to the given size."""
        if size < 0:
            raise FactorGraphError("size must be non-negative")
        if size < len(self._factors):
            del self._factors[size:]
        else:
            self._factors.extend([None] * (size - len(self._factors)))

    def remove(self, index: int) -> None:
        """Null the slot at an index."""
        self._factors[self._check_index(index)] = None

    def replace(self, index: int, factor: Optional[Factor]) -> None:
        """Replace the slot at an index."""
        self._factors[self._check_index(index)] = factor

    def keys(self) -> list[Hashable]:
        """Return the referenced keys in first-seen order."""
        seen: dict[Hashable, None] = {}
        factor: Optional[Factor]
        for factor in self._factors:
            if factor is None:
                continue
            key: Hashable
            for key in factor.keys():
                seen.setdefault(key, None)
        return list(seen.keys())

    def nr_factors(self) -> int:
        """Return the number of non-null slots."""
        return sum(1 for factor in self._factors if factor is not None)

    def check_values(self, values: Values) -> None:
        """Raise FactorGraphError if values lack a referenced key."""
        missing: list[Hashable] = [
            key for key in self.keys() if not values.exists(key)
        ]
        if missing:
            raise FactorGraphError(f"values missing keys: {missing!r}")

    def error(self, values: Values) -> float:
        """Return the total error, skipping empty slots."""
        total: float = 0.0
        factor: Optional[Factor]
        for factor in self._factors:
            if factor is not None:
                total += float(factor.error(values))
        return total

    def copy(self) -> FactorGraph:
        """Return a graph with the same slots."""
        result: FactorGraph = FactorGraph()
        result._factors = list(self._factors)
        return result

    def equals(self, other: object, tol: float = 1e-9) -> bool:
        if not isinstance(other, FactorGraph):
            return False
        if len(other) != len(self):
            return False
        mine: Optional[Factor]
        theirs: Optional[Factor]
        for mine, theirs in zip(self._factors, other._factors):
            if mine is None or theirs is None:
                if mine is not theirs:
                    return False
            elif not mine.equals(theirs, tol):
                return False
        return True

    def __getitem__(self, index: int) -> Optional[Factor]:
        return self._factors[self._check_index(index)]

    def __len__(self) -> int:
        return len(self._factors)

    def __iter__(self) -> Iterator[Optional[Factor]]:
        return iter(list(self._factors))

    def _check_index(self, index: int) -> int:
        try:
            position: int = operator.index(index)
        except TypeError as exc:
            raise FactorGraphError(f"slot index {index!r} is not an integer") from exc
        if not 0 <= position < len(self._factors):
            raise FactorGraphError(
                f"slot index {index!r} out of range for {len(self._factors)} slots"
            )
        return position

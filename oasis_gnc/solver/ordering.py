################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Column block layout for linearized least-squares systems."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable

from oasis_gnc.graph.values import Values


class OrderingError(Exception):
    """Raised when an ordering is invalid or queried for an unknown key."""


@dataclass(frozen=True)
class VariableBlock:
    """Represents one variable's columns in the stacked tangent vector.

    Attributes:
        key: Variable key
        start: Starting column index
        dim: Tangent dimension of the variable
    """

    key: Hashable
    start: int
    dim: int

    def stop(self) -> int:
        """Return the exclusive stop index for the block."""
        return self.start + self.dim

    def sl(self) -> slice:
        """Return the slice covering the block indices."""
        return slice(self.start, self.stop())

    def validate(self) -> None:
        """Validate block indices and dimensions."""
        if self.start < 0:
            raise OrderingError("Block start must be non-negative")
        if self.dim <= 0:
            raise OrderingError("Block dim must be positive")


@dataclass(frozen=True)
class Ordering:
    """Deterministic block layout following the insertion order of values."""

    _blocks: tuple[VariableBlock, ...]

    @classmethod
    def from_values(cls, values: Values) -> Ordering:
        """Construct an ordering covering every variable in values."""
        if not isinstance(values, Values):
            raise OrderingError("values must be a Values instance")
        blocks: list[VariableBlock] = []
        offset: int = 0
        key: Hashable
        for key in values.keys():
            block: VariableBlock = VariableBlock(
                key=key, start=offset, dim=values.dim(key)
            )
            block.validate()
            blocks.append(block)
            offset += block.dim
        return cls(_blocks=tuple(blocks))

    def dim(self) -> int:
        """Return the total dimension of the tangent vector."""
        if not self._blocks:
            return 0
        return self._blocks[-1].stop()

    def blocks(self) -> tuple[VariableBlock, ...]:
        return self._blocks

    def keys(self) -> list[Hashable]:
        return [block.key for block in self._blocks]

    def block(self, key: Hashable) -> VariableBlock:
        """Return the block for the given key."""
        for block in self._blocks:
            if block.key == key:
                return block
        raise OrderingError(f"Key {key!r} not found in ordering")

    def has(self, key: Hashable) -> bool:
        """Return True when the ordering contains the key."""
        return any(block.key == key for block in self._blocks)

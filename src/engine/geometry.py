"""Axial hex coordinates and the direction vectors pieces move along."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class HexDir:
    """Non-zero coordinate delta between two hex cells."""

    d0: int
    d1: int

    def __post_init__(self) -> None:
        if self.d0 == 0 and self.d1 == 0:
            raise ValueError("HexDir must be non-zero")

    def __add__(self, other: "HexDir") -> "HexDir":
        return HexDir(self.d0 + other.d0, self.d1 + other.d1)

    def __mul__(self, k: int) -> "HexDir":
        return HexDir(self.d0 * k, self.d1 * k)

    __rmul__ = __mul__

    def __neg__(self) -> "HexDir":
        return HexDir(-self.d0, -self.d1)


@dataclass(frozen=True)
class HexPos:
    """Axial cell coordinate ``(hex0, hex1)``; may lie off the board."""

    hex0: int
    hex1: int

    def __add__(self, d: HexDir) -> "HexPos":
        return HexPos(self.hex0 + d.d0, self.hex1 + d.d1)


# Orthogonal: through a cell edge.
NE = HexDir(1, 1)
N = HexDir(0, 1)
NW = HexDir(-1, 0)
SW = HexDir(-1, -1)
S = HexDir(0, -1)
SE = HexDir(1, 0)

# Diagonal: through a cell vertex.
E = HexDir(2, 1)
NNE = HexDir(1, 2)
NNW = HexDir(-1, 1)
W = HexDir(-2, -1)
SSW = HexDir(-1, -2)
SSE = HexDir(1, -1)

ORTHOGONAL_DIRS: Tuple[HexDir, ...] = (NE, N, NW, SW, S, SE)
DIAGONAL_DIRS: Tuple[HexDir, ...] = (E, NNE, NNW, W, SSW, SSE)
ALL_DIRS: Tuple[HexDir, ...] = ORTHOGONAL_DIRS + DIAGONAL_DIRS

KNIGHT_LEAP_DIRS: Tuple[HexDir, ...] = (
    HexDir(3, 2),
    HexDir(2, 3),
    HexDir(1, 3),
    HexDir(-1, 2),
    HexDir(-2, 1),
    HexDir(-3, -1),
    HexDir(-3, -2),
    HexDir(-2, -3),
    HexDir(-1, -3),
    HexDir(1, -2),
    HexDir(2, -1),
    HexDir(3, 1),
)

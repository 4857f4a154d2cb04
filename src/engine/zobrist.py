from __future__ import annotations

from functools import lru_cache
from typing import List, TYPE_CHECKING

from .pieces import Color, PieceType

if TYPE_CHECKING:  # pragma: no cover
    from .board import Board


MASK64 = 0xFFFFFFFFFFFFFFFF

COLOR_COUNT = 2
PIECE_TYPE_COUNT = 6


class _SplitMix64:
    def __init__(self, seed: int) -> None:
        self.state = seed & MASK64

    def next(self) -> int:
        # Deterministic 64-bit SplitMix64
        self.state = (self.state + 0x9E3779B97F4A7C15) & MASK64
        z = self.state
        z = (z ^ (z >> 30)) * 0xBF58476D1CE4E5B9 & MASK64
        z = (z ^ (z >> 27)) * 0x94D049BB133111EB & MASK64
        z = z ^ (z >> 31)
        return z & MASK64


class Zobrist:
    """Zobrist keys for (cell, color, piece type) triples.

    Table layout: ``keys[cell * 12 + color * 6 + piece_type]`` with Black = 0,
    White = 1 and King..Pawn = 0..5, drawn from the PRNG in index order.
    Only piece placement is hashed; the mover, en-passant target, and
    counters are not.
    """

    keys: List[int]

    def __init__(self, cell_count: int, seed: int = 0xC0FFEE_F00D_DEAD) -> None:
        prng = _SplitMix64(seed)
        self.cell_count = cell_count
        self.keys = [prng.next() for _ in range(cell_count * COLOR_COUNT * PIECE_TYPE_COUNT)]

    def key(self, index: int, color: Color, piece_type: PieceType) -> int:
        return self.keys[index * 12 + color * 6 + piece_type]


@lru_cache(maxsize=None)
def zobrist_for(cell_count: int) -> Zobrist:
    return Zobrist(cell_count)


# Global deterministic table for the 91-cell board
ZOBRIST = zobrist_for(91)


def compute_hash_from_scratch(board: "Board") -> int:
    """Compute the 64-bit Zobrist hash of a Board's piece placement.

    Deterministic across runs given the fixed key table, and independent of
    the order in which pieces were placed.
    """
    table = zobrist_for(board.geometry.cell_count)
    h = 0
    for color in Color:
        for piece_type in PieceType:
            bb = board.bits(color, piece_type)
            while bb:
                lsb = bb & -bb
                index = lsb.bit_length() - 1
                h ^= table.key(index, color, piece_type)
                bb ^= lsb
    return h & MASK64

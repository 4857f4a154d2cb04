from __future__ import annotations

from enum import IntEnum
from typing import Dict


class Color(IntEnum):
    """Side owning a piece or a move.

    The integer values are stable: they index bit-set tables and the
    Zobrist key layout.
    """

    BLACK = 0
    WHITE = 1

    @property
    def opponent(self) -> "Color":
        return Color.WHITE if self is Color.BLACK else Color.BLACK

    def fen_char(self) -> str:
        return "w" if self is Color.WHITE else "b"

    @classmethod
    def from_fen_char(cls, ch: str) -> "Color":
        if ch == "w":
            return cls.WHITE
        if ch == "b":
            return cls.BLACK
        raise ValueError("side to move must be 'w' or 'b'")


class PieceType(IntEnum):
    KING = 0
    QUEEN = 1
    ROOK = 2
    BISHOP = 3
    KNIGHT = 4
    PAWN = 5

    @property
    def letter(self) -> str:
        return _TYPE_TO_LETTER[self]

    @classmethod
    def from_letter(cls, ch: str) -> "PieceType":
        try:
            return _LETTER_TO_TYPE[ch.upper()]
        except KeyError:
            raise ValueError(f"invalid piece letter: {ch!r}") from None


_TYPE_TO_LETTER: Dict[PieceType, str] = {
    PieceType.KING: "K",
    PieceType.QUEEN: "Q",
    PieceType.ROOK: "R",
    PieceType.BISHOP: "B",
    PieceType.KNIGHT: "N",
    PieceType.PAWN: "P",
}
_LETTER_TO_TYPE: Dict[str, PieceType] = {v: k for k, v in _TYPE_TO_LETTER.items()}

PROMOTION_TYPES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)
LEAPER_TYPES = (PieceType.KING, PieceType.KNIGHT)


def piece_char(color: Color, piece_type: PieceType) -> str:
    """FEN character: uppercase for White, lowercase for Black."""
    ch = piece_type.letter
    return ch if color is Color.WHITE else ch.lower()


def parse_piece_char(ch: str) -> tuple[Color, PieceType]:
    piece_type = PieceType.from_letter(ch)
    color = Color.WHITE if ch.isupper() else Color.BLACK
    return color, piece_type

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .pieces import Color, PieceType
from .variant import GLINSKI, BoardGeometry


class MoveKind(Enum):
    SIMPLE = "simple"
    EN_PASSANT = "en_passant"
    PAWN_PROMOTION = "pawn_promotion"
    # Reserved; Glinski chess has no castling.
    CASTLING = "castling"


class CheckStatus(Enum):
    UNKNOWN = "unknown"
    NO_CHECK = "no_check"
    CHECK = "check"
    CHECKMATE = "checkmate"


@dataclass(frozen=True)
class Move:
    """Engine-internal move record.

    Carries enough to execute and exactly undo the move: the captured piece
    type is stored by value, and a promotion records the new piece type.

    Attributes:
        mover (Color): Side making the move.
        piece_type (PieceType): Type of the moving piece before promotion.
        from_index (int): Origin cell index.
        to_index (int): Destination cell index.
        kind (MoveKind): Simple, en passant, or promotion.
        captured (Optional[PieceType]): Type of the captured piece, if any.
        promotion (Optional[PieceType]): Promoted-to type, if any.
        check_status (CheckStatus): Filled in once known; ignored by equality.
    """

    mover: Color
    piece_type: PieceType
    from_index: int
    to_index: int
    kind: MoveKind = MoveKind.SIMPLE
    captured: Optional[PieceType] = None
    promotion: Optional[PieceType] = None
    check_status: CheckStatus = field(default=CheckStatus.UNKNOWN, compare=False)

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    @property
    def is_promotion(self) -> bool:
        return self.promotion is not None

    @property
    def is_check(self) -> bool:
        return self.check_status in (CheckStatus.CHECK, CheckStatus.CHECKMATE)

    def to_notation(self, geometry: BoardGeometry = GLINSKI) -> str:
        """Render the move as ``<Piece><From><-|x><To>[ep][=Promo][+|#]``.

        Returns:
            str: Move text such as ``"PF5-F6"`` or ``"QE1xE7+"``.
        """
        parts = [
            self.piece_type.letter,
            geometry.cell_name(self.from_index),
            "x" if self.is_capture else "-",
            geometry.cell_name(self.to_index),
        ]
        if self.kind is MoveKind.EN_PASSANT:
            parts.append("ep")
        if self.promotion is not None:
            parts.append("=" + self.promotion.letter)
        if self.check_status is CheckStatus.CHECKMATE:
            parts.append("#")
        elif self.check_status is CheckStatus.CHECK:
            parts.append("+")
        return "".join(parts)

    def __str__(self) -> str:
        return self.to_notation()


@dataclass(frozen=True)
class NotationMove:
    """Move fields recovered from notation text, before board resolution."""

    piece_type: PieceType
    from_index: int
    to_index: int
    is_capture: bool
    is_en_passant: bool = False
    promotion: Optional[PieceType] = None

    def matches(self, move: Move) -> bool:
        return (
            move.from_index == self.from_index
            and move.to_index == self.to_index
            and move.promotion == self.promotion
        )


_NOTATION_RE = re.compile(
    r"^(?P<piece>[KQRBNP])"
    r"(?P<from>[A-L]\d{1,2})"
    r"(?P<sep>[-x])"
    r"(?P<to>[A-L]\d{1,2})"
    r"(?P<ep>ep)?"
    r"(?:=(?P<promo>[QRBN]))?"
    r"(?P<check>[+#])?$"
)


def parse_notation(text: str, geometry: BoardGeometry = GLINSKI) -> NotationMove:
    """Parse move text produced by :meth:`Move.to_notation`.

    Args:
        text (str): Move text such as ``"PF5-F6"``. Leading/trailing
            whitespace is ignored; the check suffix is accepted but not used.

    Returns:
        NotationMove: Parsed fields, to be resolved against a board's legal
        moves.

    Raises:
        ValueError: If the text is malformed or names an unknown cell.
    """
    m = _NOTATION_RE.match(text.strip())
    if m is None:
        raise ValueError(f"invalid move notation: {text!r}")
    is_capture = m.group("sep") == "x"
    is_ep = m.group("ep") is not None
    if is_ep and not is_capture:
        raise ValueError(f"en passant move must be a capture: {text!r}")
    promo = m.group("promo")
    return NotationMove(
        piece_type=PieceType.from_letter(m.group("piece")),
        from_index=geometry.cell_index(m.group("from")),
        to_index=geometry.cell_index(m.group("to")),
        is_capture=is_capture,
        is_en_passant=is_ep,
        promotion=PieceType.from_letter(promo) if promo else None,
    )

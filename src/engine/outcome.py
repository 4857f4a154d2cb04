from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple

from .pieces import Color, PieceType


class Termination(Enum):
    CHECKMATE = "checkmate"
    RESIGNATION = "resignation"
    REPETITION_3 = "three-time board repetition"
    REPETITION_5 = "five-time board repetition"
    MOVES_50 = "50 moves without capture or Pawn move"
    MOVES_75 = "75 moves without capture or Pawn move"
    INSUFFICIENT_MATERIAL = "insufficient resources"
    STALEMATE = "stalemate"

    @property
    def is_win(self) -> bool:
        return self in (Termination.CHECKMATE, Termination.RESIGNATION)

    @property
    def is_draw(self) -> bool:
        return not self.is_win and self is not Termination.STALEMATE

    @property
    def is_claimable(self) -> bool:
        return self in (Termination.REPETITION_3, Termination.MOVES_50)


@dataclass(frozen=True)
class Outcome:
    """Result of a finished game.

    ``winner`` is meaningful for wins and for stalemate. In Glinski chess the
    player who delivers stalemate (the last mover) scores 3/4 and the
    stalemated player 1/4.
    """

    termination: Termination
    winner: Optional[Color] = None

    def __post_init__(self) -> None:
        if self.termination.is_win and self.winner is None:
            raise ValueError("a win needs a winner")
        if self.termination is Termination.STALEMATE and self.winner is None:
            raise ValueError("stalemate needs the last mover as winner")

    @property
    def is_win(self) -> bool:
        return self.termination.is_win

    @property
    def is_draw(self) -> bool:
        return self.termination.is_draw

    @property
    def is_stalemate(self) -> bool:
        return self.termination is Termination.STALEMATE

    def score(self, color: Color) -> float:
        if self.is_win:
            return 1.0 if color is self.winner else 0.0
        if self.is_stalemate:
            return 0.75 if color is self.winner else 0.25
        return 0.5

    def score_string(self) -> str:
        """Scores as ``"<white>-<black>"``, e.g. ``"1-0"`` or ``"0.75-0.25"``."""
        return f"{_fmt(self.score(Color.WHITE))}-{_fmt(self.score(Color.BLACK))}"

    def describe(self) -> str:
        if self.is_win:
            assert self.winner is not None
            return f"{self.winner.name.title()} wins by {self.termination.value}"
        if self.is_stalemate:
            assert self.winner is not None
            return f"{self.winner.name.title()} scores 3/4 by {self.termination.value}"
        return f"Draw by {self.termination.value}"


def _fmt(x: float) -> str:
    return str(int(x)) if x in (0.0, 1.0) else f"{x:g}"


# --- Insufficient material ---
MaterialSignature = Tuple[str, str]

_LETTER_ORDER = "KQRBNP"


def material_string(piece_types: Iterable[PieceType]) -> str:
    """Letters of one side's pieces in ``KQRBNP`` order, e.g. ``"KRB"``."""
    return "".join(sorted((pt.letter for pt in piece_types), key=_LETTER_ORDER.index))


def material_signature(white: Iterable[PieceType], black: Iterable[PieceType]) -> MaterialSignature:
    """Color-independent key for the multiset of remaining pieces."""
    a, b = sorted((material_string(white), material_string(black)))
    return (a, b)


# King vs King, and a lone minor piece vs King.
DEFAULT_INSUFFICIENT_MATERIAL: FrozenSet[MaterialSignature] = frozenset(
    {
        ("K", "K"),
        ("K", "KB"),
        ("K", "KN"),
    }
)

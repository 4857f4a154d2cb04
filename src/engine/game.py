from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .board import Board
from .move import Move, parse_notation
from .outcome import Outcome, Termination
from .pieces import Color


logger = logging.getLogger(__name__)


@dataclass
class Game:
    """Game wrapper around a board with helper operations.

    Responsibility: track board state, expose legal moves, apply validated
    moves, and record the move list (with check annotations) and any
    resignation. Repetition counts live on the board so search sees them.
    """

    board: Board
    move_stack: List[Move] = field(default_factory=list)
    claim_draws: bool = True
    resigned: Optional[Color] = None

    @classmethod
    def new(cls, claim_draws: bool = True) -> "Game":
        return cls(board=Board.startpos(), claim_draws=claim_draws)

    @classmethod
    def from_fen(cls, fen: str, claim_draws: bool = True) -> "Game":
        return cls(board=Board.from_fen(fen), claim_draws=claim_draws)

    def to_fen(self) -> str:
        return self.board.to_fen()

    @property
    def mover(self) -> Color:
        return self.board.mover

    def legal_moves(self) -> List[Move]:
        if self.is_over():
            return []
        return self.board.legal_moves()

    def apply_move(self, move: Move) -> Move:
        """Validate and apply ``move``; return it with check status filled in.

        Raises:
            ValueError: If the game is over or ``move`` is not legal here.
        """
        if self.is_over():
            raise ValueError("game is over")
        if move not in self.board.legal_moves():
            raise ValueError("illegal move")
        annotated = self.board.annotate_check(move)
        self.board.exec_move(annotated)
        self.move_stack.append(annotated)
        logger.debug("move %s", annotated.to_notation(self.board.geometry))
        return annotated

    def apply_notation(self, text: str) -> Move:
        """Parse move text like ``"PF5-F6"`` and apply the matching legal move.

        Raises:
            ValueError: If the text is malformed or the move is illegal.
        """
        if self.is_over():
            raise ValueError("game is over")
        parsed = parse_notation(text, self.board.geometry)
        return self.apply_move(self.board.find_legal_move(parsed))

    def undo_move(self) -> Move:
        if self.resigned is not None:
            raise ValueError("game ended by resignation")
        if not self.move_stack:
            raise ValueError("no moves to undo")
        last = self.move_stack.pop()
        self.board.undo_move(last)
        return last

    def resign(self, color: Optional[Color] = None) -> Outcome:
        """Resign on behalf of ``color`` (default: the side to move)."""
        if self.is_over():
            raise ValueError("game is over")
        self.resigned = self.board.mover if color is None else color
        logger.info("%s resigns", self.resigned.name.title())
        outcome = self.outcome()
        assert outcome is not None
        return outcome

    # --- State flags for protocol ---
    def outcome(self) -> Optional[Outcome]:
        if self.resigned is not None:
            return Outcome(Termination.RESIGNATION, winner=self.resigned.opponent)
        return self.board.outcome(claim_draws=self.claim_draws)

    def is_over(self) -> bool:
        return self.outcome() is not None

    def in_check(self) -> bool:
        return self.board.in_check()

    def checkmate(self) -> bool:
        return (not self.board.has_legal_moves()) and self.board.in_check()

    def stalemate(self) -> bool:
        return (not self.board.has_legal_moves()) and (not self.board.in_check())

    def is_draw(self) -> bool:
        outcome = self.outcome()
        return outcome is not None and outcome.is_draw

    def move_history_notation(self) -> List[str]:
        return [m.to_notation(self.board.geometry) for m in self.move_stack]

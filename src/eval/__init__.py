"""Static evaluation of hex positions.

Pure, deterministic, and side-effect free. Scores are in millipawns from
White's point of view: White maximizes, Black minimizes.
"""

from __future__ import annotations

from typing import Dict, Final, Optional

from src.engine.board import Board, popcount
from src.engine.outcome import Outcome
from src.engine.pieces import Color, PieceType


# Material values in millipawns; Kings are always present and cancel out.
Q_VAL: Final = 6660
R_VAL: Final = 4460
B_VAL: Final = 2600
N_VAL: Final = 2300
P_VAL: Final = 1000

PIECE_VALUES: Final[Dict[PieceType, int]] = {
    PieceType.KING: 0,
    PieceType.QUEEN: Q_VAL,
    PieceType.ROOK: R_VAL,
    PieceType.BISHOP: B_VAL,
    PieceType.KNIGHT: N_VAL,
    PieceType.PAWN: P_VAL,
}

# A decisive result is worth more than any reachable material balance.
TERMINAL_SCALE: Final = 1_000_000

NEG_INFINITY: Final = -10_000_000
POS_INFINITY: Final = 10_000_000


def material(board: Board, color: Color) -> int:
    return sum(
        value * popcount(board.bits(color, pt)) for pt, value in PIECE_VALUES.items() if value
    )


def material_balance(board: Board) -> int:
    """White's material minus Black's."""
    return material(board, Color.WHITE) - material(board, Color.BLACK)


def terminal_value(outcome: Outcome) -> int:
    """Score of a finished game: scaled White score minus Black score."""
    diff = outcome.score(Color.WHITE) - outcome.score(Color.BLACK)
    return int(round(TERMINAL_SCALE * diff))


def evaluate(board: Board, claim_draws: bool = True, outcome: Optional[Outcome] = None) -> int:
    """Return the static evaluation of ``board`` in millipawns.

    Args:
        board (Board): Position to score; not modified.
        claim_draws (bool): Treat claimable draws as finished games.
        outcome (Optional[Outcome]): Precomputed outcome, if the caller
            already has it.

    Returns:
        int: ``terminal_value`` for finished games, otherwise White's
        material minus Black's.
    """
    if outcome is None:
        outcome = board.outcome(claim_draws=claim_draws)
    if outcome is not None:
        return terminal_value(outcome)
    return material_balance(board)

"""Move choosers.

A player is any callable ``ChooseMove(board) -> Move``. Players may probe the
board with balanced exec/undo but leave it as they found it.
"""

from __future__ import annotations

import random
from typing import Callable, List, Optional

from src.engine.board import Board
from src.engine.move import Move
from src.search.service import MAX_EXTENSION_PLIES, MIN_SEARCH_DEPTH, search_alpha_beta


ChooseMove = Callable[[Board], Move]
MoveValue = Callable[[Board, Move], float]


def _legal_or_raise(board: Board) -> List[Move]:
    moves = board.legal_moves()
    if not moves:
        raise ValueError("no legal moves")
    return moves


def _best_by(board: Board, moves: List[Move], key: MoveValue, rng: random.Random) -> Move:
    scored = [(key(board, m), m) for m in moves]
    top = max(value for value, _ in scored)
    return rng.choice([m for value, m in scored if value == top])


def random_player(rng: Optional[random.Random] = None) -> ChooseMove:
    rng = rng or random.Random()

    def choose(board: Board) -> Move:
        return rng.choice(_legal_or_raise(board))

    return choose


def forward_progress(board: Board, move: Move) -> float:
    """Sum of forward rows of the mover's pieces once ``move`` is played."""
    color = board.mover
    board.exec_move(move)
    try:
        return sum(
            board.geometry.forward_row(index, c) for index, c, _ in board.pieces() if c is color
        )
    finally:
        board.undo_move(move)


def advancing_player(rng: Optional[random.Random] = None) -> ChooseMove:
    return preference_player(forward_progress, rng)


def attacking_player(rng: Optional[random.Random] = None) -> ChooseMove:
    """Random capture when one exists, otherwise a random move."""
    rng = rng or random.Random()

    def choose(board: Board) -> Move:
        moves = _legal_or_raise(board)
        captures = [m for m in moves if m.is_capture]
        return rng.choice(captures or moves)

    return choose


def preference_player(key: MoveValue, rng: Optional[random.Random] = None) -> ChooseMove:
    """Play a move maximizing ``key(board, move)``; ties are broken at random."""
    rng = rng or random.Random()

    def choose(board: Board) -> Move:
        return _best_by(board, _legal_or_raise(board), key, rng)

    return choose


def alpha_beta_player(
    depth: int = MIN_SEARCH_DEPTH,
    max_extension_plies: int = MAX_EXTENSION_PLIES,
    claim_draws: bool = True,
) -> ChooseMove:
    if depth < 1:
        raise ValueError("depth must be >= 1")

    def choose(board: Board) -> Move:
        best, _ = search_alpha_beta(
            board,
            depth,
            max_extension_plies=max_extension_plies,
            claim_draws=claim_draws,
        )
        if best is None:
            raise ValueError("no legal moves")
        return best

    return choose


__all__ = [
    "ChooseMove",
    "MoveValue",
    "advancing_player",
    "alpha_beta_player",
    "attacking_player",
    "forward_progress",
    "preference_player",
    "random_player",
]

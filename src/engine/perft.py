from __future__ import annotations

from typing import Dict

from .board import Board


def perft(board: Board, depth: int) -> int:
    """Compute perft node count for `board` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are visited with exec/undo on ``board`` itself, which is left
    unchanged on return.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    moves = board.legal_moves()
    if depth == 1:
        return len(moves)

    nodes = 0
    for m in moves:
        board.exec_move(m)
        nodes += perft(board, depth - 1)
        board.undo_move(m)
    return nodes


def divide(board: Board, depth: int) -> Dict[str, int]:
    """Per-root-move perft counts keyed by move notation."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    result: Dict[str, int] = {}
    for m in board.legal_moves():
        board.exec_move(m)
        result[m.to_notation(board.geometry)] = perft(board, depth - 1)
        board.undo_move(m)
    return result

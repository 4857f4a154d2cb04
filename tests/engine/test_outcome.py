from __future__ import annotations

from typing import Callable, Dict

import pytest

from src.engine.board import Board, STARTPOS_FEN
from src.engine.outcome import (
    DEFAULT_INSUFFICIENT_MATERIAL,
    Outcome,
    Termination,
    material_signature,
)
from src.engine.pieces import Color, PieceType


def test_outcome_scores() -> None:
    win = Outcome(Termination.CHECKMATE, winner=Color.WHITE)
    assert win.score(Color.WHITE) == 1.0 and win.score(Color.BLACK) == 0.0
    assert win.score_string() == "1-0"
    stale = Outcome(Termination.STALEMATE, winner=Color.BLACK)
    assert stale.score(Color.BLACK) == 0.75 and stale.score(Color.WHITE) == 0.25
    assert stale.score_string() == "0.25-0.75"
    draw = Outcome(Termination.MOVES_50)
    assert draw.is_draw and draw.score_string() == "0.5-0.5"
    resigned = Outcome(Termination.RESIGNATION, winner=Color.BLACK)
    assert resigned.describe() == "Black wins by resignation"


def test_win_requires_winner() -> None:
    with pytest.raises(ValueError):
        Outcome(Termination.CHECKMATE)
    with pytest.raises(ValueError):
        Outcome(Termination.STALEMATE)


def test_startpos_is_not_over() -> None:
    assert Board.startpos().outcome() is None


def test_checkmate(mate_in_one: Board) -> None:
    b = mate_in_one
    assert b.outcome() is None
    move = next(m for m in b.legal_moves() if m.to_notation() == "NE6-D3")
    b.exec_move(move)
    outcome = b.outcome()
    assert outcome == Outcome(Termination.CHECKMATE, winner=Color.WHITE)
    assert b.in_check()


def test_stalemate_scores_three_quarters_for_last_mover(stalemate: Board) -> None:
    b = stalemate
    assert not b.in_check()
    outcome = b.outcome()
    assert outcome is not None
    assert outcome.termination is Termination.STALEMATE
    assert outcome.winner is Color.WHITE
    assert outcome.score(Color.WHITE) == 0.75
    assert outcome.score_string() == "0.75-0.25"
    assert outcome.is_stalemate and not outcome.is_draw and not outcome.is_win


@pytest.mark.parametrize(
    "pieces",
    [
        {"F1": "K", "F11": "k"},
        {"F1": "K", "F11": "k", "C3": "B"},
        {"F1": "K", "F11": "k", "H5": "n"},
    ],
)
def test_insufficient_material(pieces: Dict[str, str], position: Callable[..., Board]) -> None:
    outcome = position(pieces).outcome()
    assert outcome == Outcome(Termination.INSUFFICIENT_MATERIAL)


def test_sufficient_material_continues(position: Callable[..., Board]) -> None:
    assert position({"F1": "K", "F11": "k", "C3": "R"}).outcome() is None
    assert position({"F1": "K", "F11": "k", "C3": "B", "H5": "b"}).outcome() is None


def test_insufficient_material_table_is_configurable(position: Callable[..., Board]) -> None:
    table = DEFAULT_INSUFFICIENT_MATERIAL | {
        material_signature([PieceType.KING, PieceType.BISHOP], [PieceType.KING, PieceType.BISHOP])
    }
    b = position({"F1": "K", "F11": "k", "C3": "B", "H5": "b"})
    b.insufficient_material = table
    assert b.outcome() == Outcome(Termination.INSUFFICIENT_MATERIAL)


def test_non_progress_rules() -> None:
    placement = STARTPOS_FEN.split()[0]
    b99 = Board.from_fen(f"{placement} w - - 99 60")
    assert b99.outcome() is None
    b100 = Board.from_fen(f"{placement} w - - 100 60")
    assert b100.outcome() == Outcome(Termination.MOVES_50)
    assert b100.outcome(claim_draws=False) is None
    b150 = Board.from_fen(f"{placement} w - - 150 80")
    assert b150.outcome(claim_draws=False) == Outcome(Termination.MOVES_75)


def _shuttle(b: Board) -> None:
    """Move one knight per side out and back: four plies, same placement."""
    played = []
    for _ in range(2):
        m = next(m for m in b.legal_moves() if m.piece_type is PieceType.KNIGHT)
        b.exec_move(m)
        played.append(m)
    for m in played:
        back = next(
            r
            for r in b.legal_moves()
            if r.from_index == m.to_index and r.to_index == m.from_index
        )
        b.exec_move(back)


def test_repetition_rules() -> None:
    b = Board.startpos()
    _shuttle(b)
    assert b.repetition_count() == 2
    assert b.outcome() is None
    _shuttle(b)
    assert b.repetition_count() == 3
    assert b.outcome() == Outcome(Termination.REPETITION_3)
    assert b.outcome(claim_draws=False) is None
    _shuttle(b)
    _shuttle(b)
    assert b.repetition_count() == 5
    assert b.outcome(claim_draws=False) == Outcome(Termination.REPETITION_5)


def test_undo_unwinds_repetition_counts() -> None:
    b = Board.startpos()
    _shuttle(b)
    _shuttle(b)
    for _ in range(4):
        b.undo_move()
    assert b.repetition_count() == 2

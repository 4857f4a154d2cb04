from __future__ import annotations

from typing import Callable

import pytest

from src.engine.board import Board
from src.engine.game import Game
from src.engine.outcome import Termination
from src.engine.pieces import Color, PieceType
from src.eval import NEG_INFINITY, POS_INFINITY, TERMINAL_SCALE
from src.search.service import SearchService, SearchStats, search_alpha_beta


@pytest.mark.parametrize("depth", [1, 2, 3])
def test_finds_mate_in_one(mate_in_one: Board, depth: int) -> None:
    before = mate_in_one.snapshot()
    best, score = search_alpha_beta(mate_in_one, depth)
    assert best is not None
    assert score == TERMINAL_SCALE
    assert mate_in_one.snapshot() == before
    mate_in_one.exec_move(best)
    outcome = mate_in_one.outcome()
    assert outcome is not None
    assert outcome.termination is Termination.CHECKMATE
    assert outcome.winner is Color.WHITE


def test_white_takes_hanging_rook(hanging_rook: Board) -> None:
    best, score = search_alpha_beta(hanging_rook, 1)
    assert best is not None
    assert best.to_notation() == "QF3xF8"
    assert score == 6660


def test_black_minimizes(position: Callable[..., Board]) -> None:
    b = position({"F11": "k", "F9": "q", "F4": "R", "A1": "K"}, mover=Color.BLACK)
    best, score = search_alpha_beta(b, 1)
    assert best is not None
    assert best.captured is PieceType.ROOK
    assert score == -6660


def test_finished_position_returns_no_move(stalemate: Board) -> None:
    best, score = search_alpha_beta(stalemate, 3)
    assert best is None
    assert score == TERMINAL_SCALE // 2


def test_leaf_returns_material(hanging_rook: Board) -> None:
    assert search_alpha_beta(hanging_rook, 0) == (None, 2200)


def test_equal_scores_keep_first_move() -> None:
    b = Board.startpos()
    best, score = search_alpha_beta(b, 1, NEG_INFINITY, POS_INFINITY)
    assert best == b.legal_moves()[0]
    assert score == 0


def test_extension_counts_captures(hanging_rook: Board) -> None:
    stats = SearchStats()
    search_alpha_beta(hanging_rook, 1, stats=stats)
    assert stats.extensions >= 1
    assert stats.nodes > stats.leaves > 0

    plain = SearchStats()
    search_alpha_beta(hanging_rook, 1, use_quiescence=False, stats=plain)
    assert plain.extensions == 0
    assert plain.nodes < stats.nodes


def test_service_result_shape(mate_in_one: Board) -> None:
    game = Game(board=mate_in_one)
    res = SearchService().search(game, depth=1)
    assert res.best_move is not None
    assert res.best_move.to_notation().endswith("#")
    assert res.score == TERMINAL_SCALE
    assert res.depth == 1
    assert res.nodes > 0
    assert [i[:2] for i in res.iters] == [(1, TERMINAL_SCALE)]
    assert res.iters[0][2] + "#" == res.best_move.to_notation()
    assert game.move_history_notation() == []


def test_service_on_finished_game(stalemate: Board) -> None:
    res = SearchService().search(Game(board=stalemate), depth=2)
    assert res.best_move is None
    assert res.score == TERMINAL_SCALE // 2


def test_service_after_resignation() -> None:
    game = Game.new()
    game.resign()
    res = SearchService().search(game, depth=2)
    assert res.best_move is None
    assert res.score == -TERMINAL_SCALE
    assert res.depth == 0


def test_service_rejects_bad_depth() -> None:
    with pytest.raises(ValueError):
        SearchService().search(Game.new(), depth=0)


def test_leaves_are_scored_by_evaluate(
    hanging_rook: Board, monkeypatch: pytest.MonkeyPatch
) -> None:
    scored = []

    def flat(board: Board, claim_draws: bool = True, outcome=None) -> int:
        scored.append(board.zobrist_hash)
        return 7

    monkeypatch.setattr("src.search.service.evaluate", flat)
    best, score = search_alpha_beta(hanging_rook, 1)
    assert scored
    assert score == 7
    assert best == hanging_rook.legal_moves()[0]

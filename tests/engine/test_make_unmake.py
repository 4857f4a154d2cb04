from __future__ import annotations

import pytest

from src.engine.board import Board


def test_exec_undo_restores_every_startpos_move() -> None:
    b = Board.startpos()
    start = b.snapshot()
    start_fen = b.to_fen()
    for m in b.legal_moves():
        b.exec_move(m)
        assert b.mover is not m.mover
        assert b.move_history == [m]
        undone = b.undo_move(m)
        assert undone == m
        assert b.snapshot() == start
        assert b.to_fen() == start_fen
        assert b.repetition_count() == 1


def test_exec_undo_two_plies_deep() -> None:
    b = Board.startpos()
    start = b.snapshot()
    for m in b.legal_moves()[::5]:
        b.exec_move(m)
        mid = b.snapshot()
        for reply in b.legal_moves():
            b.exec_move(reply)
            b.undo_move(reply)
            assert b.snapshot() == mid
        b.undo_move(m)
    assert b.snapshot() == start


def test_counters_update() -> None:
    b = Board.startpos()
    moves = {m.to_notation(): m for m in b.legal_moves()}
    b.exec_move(moves["PF5-F6"])
    assert b.non_progress_counter == 0
    assert b.fullmove_number == 1
    knight = next(m for m in b.legal_moves() if m.to_notation().startswith("N"))
    b.exec_move(knight)
    assert b.non_progress_counter == 1
    assert b.fullmove_number == 2


def test_undo_without_history_raises() -> None:
    with pytest.raises(ValueError):
        Board.startpos().undo_move()


def test_undo_of_wrong_move_raises() -> None:
    b = Board.startpos()
    first, second = b.legal_moves()[:2]
    b.exec_move(first)
    with pytest.raises(ValueError):
        b.undo_move(second)
    assert b.undo_move() == first


def test_copy_is_independent() -> None:
    b = Board.startpos()
    c = b.copy()
    c.exec_move(c.legal_moves()[0])
    assert b.snapshot() != c.snapshot()
    assert b.move_history == []

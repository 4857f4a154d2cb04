from __future__ import annotations

import pytest

from src.engine.geometry import (
    ALL_DIRS,
    DIAGONAL_DIRS,
    KNIGHT_LEAP_DIRS,
    N,
    NE,
    NNE,
    ORTHOGONAL_DIRS,
    S,
    SW,
    HexDir,
    HexPos,
)


def test_zero_direction_rejected() -> None:
    with pytest.raises(ValueError):
        HexDir(0, 0)


def test_direction_arithmetic() -> None:
    assert NE + N == NNE
    assert N * 2 == HexDir(0, 2)
    assert 3 * S == HexDir(0, -3)
    assert -NE == SW
    assert HexPos(5, 4) + N == HexPos(5, 5)


def test_direction_sets() -> None:
    assert len(ORTHOGONAL_DIRS) == 6
    assert len(DIAGONAL_DIRS) == 6
    assert ALL_DIRS == ORTHOGONAL_DIRS + DIAGONAL_DIRS
    assert len(set(KNIGHT_LEAP_DIRS)) == 12
    # every direction has its opposite in the same set
    for dirs in (ORTHOGONAL_DIRS, DIAGONAL_DIRS, KNIGHT_LEAP_DIRS):
        assert {-d for d in dirs} == set(dirs)


def test_knight_leap_is_orthogonal_plus_diagonal() -> None:
    sums = {o + d for o in ORTHOGONAL_DIRS for d in DIAGONAL_DIRS if o + d not in ALL_DIRS}
    assert set(KNIGHT_LEAP_DIRS) <= sums

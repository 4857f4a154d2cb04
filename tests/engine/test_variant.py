from __future__ import annotations

import pytest

from src.engine.geometry import HexPos
from src.engine.pieces import Color, PieceType
from src.engine.variant import GLINSKI, CellShade


def _idx(name: str) -> int:
    return GLINSKI.cell_index(name)


def test_cell_count_and_enumeration_order() -> None:
    assert GLINSKI.cell_count == 91
    assert _idx("A1") == 0
    assert _idx("B1") == 1
    assert _idx("F1") == 5
    assert _idx("A2") == 6
    assert _idx("G1") == 12
    assert _idx("F11") == 85
    assert _idx("L6") == 90


def test_names_round_trip() -> None:
    names = [GLINSKI.cell_name(i) for i in GLINSKI.cells()]
    assert len(set(names)) == 91
    assert not any(n.startswith("J") for n in names)
    for i, n in enumerate(names):
        assert GLINSKI.cell_index(n) == i
        assert GLINSKI.pos_to_index(GLINSKI.index_to_pos(i)) == i


def test_name_lookup_is_case_insensitive() -> None:
    assert GLINSKI.cell_index("f6") == GLINSKI.cell_index("F6")


@pytest.mark.parametrize("name", ["J1", "A7", "L7", "F12", "", "Z3", "A0"])
def test_unknown_cell_name_raises(name: str) -> None:
    with pytest.raises(ValueError):
        GLINSKI.cell_index(name)


def test_off_board_coordinates_raise() -> None:
    assert not GLINSKI.is_on_board(HexPos(0, 6))
    assert not GLINSKI.is_on_board(HexPos(11, 10))
    with pytest.raises(IndexError):
        GLINSKI.pos_to_index(HexPos(0, 6))
    with pytest.raises(IndexError):
        GLINSKI.index_to_pos(91)
    with pytest.raises(IndexError):
        GLINSKI.cell_name(-1)


def test_fen_row_lengths() -> None:
    lengths = [len(r) for r in GLINSKI.fen_rows()]
    assert lengths == [1, 2, 3, 4, 5, 6, 5, 6, 5, 6, 5, 6, 5, 6, 5, 6, 5, 4, 3, 2, 1]
    assert GLINSKI.fen_rows()[0] == (_idx("F11"),)
    assert GLINSKI.fen_rows()[-1] == (_idx("F1"),)
    assert GLINSKI.row(_idx("F6")) == 0


def test_shades() -> None:
    assert GLINSKI.cell_shade(_idx("A1")) is CellShade.LIGHT
    # the three bishops of one side start on three different shades
    shades = {GLINSKI.cell_shade(_idx(n)) for n in ("F1", "F2", "F3")}
    assert shades == set(CellShade)


def test_bishops_keep_shade_and_knights_change_it() -> None:
    for i in GLINSKI.cells():
        shade = GLINSKI.cell_shade(i)
        for ray in GLINSKI.rays(PieceType.BISHOP, i):
            assert all(GLINSKI.cell_shade(j) is shade for j in ray)
        for j in GLINSKI.leaps(PieceType.KNIGHT, i):
            assert GLINSKI.cell_shade(j) is not shade


def test_center_cell_mobility() -> None:
    f6 = _idx("F6")
    assert len(GLINSKI.leaps(PieceType.KING, f6)) == 12
    assert len(GLINSKI.leaps(PieceType.KNIGHT, f6)) == 12
    assert sum(len(r) for r in GLINSKI.rays(PieceType.ROOK, f6)) == 30
    assert len(GLINSKI.rays(PieceType.QUEEN, f6)) == 12


def test_corner_rays_skip_empty_directions() -> None:
    a1 = _idx("A1")
    assert all(GLINSKI.rays(PieceType.ROOK, a1))
    assert len(GLINSKI.rays(PieceType.ROOK, a1)) == 3


def test_pawn_tables() -> None:
    f5 = _idx("F5")
    assert GLINSKI.pawn_advance(Color.WHITE, f5) == _idx("F6")
    assert GLINSKI.pawn_double_advance(Color.WHITE, f5) == _idx("F7")
    assert GLINSKI.pawn_double_advance(Color.WHITE, _idx("F6")) is None
    assert set(GLINSKI.pawn_captures(Color.WHITE, f5)) == {_idx("E5"), _idx("G5")}
    assert GLINSKI.pawn_advance(Color.BLACK, _idx("F7")) == _idx("F6")
    assert set(GLINSKI.pawn_captures(Color.BLACK, _idx("F7"))) == {_idx("E6"), _idx("G6")}
    assert GLINSKI.pawn_advance(Color.WHITE, _idx("F11")) is None


def test_start_and_promotion_masks() -> None:
    for color in (Color.WHITE, Color.BLACK):
        assert GLINSKI.start_mask(color).bit_count() == 9
        assert GLINSKI.promotion_mask(color).bit_count() == 11
    assert (GLINSKI.promotion_mask(Color.WHITE) >> _idx("F11")) & 1
    assert (GLINSKI.promotion_mask(Color.WHITE) >> _idx("A6")) & 1
    assert (GLINSKI.promotion_mask(Color.BLACK) >> _idx("L1")) & 1
    assert (GLINSKI.promotion_mask(Color.BLACK) >> _idx("L6")) & 1 == 0
    assert (GLINSKI.promotion_mask(Color.BLACK) >> _idx("F1")) & 1


def test_forward_row_is_relative_to_color() -> None:
    f1 = _idx("F1")
    assert GLINSKI.forward_row(f1, Color.WHITE) == -10
    assert GLINSKI.forward_row(f1, Color.BLACK) == 10

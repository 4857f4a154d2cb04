import os
import sys
from typing import Callable, Dict

import pytest


# Ensure the repository root is on sys.path for `from src...` imports
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from src.engine.board import Board  # noqa: E402
from src.engine.pieces import Color, PieceType  # noqa: E402
from src.engine.variant import GLINSKI  # noqa: E402


PositionBuilder = Callable[..., Board]


def build_position(pieces: Dict[str, str], mover: Color = Color.WHITE) -> Board:
    """Board from ``{cell name: FEN piece char}``."""
    b = Board.empty(mover=mover)
    for name, ch in pieces.items():
        color = Color.WHITE if ch.isupper() else Color.BLACK
        b.add_piece(GLINSKI.cell_index(name), color, PieceType.from_letter(ch))
    return b


@pytest.fixture
def position() -> PositionBuilder:
    return build_position


@pytest.fixture
def mate_in_one() -> Board:
    """White to move; NE6-B4 and NE6-D3 both mate the boxed-in Black king on A1."""
    return build_position(
        {
            "A1": "k",
            "B1": "b",
            "A2": "p",
            "B2": "p",
            "C2": "p",
            "B3": "p",
            "E6": "N",
            "L6": "K",
        }
    )


@pytest.fixture
def stalemate() -> Board:
    """Black to move with no legal move and not in check."""
    return build_position(
        {"A1": "k", "A2": "p", "B2": "p", "B1": "B", "C3": "K"}, mover=Color.BLACK
    )


@pytest.fixture
def hanging_rook() -> Board:
    """White to move; QF3xF8 wins an undefended rook."""
    return build_position({"F1": "K", "F3": "Q", "F8": "r", "L6": "k"})

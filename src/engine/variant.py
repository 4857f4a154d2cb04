from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

from .geometry import (
    ALL_DIRS,
    DIAGONAL_DIRS,
    KNIGHT_LEAP_DIRS,
    ORTHOGONAL_DIRS,
    HexDir,
    HexPos,
)
from .pieces import Color, PieceType


class CellShade(IntEnum):
    LIGHT = 0
    MEDIUM = 1
    DARK = 2


Ray = Tuple[int, ...]


class BoardGeometry(ABC):
    """Static topology of a hex board variant.

    Implementations precompute everything at construction and are read-only
    afterwards, so a single instance can be shared by any number of boards.
    Board state, move generation, evaluation, and search depend only on this
    interface.
    """

    name: str
    cell_count: int
    initial_fen: str

    @abstractmethod
    def is_on_board(self, pos: HexPos) -> bool: ...

    @abstractmethod
    def pos_to_index(self, pos: HexPos) -> int: ...

    @abstractmethod
    def index_to_pos(self, index: int) -> HexPos: ...

    @abstractmethod
    def cell_name(self, index: int) -> str: ...

    @abstractmethod
    def cell_index(self, name: str) -> int: ...

    @abstractmethod
    def cell_shade(self, index: int) -> CellShade: ...

    @abstractmethod
    def row(self, index: int) -> int: ...

    @abstractmethod
    def fen_rows(self) -> Tuple[Tuple[int, ...], ...]: ...

    @abstractmethod
    def leaps(self, piece_type: PieceType, index: int) -> Tuple[int, ...]: ...

    @abstractmethod
    def leap_mask(self, piece_type: PieceType, index: int) -> int: ...

    @abstractmethod
    def rays(self, piece_type: PieceType, index: int) -> Tuple[Ray, ...]: ...

    @abstractmethod
    def pawn_advance(self, color: Color, index: int) -> Optional[int]: ...

    @abstractmethod
    def pawn_double_advance(self, color: Color, index: int) -> Optional[int]: ...

    @abstractmethod
    def pawn_captures(self, color: Color, index: int) -> Tuple[int, ...]: ...

    @abstractmethod
    def pawn_attackers(self, color: Color, index: int) -> int: ...

    @abstractmethod
    def promotion_mask(self, color: Color) -> int: ...

    @abstractmethod
    def start_mask(self, color: Color) -> int: ...

    def forward_row(self, index: int, color: Color) -> int:
        """Row number counted from ``color``'s own side of the board."""
        r = self.row(index)
        return r if color is Color.WHITE else -r


def _mask(cells: Tuple[int, ...]) -> int:
    m = 0
    for i in cells:
        m |= 1 << i
    return m


_FILE_LETTERS = "ABCDEFGHIKL"

_PAWN_ADVANCE: Dict[Color, HexDir] = {
    Color.WHITE: HexDir(0, 1),
    Color.BLACK: HexDir(0, -1),
}
_PAWN_CAPTURE_DIRS: Dict[Color, Tuple[HexDir, HexDir]] = {
    Color.WHITE: (HexDir(-1, 0), HexDir(1, 1)),
    Color.BLACK: (HexDir(-1, -1), HexDir(1, 0)),
}
_PAWN_START_CELLS: Dict[Color, Tuple[str, ...]] = {
    Color.WHITE: ("B1", "C2", "D3", "E4", "F5", "G4", "H3", "I2", "K1"),
    Color.BLACK: ("B7", "C7", "D7", "E7", "F7", "G7", "H7", "I7", "K7"),
}

GLINSKI_INITIAL_FEN = (
    "b/qk/nbn/r2r/p1b1p/1p2p1/1p1p1/2pp2/2p2/6/5/6/2P2/2PP2/1P1P1/1P2P1/P1B1P/R2R/NBN/QK/B"
    " w - - 0 1"
)


class Glinski(BoardGeometry):
    """Glinski's 91-cell hexagonal board.

    Cells are enumerated by ``hex1`` then ``hex0`` ascending, so A1 is 0,
    F1 is 5, G1 is 12 and L6 is 90.
    """

    name = "glinski"
    cell_count = 91
    initial_fen = GLINSKI_INITIAL_FEN
    SIZE = 11
    HALF = 5

    def __init__(self) -> None:
        self._positions: List[HexPos] = []
        self._index_by_pos: Dict[Tuple[int, int], int] = {}
        for h1 in range(self.SIZE):
            for h0 in range(self.SIZE):
                pos = HexPos(h0, h1)
                if self.is_on_board(pos):
                    self._index_by_pos[(h0, h1)] = len(self._positions)
                    self._positions.append(pos)
        assert len(self._positions) == self.cell_count

        self._names = tuple(self._name_for(p) for p in self._positions)
        self._index_by_name = {n: i for i, n in enumerate(self._names)}
        self._fen_rows = self._build_fen_rows()

        self._leaps: Dict[PieceType, Tuple[Tuple[int, ...], ...]] = {
            PieceType.KING: tuple(self._leaps_for(i, ALL_DIRS) for i in self.cells()),
            PieceType.KNIGHT: tuple(self._leaps_for(i, KNIGHT_LEAP_DIRS) for i in self.cells()),
        }
        self._leap_masks: Dict[PieceType, Tuple[int, ...]] = {
            pt: tuple(_mask(cells) for cells in table) for pt, table in self._leaps.items()
        }
        ortho = tuple(tuple(self._ray(i, d) for d in ORTHOGONAL_DIRS) for i in self.cells())
        diag = tuple(tuple(self._ray(i, d) for d in DIAGONAL_DIRS) for i in self.cells())
        self._rays: Dict[PieceType, Tuple[Tuple[Ray, ...], ...]] = {
            PieceType.ROOK: tuple(tuple(r for r in rs if r) for rs in ortho),
            PieceType.BISHOP: tuple(tuple(r for r in rs if r) for rs in diag),
            PieceType.QUEEN: tuple(
                tuple(r for r in ortho[i] + diag[i] if r) for i in self.cells()
            ),
        }

        self._start_mask: Dict[Color, int] = {}
        self._promotion_mask: Dict[Color, int] = {}
        self._advance: Dict[Color, Tuple[Optional[int], ...]] = {}
        self._double: Dict[Color, Tuple[Optional[int], ...]] = {}
        self._captures: Dict[Color, Tuple[Tuple[int, ...], ...]] = {}
        self._attackers: Dict[Color, Tuple[int, ...]] = {}
        for color in (Color.BLACK, Color.WHITE):
            start = 0
            for name in _PAWN_START_CELLS[color]:
                start |= 1 << self.cell_index(name)
            self._start_mask[color] = start

            promo = 0
            for i in self.cells():
                if self._step(i, _PAWN_ADVANCE[color]) is None:
                    promo |= 1 << i
            self._promotion_mask[color] = promo

            adv = tuple(self._step(i, _PAWN_ADVANCE[color]) for i in self.cells())
            self._advance[color] = adv
            self._double[color] = tuple(
                self._step(i, _PAWN_ADVANCE[color] * 2) if (start >> i) & 1 else None
                for i in self.cells()
            )
            caps = tuple(
                tuple(
                    j
                    for j in (self._step(i, d) for d in _PAWN_CAPTURE_DIRS[color])
                    if j is not None
                )
                for i in self.cells()
            )
            self._captures[color] = caps
            attackers = [0] * self.cell_count
            for i in self.cells():
                for j in caps[i]:
                    attackers[j] |= 1 << i
            self._attackers[color] = tuple(attackers)

    # --- Coordinates ---
    def cells(self) -> range:
        return range(self.cell_count)

    def is_on_board(self, pos: HexPos) -> bool:
        h0, h1 = pos.hex0, pos.hex1
        return (
            0 <= h0 < self.SIZE
            and 0 <= h1 < self.SIZE
            and h1 - h0 <= self.HALF
            and h0 - h1 <= self.HALF
        )

    def pos_to_index(self, pos: HexPos) -> int:
        try:
            return self._index_by_pos[(pos.hex0, pos.hex1)]
        except KeyError:
            raise IndexError(f"hex position off board: {pos}") from None

    def index_to_pos(self, index: int) -> HexPos:
        if not 0 <= index < self.cell_count:
            raise IndexError(f"cell index out of range: {index}")
        return self._positions[index]

    def cell_name(self, index: int) -> str:
        if not 0 <= index < self.cell_count:
            raise IndexError(f"cell index out of range: {index}")
        return self._names[index]

    def cell_index(self, name: str) -> int:
        """Look up a cell by name such as ``"F6"`` (case-insensitive).

        Raises:
            ValueError: If ``name`` is not a cell of this board.
        """
        try:
            return self._index_by_name[name.upper()]
        except KeyError:
            raise ValueError(f"invalid cell name: {name!r}") from None

    def cell_shade(self, index: int) -> CellShade:
        pos = self.index_to_pos(index)
        return CellShade((pos.hex0 + pos.hex1) % 3)

    def row(self, index: int) -> int:
        pos = self.index_to_pos(index)
        return 2 * pos.hex1 - pos.hex0 - self.HALF

    def fen_rows(self) -> Tuple[Tuple[int, ...], ...]:
        return self._fen_rows

    # --- Movement tables ---
    def leaps(self, piece_type: PieceType, index: int) -> Tuple[int, ...]:
        return self._leaps[piece_type][index]

    def leap_mask(self, piece_type: PieceType, index: int) -> int:
        return self._leap_masks[piece_type][index]

    def rays(self, piece_type: PieceType, index: int) -> Tuple[Ray, ...]:
        return self._rays[piece_type][index]

    def pawn_advance(self, color: Color, index: int) -> Optional[int]:
        return self._advance[color][index]

    def pawn_double_advance(self, color: Color, index: int) -> Optional[int]:
        return self._double[color][index]

    def pawn_captures(self, color: Color, index: int) -> Tuple[int, ...]:
        return self._captures[color][index]

    def pawn_attackers(self, color: Color, index: int) -> int:
        """Mask of cells from which a ``color`` pawn would capture on ``index``."""
        return self._attackers[color][index]

    def promotion_mask(self, color: Color) -> int:
        return self._promotion_mask[color]

    def start_mask(self, color: Color) -> int:
        return self._start_mask[color]

    # --- Construction helpers ---
    def _name_for(self, pos: HexPos) -> str:
        h0, h1 = pos.hex0, pos.hex1
        number = h1 + 1 if h0 <= self.HALF else h1 - (h0 - self.HALF) + 1
        return f"{_FILE_LETTERS[h0]}{number}"

    def _build_fen_rows(self) -> Tuple[Tuple[int, ...], ...]:
        by_row: Dict[int, List[int]] = {}
        for i in self.cells():
            by_row.setdefault(self.row(i), []).append(i)
        rows = []
        for r in sorted(by_row, reverse=True):
            rows.append(tuple(sorted(by_row[r], key=lambda i: self._positions[i].hex0)))
        return tuple(rows)

    def _step(self, index: int, d: HexDir) -> Optional[int]:
        pos = self._positions[index] + d
        if not self.is_on_board(pos):
            return None
        return self._index_by_pos[(pos.hex0, pos.hex1)]

    def _leaps_for(self, index: int, dirs: Tuple[HexDir, ...]) -> Tuple[int, ...]:
        return tuple(j for j in (self._step(index, d) for d in dirs) if j is not None)

    def _ray(self, index: int, d: HexDir) -> Ray:
        cells: List[int] = []
        pos = self._positions[index] + d
        while self.is_on_board(pos):
            cells.append(self._index_by_pos[(pos.hex0, pos.hex1)])
            pos = pos + d
        return tuple(cells)


# Process-wide immutable table
GLINSKI = Glinski()

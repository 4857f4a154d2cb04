from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterator, List, NamedTuple, Optional, Tuple

from .move import CheckStatus, Move, MoveKind, NotationMove
from .outcome import (
    DEFAULT_INSUFFICIENT_MATERIAL,
    MaterialSignature,
    Outcome,
    Termination,
    material_signature,
)
from .pieces import (
    LEAPER_TYPES,
    PROMOTION_TYPES,
    Color,
    PieceType,
    parse_piece_char,
    piece_char,
)
from .variant import GLINSKI, BoardGeometry
from .zobrist import MASK64, zobrist_for


STARTPOS_FEN = GLINSKI.initial_fen

# Non-progress thresholds in plies
CLAIMABLE_NON_PROGRESS_PLIES = 100
AUTOMATIC_NON_PROGRESS_PLIES = 150
CLAIMABLE_REPETITIONS = 3
AUTOMATIC_REPETITIONS = 5


def iter_bits(bb: int) -> Iterator[int]:
    """Yield set bit indices in ascending order."""
    while bb:
        lsb = bb & -bb
        yield lsb.bit_length() - 1
        bb ^= lsb


def popcount(bb: int) -> int:
    return bb.bit_count()


def _bb_index(color: Color, piece_type: PieceType) -> int:
    return color * 6 + piece_type


class _FenState(NamedTuple):
    placements: List[Tuple[int, Color, PieceType]]
    mover: Color
    ep_index: Optional[int]
    non_progress_counter: int
    fullmove_number: int


@dataclass
class Board:
    """Hex board state with bit sets, move generation, and FEN I/O.

    Notes:
    - Cells are indexed by the board geometry (0..90 for Glinski).
    - ``bb`` holds one bit set per (color, piece type), at ``color * 6 + type``;
      ``occupied`` holds the per-color unions.
    - Execution and undo are strictly stack-ordered and restore state exactly.
    - Not thread-safe: use one board per concurrent search.
    """

    bb: List[int]
    occupied: List[int]
    mover: Color
    ep_index: Optional[int]
    non_progress_counter: int
    fullmove_number: int
    geometry: BoardGeometry = field(default=GLINSKI, repr=False, compare=False)
    insufficient_material: FrozenSet[MaterialSignature] = field(
        default=DEFAULT_INSUFFICIENT_MATERIAL, repr=False, compare=False
    )
    # (move, prev mover, prev ep, prev non-progress, prev fullmove, prev hash)
    _history: List[Tuple] = field(default_factory=list, repr=False, compare=False)
    # incremental zobrist hash of current piece placement
    zobrist_hash: int = 0
    # occurrences of each placement hash along the executed line
    repetitions: Dict[int, int] = field(default_factory=dict, repr=False, compare=False)

    # --- Construction ---
    @classmethod
    def empty(
        cls,
        geometry: BoardGeometry = GLINSKI,
        mover: Color = Color.WHITE,
        insufficient_material: FrozenSet[MaterialSignature] = DEFAULT_INSUFFICIENT_MATERIAL,
    ) -> "Board":
        board = cls(
            bb=[0] * 12,
            occupied=[0, 0],
            mover=mover,
            ep_index=None,
            non_progress_counter=0,
            fullmove_number=1,
            geometry=geometry,
            insufficient_material=insufficient_material,
        )
        board.repetitions = {board.zobrist_hash: 1}
        return board

    @classmethod
    def startpos(cls, geometry: BoardGeometry = GLINSKI) -> "Board":
        """Create a board set up in the variant's initial position."""
        return cls.from_fen(geometry.initial_fen, geometry)

    @classmethod
    def from_fen(cls, fen: str, geometry: BoardGeometry = GLINSKI) -> "Board":
        """Create a board from a hex FEN string.

        Args:
            fen (str): ``placement mover castling ep halfmove fullmove`` or the
                short form ``placement mover ep halfmove``.
            geometry (BoardGeometry): Board topology; defaults to Glinski.

        Returns:
            Board: Board initialized with the encoded position.

        Raises:
            ValueError: If ``fen`` is malformed.
        """
        board = cls.empty(geometry)
        board.initialize(fen)
        return board

    def initialize(self, fen: str) -> None:
        """Load ``fen`` into this board, replacing all state.

        The whole string is parsed before anything is changed, so a malformed
        FEN leaves the board untouched.

        Raises:
            ValueError: If ``fen`` is malformed.
        """
        state = _parse_fen(fen, self.geometry)
        self.bb = [0] * 12
        self.occupied = [0, 0]
        self.zobrist_hash = 0
        for index, color, piece_type in state.placements:
            self.add_piece(index, color, piece_type)
        self.mover = state.mover
        self.ep_index = state.ep_index
        self.non_progress_counter = state.non_progress_counter
        self.fullmove_number = state.fullmove_number
        self._history = []
        self.repetitions = {self.zobrist_hash: 1}

    def copy(self) -> "Board":
        """Independent board with the same position and history."""
        return dataclasses.replace(
            self,
            bb=list(self.bb),
            occupied=list(self.occupied),
            _history=list(self._history),
            repetitions=dict(self.repetitions),
        )

    # --- Piece placement ---
    def set_piece(self, index: int, color: Color, piece_type: PieceType, present: bool) -> None:
        """Set or clear one (cell, color, type) bit and toggle its hash key.

        No checks against the prior contents are made; callers must not add
        a piece twice or remove a piece that is not there.
        """
        bit = 1 << index
        i = _bb_index(color, piece_type)
        if present:
            self.bb[i] |= bit
            self.occupied[color] |= bit
        else:
            self.bb[i] &= ~bit
            self.occupied[color] &= ~bit
        self.zobrist_hash ^= zobrist_for(self.geometry.cell_count).key(index, color, piece_type)

    def add_piece(self, index: int, color: Color, piece_type: PieceType) -> None:
        self.set_piece(index, color, piece_type, True)

    def remove_piece(self, index: int, color: Color, piece_type: PieceType) -> None:
        self.set_piece(index, color, piece_type, False)

    # --- Queries ---
    def bits(self, color: Color, piece_type: PieceType) -> int:
        return self.bb[_bb_index(color, piece_type)]

    def any_piece_bits(self, color: Optional[Color] = None) -> int:
        if color is None:
            return self.occupied[0] | self.occupied[1]
        return self.occupied[color]

    def is_empty(self, index: int) -> bool:
        return not (self.any_piece_bits() >> index) & 1

    def color_at(self, index: int) -> Optional[Color]:
        for color in (Color.WHITE, Color.BLACK):
            if (self.occupied[color] >> index) & 1:
                return color
        return None

    def piece_type_at(self, index: int, color: Optional[Color] = None) -> Optional[PieceType]:
        colors = (color,) if color is not None else (Color.WHITE, Color.BLACK)
        for c in colors:
            if not (self.occupied[c] >> index) & 1:
                continue
            for piece_type in PieceType:
                if (self.bb[_bb_index(c, piece_type)] >> index) & 1:
                    return piece_type
        return None

    def piece_at(self, index: int) -> Optional[Tuple[Color, PieceType]]:
        color = self.color_at(index)
        if color is None:
            return None
        piece_type = self.piece_type_at(index, color)
        assert piece_type is not None
        return color, piece_type

    def is_piece_at(self, index: int, color: Color, piece_type: PieceType) -> bool:
        return bool((self.bits(color, piece_type) >> index) & 1)

    def count(self, color: Color, piece_type: Optional[PieceType] = None) -> int:
        if piece_type is None:
            return popcount(self.occupied[color])
        return popcount(self.bits(color, piece_type))

    def piece_count(self) -> int:
        return popcount(self.any_piece_bits())

    def pieces(self) -> Iterator[Tuple[int, Color, PieceType]]:
        """Yield ``(index, color, piece_type)`` for every piece, by cell."""
        for index in iter_bits(self.any_piece_bits()):
            placed = self.piece_at(index)
            assert placed is not None
            yield index, placed[0], placed[1]

    def king_index(self, color: Color) -> Optional[int]:
        kings = self.bits(color, PieceType.KING)
        if not kings:
            return None
        return (kings & -kings).bit_length() - 1

    def is_attacked(self, index: int, by: Color) -> bool:
        """Return True if a ``by`` piece attacks cell ``index``."""
        g = self.geometry
        if g.pawn_attackers(by, index) & self.bits(by, PieceType.PAWN):
            return True
        if g.leap_mask(PieceType.KNIGHT, index) & self.bits(by, PieceType.KNIGHT):
            return True
        if g.leap_mask(PieceType.KING, index) & self.bits(by, PieceType.KING):
            return True
        occ = self.any_piece_bits()
        queens = self.bits(by, PieceType.QUEEN)
        for slider, attackers in (
            (PieceType.ROOK, self.bits(by, PieceType.ROOK) | queens),
            (PieceType.BISHOP, self.bits(by, PieceType.BISHOP) | queens),
        ):
            if not attackers:
                continue
            for ray in g.rays(slider, index):
                for j in ray:
                    if (occ >> j) & 1:
                        if (attackers >> j) & 1:
                            return True
                        break
        return False

    def in_check(self, color: Optional[Color] = None) -> bool:
        """Return True if ``color`` (default: mover) has its king attacked."""
        c = self.mover if color is None else color
        king = self.king_index(c)
        if king is None:
            return False
        return self.is_attacked(king, c.opponent)

    # --- Move generation ---
    def pseudo_legal_moves(self, color: Optional[Color] = None) -> List[Move]:
        """Moves obeying piece movement rules, ignoring own-king safety.

        Order is deterministic: origin cells ascending, then each piece's
        direction order, then promotion types Q, R, B, N.
        """
        c = self.mover if color is None else color
        opp = c.opponent
        g = self.geometry
        own = self.occupied[c]
        enemy = self.occupied[opp]
        moves: List[Move] = []
        for index in iter_bits(own):
            piece_type = self.piece_type_at(index, c)
            assert piece_type is not None
            if piece_type is PieceType.PAWN:
                self._pawn_moves(index, c, moves)
            elif piece_type in LEAPER_TYPES:
                for to in g.leaps(piece_type, index):
                    if (own >> to) & 1:
                        continue
                    captured = self.piece_type_at(to, opp) if (enemy >> to) & 1 else None
                    moves.append(Move(c, piece_type, index, to, captured=captured))
            else:
                for ray in g.rays(piece_type, index):
                    for to in ray:
                        if (own >> to) & 1:
                            break
                        if (enemy >> to) & 1:
                            moves.append(
                                Move(c, piece_type, index, to, captured=self.piece_type_at(to, opp))
                            )
                            break
                        moves.append(Move(c, piece_type, index, to))
        return moves

    def _pawn_moves(self, index: int, color: Color, moves: List[Move]) -> None:
        g = self.geometry
        opp = color.opponent
        occ = self.any_piece_bits()
        enemy = self.occupied[opp]
        promo_mask = g.promotion_mask(color)

        def add(to: int, captured: Optional[PieceType]) -> None:
            if (promo_mask >> to) & 1:
                for promo in PROMOTION_TYPES:
                    moves.append(
                        Move(
                            color,
                            PieceType.PAWN,
                            index,
                            to,
                            kind=MoveKind.PAWN_PROMOTION,
                            captured=captured,
                            promotion=promo,
                        )
                    )
            else:
                moves.append(Move(color, PieceType.PAWN, index, to, captured=captured))

        advance = g.pawn_advance(color, index)
        if advance is not None and not (occ >> advance) & 1:
            add(advance, None)
            double = g.pawn_double_advance(color, index)
            if double is not None and not (occ >> double) & 1:
                add(double, None)
        for to in g.pawn_captures(color, index):
            if (enemy >> to) & 1:
                add(to, self.piece_type_at(to, opp))
            elif to == self.ep_index and color is self.mover:
                victim = g.pawn_advance(opp, to)
                if victim is not None and self.is_piece_at(victim, opp, PieceType.PAWN):
                    moves.append(
                        Move(
                            color,
                            PieceType.PAWN,
                            index,
                            to,
                            kind=MoveKind.EN_PASSANT,
                            captured=PieceType.PAWN,
                        )
                    )

    def _leaves_king_safe(self, move: Move) -> bool:
        self.exec_move(move)
        try:
            return not self.in_check(move.mover)
        finally:
            self.undo_move(move)

    def legal_moves(self, color: Optional[Color] = None) -> List[Move]:
        """Return legal moves for ``color`` (default: mover) in generation order.

        Each pseudo-legal move is executed, the mover's king is tested for
        attack, and the move is undone.
        """
        return [m for m in self.pseudo_legal_moves(color) if self._leaves_king_safe(m)]

    def has_legal_moves(self, color: Optional[Color] = None) -> bool:
        """Return True if ``color`` (default: mover) has at least one legal move."""
        return any(self._leaves_king_safe(m) for m in self.pseudo_legal_moves(color))

    def annotate_check(self, move: Move) -> Move:
        """Return ``move`` with its check status determined by probing it."""
        self.exec_move(move)
        try:
            if not self.in_check(self.mover):
                status = CheckStatus.NO_CHECK
            elif self.has_legal_moves():
                status = CheckStatus.CHECK
            else:
                status = CheckStatus.CHECKMATE
        finally:
            self.undo_move(move)
        return dataclasses.replace(move, check_status=status)

    def gives_check(self, move: Move) -> bool:
        self.exec_move(move)
        try:
            return self.in_check(self.mover)
        finally:
            self.undo_move(move)

    def find_legal_move(self, parsed: NotationMove) -> Move:
        """Resolve parsed notation to the matching legal move.

        Raises:
            ValueError: If no legal move matches, or the notation's piece or
                capture marker disagrees with the board.
        """
        for m in self.legal_moves():
            if not parsed.matches(m):
                continue
            if m.piece_type is not parsed.piece_type:
                raise ValueError("piece letter does not match the moving piece")
            if m.is_capture != parsed.is_capture:
                raise ValueError("capture marker does not match the move")
            if (m.kind is MoveKind.EN_PASSANT) != parsed.is_en_passant:
                raise ValueError("en passant marker does not match the move")
            return m
        raise ValueError("illegal move")

    # --- Execution ---
    def exec_move(self, move: Move) -> None:
        """Apply ``move`` in place, recording what is needed to undo it.

        ``move`` must come from :meth:`legal_moves` for the current state.
        """
        g = self.geometry
        color = move.mover
        opp = color.opponent
        self._history.append(
            (
                move,
                self.mover,
                self.ep_index,
                self.non_progress_counter,
                self.fullmove_number,
                self.zobrist_hash,
            )
        )

        self.set_piece(move.from_index, color, move.piece_type, False)
        if move.kind is MoveKind.EN_PASSANT:
            victim = g.pawn_advance(opp, move.to_index)
            assert victim is not None
            self.set_piece(victim, opp, PieceType.PAWN, False)
        elif move.captured is not None:
            self.set_piece(move.to_index, opp, move.captured, False)
        placed = move.promotion if move.promotion is not None else move.piece_type
        self.set_piece(move.to_index, color, placed, True)

        self.ep_index = None
        if (
            move.piece_type is PieceType.PAWN
            and move.to_index == g.pawn_double_advance(color, move.from_index)
        ):
            self.ep_index = g.pawn_advance(color, move.from_index)

        if move.piece_type is PieceType.PAWN or move.captured is not None:
            self.non_progress_counter = 0
        else:
            self.non_progress_counter += 1
        if color is Color.BLACK:
            self.fullmove_number += 1
        self.mover = opp
        self.repetitions[self.zobrist_hash] = self.repetitions.get(self.zobrist_hash, 0) + 1

    def undo_move(self, move: Optional[Move] = None) -> Move:
        """Undo the most recently executed move and return it.

        Raises:
            ValueError: If there is nothing to undo, or ``move`` is given and
                is not the most recent move.
        """
        if not self._history:
            raise ValueError("no moves to undo")
        last = self._history[-1][0]
        if move is not None and move != last:
            raise ValueError("move is not the most recently executed move")
        (
            last,
            prev_mover,
            prev_ep,
            prev_non_progress,
            prev_fullmove,
            prev_hash,
        ) = self._history.pop()

        count = self.repetitions.get(self.zobrist_hash, 0) - 1
        if count > 0:
            self.repetitions[self.zobrist_hash] = count
        else:
            self.repetitions.pop(self.zobrist_hash, None)

        g = self.geometry
        color = last.mover
        opp = color.opponent
        placed = last.promotion if last.promotion is not None else last.piece_type
        self.set_piece(last.to_index, color, placed, False)
        if last.kind is MoveKind.EN_PASSANT:
            victim = g.pawn_advance(opp, last.to_index)
            assert victim is not None
            self.set_piece(victim, opp, PieceType.PAWN, True)
        elif last.captured is not None:
            self.set_piece(last.to_index, opp, last.captured, True)
        self.set_piece(last.from_index, color, last.piece_type, True)

        self.mover = prev_mover
        self.ep_index = prev_ep
        self.non_progress_counter = prev_non_progress
        self.fullmove_number = prev_fullmove
        self.zobrist_hash = prev_hash & MASK64
        return last

    @property
    def move_history(self) -> List[Move]:
        return [entry[0] for entry in self._history]

    # --- Game end ---
    def is_insufficient_material(self) -> bool:
        limit = max((len(a) + len(b) for a, b in self.insufficient_material), default=0)
        if self.piece_count() > limit:
            return False
        white = [pt for pt in PieceType for _ in range(self.count(Color.WHITE, pt))]
        black = [pt for pt in PieceType for _ in range(self.count(Color.BLACK, pt))]
        return material_signature(white, black) in self.insufficient_material

    def repetition_count(self) -> int:
        return self.repetitions.get(self.zobrist_hash, 0)

    def outcome(self, claim_draws: bool = True) -> Optional[Outcome]:
        """Classify the position; None while the game continues.

        Checkmate and stalemate come first, then insufficient material, then
        the automatic 5-fold repetition and 75-move rules. The claimable
        3-fold repetition and 50-move rule are reported only when
        ``claim_draws`` is True. Resignation is never detected here.
        """
        if not self.has_legal_moves():
            if self.in_check():
                return Outcome(Termination.CHECKMATE, winner=self.mover.opponent)
            return Outcome(Termination.STALEMATE, winner=self.mover.opponent)
        if self.is_insufficient_material():
            return Outcome(Termination.INSUFFICIENT_MATERIAL)
        reps = self.repetition_count()
        if reps >= AUTOMATIC_REPETITIONS:
            return Outcome(Termination.REPETITION_5)
        if self.non_progress_counter >= AUTOMATIC_NON_PROGRESS_PLIES:
            return Outcome(Termination.MOVES_75)
        if claim_draws:
            if reps >= CLAIMABLE_REPETITIONS:
                return Outcome(Termination.REPETITION_3)
            if self.non_progress_counter >= CLAIMABLE_NON_PROGRESS_PLIES:
                return Outcome(Termination.MOVES_50)
        return None

    # --- Reporting ---
    def to_fen(self) -> str:
        """Serialize the position as ``placement mover - ep halfmove fullmove``."""
        rows: List[str] = []
        for row in self.geometry.fen_rows():
            run = 0
            out: List[str] = []
            for index in row:
                placed = self.piece_at(index)
                if placed is None:
                    run += 1
                    continue
                if run > 0:
                    out.append(str(run))
                    run = 0
                out.append(piece_char(*placed))
            if run > 0:
                out.append(str(run))
            rows.append("".join(out))
        ep = "-" if self.ep_index is None else self.geometry.cell_name(self.ep_index)
        return " ".join(
            [
                "/".join(rows),
                self.mover.fen_char(),
                "-",
                ep,
                str(self.non_progress_counter),
                str(self.fullmove_number),
            ]
        )

    def board_string(self) -> str:
        """Human-readable rendering, one line per FEN row, shaped like the board."""
        rows = self.geometry.fen_rows()
        widest = max(len(r) for r in rows)
        lines: List[str] = []
        for row in rows:
            cells = []
            for index in row:
                placed = self.piece_at(index)
                cells.append("." if placed is None else piece_char(*placed))
            indent = " " * (2 * (widest - len(row)))
            lines.append(indent + "   ".join(cells))
        return "\n".join(lines)

    def snapshot(self) -> Tuple:
        """Comparable copy of all position state (no history)."""
        return (
            tuple(self.bb),
            tuple(self.occupied),
            self.mover,
            self.ep_index,
            self.non_progress_counter,
            self.fullmove_number,
            self.zobrist_hash,
        )


def _parse_fen(fen: str, geometry: BoardGeometry) -> _FenState:
    if not fen or not isinstance(fen, str):
        raise ValueError("FEN must be a non-empty string")
    parts = fen.strip().split()
    if len(parts) == 6:
        placement, stm, castling, ep, halfmove, fullmove = parts
        if castling != "-":
            raise ValueError("castling is not supported; castling field must be '-'")
    elif len(parts) == 4:
        placement, stm, ep, halfmove = parts
        fullmove = "1"
    else:
        raise ValueError("FEN must have 4 or 6 fields")

    rows = placement.split("/")
    fen_rows = geometry.fen_rows()
    if len(rows) != len(fen_rows):
        raise ValueError(f"FEN board must have {len(fen_rows)} rows")
    placements: List[Tuple[int, Color, PieceType]] = []
    for row_text, row_cells in zip(rows, fen_rows):
        pos = 0
        digits = ""
        for ch in row_text + "/":
            if ch.isdigit():
                digits += ch
                continue
            if digits:
                n = int(digits)
                digits = ""
                if n < 1:
                    raise ValueError("invalid empty count in FEN row")
                pos += n
            if ch == "/":
                break
            color, piece_type = parse_piece_char(ch)
            if pos >= len(row_cells):
                raise ValueError("too many cells in FEN row")
            placements.append((row_cells[pos], color, piece_type))
            pos += 1
        if pos != len(row_cells):
            raise ValueError(f"FEN row {row_text!r} does not cover {len(row_cells)} cells")
    for color in Color:
        kings = sum(1 for _, c, pt in placements if c is color and pt is PieceType.KING)
        if kings > 1:
            raise ValueError("more than one king for a color in FEN")

    mover = Color.from_fen_char(stm)

    ep_index: Optional[int]
    if ep == "-":
        ep_index = None
    else:
        try:
            ep_index = geometry.cell_index(ep)
        except ValueError as e:
            raise ValueError("invalid en passant cell") from e
        occupied = {index for index, _, _ in placements}
        passed_over = {
            geometry.pawn_advance(mover.opponent, s)
            for s in iter_bits(geometry.start_mask(mover.opponent))
        }
        if ep_index in occupied or ep_index not in passed_over:
            raise ValueError("invalid en passant cell")

    try:
        non_progress = int(halfmove)
        fullmove_number = int(fullmove)
    except ValueError as e:
        raise ValueError("invalid move counters in FEN") from e
    if non_progress < 0 or fullmove_number <= 0:
        raise ValueError("invalid move counters in FEN")

    return _FenState(placements, mover, ep_index, non_progress, fullmove_number)

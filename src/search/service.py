from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging
import time

from src.engine.board import Board
from src.engine.game import Game
from src.engine.move import Move
from src.engine.pieces import Color
from src.eval import NEG_INFINITY, POS_INFINITY, evaluate


logger = logging.getLogger(__name__)

# Depth used when the caller does not ask for one
MIN_SEARCH_DEPTH = 3
# Cap on plies added at the horizon for captures, promotions, and checks
MAX_EXTENSION_PLIES = 3


@dataclass
class SearchStats:
    nodes: int = 0
    leaves: int = 0
    extensions: int = 0
    cutoffs: int = 0


def search_alpha_beta(
    board: Board,
    depth: int,
    alpha: int = NEG_INFINITY,
    beta: int = POS_INFINITY,
    use_quiescence: bool = True,
    extension_plies: int = 0,
    *,
    max_extension_plies: int = MAX_EXTENSION_PLIES,
    claim_draws: bool = True,
    stats: Optional[SearchStats] = None,
) -> Tuple[Optional[Move], int]:
    """Minimax with alpha-beta pruning over ``board``.

    White maximizes and Black minimizes the static evaluation. When a move
    made with one ply left is a capture, promotion, or gives check, the
    search is extended by a ply, at most ``max_extension_plies`` times along
    a line. Among equally scored moves the first in generation order wins.

    Args:
        board (Board): Position to search; restored before returning.
        depth (int): Remaining plies.
        alpha (int): Best score already guaranteed to White.
        beta (int): Best score already guaranteed to Black.
        use_quiescence (bool): Enable the horizon extension.
        extension_plies (int): Plies already added on this line.

    Returns:
        Tuple[Optional[Move], int]: Best move (None at leaves and finished
        positions) and its score.
    """
    if stats is not None:
        stats.nodes += 1
    outcome = board.outcome(claim_draws=claim_draws)
    if outcome is not None or depth <= 0:
        if stats is not None:
            stats.leaves += 1
        return None, evaluate(board, claim_draws=claim_draws, outcome=outcome)

    maximizing = board.mover is Color.WHITE
    best_value = NEG_INFINITY if maximizing else POS_INFINITY
    best_move: Optional[Move] = None
    for move in board.legal_moves():
        board.exec_move(move)
        extend = 0
        if (
            use_quiescence
            and depth == 1
            and extension_plies < max_extension_plies
            and (move.is_capture or move.is_promotion or board.in_check())
        ):
            extend = 1
            if stats is not None:
                stats.extensions += 1
        _, value = search_alpha_beta(
            board,
            depth - 1 + extend,
            alpha,
            beta,
            use_quiescence,
            extension_plies + extend,
            max_extension_plies=max_extension_plies,
            claim_draws=claim_draws,
            stats=stats,
        )
        board.undo_move(move)

        if maximizing:
            if value > best_value:
                best_value, best_move = value, move
            alpha = max(alpha, best_value)
        else:
            if value < best_value:
                best_value, best_move = value, move
            beta = min(beta, best_value)
        if alpha >= beta:
            if stats is not None:
                stats.cutoffs += 1
            break
    return best_move, best_value


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: int
    nodes: int
    depth: int
    time_ms: int
    extensions: int = 0
    iters: List[Tuple[int, int, Optional[str]]] = field(default_factory=list)


class SearchService:
    """Alpha-beta search over a game's board.

    Searches with iterative deepening from depth 1. ``movetime_ms`` is
    checked between iterations only; an iteration in progress always
    completes.
    """

    def __init__(
        self,
        max_extension_plies: int = MAX_EXTENSION_PLIES,
        use_quiescence: bool = True,
    ) -> None:
        self.max_extension_plies = max_extension_plies
        self.use_quiescence = use_quiescence

    def search(
        self,
        game: Game,
        depth: Optional[int] = None,
        movetime_ms: Optional[int] = None,
    ) -> SearchResult:
        target = MIN_SEARCH_DEPTH if depth is None else depth
        if target < 1:
            raise ValueError("depth must be >= 1")
        board = game.board.copy()
        start = time.perf_counter()
        stats = SearchStats()
        best: Optional[Move] = None
        score = 0
        reached = 0
        iters: List[Tuple[int, int, Optional[str]]] = []

        if game.resigned is not None:
            outcome = game.outcome()
            assert outcome is not None
            target = 0
            score = evaluate(board, outcome=outcome)

        for d in range(1, target + 1):
            best, score = search_alpha_beta(
                board,
                d,
                use_quiescence=self.use_quiescence,
                max_extension_plies=self.max_extension_plies,
                claim_draws=game.claim_draws,
                stats=stats,
            )
            reached = d
            note = best.to_notation(board.geometry) if best is not None else None
            iters.append((d, score, note))
            logger.debug("depth %d score %d best %s nodes %d", d, score, note, stats.nodes)
            if best is None:
                break
            if movetime_ms is not None:
                elapsed_ms = int((time.perf_counter() - start) * 1000)
                if elapsed_ms >= movetime_ms:
                    break

        time_ms = int((time.perf_counter() - start) * 1000)
        if best is not None:
            best = board.annotate_check(best)
        logger.info(
            "search depth=%d score=%d best=%s nodes=%d time_ms=%d",
            reached,
            score,
            best.to_notation(board.geometry) if best is not None else None,
            stats.nodes,
            time_ms,
        )
        return SearchResult(
            best_move=best,
            score=score,
            nodes=stats.nodes,
            depth=reached,
            time_ms=time_ms,
            extensions=stats.extensions,
            iters=iters,
        )
